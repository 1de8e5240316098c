import pytest

from mpfr_pi.reference import LEAF_RUN, Split, binary_split, reference_pi, term, verify
from tests.conftest import PI_50


def test_reference_pi_50() -> None:
    assert reference_pi(50) == PI_50


@pytest.mark.parametrize("digits", [1, 2, 15, 16, 100, 1000])
def test_reference_layout(digits) -> None:
    s = reference_pi(digits)
    assert len(s) == digits + 1
    assert PI_50.startswith(s[:51])


def test_reference_prefix_stable() -> None:
    longer = reference_pi(1500)
    assert longer.startswith(reference_pi(1000))


def test_binary_split_single_term() -> None:
    P, Q, T = binary_split(0, 1)
    assert (P, Q, T) == (1, 1, 13591409)


def test_binary_split_sign() -> None:
    _P, _Q, T = binary_split(1, 2)
    assert T < 0


@pytest.mark.parametrize("b", [2, LEAF_RUN, LEAF_RUN + 1, 5 * LEAF_RUN + 3])
def test_binary_split_matches_term_by_term(b) -> None:
    folded = term(0)
    for k in range(1, b):
        folded = folded.then(term(k))
    assert binary_split(0, b) == folded


def test_split_join_is_associative() -> None:
    whole = binary_split(0, 40)
    assert binary_split(0, 13).then(binary_split(13, 40)) == whole
    assert isinstance(whole, Split)


def test_verify() -> None:
    assert verify(PI_50)
    assert not verify(PI_50[:-1] + "2")
    assert not verify("3")


def test_non_positive_digits() -> None:
    with pytest.raises(ValueError):
        reference_pi(0)
