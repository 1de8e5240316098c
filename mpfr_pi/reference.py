"""
Independent reference value of π for verifying results.

Uses the Chudnovsky series with binary splitting, computed entirely in
exact gmpy2.mpz integers, so it shares no floating point code path with
the series strategies.
"""

from __future__ import annotations

from typing import NamedTuple

from gmpy2 import digits as mpz_digits
from gmpy2 import isqrt, mpz


A = 13591409
B = 545140134
# C^3 / 24, where C = 640320
C3_OVER_24 = mpz("10939058860032000")

# below this many terms a range is folded left to right instead of halved
LEAF_RUN = 8


class Split(NamedTuple):
    """
    Partial products of the Chudnovsky series over a range [a, b):

      π = (Q(0, N) * 426880 * sqrt(10005)) / T(0, N)
    """

    p: mpz
    q: mpz
    t: mpz

    def then(self, right: "Split") -> "Split":
        """Join [a, m) with [m, b)."""
        return Split(
            self.p * right.p,
            self.q * right.q,
            right.q * self.t + self.p * right.t,
        )


def term(k: int) -> Split:
    """The single-term split for index k."""
    if k == 0:
        return Split(mpz(1), mpz(1), mpz(A))
    n = mpz(k)
    # p = (6n - 5)(2n - 1)(6n - 1), q = n^3 * C^3 / 24
    p = (6 * n - 5) * (2 * n - 1) * (6 * n - 1)
    q = n * n * n * C3_OVER_24
    t = p * (A + B * n)
    return Split(p, q, -t if k & 1 else t)


def binary_split(a: int, b: int) -> Split:
    """Split for [a, b), halving the range until runs are short."""
    if b - a <= LEAF_RUN:
        acc = term(a)
        for k in range(a + 1, b):
            acc = acc.then(term(k))
        return acc
    m = (a + b) // 2
    return binary_split(a, m).then(binary_split(m, b))


def reference_pi(digits: int) -> str:
    """
    π with `digits` significant digits, truncated, as "3.<digits - 1>".

    Same layout as output.render(), so the two can be compared directly.
    """
    if digits <= 0:
        raise ValueError("digits must be positive")

    decimals = digits - 1
    # Number of Chudnovsky terms (~14 digits per term)
    terms = decimals // 14 + 2
    _P, Q, T = binary_split(0, terms)

    # Extra precision for sqrt(10005)
    margin = 10
    p = decimals + margin
    S = isqrt(mpz(10005) * mpz(10) ** (2 * p))

    # pi * 10^decimals ~= (Q * 426880 * S) / (T * 10^(p - decimals))
    num = Q * 426880 * S
    den = T * mpz(10) ** (p - decimals)
    s = mpz_digits(num // den, 10)

    return f"{s[0]}.{s[1:digits]}"


def verify(rendered: str) -> bool:
    """True if `rendered` (as produced by output.render) matches the reference."""
    digits = len(rendered) - 1
    if digits <= 0:
        return False
    return rendered == reference_pi(digits)
