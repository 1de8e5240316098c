"""
Series strategy contract.

A strategy evaluates one convergent series for 1/π term by term:

    1/π = CMULT * SUM(k, 0..infinity) TERM(k)

Each call to `compute_next_term()` adds TERM(k) to the running sum and
advances k. `get_value()` can be called at any time to invert the current
partial sum into π together with a conservative estimate of how many
digits are already correct.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from gmpy2 import mpfr, sqrt

from .config import (
    SAFE_LONG_MAX,
    SAFE_ULONG_MAX,
    WORKING_PRECISION,
    ConfigurationError,
    working_context,
)


# Ramanujan 1910 gains log10(99^4) ~= 7.9825 digits per term; count 7.98,
# in hundredths so the conversions stay in integer arithmetic.
DIGITS_PER_TERM_X100 = 798


def digits_to_k(digits: int) -> int:
    """Number of iterations needed to get `digits` digits."""
    return -(-digits * 100 // DIGITS_PER_TERM_X100) + 1


def k_to_digits(k: int, slack_k: int) -> int:
    """
    Digits known to be correct after term `k`.

    Stays at 0 until `k` reaches the slack threshold, then undercounts by
    `slack_k`. Never exceeds what the series actually delivers.
    """
    if k < slack_k:
        return 0
    return k * DIGITS_PER_TERM_X100 // 100 - slack_k


@dataclass(frozen=True)
class ComputedConstant:
    """Snapshot of the extracted constant after the last completed term."""

    value: mpfr
    digits: int
    k: int
    algorithm: str


class SeriesStrategy(ABC):
    """
    Base class for the series implementations.

    Subclasses set `key` (registry name), `name` (display name) and
    `slack_k`, and implement `_next_term()`. State is private to one
    instance and must only be driven from one caller.
    """

    key: str = ""
    name: str = ""
    slack_k: int = 0

    def __init__(self, desired_digits: int, precision: int = WORKING_PRECISION) -> None:
        if isinstance(desired_digits, bool) or not isinstance(desired_digits, int):
            raise ConfigurationError(
                f"desired digits must be an integer, got {desired_digits!r}"
            )
        if desired_digits <= 0:
            raise ConfigurationError(f"invalid {desired_digits} parameter for digits")
        if desired_digits >= SAFE_LONG_MAX:
            raise ConfigurationError(f"desired digits {desired_digits} too large")

        max_k = digits_to_k(desired_digits) + self.slack_k
        # the terms compute 4k directly
        if max_k >= SAFE_ULONG_MAX // 4:
            raise ConfigurationError(
                f"{desired_digits} digits need {max_k} iterations, "
                f"which overflows the iteration index"
            )

        self.desired_digits = desired_digits
        self.precision = precision
        self.max_k = max_k
        self.k = 0
        self.digits = 0
        self._closed = False

        working_context(self.precision)
        # CMULT = (2 * sqrt(2)) / 9801, 9801 = 99^2
        self.cmult = sqrt(mpfr(2)) * 2 / 9801
        self.term_sum = mpfr(0)

    @classmethod
    def initialize(
        cls, desired_digits: int, precision: int = WORKING_PRECISION
    ) -> Tuple["SeriesStrategy", int]:
        """Create a strategy and return it with its iteration target."""
        strategy = cls(desired_digits, precision)
        return strategy, strategy.max_k

    def __enter__(self) -> "SeriesStrategy":
        return self

    def __exit__(self, *exc) -> None:
        self.teardown()

    @property
    def closed(self) -> bool:
        return self._closed

    @abstractmethod
    def _next_term(self, k: int) -> mpfr:
        """Return TERM(k) and prepare any carried state for k + 1."""

    def compute_next_term(self) -> Tuple[int, int, bool]:
        """
        Add TERM(k) to the running sum and advance k.

        Returns (k consumed, digit estimate for it, converged).
        """
        if self._closed:
            raise RuntimeError(f"{self.key}: compute_next_term() after teardown")

        working_context(self.precision)
        k = self.k
        self.term_sum = self.term_sum + self._next_term(k)

        digits = k_to_digits(k, self.slack_k)
        if digits > self.digits:
            self.digits = digits
        converged = k >= self.max_k
        self.k = k + 1
        return k, self.digits, converged

    def get_value(self) -> Tuple[Optional[mpfr], int]:
        """
        Compute π from the terms summed so far.

        Returns (None, 0) while no digit is certified yet. The digit count
        refers to the last completed term, k - 1.
        """
        if self._closed:
            raise RuntimeError(f"{self.key}: get_value() after teardown")
        if self.k == 0:
            return None, 0
        digits = k_to_digits(self.k - 1, self.slack_k)
        if digits == 0:
            return None, 0

        working_context(self.precision)
        # 1 / PI = cmult * term_sum
        inverse = self.cmult * self.term_sum
        return 1 / inverse, digits

    def extract(self) -> Optional[ComputedConstant]:
        value, digits = self.get_value()
        if value is None:
            return None
        return ComputedConstant(value=value, digits=digits, k=self.k - 1, algorithm=self.key)

    def teardown(self) -> None:
        """Release all mpfr values. A second call does nothing."""
        if self._closed:
            return
        self._closed = True
        self.cmult = None
        self.term_sum = None
        self._release()

    def _release(self) -> None:
        """Hook for subclasses holding extra mpfr state."""

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} k={self.k} max_k={self.max_k} "
            f"digits={self.digits} desired={self.desired_digits}>"
        )

