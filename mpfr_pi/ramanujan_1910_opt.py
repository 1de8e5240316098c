"""
Srinivasa Ramanujan's 1910 series, factorials carried between terms.

Same series as `ramanujan_1910`:

    TERM(k) = [ (4k)! * (1103 + 26390k) ] /
              [ (k!)^4 * 396^(4k) ]

rewritten with both factorials updated from the previous iteration:

    FACT(0)   = 1
    FACT(k)   = FACT(k - 1) * k

    FACT4(0)  = 1
    FACT4(4k) = FACT4(4k - 4) * 4k * (4k - 1) * (4k - 2) * (4k - 3)

    TERM(k)   = [ FACT4(4k) * (1103 + 26390k) ] /
                [ FACT(k)^4 * 396^(4k) ]

Each iteration costs a constant number of big multiplications instead of
two full factorial evaluations.
"""

from __future__ import annotations

from gmpy2 import mpfr

from .config import WORKING_PRECISION
from .strategy import SeriesStrategy, digits_to_k


class Ramanujan1910Opt(SeriesStrategy):
    key = "ramanujan_1910_opt"
    name = "Ramanujan 1910 Formula (optimized)"
    slack_k = digits_to_k(16)

    def __init__(self, desired_digits: int, precision: int = WORKING_PRECISION) -> None:
        super().__init__(desired_digits, precision)
        self.k4 = 0
        # FACT(0), FACT4(0)
        self.fact_k = mpfr(1)
        self.fact_4k = mpfr(1)

    def _next_term(self, k: int) -> mpfr:
        # 1103 + 26390k fits a machine word for any allowed k, one multiply
        dividend = self.fact_4k * (1103 + 26390 * k)

        divisor = self.fact_k ** 4
        divisor = divisor * mpfr(396) ** self.k4

        term = dividend / divisor

        # carry factorials over to k + 1
        self.k4 += 4
        self.fact_k = self.fact_k * (k + 1)
        for i in range(4):
            self.fact_4k = self.fact_4k * (self.k4 - i)

        return term

    def _release(self) -> None:
        self.fact_k = None
        self.fact_4k = None
