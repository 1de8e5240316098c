"""
Srinivasa Ramanujan's 1910 series, every term computed from scratch.

    1/π = CMULT * SUM(k, 0..infinity) TERM(k)

    CMULT   = (2 * sqrt(2)) / 9801                  # 9801 = 99^2

    TERM(k) = [ (4k)! * (1103 + 26390k) ] /         # dividend
              [ (k!)^4 * 396^(4k) ]                 # divisor, 396 = 99 * 4

More info:
  https://en.wikipedia.org/wiki/Ramanujan%E2%80%93Sato_series
"""

from __future__ import annotations

from gmpy2 import factorial, mpfr

from .strategy import SeriesStrategy, digits_to_k


class Ramanujan1910(SeriesStrategy):
    """Factorials and powers are re-evaluated at every k."""

    key = "ramanujan_1910"
    name = "Ramanujan 1910 Formula"
    slack_k = digits_to_k(8)

    def _next_term(self, k: int) -> mpfr:
        # dividend: (4k)! * (1103 + 26390k)
        dividend = factorial(4 * k)
        dividend = dividend * (mpfr(26390) * k + 1103)

        # divisor: (k!)^4 * 396^(4k)
        divisor = factorial(k) ** 4
        divisor = divisor * mpfr(396) ** (4 * k)

        return dividend / divisor
