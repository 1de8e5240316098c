"""
Build-wide configuration for mpfr-pi.

The working precision and rounding mode bound every value the engine
touches. Digit requests that do not fit comfortably inside the working
precision are rejected before any work starts.
"""

from __future__ import annotations

import gmpy2


# Working precision of every mpfr value, in bits.
WORKING_PRECISION = 10_000_000
ROUNDING = gmpy2.RoundDown

# Output layout
CHARACTERS_PER_LINE = 100

# Minimum wall-clock gap between two progress lines
PROGRESS_INTERVAL_SECS = 10.0

# Bits of working precision spent per requested decimal digit, and the
# number of digits held back below that bound.
BITS_PER_DIGIT_BOUND = 3.5
DIGITS_MARGIN = 100

# The iteration index is modelled as a 64-bit unsigned counter; keep half
# of its range as headroom for the 4k products computed per term.
ULONG_MAX = 2**64 - 1
LONG_MAX = 2**63 - 1
SAFE_ULONG_MAX = ULONG_MAX // 2
SAFE_LONG_MAX = LONG_MAX // 2


class ConfigurationError(ValueError):
    """Invalid request: rejected before any computation starts."""


class UnknownAlgorithmError(ConfigurationError):
    def __init__(self, name: str, known: list[str]) -> None:
        self.name = name
        self.known = known
        super().__init__(
            f"unknown algorithm {name!r}, supported algorithms: {', '.join(known)}"
        )


def max_supported_digits(precision: int = WORKING_PRECISION) -> int:
    """Smallest digit count that is *not* supported at `precision` bits."""
    return int(precision / BITS_PER_DIGIT_BOUND) - DIGITS_MARGIN


def approximate_decimals(precision: int = WORKING_PRECISION) -> int:
    """Rough upper bound of decimals representable at `precision` bits."""
    return precision // 4


def validate_digits(digits: int, precision: int = WORKING_PRECISION) -> int:
    """
    Check a digit request against the working precision.

    Returns the digit count unchanged. Raises ConfigurationError if it is
    not a positive integer or does not fit within `precision`.
    """
    if isinstance(digits, bool) or not isinstance(digits, int):
        raise ConfigurationError(f"digits must be an integer, got {digits!r}")
    if digits <= 0:
        raise ConfigurationError(f"invalid {digits} parameter for digits")
    limit = max_supported_digits(precision)
    if digits >= limit:
        raise ConfigurationError(
            f"this build does not support {digits} digits (max is {limit})"
        )
    return digits


def validate_precision(precision: int) -> int:
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise ConfigurationError(f"precision must be an integer, got {precision!r}")
    if precision > gmpy2.get_max_precision():
        raise ConfigurationError(
            f"precision {precision} exceeds the MPFR maximum "
            f"({gmpy2.get_max_precision()})"
        )
    if max_supported_digits(precision) <= 1:
        raise ConfigurationError(
            f"precision {precision} bits is too small to compute any digits"
        )
    return precision


def working_context(precision: int = WORKING_PRECISION):
    """
    Switch the current gmpy2 context to the working precision and rounding.

    Returns the (now active) context.
    """
    ctx = gmpy2.get_context()
    ctx.precision = precision
    ctx.round = ROUNDING
    return ctx
