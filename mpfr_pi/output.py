"""
Decimal rendering and file output.

Conversion from the internal binary representation to decimal is the
most expensive step after the series itself for large digit counts.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from gmpy2 import digits as mpz_digits
from gmpy2 import floor, mpfr, mpz

from .config import CHARACTERS_PER_LINE, WORKING_PRECISION, working_context


def render(value: mpfr, digits: int, precision: int = WORKING_PRECISION) -> str:
    """
    Render `value` with `digits` significant digits as "3.1415...".

    The result is exactly digits + 1 characters long (the +1 accounts for
    the decimal point). The last digit is truncated toward -inf, matching
    the working rounding mode.
    """
    if digits <= 0:
        raise ValueError("digits must be positive")
    if value < 0:
        raise ValueError("only non-negative values can be rendered")

    working_context(precision)
    int_part = mpz_digits(mpz(floor(value)), 10)
    decimals = digits - len(int_part)
    if decimals < 0:
        raise ValueError(
            f"{digits} digits cannot hold the integer part of {int_part}"
        )

    # Scale by 10^decimals and floor instead of round.
    scaled = mpz(floor(value * mpfr(10) ** decimals))
    s = mpz_digits(scaled, 10)
    if len(s) < digits:
        s = s.rjust(digits, "0")

    return f"{s[:len(int_part)]}.{s[len(int_part):digits]}"


def chunk(text: str, width: int = CHARACTERS_PER_LINE) -> Iterator[str]:
    """Split `text` into lines of `width` characters; the last may be shorter."""
    if width <= 0:
        raise ValueError("width must be positive")
    for i in range(0, len(text), width):
        yield text[i : i + width]


def output_filename(digits: int, algorithm: str) -> str:
    return f"FPI_{digits}_{algorithm}.txt"


class PiWriter:
    """
    Output file that is either fully written or not there at all.

    The file is created on construction so that a bad path fails before
    hours of computation, and removed again unless `write()` completes.
    """

    def __init__(
        self, path: Union[str, os.PathLike], width: int = CHARACTERS_PER_LINE
    ) -> None:
        if width <= 0:
            raise ValueError("width must be positive")
        self.path = Path(path)
        self.width = width
        self.lines = 0
        self.complete = False
        self._fd: Optional[TextIO] = open(self.path, "w", encoding="ascii")

    def __enter__(self) -> "PiWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.complete:
            self.abort()

    def write(self, text: str) -> int:
        """Write `text` in fixed-width lines and close. Returns the line count."""
        if self._fd is None:
            raise RuntimeError(f"{self.path} is already closed")
        try:
            for line in chunk(text, self.width):
                self._fd.write(line + "\n")
                self.lines += 1
            self._fd.close()
        except BaseException:
            self.abort()
            raise
        self._fd = None
        self.complete = True
        return self.lines

    def abort(self) -> None:
        """Close and delete a partially written file."""
        if self._fd is not None:
            self._fd.close()
            self._fd = None
        if not self.complete and self.path.exists():
            self.path.unlink()
