"""Formatting helpers for progress lines."""

from __future__ import annotations

import time


def date_str(ts: float) -> str:
    """Local wall-clock time as "YYYY-MM-DD:HH:MM:SS.uuuuuu"."""
    secs = int(ts)
    usecs = int(round((ts - secs) * 1_000_000))
    if usecs >= 1_000_000:
        secs += 1
        usecs -= 1_000_000
    return time.strftime("%Y-%m-%d:%H:%M:%S", time.localtime(secs)) + f".{usecs:06d}"


def offset_str(elapsed: float) -> str:
    """Elapsed seconds as "H:MM:SS.uuuuuu"."""
    if elapsed < 0:
        elapsed = 0.0
    total_usecs = int(round(elapsed * 1_000_000))
    secs, usecs = divmod(total_usecs, 1_000_000)
    hours, rest = divmod(secs, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours}:{mins:02d}:{secs:02d}.{usecs:06d}"


def stamp(ts: float, elapsed: float) -> str:
    """Common "<date>: <offset>" prefix."""
    return f"{date_str(ts)}: {offset_str(elapsed)}"
