"""
Iteration driver.

Runs a strategy until it reports convergence, then extracts π:

    INITIALIZING -> ITERATING -> CONVERGED -> EXTRACTING -> DONE

While iterating, a progress sample is handed to the optional `progress`
callback whenever at least `interval` seconds went by since the previous
one. Progress is advisory and has no influence on the loop.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .config import (
    PROGRESS_INTERVAL_SECS,
    WORKING_PRECISION,
    validate_digits,
    validate_precision,
)
from .registry import get_algorithm
from .strategy import ComputedConstant, SeriesStrategy


class DriverState(Enum):
    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    EXTRACTING = "extracting"
    DONE = "done"


_TRANSITIONS = {
    DriverState.INITIALIZING: DriverState.ITERATING,
    DriverState.ITERATING: DriverState.CONVERGED,
    DriverState.CONVERGED: DriverState.EXTRACTING,
    DriverState.EXTRACTING: DriverState.DONE,
}


@dataclass(frozen=True)
class ProgressSample:
    timestamp: float  # wall clock, seconds since the epoch
    elapsed: float
    k: int
    k_delta: int
    max_k: int


ProgressCallback = Callable[[ProgressSample], None]


class IterationDriver:
    """Owns one strategy for the duration of one computation."""

    def __init__(
        self,
        algorithm: str,
        digits: int,
        precision: int = WORKING_PRECISION,
        progress: Optional[ProgressCallback] = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        interval: float = PROGRESS_INTERVAL_SECS,
    ) -> None:
        self.strategy_class = get_algorithm(algorithm)
        self.algorithm = algorithm
        self.digits = digits
        self.precision = precision
        self.progress = progress
        self.clock = clock
        self.wall_clock = wall_clock
        self.interval = interval

        self.state = DriverState.INITIALIZING
        self.history: List[DriverState] = [self.state]
        self.strategy: Optional[SeriesStrategy] = None
        self.max_k = 0
        self.last_k = 0
        self.samples = 0
        self._start = 0.0
        self._last_sample = 0.0

    @property
    def name(self) -> str:
        return self.strategy_class.name

    def _advance(self, expected: DriverState) -> None:
        if self.state is not expected:
            raise RuntimeError(
                f"driver is {self.state.value}, expected {expected.value}"
            )
        self.state = _TRANSITIONS[self.state]
        self.history.append(self.state)

    def initialize(self) -> int:
        """Create the strategy. Returns the iteration target max_k."""
        if self.state is not DriverState.INITIALIZING:
            raise RuntimeError(f"driver is {self.state.value}, cannot initialize")
        self.strategy, self.max_k = self.strategy_class.initialize(
            self.digits, self.precision
        )
        self._advance(DriverState.INITIALIZING)
        return self.max_k

    def iterate(self) -> int:
        """Compute terms until convergence. Returns the last k computed."""
        if self.state is not DriverState.ITERATING:
            raise RuntimeError(f"driver is {self.state.value}, cannot iterate")
        self._start = self._last_sample = self.clock()
        sampled_k = 0

        while True:
            k, _digits, converged = self.strategy.compute_next_term()
            self.last_k = k

            now = self.clock()
            if now - self._last_sample >= self.interval:
                self._report(now, k, k - sampled_k)
                self._last_sample = now
                sampled_k = k

            if converged:
                break

        self._advance(DriverState.ITERATING)
        return self.last_k

    def _report(self, now: float, k: int, k_delta: int) -> None:
        self.samples += 1
        if self.progress is None:
            return
        self.progress(
            ProgressSample(
                timestamp=self.wall_clock(),
                elapsed=now - self._start,
                k=k,
                k_delta=k_delta,
                max_k=self.max_k,
            )
        )

    def extract(self) -> ComputedConstant:
        """Extract π from the converged strategy and release it."""
        self._advance(DriverState.CONVERGED)
        try:
            result = self.strategy.extract()
        finally:
            self.close()
        if result is None:
            raise RuntimeError(f"{self.algorithm}: converged without any certified digits")
        self._advance(DriverState.EXTRACTING)
        return result

    def close(self) -> None:
        if self.strategy is not None:
            self.strategy.teardown()

    def run(
        self, on_start: Optional[Callable[["IterationDriver"], None]] = None
    ) -> ComputedConstant:
        """
        Initialize, iterate and extract in one go.

        `on_start` is called once the strategy exists and before the first
        term, e.g. to announce max_k.
        """
        self.initialize()
        try:
            if on_start is not None:
                on_start(self)
            self.iterate()
        except BaseException:
            self.close()
            raise
        return self.extract()


def compute(
    digits: int,
    algorithm: str,
    precision: int = WORKING_PRECISION,
    progress: Optional[ProgressCallback] = None,
) -> ComputedConstant:
    """
    Compute π to `digits` digits with the named algorithm.

    The request is validated before any arithmetic; ConfigurationError is
    raised for bad digit counts, precisions or algorithm names.
    """
    validate_precision(precision)
    validate_digits(digits, precision)
    driver = IterationDriver(algorithm, digits, precision=precision, progress=progress)
    return driver.run()
