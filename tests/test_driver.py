"""Tests for the iteration driver and the compute() entry point."""

import itertools

import pytest

from mpfr_pi.config import (
    ConfigurationError,
    UnknownAlgorithmError,
    max_supported_digits,
)
from mpfr_pi.driver import DriverState, IterationDriver, ProgressSample, compute
from mpfr_pi.output import render
from mpfr_pi.reference import reference_pi
from mpfr_pi.registry import algorithm_names
from tests.conftest import PI_50, TEST_PRECISION

LARGE_PRECISION = 120_000


def fake_clock(step: float):
    ticks = itertools.count(0.0, step)
    return lambda: next(ticks)


class TestStateMachine:
    def test_run_visits_every_state(self) -> None:
        driver = IterationDriver("ramanujan_1910_opt", 50, precision=TEST_PRECISION)
        driver.run()
        assert driver.history == [
            DriverState.INITIALIZING,
            DriverState.ITERATING,
            DriverState.CONVERGED,
            DriverState.EXTRACTING,
            DriverState.DONE,
        ]
        assert driver.state is DriverState.DONE

    def test_step_by_step(self) -> None:
        driver = IterationDriver("ramanujan_1910", 50, precision=TEST_PRECISION)
        max_k = driver.initialize()
        assert max_k == 11
        assert driver.state is DriverState.ITERATING
        assert driver.iterate() == max_k
        assert driver.state is DriverState.CONVERGED
        result = driver.extract()
        assert driver.state is DriverState.DONE
        assert result.digits >= 50

    def test_strategy_released_after_run(self) -> None:
        driver = IterationDriver("ramanujan_1910", 50, precision=TEST_PRECISION)
        driver.run()
        assert driver.strategy.closed

    def test_out_of_order_calls_rejected(self) -> None:
        driver = IterationDriver("ramanujan_1910", 50, precision=TEST_PRECISION)
        with pytest.raises(RuntimeError):
            driver.iterate()
        with pytest.raises(RuntimeError):
            driver.extract()
        driver.initialize()
        with pytest.raises(RuntimeError):
            driver.initialize()

    def test_failed_initialize_stays_initializing(self) -> None:
        driver = IterationDriver("ramanujan_1910", 0, precision=TEST_PRECISION)
        with pytest.raises(ConfigurationError):
            driver.run()
        assert driver.history == [DriverState.INITIALIZING]
        assert driver.strategy is None

    def test_unknown_algorithm(self) -> None:
        with pytest.raises(UnknownAlgorithmError) as excinfo:
            IterationDriver("gauss_legendre", 50, precision=TEST_PRECISION)
        assert excinfo.value.known == algorithm_names()
        for name in algorithm_names():
            assert name in str(excinfo.value)


class TestProgress:
    def test_samples_every_interval(self) -> None:
        samples = []
        driver = IterationDriver(
            "ramanujan_1910_opt",
            50,
            precision=TEST_PRECISION,
            progress=samples.append,
            clock=fake_clock(4.0),
            wall_clock=lambda: 1_700_000_000.0,
            interval=10.0,
        )
        driver.run()

        assert [(s.k, s.k_delta, s.elapsed) for s in samples] == [
            (2, 2, 12.0),
            (5, 3, 24.0),
            (8, 3, 36.0),
            (11, 3, 48.0),
        ]
        assert all(s.max_k == 12 for s in samples)
        assert all(s.timestamp == 1_700_000_000.0 for s in samples)
        assert driver.samples == 4

    def test_no_samples_when_fast(self) -> None:
        samples = []
        driver = IterationDriver(
            "ramanujan_1910",
            50,
            precision=TEST_PRECISION,
            progress=samples.append,
            clock=fake_clock(0.001),
        )
        driver.run()
        assert samples == []

    def test_progress_does_not_change_result(self) -> None:
        quiet = IterationDriver("ramanujan_1910", 100, precision=TEST_PRECISION).run()
        chatty = IterationDriver(
            "ramanujan_1910",
            100,
            precision=TEST_PRECISION,
            progress=lambda sample: None,
            clock=fake_clock(100.0),
        ).run()
        assert quiet.value == chatty.value
        assert quiet.digits == chatty.digits

    def test_callback_error_releases_strategy(self) -> None:
        def broken(sample: ProgressSample) -> None:
            raise KeyboardInterrupt

        driver = IterationDriver(
            "ramanujan_1910",
            50,
            precision=TEST_PRECISION,
            progress=broken,
            clock=fake_clock(100.0),
        )
        with pytest.raises(KeyboardInterrupt):
            driver.run()
        assert driver.strategy.closed

    def test_on_start_sees_iteration_target(self) -> None:
        seen = []
        driver = IterationDriver("ramanujan_1910_opt", 50, precision=TEST_PRECISION)
        driver.run(on_start=lambda d: seen.append((d.state, d.max_k, d.strategy.k)))
        assert seen == [(DriverState.ITERATING, 12, 0)]

    def test_on_start_error_releases_strategy(self) -> None:
        def broken(driver: IterationDriver) -> None:
            raise RuntimeError("announce failed")

        driver = IterationDriver("ramanujan_1910", 50, precision=TEST_PRECISION)
        with pytest.raises(RuntimeError, match="announce failed"):
            driver.run(on_start=broken)
        assert driver.strategy.closed
        assert driver.state is DriverState.ITERATING


class TestCompute:
    @pytest.mark.parametrize("algorithm", ["ramanujan_1910", "ramanujan_1910_opt"])
    def test_known_value(self, algorithm) -> None:
        result = compute(50, algorithm, precision=TEST_PRECISION)
        assert result.algorithm == algorithm
        assert result.digits >= 50
        assert render(result.value, 50, TEST_PRECISION) == PI_50

    def test_variants_agree(self) -> None:
        a = compute(700, "ramanujan_1910", precision=TEST_PRECISION)
        b = compute(700, "ramanujan_1910_opt", precision=TEST_PRECISION)
        assert render(a.value, 700, TEST_PRECISION) == render(b.value, 700, TEST_PRECISION)

    @pytest.mark.slow
    @pytest.mark.parametrize("algorithm", ["ramanujan_1910", "ramanujan_1910_opt"])
    def test_digit_estimate_holds_for_large_requests(self, algorithm) -> None:
        # far enough out that a per-term rate of 8 instead of 7.98 shows
        digits = 30_000
        result = compute(digits, algorithm, precision=LARGE_PRECISION)
        assert result.digits >= digits
        assert render(result.value, digits, LARGE_PRECISION) == reference_pi(digits)

    @pytest.mark.parametrize("digits", [0, -5])
    def test_non_positive_rejected(self, digits) -> None:
        with pytest.raises(ConfigurationError):
            compute(digits, "ramanujan_1910", precision=TEST_PRECISION)

    def test_boundary(self) -> None:
        limit = max_supported_digits(TEST_PRECISION)
        assert limit == 2240
        with pytest.raises(ConfigurationError, match="does not support"):
            compute(limit, "ramanujan_1910", precision=TEST_PRECISION)
        with pytest.raises(ConfigurationError):
            compute(limit + 1, "ramanujan_1910", precision=TEST_PRECISION)

    def test_just_below_boundary_validates(self) -> None:
        from mpfr_pi.config import validate_digits

        limit = max_supported_digits(TEST_PRECISION)
        assert validate_digits(limit - 1, TEST_PRECISION) == limit - 1

    def test_unknown_algorithm(self) -> None:
        with pytest.raises(UnknownAlgorithmError):
            compute(50, "nope", precision=TEST_PRECISION)

    def test_bad_precision(self) -> None:
        with pytest.raises(ConfigurationError):
            compute(50, "ramanujan_1910", precision=64)
