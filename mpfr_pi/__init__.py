"""Compute π to many digits with Ramanujan-type series on MPFR (gmpy2)."""

from .config import (
    CHARACTERS_PER_LINE,
    ROUNDING,
    WORKING_PRECISION,
    ConfigurationError,
    UnknownAlgorithmError,
    max_supported_digits,
)
from .driver import DriverState, IterationDriver, ProgressSample, compute
from .output import PiWriter, chunk, output_filename, render
from .ramanujan_1910 import Ramanujan1910
from .ramanujan_1910_opt import Ramanujan1910Opt
from .registry import ALGORITHMS, DEFAULT_ALGORITHM, algorithm_names, get_algorithm
from .strategy import ComputedConstant, SeriesStrategy

__version__ = "0.1.0"

__all__ = [
    "ALGORITHMS",
    "CHARACTERS_PER_LINE",
    "DEFAULT_ALGORITHM",
    "ROUNDING",
    "WORKING_PRECISION",
    "ComputedConstant",
    "ConfigurationError",
    "DriverState",
    "IterationDriver",
    "PiWriter",
    "ProgressSample",
    "Ramanujan1910",
    "Ramanujan1910Opt",
    "SeriesStrategy",
    "UnknownAlgorithmError",
    "algorithm_names",
    "chunk",
    "compute",
    "get_algorithm",
    "max_supported_digits",
    "output_filename",
    "render",
]
