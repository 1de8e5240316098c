"""
Command line front end.

    mpfr-pi DIGITS [ALGORITHM]

Computes π to DIGITS digits and writes it to FPI_<DIGITS>_<ALGORITHM>.txt
in fixed-width lines.
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from pathlib import Path

import gmpy2

from .config import (
    CHARACTERS_PER_LINE,
    WORKING_PRECISION,
    ConfigurationError,
    UnknownAlgorithmError,
    approximate_decimals,
    max_supported_digits,
    validate_digits,
    validate_precision,
)
from .driver import IterationDriver, ProgressSample
from .output import PiWriter, output_filename, render
from .reference import verify
from .registry import DEFAULT_ALGORITHM, algorithm_names, get_algorithm
from .timestamps import stamp


EXIT_OK = 0
EXIT_USAGE = 1
EXIT_RESOURCE = 2
EXIT_UNKNOWN_ALGORITHM = 3
EXIT_VERIFY_FAILED = 4


# =========================
# Digit specification parser
# =========================


def parse_digit_spec(spec: str) -> int:
    """
    Parse a digit specification like:
      "123", "1K", "10M", "2g", "132876K", "1e6", "3E7"

    Suffixes (case-insensitive):
      K = 1_000 (10^3)
      M = 1_000_000 (10^6)
      G = 1_000_000_000 (10^9)

    Scientific notation:
      "<int>e<int>", e.g. "1e6".

    Raises ValueError on invalid input.
    """
    s = spec.strip()
    if not s:
        raise ValueError("Empty digits specification")

    # 1) Scientific notation: "<int>e<int>" or "<int>E<int>"
    mantissa_str, sep, exp_str = s.lower().partition("e")
    if sep:
        if not mantissa_str or not exp_str:
            raise ValueError(f"Invalid scientific notation: {spec!r}")
        exp = int(exp_str)
        if exp < 0:
            raise ValueError(f"Negative exponent not supported in {spec!r}")
        value = int(mantissa_str) * (10 ** exp)
        if value <= 0:
            raise ValueError(f"Digits must be positive: {spec!r}")
        return value

    # 2) Suffix-based notation: K, M, G
    multipliers = {"k": 1_000, "m": 1_000_000, "g": 1_000_000_000}
    multiplier = multipliers.get(s[-1].lower(), 1)
    if multiplier != 1:
        s = s[:-1].strip()
        if not s:
            raise ValueError(f"Missing number before suffix in {spec!r}")

    base = int(s)
    if base <= 0:
        raise ValueError(f"Digits must be positive: {spec!r}")

    return base * multiplier


@dataclass
class Options:
    digits: int
    algorithm: str = DEFAULT_ALGORITHM
    precision: int = WORKING_PRECISION
    width: int = CHARACTERS_PER_LINE
    output_dir: Path = Path(".")
    verify: bool = False
    list_algorithms: bool = False


_VALUE_FLAGS = {
    "--digits": "digits",
    "-d": "digits",
    "--calculate": "digits",
    "-c": "digits",
    "--algorithm": "algorithm",
    "-a": "algorithm",
    "--precision": "precision",
    "-p": "precision",
    "--width": "width",
    "-w": "width",
    "--output-dir": "output_dir",
    "-o": "output_dir",
}


def parse_args(argv: list[str]) -> Options:
    """
    Read options from CLI arguments.

    Supported forms:
      mpfr-pi 12345
      mpfr-pi 1K ramanujan_1910
      mpfr-pi --digits 10M --algorithm ramanujan_1910_opt
      mpfr-pi -d 5000 -p 65536 -w 80 -o results --verify
      mpfr-pi --list
    """
    values: dict[str, str] = {}
    positional: list[str] = []
    verify_flag = False
    list_flag = False

    args = argv[1:]  # skip program name
    i = 0
    while i < len(args):
        arg = args[i]
        if arg in _VALUE_FLAGS:
            if i + 1 >= len(args):
                raise ValueError(f"Flag {arg!r} requires a value")
            values[_VALUE_FLAGS[arg]] = args[i + 1]
            i += 2
        elif arg == "--verify":
            verify_flag = True
            i += 1
        elif arg in ("--list", "-l"):
            list_flag = True
            i += 1
        elif arg.startswith("-") and len(arg) > 1:
            raise ValueError(f"Unknown option {arg!r}")
        else:
            positional.append(arg)
            i += 1

    if len(positional) > 2:
        raise ValueError(f"Unexpected arguments: {' '.join(positional[2:])}")
    if positional:
        values.setdefault("digits", positional[0])
    if len(positional) == 2:
        values.setdefault("algorithm", positional[1])

    if list_flag:
        return Options(digits=0, list_algorithms=True)
    if "digits" not in values:
        raise ValueError("Missing number of digits")

    opts = Options(digits=parse_digit_spec(values["digits"]), verify=verify_flag)
    if "algorithm" in values:
        opts.algorithm = values["algorithm"]
    if "precision" in values:
        opts.precision = parse_digit_spec(values["precision"])
    if "width" in values:
        opts.width = int(values["width"])
        if opts.width <= 0:
            raise ValueError(f"Width must be positive: {values['width']!r}")
    if "output_dir" in values:
        opts.output_dir = Path(values["output_dir"])
    return opts


def print_usage(prog: str) -> None:
    sys.stderr.write("Usage examples:\n")
    sys.stderr.write(f"  {prog} 12345\n")
    sys.stderr.write(f"  {prog} 1K ramanujan_1910\n")
    sys.stderr.write(f"  {prog} --digits 10M --algorithm ramanujan_1910_opt\n")
    sys.stderr.write(f"  {prog} -d 5000 --precision 65536 --verify\n")
    sys.stderr.write(f"  {prog} --list\n")


def print_algorithms() -> None:
    print("supported algorithms:")
    for name in algorithm_names():
        print(f"                {name}")


def print_banner(precision: int) -> None:
    print(f"MPFR library: {gmpy2.mpfr_version()}")
    print(f"gmpy2:        {gmpy2.version()}")
    print(f"MPFR max precision = {gmpy2.get_max_precision()}")
    print()
    print(f"working precision = {precision} bits")
    print(f"approximate decimals for working precision = {approximate_decimals(precision)} (upper bound)")
    print(f"maximum supported digits = {max_supported_digits(precision) - 1}")
    print()


def print_progress(sample: ProgressSample) -> None:
    print(
        f"{stamp(sample.timestamp, sample.elapsed)}: "
        f"k = {sample.k}, k_delta = {sample.k_delta}, max_k = {sample.max_k}"
    )


def make_pi(opts: Options) -> int:
    """Run one computation and write its output file. Returns an exit status."""
    filename = opts.output_dir / output_filename(opts.digits, opts.algorithm)

    # Open the results file right away: failing after hours of work is worse.
    try:
        writer = PiWriter(filename, width=opts.width)
    except OSError as e:
        sys.stderr.write(f"Error: cannot create {filename}: {e}\n")
        return EXIT_RESOURCE

    with writer:
        driver = IterationDriver(
            opts.algorithm, opts.digits, precision=opts.precision, progress=print_progress
        )
        print(f"make_pi: algorithm: {driver.name}")

        start = time.perf_counter()

        def announce(d: IterationDriver) -> None:
            print(f"{stamp(time.time(), 0.0)}: make_pi, digits = {opts.digits}, max_k = {d.max_k}")

        result = driver.run(on_start=announce)

        elapsed = time.perf_counter() - start
        print(
            f"{stamp(time.time(), elapsed)}: "
            f"k = {driver.last_k}, max_k = {driver.max_k}, digits = {result.digits}"
        )

        # conversion from the internal binary representation to decimal
        convert_start = time.perf_counter()
        pi_str = render(result.value, opts.digits, opts.precision)
        lines = writer.write(pi_str)
        convert_elapsed = time.perf_counter() - convert_start
        print(f"{stamp(time.time(), convert_elapsed)}: (finalization and conversion base 10)")

    status = EXIT_OK
    if opts.verify:
        if verify(pi_str):
            print("make_pi: verified against Chudnovsky binary splitting")
        else:
            sys.stderr.write("Error: result does not match the reference value\n")
            status = EXIT_VERIFY_FAILED

    total = time.perf_counter() - start
    print(f"{stamp(time.time(), total)}: all done, {lines} lines, output in {filename}")
    return status


def main(argv: list[str]) -> int:
    prog = argv[0] if argv else "mpfr-pi"
    try:
        opts = parse_args(argv)
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        print_usage(prog)
        return EXIT_USAGE

    if opts.list_algorithms:
        print_algorithms()
        return EXIT_OK

    print_banner(opts.precision)

    try:
        validate_precision(opts.precision)
        validate_digits(opts.digits, opts.precision)
        get_algorithm(opts.algorithm)
    except UnknownAlgorithmError as e:
        print(f"make_pi: unknown algorithm {e.name}")
        print_algorithms()
        return EXIT_UNKNOWN_ALGORITHM
    except ConfigurationError as e:
        sys.stderr.write(f"Error: {e}\n")
        return EXIT_USAGE

    print(f"calculating pi to {opts.digits} digits using {opts.algorithm} algorithm")
    return make_pi(opts)


def run() -> None:
    """Console script entry point."""
    raise SystemExit(main(sys.argv))


if __name__ == "__main__":
    run()
