"""Compute p-adic valuations of n! two ways and check that they agree.

Method:
- Direct: build n! explicitly and divide by p until a remainder appears. For p=2 the
  trailing zero bits of the little-endian byte export are counted instead.
- Legendre: v_p(n!) = (n - s_p(n)) / (p - 1) with s_p the base-p digit sum; n! is
  never built.

Capabilities:
- Single run for one n (default 20) over a set of primes (default 2,3,5), printing n!
  and both valuations, with an optional JSON certificate.
- Sequential run up to N, writing `V_{n}.json` certificates into a folder and skipping
  existing ones to allow resume. n! is grown incrementally between steps.
- `--strict` turns any disagreement between the two methods into a hard failure.

Example commands:
  python valuations.py
  python valuations.py 1000 --primes 2,3,5,7,11 --cert V_1000.json
  python valuations.py --seq 500 --cert-dir certificates --strict
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from certificates import certificate_paths, save_certificate
from crosscheck import (
    DEFAULT_PRIMES,
    CrossCheck,
    cross_check,
    find_mismatches,
    format_crosscheck_summary,
    parse_primes,
)
from valuation import factorial

DEFAULT_N = 20
FACTORIAL_DISPLAY_DIGITS = 60


@contextmanager
def unlimited_int_digits() -> Iterator[None]:
    """Lift the int <-> decimal string digit limit inside the block, then restore it.

    Factorials past a few thousand digits exceed the interpreter default.
    """
    if not hasattr(sys, "get_int_max_str_digits"):
        yield
        return
    previous = sys.get_int_max_str_digits()
    sys.set_int_max_str_digits(0)
    try:
        yield
    finally:
        sys.set_int_max_str_digits(previous)


def decimal_digits(value: int) -> int:
    with unlimited_int_digits():
        return len(str(value))


def format_factorial(fact: int, full: bool = False) -> str:
    """Decimal text of n!, elided in the middle when long unless `full`."""
    with unlimited_int_digits():
        text = str(fact)
    if full or len(text) <= FACTORIAL_DISPLAY_DIGITS:
        return text
    half = FACTORIAL_DISPLAY_DIGITS // 2
    return f"{text[:half]}...{text[-half:]} ({len(text)} digits)"


def run_single(
    n: int,
    primes: Sequence[int] = DEFAULT_PRIMES,
    verbose: bool = False,
    show_factorial: bool = False,
    fact: Optional[int] = None,
) -> List[CrossCheck]:
    """Compute and print both valuations of n! for each prime."""
    if fact is None:
        fact = factorial(n)
    checks = [cross_check(n, p, fact=fact) for p in primes]
    fact_text = format_factorial(fact, full=show_factorial)

    if n == 0:
        print("0! = 1, so every valuation is 0.")

    print("Using direct division:")
    for c in checks:
        print(f"The {c.prime}-adic valuation of {fact_text} is {c.direct}.")
    print("\nUsing Legendre's formula:")
    for c in checks:
        print(f"The {c.prime}-adic valuation of {fact_text} is {c.legendre}.")

    for c in find_mismatches(checks):
        print(f"MISMATCH p={c.prime}: direct={c.direct} legendre={c.legendre}")
    if verbose:
        for c in checks:
            print(
                f"[timing] p={c.prime} direct={c.direct_seconds:.6f}s legendre={c.legendre_seconds:.6f}s"
            )
    return checks


def _raise_on_mismatch(checks: Sequence[CrossCheck]) -> None:
    bad = find_mismatches(checks)
    if bad:
        detail = ", ".join(
            f"n={c.n} p={c.prime} (direct {c.direct}, legendre {c.legendre})" for c in bad
        )
        raise RuntimeError(f"valuation methods disagree: {detail}")


def sequential_cert_run(
    target_n: int,
    out_dir: Path,
    primes: Sequence[int] = DEFAULT_PRIMES,
    verbose: bool = False,
    strict: bool = False,
) -> List[CrossCheck]:
    """Cross-check n=1..target_n, writing certificates and skipping existing ones.

    Returns the checks made in this run (resumed steps are not recomputed).
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    existing = {int(p.stem.split("_")[1]) for p in certificate_paths(out_dir)}
    start = max(existing) + 1 if existing else 1

    all_checks: List[CrossCheck] = []
    fact = factorial(start - 1)
    for n in range(start, target_n + 1):
        t0 = time.perf_counter()
        fact *= n
        checks = [cross_check(n, p, fact=fact) for p in primes]
        runtime = time.perf_counter() - t0
        if strict:
            _raise_on_mismatch(checks)
        cert_path = out_dir / f"V_{n}.json"
        save_certificate(
            n, checks, cert_path, runtime=runtime, factorial_digits=decimal_digits(fact)
        )
        all_checks.extend(checks)
        vals = " ".join(f"v_{c.prime}={c.direct}" for c in checks)
        agree = all(c.agrees for c in checks)
        print(f"n={n} -> {vals} | agree={agree} | time {runtime:.3f}s | saved {cert_path}")
        if verbose:
            for c in checks:
                print(
                    f"[timing] n={n} p={c.prime} direct={c.direct_seconds:.6f}s legendre={c.legendre_seconds:.6f}s"
                )

    if all_checks:
        print(format_crosscheck_summary(all_checks))
    return all_checks


def main(argv: Optional[Sequence[str]] = None) -> None:
    import argparse

    parser = argparse.ArgumentParser(
        description="Compute p-adic valuations of n! by direct division and by Legendre's formula."
    )
    parser.add_argument(
        "n",
        type=int,
        nargs="?",
        default=DEFAULT_N,
        help=f"Compute valuations of n! (default {DEFAULT_N}).",
    )
    parser.add_argument(
        "--primes",
        type=str,
        default=",".join(str(p) for p in DEFAULT_PRIMES),
        help="Comma-separated prime moduli (default 2,3,5). Primality is not checked.",
    )
    parser.add_argument("--verbose", action="store_true", help="Print per-method timings.")
    parser.add_argument(
        "--show-factorial",
        action="store_true",
        help="Print n! in full instead of eliding long values.",
    )
    parser.add_argument(
        "--cert", type=Path, help="Write a JSON certificate for the single run to this path."
    )
    parser.add_argument(
        "--seq",
        type=int,
        help="Run sequentially for n=1..SEQ, writing certificates V_{n}.json in --cert-dir.",
    )
    parser.add_argument(
        "--cert-dir",
        type=Path,
        default=Path("certificates"),
        help="Directory for certificates in sequential mode.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when the direct and Legendre valuations disagree.",
    )

    with unlimited_int_digits():
        args = parser.parse_args(argv)

        try:
            primes = parse_primes(args.primes)
        except ValueError as exc:
            parser.error(str(exc))
        if args.n < 0:
            parser.error("n must be non-negative.")

        if args.seq is not None:
            if args.seq < 0:
                parser.error("--seq must be non-negative.")
            if args.cert:
                parser.error("--cert applies to single runs; use --cert-dir with --seq.")
            sequential_cert_run(
                args.seq,
                args.cert_dir,
                primes=primes,
                verbose=args.verbose,
                strict=args.strict,
            )
            return

        t0 = time.perf_counter()
        fact = factorial(args.n)
        checks = run_single(
            args.n,
            primes,
            verbose=args.verbose,
            show_factorial=args.show_factorial,
            fact=fact,
        )
        runtime = time.perf_counter() - t0
        if args.strict:
            _raise_on_mismatch(checks)
        if args.cert:
            save_certificate(
                args.n,
                checks,
                args.cert,
                runtime=runtime,
                factorial_digits=decimal_digits(fact),
            )
            print(f"wrote certificate to {args.cert}")


if __name__ == "__main__":
    main()
