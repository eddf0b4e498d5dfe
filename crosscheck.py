"""Cross-check the direct and Legendre valuations of n! against each other."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from valuation import direct_valuation, factorial, legendre_valuation

DEFAULT_PRIMES: Tuple[int, ...] = (2, 3, 5)


@dataclass
class CrossCheck:
    n: int
    prime: int
    direct: int
    legendre: int
    direct_seconds: float
    legendre_seconds: float

    @property
    def agrees(self) -> bool:
        return self.direct == self.legendre


def parse_primes(text: str) -> List[int]:
    """Parse a comma-separated list such as "2,3,5"; moduli below 2 are rejected."""
    primes: List[int] = []
    for chunk in text.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        p = int(chunk)
        if p < 2:
            raise ValueError(f"prime modulus must be >= 2, got {p}")
        if p not in primes:
            primes.append(p)
    if not primes:
        raise ValueError("at least one prime modulus is required")
    return primes


def cross_check(n: int, p: int, fact: Optional[int] = None) -> CrossCheck:
    """Compute v_p(n!) both ways; `fact` may carry a precomputed n!."""
    if fact is None:
        fact = factorial(n)

    t0 = time.perf_counter()
    # n! >= 1, so the zero-input branch cannot trigger here.
    direct = direct_valuation(fact, p).unwrap()
    direct_seconds = time.perf_counter() - t0

    t0 = time.perf_counter()
    legendre = legendre_valuation(n, p)
    legendre_seconds = time.perf_counter() - t0

    return CrossCheck(
        n=n,
        prime=p,
        direct=direct,
        legendre=legendre,
        direct_seconds=direct_seconds,
        legendre_seconds=legendre_seconds,
    )


def cross_check_range(
    n_max: int, primes: Sequence[int] = DEFAULT_PRIMES, n_min: int = 1
) -> List[CrossCheck]:
    """Check every n in [n_min, n_max] for every prime, growing n! incrementally."""
    checks: List[CrossCheck] = []
    fact = factorial(n_min)
    for n in range(n_min, n_max + 1):
        if n > n_min:
            fact *= n
        for p in primes:
            checks.append(cross_check(n, p, fact=fact))
    return checks


def find_mismatches(checks: Iterable[CrossCheck]) -> List[CrossCheck]:
    return [c for c in checks if not c.agrees]


def format_crosscheck_summary(checks: Sequence[CrossCheck]) -> str:
    """One-line summary of a batch of cross-checks."""
    ns = sorted({c.n for c in checks})
    primes = sorted({c.prime for c in checks})
    direct_total = sum(c.direct_seconds for c in checks)
    legendre_total = sum(c.legendre_seconds for c in checks)
    parts = [
        "[crosscheck] n="
        + (f"{ns[0]}..{ns[-1]}" if ns else "none"),
        f"primes={primes}",
        f"checks={len(checks)}",
        f"mismatches={len(find_mismatches(checks))}",
        f"direct_time={direct_total:.3f}s",
        f"legendre_time={legendre_total:.3f}s",
    ]
    return " | ".join(parts)
