"""p-adic valuation helpers for factorials and other large integers.

Two independent routes to v_p(n!) live here:

- `direct_valuation` divides the materialised value by p until a remainder
  appears. For p=2 it reads the little-endian byte export instead and counts
  trailing zero bits, so no division is performed at all.
- `legendre_valuation` uses Legendre's formula
  v_p(n!) = (n - s_p(n)) / (p - 1), where s_p(n) is the base-p digit sum,
  and never builds n!. Its cost is O(log_p n) small divisions.

The two must agree for every n >= 0 and prime p; `crosscheck.py` relies on this.
Magnitudes are plain Python ints. Primality of p is not checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ZERO_INPUT = "ZeroValuationInput"


class ZeroValuationInput(ValueError):
    """Raised when the valuation of zero is requested (it is unbounded for every p)."""


@dataclass(frozen=True)
class ValuationResult:
    """Outcome of `direct_valuation`: exactly one of `value` or `error` is set."""

    prime: int
    value: Optional[int] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError(
                f"ValuationResult needs exactly one of value or error, got value={self.value!r} error={self.error!r}"
            )

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> int:
        if self.error == ZERO_INPUT:
            raise ZeroValuationInput(
                f"{self.prime}-adic valuation of 0 is infinite; pass a non-zero integer."
            )
        if self.value is None:
            raise ValueError(f"unknown valuation error kind {self.error!r}")
        return self.value


def magnitude_bytes(m: int) -> bytes:
    """Minimal little-endian byte export of m >= 0; zero gives b""."""
    return m.to_bytes((m.bit_length() + 7) // 8, "little")


def trailing_zero_bits(byte: int) -> int:
    """Count trailing zero bits of a non-zero byte (0..7)."""
    return (byte & -byte).bit_length() - 1


def byte_popcount(byte: int) -> int:
    return bin(byte).count("1")


def factorial(n: int) -> int:
    """Return n! by descending multiplication n * (n-1) * ... * 2."""
    if n <= 1:
        return 1
    fact = n
    i = n - 1
    while i > 1:
        fact *= i
        i -= 1
    return fact


def direct_valuation(m: int, p: int) -> ValuationResult:
    """Return v_p(m) by repeated division, or by trailing-zero counting for p=2.

    A zero magnitude yields a result with `error=ZERO_INPUT` rather than a value;
    call `.unwrap()` to turn that into `ZeroValuationInput`.
    """
    if m == 0:
        return ValuationResult(prime=p, error=ZERO_INPUT)

    k = 0
    if p != 2:
        q, r = divmod(m, p)
        while r == 0:
            k += 1
            m = q
            q, r = divmod(m, p)
        return ValuationResult(prime=p, value=k)

    for b in magnitude_bytes(m):
        if b == 0:
            k += 8
            continue
        k += trailing_zero_bits(b)
        break
    return ValuationResult(prime=p, value=k)


def digit_sum(n: int, p: int) -> int:
    """Sum of the base-p digits of n >= 0 (s_p(n)); popcount when p=2."""
    total = 0
    if p != 2:
        while n != 0:
            n, digit = divmod(n, p)
            total += digit
        return total

    # Population count of the binary expansion is the base-2 digit sum.
    for b in magnitude_bytes(n):
        total += byte_popcount(b)
    return total


def legendre_valuation(n: int, p: int) -> int:
    """v_p(n!) via Legendre's formula without computing n!."""
    return (n - digit_sum(n, p)) // (p - 1)
