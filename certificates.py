"""Certificate helpers for valuation runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from crosscheck import CrossCheck


def save_certificate(
    n: int,
    checks: Sequence[CrossCheck],
    path: Path,
    runtime: Optional[float],
    factorial_digits: Optional[int] = None,
) -> None:
    """Write a JSON certificate with both valuations per prime and their agreement."""
    data = {
        "n": n,
        "primes": [c.prime for c in checks],
        "direct": {str(c.prime): c.direct for c in checks},
        "legendre": {str(c.prime): c.legendre for c in checks},
        "agree": all(c.agrees for c in checks),
        "factorial_digits": factorial_digits,
        "runtime_seconds": runtime,
    }
    path.write_text(json.dumps(data, indent=2))


def certificate_paths(cert_dir: Path) -> List[Path]:
    """V_*.json files in cert_dir sorted by n."""
    if not cert_dir.exists():
        return []
    return sorted(
        (p for p in cert_dir.glob("V_*.json") if p.stem.split("_")[1].isdigit()),
        key=lambda p: int(p.stem.split("_")[1]),
    )


def load_certificate(path: Path) -> Dict[str, Any]:
    with path.open() as fh:
        data = json.load(fh)
    data["direct"] = {int(k): int(v) for k, v in data["direct"].items()}
    data["legendre"] = {int(k): int(v) for k, v in data["legendre"].items()}
    return data
