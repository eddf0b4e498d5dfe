#!/usr/bin/env python3
"""Keep the README's v_p(n!) table in step with the valuation certificates.

Every row is rebuilt from a `V_*.json` certificate and re-derived with Legendre's
formula before it is rendered, so an edited or corrupted certificate shows up as an
unverified row instead of silently reaching the README. Rows are compared with the
table already between the markers, one n at a time:

  <!-- VALUATION_TABLE:START -->
  ... generated table ...
  <!-- VALUATION_TABLE:END -->

Usage examples:
  python update_readme_table.py --cert-dir certificates --readme README.md
  python update_readme_table.py --check     # list stale n values, exit 1 if any
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from certificates import certificate_paths, load_certificate
from valuation import legendre_valuation

SECTION = "VALUATION_TABLE"
START_MARKER = f"<!-- {SECTION}:START -->"
END_MARKER = f"<!-- {SECTION}:END -->"


@dataclass
class TableRow:
    n: int
    valuations: Dict[int, int]
    verified: bool

    def render(self, primes: Sequence[int]) -> str:
        cells = [str(self.valuations.get(p, "")) for p in primes]
        mark = "yes" if self.verified else "**no**"
        return f"| {self.n} | " + " | ".join(cells) + f" | {mark} |"


def rows_from_certificates(cert_dir: Path) -> List[TableRow]:
    """One row per certificate, verified against Legendre's formula."""
    paths = certificate_paths(cert_dir)
    if not paths:
        raise ValueError(f"no V_*.json certificates in {cert_dir}")
    rows: List[TableRow] = []
    for path in paths:
        data = load_certificate(path)
        n = int(data["n"])
        direct: Dict[int, int] = data["direct"]
        verified = bool(data["agree"]) and all(
            legendre_valuation(n, p) == v for p, v in direct.items()
        )
        rows.append(TableRow(n=n, valuations=direct, verified=verified))
    return rows


def table_primes(rows: Sequence[TableRow]) -> List[int]:
    return sorted({p for row in rows for p in row.valuations})


def render_table(rows: Sequence[TableRow]) -> str:
    primes = table_primes(rows)
    lines = [
        "Direct-division valuations from `certificates/V_*.json`, re-checked with Legendre's formula:",
        "",
        "| n | " + " | ".join(f"v_{p}(n!)" for p in primes) + " | verified |",
        "|---|" + "---|" * len(primes) + "---|",
    ]
    lines.extend(row.render(primes) for row in rows)
    return "\n".join(lines)


def split_readme(readme_text: str) -> Tuple[str, str, str]:
    """Split into (text through START marker, section body, END marker onward)."""
    head, found, rest = readme_text.partition(START_MARKER)
    if not found:
        raise ValueError(f"README has no {START_MARKER} marker")
    body, found, tail = rest.partition(END_MARKER)
    if not found:
        raise ValueError(f"README has no {END_MARKER} marker after {START_MARKER}")
    return head + START_MARKER, body, END_MARKER + tail


def rendered_rows(section: str) -> Dict[int, str]:
    """Map n to its Markdown row for every data row in a table section."""
    rows: Dict[int, str] = {}
    for line in section.splitlines():
        line = line.strip()
        if not line.startswith("|"):
            continue
        first = line.strip("|").split("|")[0].strip()
        if first.isdigit():
            rows[int(first)] = line
    return rows


def stale_values(old_section: str, new_section: str) -> List[int]:
    """n values whose row was added, dropped, or changed."""
    old = rendered_rows(old_section)
    new = rendered_rows(new_section)
    return sorted(n for n in old.keys() | new.keys() if old.get(n) != new.get(n))


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Refresh the README's v_p(n!) table from valuation certificates."
    )
    parser.add_argument(
        "--cert-dir",
        type=Path,
        default=Path("certificates"),
        help="Directory containing V_*.json certificate files.",
    )
    parser.add_argument(
        "--readme", type=Path, default=Path("README.md"), help="README to update."
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report stale rows; exit 1 if the table would change.",
    )
    args = parser.parse_args(argv)

    try:
        rows = rows_from_certificates(args.cert_dir)
        head, body, tail = split_readme(args.readme.read_text())
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    unverified = [row.n for row in rows if not row.verified]
    if unverified:
        print(f"[readme] rows failing the Legendre re-check: n={unverified}")

    table = render_table(rows)
    stale = stale_values(body, table)
    if args.check:
        if stale:
            print(f"[readme] stale rows: n={stale}; rerun without --check to update.")
            return 1
        print(f"[readme] table is current ({len(rows)} rows).")
        return 0

    if not stale:
        print(f"[readme] table is current ({len(rows)} rows); nothing written.")
        return 0

    args.readme.write_text(f"{head}\n{table}\n{tail}")
    print(
        f"[readme] wrote {len(rows)} rows (n={rows[0].n}..{rows[-1].n}) to {args.readme}; "
        f"{len(stale)} changed."
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
