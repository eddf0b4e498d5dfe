#!/usr/bin/env python3
"""
Plot and log valuation certificates.

This script reads the JSON certificates emitted by `valuations.py --seq`, prints a
small summary table, and saves a couple of plots:
- v_p(n!) progression per prime, with the upper bound (n-1)/(p-1) drawn dashed
  and any direct/Legendre disagreement marked with a red X.
- Runtime per certificate and the valuation density v_p(n!)/n, which tends to
  1/(p-1) as n grows.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

import matplotlib.pyplot as plt

from certificates import certificate_paths, load_certificate

PRIME_COLORS = ["#2a9d8f", "#264653", "#e9c46a", "#f4a261", "#8d99ae", "#6a4c93"]


@dataclass
class Certificate:
    n: int
    direct: Dict[int, int]
    legendre: Dict[int, int]
    agree: bool
    runtime_seconds: float | None
    path: Path


def load_certificates(cert_dir: Path) -> List[Certificate]:
    certs: List[Certificate] = []
    for path in certificate_paths(cert_dir):
        data = load_certificate(path)
        certs.append(
            Certificate(
                n=int(data["n"]),
                direct=data["direct"],
                legendre=data["legendre"],
                agree=bool(data.get("agree")),
                runtime_seconds=data.get("runtime_seconds"),
                path=path,
            )
        )
    return certs


def certificate_primes(certs: Sequence[Certificate]) -> List[int]:
    primes = set()
    for cert in certs:
        primes.update(cert.direct)
    return sorted(primes)


def legendre_upper_bound(n: int, p: int) -> float:
    """v_p(n!) <= (n - 1)/(p - 1), with equality exactly when n is a power of p."""
    return (n - 1) / (p - 1) if n > 0 else 0.0


def print_summary(certs: Sequence[Certificate]) -> None:
    if not certs:
        print("No certificates found.")
        return
    primes = certificate_primes(certs)
    disagreeing = [c for c in certs if not c.agree]
    print(f"Loaded {len(certs)} certificates spanning n={certs[0].n}..{certs[-1].n}.")
    if disagreeing:
        print(
            "Direct/Legendre disagreements: "
            + ", ".join(f"n={c.n}" for c in disagreeing)
        )
    else:
        print("Direct and Legendre valuations agree everywhere.")

    header = f"{'n':>5}  " + "  ".join(f"{'v_' + str(p):>7}" for p in primes)
    print(f"{header}  {'runtime (s)':>11}  {'path'}")
    print("-" * (len(header) + 24))
    for cert in certs:
        vals = "  ".join(
            f"{cert.direct[p] if p in cert.direct else '—':>7}" for p in primes
        )
        runtime = (
            f"{cert.runtime_seconds:.4f}" if cert.runtime_seconds is not None else "—"
        )
        print(f"{cert.n:>5}  {vals}  {runtime:>11}  {cert.path.name}")


def save_fig(fig: plt.Figure, out_dir: Path, name: str, formats: Iterable[str]) -> None:
    out_dir.mkdir(parents=True, exist_ok=True)
    for fmt in formats:
        fig_path = out_dir / f"{name}.{fmt}"
        fig.savefig(fig_path, bbox_inches="tight", dpi=150)
        print(f"Saved {fig_path}")
    plt.close(fig)


def plot_progression(
    certs: Sequence[Certificate], out_dir: Path, formats: Iterable[str]
) -> None:
    ns = [c.n for c in certs]
    fig, ax = plt.subplots(figsize=(10, 6))

    for idx, p in enumerate(certificate_primes(certs)):
        color = PRIME_COLORS[idx % len(PRIME_COLORS)]
        points = [(c.n, c.direct[p]) for c in certs if p in c.direct]
        ax.plot(
            [n for n, _ in points],
            [v for _, v in points],
            marker="o",
            markersize=3,
            linewidth=1.5,
            color=color,
            label=f"v_{p}(n!)",
            zorder=2,
        )
        ax.plot(
            ns,
            [legendre_upper_bound(n, p) for n in ns],
            linestyle="--",
            linewidth=1.0,
            color=color,
            alpha=0.5,
            label=f"(n-1)/{p - 1}",
            zorder=1,
        )
        mismatched = [
            (c.n, c.direct[p])
            for c in certs
            if p in c.direct and c.direct[p] != c.legendre.get(p)
        ]
        if mismatched:
            ax.scatter(
                [n for n, _ in mismatched],
                [v for _, v in mismatched],
                color="#e76f51",
                s=100,
                marker="x",
                linewidth=2,
                label=f"Mismatch (p={p})",
                zorder=3,
            )

    ax.set_xlabel("n", fontsize=11)
    ax.set_ylabel("v_p(n!)", fontsize=11)
    ax.set_title("p-adic valuations of n!", fontsize=13, fontweight="bold")
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.legend(loc="upper left", frameon=True, framealpha=0.9)

    save_fig(fig, out_dir, "valuations", formats)


def plot_runtime_and_density(
    certs: Sequence[Certificate], out_dir: Path, formats: Iterable[str]
) -> None:
    ns = [c.n for c in certs]
    runtimes = [c.runtime_seconds or 0.0 for c in certs]
    colors = ["#2a9d8f" if c.agree else "#e76f51" for c in certs]

    fig, (ax_rt, ax_density) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    ax_rt.bar(ns, runtimes, color=colors, width=0.8, alpha=0.9)
    ax_rt.set_ylabel("Runtime (s)", fontsize=11)
    ax_rt.set_yscale("symlog", linthresh=1e-4)
    ax_rt.grid(True, axis="y", linestyle="--", alpha=0.3)
    ax_rt.set_title("Runtime and valuation density", fontsize=13, fontweight="bold")

    for idx, p in enumerate(certificate_primes(certs)):
        color = PRIME_COLORS[idx % len(PRIME_COLORS)]
        points = [(c.n, c.direct[p] / c.n) for c in certs if p in c.direct and c.n > 0]
        ax_density.plot(
            [n for n, _ in points],
            [d for _, d in points],
            color=color,
            linewidth=1.2,
            label=f"v_{p}(n!)/n",
        )
        ax_density.axhline(1 / (p - 1), color=color, linestyle=":", alpha=0.6)
    ax_density.set_xlabel("n", fontsize=11)
    ax_density.set_ylabel("Density", fontsize=11)
    ax_density.grid(True, linestyle="--", alpha=0.3)
    ax_density.legend(fontsize="small", loc="lower right")

    save_fig(fig, out_dir, "runtime_density", formats)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--cert-dir",
        type=Path,
        default=Path("certificates"),
        help="Directory containing V_*.json certificate files.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=Path("plots"),
        help="Where to save generated plots.",
    )
    parser.add_argument(
        "--formats",
        nargs="+",
        default=["png"],
        help="Image formats to save (passed to matplotlib).",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display plots interactively after saving.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    plt.rcParams.update(
        {
            "font.family": "sans-serif",
            "axes.spines.top": False,
            "axes.spines.right": False,
        }
    )

    certs = load_certificates(args.cert_dir)
    print_summary(certs)
    if not certs:
        return

    plot_progression(certs, args.out_dir, args.formats)
    plot_runtime_and_density(certs, args.out_dir, args.formats)

    if args.show:
        plt.show()


if __name__ == "__main__":
    main()
