#!/usr/bin/env python3
"""Size sweep: solve a grid of (n, seed) instances and aggregate timings."""
from __future__ import annotations

import argparse
import csv
import os
import sys
import time
from itertools import product
from typing import Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stablematch.core.config import SCHEDULES, MatchingConfig  # noqa: E402
from stablematch.core.rng import SeededRNG  # noqa: E402
from stablematch.market.simulator import MatchingSimulator  # noqa: E402


def run_sweep(
    sizes: list[int],
    seeds: list[int],
    schedule: str = "rounds",
) -> list[dict]:
    """One summary row per (n, seed); nothing is written to disk."""
    rows: list[dict] = []
    for n, seed in product(sizes, seeds):
        cfg = MatchingConfig(n=n, seed=seed, write_outputs=False)
        cfg.engine.schedule = schedule
        sim = MatchingSimulator(cfg, SeededRNG(seed))
        sim.run()
        row = dict(sim.metrics[0])
        row["schedule"] = schedule
        rows.append(row)
    return rows


def main(argv: Optional[list[str]] = None) -> None:
    p = argparse.ArgumentParser(description="Run a stable-matching size sweep.")
    p.add_argument("--sizes", type=int, nargs="+", default=[10, 100, 500])
    p.add_argument("--seeds", type=int, nargs="+", default=[42, 123, 456])
    p.add_argument("--schedule", type=str, default="rounds", choices=list(SCHEDULES))
    p.add_argument("--output", type=str, default="outputs/sweep_results.csv")
    args = p.parse_args(argv)

    print(f"Sweep: {len(args.sizes) * len(args.seeds)} configurations")
    t0 = time.time()
    rows = run_sweep(args.sizes, args.seeds, args.schedule)
    for row in rows:
        print(
            f"  n={row['n']}  seed={row['seed']}  proposals={row['proposals']}  "
            f"rounds={row['rounds']}  {row['elapsed_sec']:.3f}s"
        )

    # write aggregated CSV
    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    if rows:
        with open(args.output, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)

    print(f"\nSweep complete in {time.time() - t0:.1f}s: {len(rows)} runs → {args.output}")


if __name__ == "__main__":
    main()
