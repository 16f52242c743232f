#!/usr/bin/env python3
"""CLI entry-point: solve a random stable-matching instance of size n."""
from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import Optional

# Ensure project root is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stablematch.core.config import (  # noqa: E402
    SCHEDULES,
    MatchingConfig,
    load_config,
    parse_size,
    validate_config,
)
from stablematch.core.errors import UsageError  # noqa: E402
from stablematch.core.rng import SeededRNG  # noqa: E402
from stablematch.evaluation.reports import format_report  # noqa: E402
from stablematch.market.simulator import MatchingSimulator  # noqa: E402

USAGE = "Usage: run.py <value for n> [options]"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Generate random seller/buyer preferences and find a "
                    "stable matching with deferred acceptance.",
        usage=USAGE,
    )
    p.add_argument("n", nargs="?", default=None,
                   help="Number of sellers (and of buyers)")
    p.add_argument("--config", type=str, default=None,
                   help="Path to YAML config file")
    p.add_argument("--seed", type=int, default=None,
                   help="RNG seed (default: current time)")
    p.add_argument("--repeats", type=int, default=None,
                   help="Number of independent instances to solve")
    p.add_argument("--schedule", type=str, default=None, choices=list(SCHEDULES),
                   help="Proposal order: ascending-id rounds or a FIFO queue")
    p.add_argument("--max_rounds", type=int, default=None,
                   help="Abort with an error after this many rounds")
    p.add_argument("--output_dir", type=str, default=None)
    p.add_argument("--no_write", action="store_true",
                   help="Print only; do not write a run directory")
    p.add_argument("--no_verify", action="store_true",
                   help="Skip the stability check after matching")
    p.add_argument("--trace", action="store_true",
                   help="Log every proposal to events.jsonl")
    p.add_argument("--quiet", action="store_true",
                   help="Do not print the preference tables")
    p.add_argument("--log_level", type=str, default="WARNING")
    return p


def _apply_overrides(cfg: MatchingConfig, args: argparse.Namespace) -> None:
    """Mutate *cfg* in-place with any non-None CLI overrides."""
    cfg.n = parse_size(args.n)
    if args.seed is not None:
        cfg.seed = args.seed
    elif not args.config:
        cfg.seed = int(time.time())
    if args.repeats is not None:
        cfg.repeats = args.repeats
    if args.schedule is not None:
        cfg.engine.schedule = args.schedule
    if args.max_rounds is not None:
        cfg.engine.max_rounds = args.max_rounds
    if args.output_dir is not None:
        cfg.output_dir = args.output_dir
    if args.no_write:
        cfg.write_outputs = False
    if args.no_verify:
        cfg.verify = False
    if args.trace:
        cfg.engine.trace = True


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config) if args.config else MatchingConfig()
        _apply_overrides(cfg, args)
        validate_config(cfg)
    except UsageError as exc:
        print(USAGE, file=sys.stderr)
        print(f"error: {exc}", file=sys.stderr)
        return 1

    rng = SeededRNG(cfg.seed)
    sim = MatchingSimulator(cfg, rng)
    sim.run()

    for i, (profile, result) in enumerate(zip(sim.profiles, sim.results)):
        if cfg.repeats > 1:
            print(f"== instance {i} (seed={sim.metrics[i]['seed']})")
        print(format_report(profile, result, sim.elapsed[i],
                            show_preferences=not args.quiet))

    if sim.run_dir:
        print(f"Results → {sim.run_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
