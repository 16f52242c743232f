"""Matching run orchestration – generate, match, verify, write outputs.

Each run draws ``repeats`` independent instances of size ``n`` from forked
RNGs, solves each with deferred acceptance and writes:

  - ``events.jsonl``: profile / proposal / result / error events
  - ``matches.csv``: one row per (instance, seller, buyer)
  - ``preferences_<i>.json``: the preference tables of instance i
  - ``summary.json``: per-instance metrics plus run metadata
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional

from stablematch.core.config import MatchingConfig, validate_config
from stablematch.core.errors import InvariantViolation
from stablematch.core.logging import EventLogger
from stablematch.core.rng import SeededRNG
from stablematch.core.types import MatchResult, PreferenceProfile
from stablematch.evaluation.metrics import compute_metrics, verify_accept_ranks
from stablematch.evaluation.reports import (
    write_matches_csv,
    write_preferences_json,
    write_summary,
)
from stablematch.market.matcher import DeferredAcceptanceMatcher, Matcher
from stablematch.market.preferences import generate_preferences

logger = logging.getLogger(__name__)


def _make_run_dir(output_dir: str, name: str) -> str:
    """Create a fresh run directory, suffixing _1, _2, ... on name clashes."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, name)
    suffix = 0
    while True:
        try:
            os.mkdir(path)
            return path
        except FileExistsError:
            suffix += 1
            path = os.path.join(output_dir, f"{name}_{suffix}")


class MatchingSimulator:
    """Runs ``config.repeats`` random stable-matching instances.

    With ``write_outputs`` off nothing touches the filesystem and
    ``run_dir`` is None.
    """

    def __init__(self, config: MatchingConfig, rng: SeededRNG):
        validate_config(config)
        self.config = config
        self.rng = rng

        self.run_dir: Optional[str] = None
        self.event_logger: Optional[EventLogger] = None
        if config.write_outputs:
            timestamp = time.strftime("%Y%m%d_%H%M%S")
            self.run_dir = _make_run_dir(
                config.output_dir, f"{timestamp}_n{config.n}_s{config.seed}"
            )
            self.event_logger = EventLogger(self.run_dir)

        # matcher (pluggable via Matcher interface)
        self.matcher: Matcher = DeferredAcceptanceMatcher(
            max_rounds=config.engine.max_rounds,
            schedule=config.engine.schedule,
            event_logger=self.event_logger,
            trace=config.engine.trace,
        )

        # collected results, one entry per instance
        self.profiles: list[PreferenceProfile] = []
        self.results: list[MatchResult] = []
        self.metrics: list[dict[str, Any]] = []
        self.elapsed: list[float] = []

    # ── single instance ──────────────────────────────────────────────────

    def _run_instance(self, instance: int, rng: SeededRNG) -> MatchResult:
        cfg = self.config
        profile = generate_preferences(cfg.n, rng)
        if self.event_logger:
            self.event_logger.log_profile(instance, cfg.n, rng.seed)
        if isinstance(self.matcher, DeferredAcceptanceMatcher):
            self.matcher.instance = instance

        t0 = time.perf_counter()
        result = self.matcher.match(profile)
        elapsed = time.perf_counter() - t0

        metrics = compute_metrics(profile, result)
        metrics["instance"] = instance
        metrics["seed"] = rng.seed
        metrics["elapsed_sec"] = round(elapsed, 6)
        if cfg.verify:
            self._verify(profile, result, metrics)

        if self.event_logger:
            self.event_logger.log_result(metrics, instance)
        if self.run_dir:
            write_matches_csv(profile, result, self.run_dir, instance)
            write_preferences_json(profile, self.run_dir, instance)

        logger.info(
            "instance %d: n=%d proposals=%d rounds=%d (%.3fs)",
            instance, cfg.n, result.proposals, result.rounds, elapsed,
        )
        self.profiles.append(profile)
        self.results.append(result)
        self.metrics.append(metrics)
        self.elapsed.append(elapsed)
        return result

    @staticmethod
    def _verify(
        profile: PreferenceProfile, result: MatchResult, metrics: dict[str, Any],
    ) -> None:
        if not metrics["perfect"]:
            raise InvariantViolation("matching is not a perfect bijection")
        if not metrics["stable"]:
            raise InvariantViolation(
                f"matching has {metrics['blocking_pairs']} blocking pairs"
            )
        if not verify_accept_ranks(profile, result):
            raise InvariantViolation("buyer_accept_rank disagrees with buyer_matches")

    # ── main loop ────────────────────────────────────────────────────────

    def run(self) -> list[MatchResult]:
        cfg = self.config
        try:
            for instance in range(cfg.repeats):
                # single runs use the root RNG so a seed maps to one profile
                rng = self.rng if cfg.repeats == 1 else self.rng.fork()
                try:
                    self._run_instance(instance, rng)
                except Exception as exc:
                    if self.event_logger:
                        self.event_logger.log_error(exc, instance)
                    logger.error("instance %d failed: %s", instance, exc)
                    raise
        finally:
            if self.event_logger:
                self.event_logger.close()

        if self.run_dir:
            summary: dict[str, Any] = {
                "n": cfg.n,
                "seed": cfg.seed,
                "repeats": cfg.repeats,
                "schedule": cfg.engine.schedule,
                "total_proposals": sum(r.proposals for r in self.results),
                "total_elapsed_sec": round(sum(self.elapsed), 6),
                "instances": self.metrics,
            }
            write_summary(summary, self.run_dir)
        return self.results
