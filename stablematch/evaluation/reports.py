"""Text report for stdout plus summary JSON / matches CSV in the run directory."""
from __future__ import annotations

import csv
import json
import os
from typing import Any, Optional

from stablematch.core.types import MatchResult, PreferenceProfile


def format_report(
    profile: PreferenceProfile,
    result: MatchResult,
    elapsed: Optional[float] = None,
    show_preferences: bool = True,
) -> str:
    """Both preference tables, every seller's partner, and the elapsed time."""
    lines: list[str] = []
    if show_preferences:
        lines.append("Pref lists - sellers")
        for s, prefs in enumerate(profile.seller_prefs):
            lines.append(f"seller {s}: " + " ".join(str(b) for b in prefs))
        lines.append("Pref lists - buyers")
        for b, prefs in enumerate(profile.buyer_prefs):
            lines.append(f"buyer {b}: " + " ".join(str(s) for s in prefs))
    lines.append("Matches, ordered by seller.")
    for s, b in result.pairs():
        lines.append(f"seller {s} with buyer {b}")
    lines.append(f"Proposals: {result.proposals}  rounds: {result.rounds}")
    if elapsed is not None:
        lines.append(f"Time taken: {elapsed:.3f} seconds")
    return "\n".join(lines)


def write_summary(metrics: dict[str, Any], run_dir: str) -> str:
    """Write aggregate metrics as ``summary.json``."""
    path = os.path.join(run_dir, "summary.json")
    with open(path, "w") as f:
        json.dump(metrics, f, indent=2)
    return path


def write_preferences_json(
    profile: PreferenceProfile, run_dir: str, instance: int = 0,
) -> str:
    """Write both preference tables as ``preferences_<instance>.json``."""
    path = os.path.join(run_dir, f"preferences_{instance}.json")
    with open(path, "w") as f:
        json.dump(
            {
                "n": profile.n,
                "seller_prefs": profile.seller_prefs,
                "buyer_prefs": profile.buyer_prefs,
            },
            f,
        )
    return path


_MATCH_FIELDS = [
    "instance",
    "seller",
    "buyer",
    "seller_rank",
    "buyer_rank",
]


def write_matches_csv(
    profile: PreferenceProfile,
    result: MatchResult,
    run_dir: str,
    instance: int = 0,
) -> str:
    """Write one row per matched pair to ``matches.csv`` (appends across instances)."""
    path = os.path.join(run_dir, "matches.csv")
    new_file = not os.path.exists(path)
    seller_ranks = result.seller_ranks(profile)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_MATCH_FIELDS)
        if new_file:
            writer.writeheader()
        for s, b in result.pairs():
            writer.writerow({
                "instance": instance,
                "seller": s,
                "buyer": b,
                "seller_rank": seller_ranks[s],
                "buyer_rank": result.buyer_accept_rank[b],
            })
    return path
