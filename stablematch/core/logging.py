"""Event-level JSONL logging and run output management."""
from __future__ import annotations

import json
import os
from typing import Any

from stablematch.core.types import Proposal


class EventLogger:
    """Writes structured events as newline-delimited JSON."""

    def __init__(self, run_dir: str):
        self.run_dir = run_dir
        os.makedirs(run_dir, exist_ok=True)
        self._events_path = os.path.join(run_dir, "events.jsonl")
        self._file = open(self._events_path, "a")

    def log_profile(self, instance: int, n: int, seed: int) -> None:
        event: dict[str, Any] = {
            "event": "profile",
            "instance": instance,
            "n": n,
            "seed": seed,
        }
        self._file.write(json.dumps(event) + "\n")

    def log_proposal(self, proposal: Proposal, instance: int = 0) -> None:
        event: dict[str, Any] = {
            "event": "proposal",
            "instance": instance,
            "round": proposal.round_number,
            "seller": proposal.seller,
            "buyer": proposal.buyer,
            "rank": proposal.rank,
            "outcome": proposal.outcome.value,
            "displaced": proposal.displaced,
        }
        self._file.write(json.dumps(event) + "\n")

    def log_result(self, metrics: dict[str, Any], instance: int = 0) -> None:
        record = dict(metrics)
        record["event"] = "result"
        record["instance"] = instance
        self._file.write(json.dumps(record) + "\n")

    def log_error(self, exc: BaseException, instance: int = 0) -> None:
        event = {
            "event": "error",
            "instance": instance,
            "type": type(exc).__name__,
            "message": str(exc),
        }
        self._file.write(json.dumps(event) + "\n")

    def close(self) -> None:
        self._file.flush()
        self._file.close()
