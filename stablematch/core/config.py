"""Configuration loading and defaults."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from stablematch.core.errors import UsageError

SCHEDULES = ("rounds", "queue")


@dataclass
class EngineConfig:
    schedule: str = "rounds"             # "rounds" | "queue"
    max_rounds: Optional[int] = None     # None = no budget
    trace: bool = False                  # log every proposal as an event


@dataclass
class MatchingConfig:
    n: int = 10
    seed: int = 42
    repeats: int = 1
    output_dir: str = "outputs/runs"
    verify: bool = True
    write_outputs: bool = True
    engine: EngineConfig = field(default_factory=EngineConfig)


def load_config(path: str) -> MatchingConfig:
    """Load configuration from a YAML file."""
    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise UsageError(f"Config {path} is not valid YAML: {exc}") from None
    if not isinstance(data, dict):
        raise UsageError(f"Config {path} must be a mapping, got {type(data).__name__}")
    return _dict_to_config(data)


_TOP_SCALARS = (
    "n", "seed", "repeats", "output_dir", "verify", "write_outputs",
)


def _dict_to_config(data: dict[str, Any]) -> MatchingConfig:
    cfg = MatchingConfig()
    for key in _TOP_SCALARS:
        if key in data:
            setattr(cfg, key, data[key])
    if isinstance(data.get("engine"), dict):
        for k, v in data["engine"].items():
            if hasattr(cfg.engine, k):
                setattr(cfg.engine, k, v)
    return cfg


def parse_size(text: Optional[str]) -> int:
    """Turn the command-line size argument into a non-negative ``n``."""
    if text is None:
        raise UsageError("missing value for n")
    try:
        n = int(text.strip())
    except ValueError:
        raise UsageError(f"n must be a non-negative integer, got {text!r}") from None
    if n < 0:
        raise UsageError(f"n must be a non-negative integer, got {n}")
    return n


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(cfg: MatchingConfig) -> None:
    """Raise ``UsageError`` if *cfg* cannot drive a run."""
    if not _is_int(cfg.n) or cfg.n < 0:
        raise UsageError(f"n must be a non-negative integer, got {cfg.n!r}")
    if not _is_int(cfg.seed):
        raise UsageError(f"seed must be an integer, got {cfg.seed!r}")
    if not _is_int(cfg.repeats) or cfg.repeats < 1:
        raise UsageError(f"repeats must be >= 1, got {cfg.repeats!r}")
    if not isinstance(cfg.output_dir, str) or not cfg.output_dir:
        raise UsageError(f"output_dir must be a non-empty path, got {cfg.output_dir!r}")
    for key in ("verify", "write_outputs"):
        if not isinstance(getattr(cfg, key), bool):
            raise UsageError(f"{key} must be true or false, got {getattr(cfg, key)!r}")

    eng = cfg.engine
    if not isinstance(eng, EngineConfig):
        raise UsageError(f"engine must be a mapping, got {eng!r}")
    if not isinstance(eng.schedule, str) or eng.schedule not in SCHEDULES:
        raise UsageError(
            f"Unknown schedule {eng.schedule!r}; expected one of {SCHEDULES}"
        )
    if eng.max_rounds is not None and (not _is_int(eng.max_rounds) or eng.max_rounds < 1):
        raise UsageError(f"max_rounds must be a positive integer, got {eng.max_rounds!r}")
    if not isinstance(eng.trace, bool):
        raise UsageError(f"trace must be true or false, got {eng.trace!r}")
