from __future__ import annotations

import ast
import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lib.config_base import ConfigBase

HEAP_ORDERS = ("max", "min")


@dataclass
class HeapConfig(ConfigBase):
    capacity: int = 1024
    # Verify heap order and index coherence after every mutation (slow).
    check_invariants: bool = False
    order: str = "max"

    def validate(self) -> None:
        if self.capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {self.capacity}")
        if self.order not in HEAP_ORDERS:
            raise ValueError(f"Unknown heap order `{self.order}`. Use 'max' or 'min'.")


def load_heap_config(
    config_path: str | Path | None = None,
    overrides: Iterable[str] = (),
) -> HeapConfig:
    """Build a ``HeapConfig`` from an optional file plus ``KEY=VALUE`` overrides."""
    cfg = HeapConfig() if config_path is None else HeapConfig.from_file(config_path)
    updates: dict[str, Any] = {}
    for override in overrides:
        if "=" not in override:
            raise ValueError(
                f"Invalid override expression: `{override}` (expected KEY=VALUE)"
            )
        key, raw = override.split("=", 1)
        updates[key.strip()] = _parse_value(raw.strip())
    if not updates:
        cfg.validate()
        return cfg
    return cfg.with_updates(updates)


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    try:
        return ast.literal_eval(raw)
    except (ValueError, SyntaxError):
        return raw
