from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from .metrics import TickMetrics


@dataclass(slots=True)
class Snapshot:
    tick: int
    metrics: TickMetrics
    cells: List[Dict[str, Any]]
    wyrms: List[Dict[str, Any]]
    world: "SnapshotWorld"
    metadata: "SnapshotMetadata"


@dataclass(slots=True)
class SnapshotWorld:
    width: int
    height: int


@dataclass(slots=True)
class SnapshotMetadata:
    seed: int
    config_version: str
    cell_size: int
    tick_interval_ms: int
