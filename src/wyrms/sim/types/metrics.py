from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    spawns: int
    deaths: int
    fights: int
    reclaimed: int
    food_cells: int
    largest_wyrm: int
    average_size: float
    tick_duration_ms: float = 0.0
