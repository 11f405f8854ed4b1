from __future__ import annotations

from typing import Sequence

from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    spawns: int,
    deaths: int,
    fights: int,
    reclaimed: int,
    food_cells: int,
    sizes: Sequence[int],
    duration_ms: float,
) -> TickMetrics:
    population = len(sizes)
    return TickMetrics(
        tick=tick,
        population=population,
        spawns=spawns,
        deaths=deaths,
        fights=fights,
        reclaimed=reclaimed,
        food_cells=food_cells,
        largest_wyrm=max(sizes, default=0),
        average_size=0.0 if population == 0 else sum(sizes) / population,
        tick_duration_ms=duration_ms,
    )
