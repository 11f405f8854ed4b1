from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..core.config import SpawnConfig
from ..core.geometry import Point
from ..core.rng import RandomSource
from ..core.tiles import TileKind

if TYPE_CHECKING:
    from ..core.grid import TileGrid
    from ..core.wyrm import Wyrm

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SpawnBox:
    """Region in fractional grid coordinates; bounds are exclusive."""

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def contains(self, x_frac: float, y_frac: float) -> bool:
        return self.x_min < x_frac < self.x_max and self.y_min < y_frac < self.y_max


class SpawnScheduler:
    def __init__(self, config: SpawnConfig):
        self._config = config
        self._period = max(1, int(config.period))

    def is_due(self, tick_count: int) -> bool:
        return self._config.enabled and tick_count % self._period == 0

    def sample_box(self, rng: RandomSource) -> SpawnBox:
        config = self._config
        x_min = rng.next_range(config.jitter_min, config.jitter_max)
        y_min = rng.next_range(config.jitter_min, config.jitter_max)
        return SpawnBox(x_min, x_min + config.box_size, y_min, y_min + config.box_size)

    def find_cell(self, grid: TileGrid, box: SpawnBox) -> Optional[Point]:
        width = grid.width
        height = grid.height
        for x in range(width):
            x_frac = x / width
            if not box.x_min < x_frac < box.x_max:
                continue
            for y in range(height):
                point = Point(x, y)
                if box.contains(x_frac, y / height) and grid.tile_at(point).kind is TileKind.EMPTY:
                    return point
        return None

    def auto_spawn(self, grid: TileGrid) -> Optional[Wyrm]:
        if not self.is_due(grid.tick_count):
            return None
        box = self.sample_box(grid.rng)
        point = self.find_cell(grid, box)
        if point is None:
            logger.debug("tick %d: no empty cell inside spawn box %s", grid.tick_count, box)
            return None
        return grid.spawn(point)

    def manual_spawn(self, grid: TileGrid, point: Point) -> Optional[Wyrm]:
        return grid.spawn(point)
