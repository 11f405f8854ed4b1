from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from ..systems import metrics as metrics_system
from ..systems.spawning import SpawnScheduler
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from .config import SimulationConfig
from .errors import GridBoundsError
from .geometry import Direction, Point, Turn, turn
from .rng import DeterministicRng, RandomSource
from .tiles import WALL_TILE, WYRM_ID_BASE, Tile, TileKind, decode_tile, encode_tile
from .wyrm import Wyrm

logger = logging.getLogger(__name__)

_EMPTY = int(TileKind.EMPTY)
_WALL = int(TileKind.WALL)
_FOOD = int(TileKind.FOOD)


class TileGrid:
    """Walled 2-D board of tiles and the sole owner of every wyrm on it.

    ``rng`` is any :class:`~wyrms.sim.core.rng.RandomSource`; by default a
    :class:`DeterministicRng` seeded from ``config.seed``. Every random draw in
    the simulation goes through it.
    """

    def __init__(self, config: SimulationConfig, rng: Optional[RandomSource] = None):
        width = int(config.grid.width)
        height = int(config.grid.height)
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self._config = config
        self._width = width
        self._height = height
        self._rng = rng if rng is not None else DeterministicRng(config.seed)
        self._scheduler = SpawnScheduler(config.spawn)
        self._tiles: List[int] = []
        self._wyrms: Dict[int, Wyrm] = {}
        self._next_id = WYRM_ID_BASE
        self._tick_count = config.grid.initial_tick
        self._metrics: TickMetrics | None = None
        self._spawns = 0
        self._deaths = 0
        self._fights = 0
        self.initialize()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def rng(self) -> RandomSource:
        return self._rng

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def tiles(self) -> List[int]:
        return self._tiles

    @property
    def wyrms(self) -> Dict[int, Wyrm]:
        return self._wyrms

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def scheduler(self) -> SpawnScheduler:
        return self._scheduler

    def initialize(self, fill_probability: Optional[float] = None) -> None:
        if fill_probability is None:
            fill_probability = self._config.grid.fill_probability
        width = self._width
        height = self._height
        tiles = [_EMPTY] * (width * height)
        for y in range(height):
            for x in range(width):
                if y == 0 or y == height - 1 or x == 0 or x == width - 1:
                    tiles[y * width + x] = _WALL
                elif self._rng.next_float() < fill_probability:
                    tiles[y * width + x] = _FOOD
        self._tiles = tiles
        self._wyrms.clear()
        self._next_id = WYRM_ID_BASE
        self._tick_count = self._config.grid.initial_tick
        self._metrics = None
        self._reset_counters()

    def reset(self) -> None:
        reset = getattr(self._rng, "reset", None)
        if reset is not None:
            reset()
        self.initialize()

    def in_bounds(self, point: Point) -> bool:
        return 0 <= point.x < self._width and 0 <= point.y < self._height

    def index(self, point: Point) -> int:
        if not self.in_bounds(point):
            raise GridBoundsError(point.x, point.y, self._width, self._height)
        return point.y * self._width + point.x

    def get(self, point: Point) -> int:
        return self._tiles[self.index(point)]

    def set(self, point: Point, value: int) -> None:
        self._tiles[self.index(point)] = value

    def tile_at(self, point: Point) -> Tile:
        return decode_tile(self.get(point))

    def set_tile(self, point: Point, tile: Tile) -> None:
        self.set(point, encode_tile(tile))

    def probe(self, point: Point) -> Tile:
        """Like :meth:`tile_at`, but anything past the edge reads as wall."""
        if not self.in_bounds(point):
            return WALL_TILE
        return decode_tile(self._tiles[point.y * self._width + point.x])

    def neighbors_of(self, point: Point, facing: Direction) -> Tuple[Tile, Tile, Tile]:
        """Tiles one step Forward, Left and Right of ``facing``, in that order."""
        return (
            self.probe(point.move(turn(facing, Turn.FORWARD))),
            self.probe(point.move(turn(facing, Turn.LEFT))),
            self.probe(point.move(turn(facing, Turn.RIGHT))),
        )

    def food_count(self) -> int:
        return self._tiles.count(_FOOD)

    def spawn(self, point: Point) -> Optional[Wyrm]:
        if not self.in_bounds(point) or self._tiles[self.index(point)] != _EMPTY:
            return None
        wyrm_id = self._next_id
        self._next_id += 1
        wyrm = Wyrm(self, wyrm_id, point)
        self._wyrms[wyrm_id] = wyrm
        self.set_tile(point, Tile.occupied(wyrm_id))
        self._spawns += 1
        logger.debug("spawned wyrm %d at (%d, %d) facing %s", wyrm_id, point.x, point.y, wyrm.direction.name)
        return wyrm

    def remove_wyrm(self, wyrm_id: int) -> None:
        if self._wyrms.pop(wyrm_id, None) is not None:
            self._deaths += 1

    def tick(self) -> TickMetrics:
        start = perf_counter()
        self._scheduler.auto_spawn(self)

        # Larger wyrms move first and get first claim on contested cells.
        ordered = sorted(self._wyrms.values(), key=lambda wyrm: -wyrm.size)
        for wyrm in ordered:
            if self._wyrms.get(wyrm.id) is not wyrm:
                continue
            wyrm.auto_act()

        self._tick_count += 1
        reclaimed = self.reclaim()

        duration_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            tick=self._tick_count,
            spawns=self._spawns,
            deaths=self._deaths,
            fights=self._fights,
            reclaimed=reclaimed,
            food_cells=self.food_count(),
            sizes=[wyrm.size for wyrm in self._wyrms.values()],
            duration_ms=duration_ms,
        )
        self._metrics = metrics
        self._reset_counters()
        return metrics

    def reclaim(self) -> int:
        """Turn every cell still marked with a dead wyrm's id into food or empty."""
        tiles = self._tiles
        wyrms = self._wyrms
        food_probability = self._config.reclaim.food_probability
        reclaimed = 0
        for index, raw in enumerate(tiles):
            if raw >= WYRM_ID_BASE and raw not in wyrms:
                tiles[index] = _FOOD if self._rng.next_float() < food_probability else _EMPTY
                reclaimed += 1
        if reclaimed:
            logger.debug("tick %d: reclaimed %d cells", self._tick_count, reclaimed)
        return reclaimed

    def snapshot(self) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else self._metrics_from_state()
        render = self._config.render
        return Snapshot(
            tick=self._tick_count,
            metrics=metrics,
            cells=self._cell_payload(),
            wyrms=[self._wyrm_snapshot(wyrm) for wyrm in self._wyrms.values()],
            world=SnapshotWorld(width=self._width, height=self._height),
            metadata=SnapshotMetadata(
                seed=self._config.seed,
                config_version=self._config.config_version,
                cell_size=render.cell_size,
                tick_interval_ms=render.tick_interval_ms,
            ),
        )

    def _cell_payload(self) -> List[Dict[str, Any]]:
        width = self._width
        cells = []
        for index, raw in enumerate(self._tiles):
            if raw == _WALL or raw == _FOOD:
                cells.append({"x": index % width, "y": index // width, "kind": TileKind(raw).name.lower()})
        return cells

    @staticmethod
    def _wyrm_snapshot(wyrm: Wyrm) -> Dict[str, Any]:
        return {
            "id": wyrm.id,
            "direction": wyrm.direction.name.lower(),
            "size": wyrm.size,
            "segments": [[point.x, point.y] for point in wyrm.segments],
        }

    def _metrics_from_state(self) -> TickMetrics:
        return metrics_system.create_metrics(
            tick=self._tick_count,
            spawns=self._spawns,
            deaths=self._deaths,
            fights=self._fights,
            reclaimed=0,
            food_cells=self.food_count(),
            sizes=[wyrm.size for wyrm in self._wyrms.values()],
            duration_ms=0.0,
        )

    def _reset_counters(self) -> None:
        self._spawns = 0
        self._deaths = 0
        self._fights = 0
