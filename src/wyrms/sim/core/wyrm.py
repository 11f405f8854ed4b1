from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..systems import combat
from .errors import WyrmInvariantError
from .geometry import DECISION_TURNS, Action, Direction, Point, action_turn, turn, turn_action
from .tiles import EMPTY_TILE, FOOD_TILE, Tile, TileKind, tile_score

if TYPE_CHECKING:
    from .grid import TileGrid

logger = logging.getLogger(__name__)


class Wyrm:
    def __init__(self, grid: TileGrid, wyrm_id: int, spawn_point: Point, direction: Optional[Direction] = None):
        self._grid = grid
        self.id = wyrm_id
        self.segments: List[Point] = [spawn_point]
        if direction is None:
            direction = Direction(grid.rng.next_int(4))
        # Refine the random facing once so the first move is not wasted on a wall.
        choice = self.decide(grid.neighbors_of(spawn_point, direction))
        self.direction = turn(direction, action_turn(choice))

    def __repr__(self) -> str:
        return f"Wyrm(id={self.id}, direction={self.direction.name}, size={len(self.segments)})"

    @property
    def size(self) -> int:
        return len(self.segments)

    @property
    def alive(self) -> bool:
        return self._grid.wyrms.get(self.id) is self

    def head(self) -> Point:
        if not self.segments:
            raise WyrmInvariantError(f"wyrm {self.id} has no segments")
        return self.segments[0]

    @staticmethod
    def decide(neighbors: Sequence[Tile]) -> Action:
        """Pick the best of Forward, Left, Right; the first maximum wins ties."""
        best_turn = DECISION_TURNS[0]
        best_score = tile_score(neighbors[0])
        for relative, tile in zip(DECISION_TURNS[1:], neighbors[1:]):
            score = tile_score(tile)
            if score > best_score:
                best_turn = relative
                best_score = score
        return turn_action(best_turn)

    def auto_act(self) -> None:
        neighbors = self._grid.neighbors_of(self.head(), self.direction)
        self.act(self.decide(neighbors))

    def act(self, action: Action) -> None:
        if action is Action.REST:
            return

        direction = turn(self.direction, action_turn(action))
        destination = self.head().move(direction)
        tile = self._grid.probe(destination)

        if tile.kind is TileKind.WALL or tile.wyrm_id == self.id:
            self.die()
        elif tile.kind is TileKind.EMPTY:
            poop = self._grid.rng.next_float() < self._grid.config.wyrm.poop_probability
            self._move(direction, grow=False, poop=poop)
        elif tile.kind is TileKind.FOOD:
            self._move(direction, grow=True)
        else:
            combat.resolve_fight(self._grid, self, self._grid.wyrms.get(tile.wyrm_id))

    def die(self) -> None:
        logger.debug("wyrm %d died at size %d", self.id, len(self.segments))
        self._grid.remove_wyrm(self.id)

    def _move(self, direction: Direction, grow: bool = False, poop: bool = False) -> None:
        destination = self.head().move(direction)
        self._grid.set_tile(destination, Tile.occupied(self.id))
        self.segments.insert(0, destination)

        if not grow:
            last = self.segments.pop()
            self._grid.set_tile(last, FOOD_TILE if poop else EMPTY_TILE)

        self.direction = direction
