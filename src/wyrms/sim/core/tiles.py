"""Tile values as a tagged variant over the grid's dense integer buffer.

The buffer stores ``0`` for Empty, ``1`` for Wall, ``2`` for Food and any
integer from :data:`WYRM_ID_BASE` upwards as the id of the occupying wyrm.
Everything outside :class:`~wyrms.sim.core.grid.TileGrid` talks in
:class:`Tile` values; :func:`decode_tile` and :func:`encode_tile` convert.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional


class TileKind(IntEnum):
    EMPTY = 0
    WALL = 1
    FOOD = 2
    OCCUPIED = 3


WYRM_ID_BASE = int(TileKind.OCCUPIED)


@dataclass(frozen=True, slots=True)
class Tile:
    kind: TileKind
    wyrm_id: Optional[int] = None

    @staticmethod
    def occupied(wyrm_id: int) -> "Tile":
        if wyrm_id < WYRM_ID_BASE:
            raise ValueError(f"wyrm id {wyrm_id} collides with a fixed tile kind")
        return Tile(TileKind.OCCUPIED, wyrm_id)

    @property
    def is_occupied(self) -> bool:
        return self.kind is TileKind.OCCUPIED


EMPTY_TILE = Tile(TileKind.EMPTY)
WALL_TILE = Tile(TileKind.WALL)
FOOD_TILE = Tile(TileKind.FOOD)

_FIXED_TILES = (EMPTY_TILE, WALL_TILE, FOOD_TILE)

_TILE_SCORES: Dict[TileKind, int] = {
    TileKind.EMPTY: 0,
    TileKind.FOOD: 1,
}


def decode_tile(raw: int) -> Tile:
    if raw >= WYRM_ID_BASE:
        return Tile(TileKind.OCCUPIED, raw)
    if raw < 0:
        raise ValueError(f"invalid tile value {raw}")
    return _FIXED_TILES[raw]


def encode_tile(tile: Tile) -> int:
    if tile.kind is TileKind.OCCUPIED:
        if tile.wyrm_id is None:
            raise ValueError("occupied tile without a wyrm id")
        return tile.wyrm_id
    return int(tile.kind)


def tile_score(tile: Tile) -> int:
    """Desirability of stepping onto ``tile``: food 1, empty 0, anything else -1."""
    return _TILE_SCORES.get(tile.kind, -1)
