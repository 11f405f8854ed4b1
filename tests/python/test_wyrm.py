from __future__ import annotations

import pytest

from conftest import ScriptedRng, place_wyrm, quiet_config
from wyrms.sim.core.errors import WyrmInvariantError
from wyrms.sim.core.geometry import Action, Direction, Point
from wyrms.sim.core.grid import TileGrid
from wyrms.sim.core.tiles import EMPTY_TILE, FOOD_TILE, WALL_TILE, Tile, TileKind
from wyrms.sim.core.wyrm import Wyrm


def test_decide_prefers_forward_then_left_then_right_on_ties():
    assert Wyrm.decide([EMPTY_TILE, EMPTY_TILE, FOOD_TILE]) is Action.TURN_RIGHT
    assert Wyrm.decide([EMPTY_TILE, EMPTY_TILE, EMPTY_TILE]) is Action.FORWARD
    assert Wyrm.decide([WALL_TILE, FOOD_TILE, FOOD_TILE]) is Action.TURN_LEFT
    assert Wyrm.decide([WALL_TILE, EMPTY_TILE, EMPTY_TILE]) is Action.TURN_LEFT
    assert Wyrm.decide([Tile.occupied(5), WALL_TILE, EMPTY_TILE]) is Action.TURN_RIGHT


def test_decide_never_rests_when_boxed_in():
    assert Wyrm.decide([WALL_TILE, WALL_TILE, Tile.occupied(4)]) is Action.FORWARD


def test_initial_facing_is_refined_away_from_wall():
    rng = ScriptedRng(seed=3)
    grid = TileGrid(quiet_config(), rng=rng)
    rng.ints = [int(Direction.NORTH)]

    wyrm = grid.spawn(Point(3, 1))

    # North is wall; west (left of north) ties with east and wins.
    assert wyrm.direction is Direction.WEST
    assert wyrm.segments == [Point(3, 1)]


def test_moving_onto_food_grows_and_keeps_tail():
    grid = TileGrid(quiet_config())
    wyrm = place_wyrm(grid, [(3, 3), (3, 4)], Direction.NORTH)
    grid.set_tile(Point(3, 2), FOOD_TILE)

    wyrm.act(Action.FORWARD)

    assert wyrm.size == 3
    assert wyrm.segments == [Point(3, 2), Point(3, 3), Point(3, 4)]
    assert grid.tile_at(Point(3, 4)) == Tile.occupied(wyrm.id)
    assert grid.tile_at(Point(3, 2)) == Tile.occupied(wyrm.id)
    assert wyrm.direction is Direction.NORTH


def test_moving_onto_empty_keeps_size_and_clears_tail():
    rng = ScriptedRng(seed=3)
    grid = TileGrid(quiet_config(), rng=rng)
    wyrm = place_wyrm(grid, [(3, 3), (3, 4)], Direction.NORTH)
    rng.floats = [0.5]

    wyrm.act(Action.TURN_RIGHT)

    assert wyrm.size == 2
    assert wyrm.segments == [Point(4, 3), Point(3, 3)]
    assert wyrm.direction is Direction.EAST
    assert grid.tile_at(Point(3, 4)) is EMPTY_TILE


def test_tail_drops_food_when_poop_draw_hits():
    rng = ScriptedRng(seed=3)
    grid = TileGrid(quiet_config(), rng=rng)
    wyrm = place_wyrm(grid, [(3, 3), (3, 4)], Direction.NORTH)
    rng.floats = [0.0]

    wyrm.act(Action.FORWARD)

    assert wyrm.size == 2
    assert grid.tile_at(Point(3, 4)) is FOOD_TILE


def test_poop_rate_follows_configured_probability():
    rng = ScriptedRng(seed=2024)
    trials = 3000
    pooped = 0
    for _ in range(trials):
        grid = TileGrid(quiet_config(width=5, height=5), rng=rng)
        wyrm = grid.spawn(Point(2, 2))
        wyrm.act(Action.FORWARD)
        if grid.tile_at(Point(2, 2)) is FOOD_TILE:
            pooped += 1

    assert 0.015 < pooped / trials < 0.055


def test_rest_changes_nothing():
    grid = TileGrid(quiet_config())
    wyrm = place_wyrm(grid, [(3, 3), (3, 4)], Direction.NORTH)
    before = list(grid.tiles)

    wyrm.act(Action.REST)

    assert grid.tiles == before
    assert wyrm.segments == [Point(3, 3), Point(3, 4)]


def test_walking_into_wall_kills_but_leaves_cells_until_reclaimed():
    grid = TileGrid(quiet_config())
    wyrm = place_wyrm(grid, [(1, 3), (2, 3)], Direction.WEST)

    wyrm.act(Action.FORWARD)

    assert wyrm.id not in grid.wyrms
    assert not wyrm.alive
    assert grid.get(Point(1, 3)) == wyrm.id
    assert grid.get(Point(2, 3)) == wyrm.id

    assert grid.reclaim() == 2
    assert wyrm.id not in grid.tiles


def test_walking_into_own_body_kills():
    grid = TileGrid(quiet_config())
    wyrm = place_wyrm(grid, [(2, 2), (3, 2), (3, 3), (2, 3)], Direction.SOUTH)

    wyrm.act(Action.FORWARD)

    assert wyrm.id not in grid.wyrms


def test_self_collision_during_tick_is_reclaimed_same_tick():
    grid = TileGrid(quiet_config())
    # Forward and left are its own body and right is wall, so it bites itself.
    wyrm = place_wyrm(grid, [(1, 1), (2, 1), (2, 2), (1, 2)], Direction.SOUTH)

    metrics = grid.tick()

    assert wyrm.id not in grid.wyrms
    assert metrics.deaths == 1
    assert metrics.reclaimed == 4
    assert all(grid.tile_at(Point(x, y)).kind is not TileKind.OCCUPIED for x, y in [(1, 1), (2, 1), (2, 2), (1, 2)])


def test_head_of_empty_wyrm_is_a_fatal_error():
    grid = TileGrid(quiet_config())
    wyrm = grid.spawn(Point(3, 3))
    wyrm.segments.clear()

    with pytest.raises(WyrmInvariantError):
        wyrm.head()
    with pytest.raises(WyrmInvariantError):
        grid.tick()
