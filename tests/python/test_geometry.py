from __future__ import annotations

import pytest

from wyrms.sim.core.geometry import (
    Action,
    Direction,
    Point,
    Turn,
    action_turn,
    pixel_to_cell,
    turn,
    turn_action,
)


def test_turn_wraps_around_compass():
    assert turn(Direction.NORTH, Turn.RIGHT) == Direction.EAST
    assert turn(Direction.NORTH, Turn.LEFT) == Direction.WEST
    assert turn(Direction.WEST, Turn.RIGHT) == Direction.NORTH
    assert turn(Direction.SOUTH, Turn.BACK) == Direction.NORTH
    assert turn(Direction.EAST, Turn.FORWARD) == Direction.EAST


def test_point_move_uses_screen_axes():
    origin = Point(3, 3)
    assert origin.move(Direction.NORTH) == Point(3, 2)
    assert origin.move(Direction.EAST) == Point(4, 3)
    assert origin.move(Direction.SOUTH) == Point(3, 4)
    assert origin.move(Direction.WEST) == Point(2, 3)


def test_point_adjacency_is_axis_aligned():
    assert Point(2, 2).is_adjacent(Point(2, 3))
    assert not Point(2, 2).is_adjacent(Point(3, 3))
    assert not Point(2, 2).is_adjacent(Point(2, 2))


def test_actions_map_to_turns_and_back():
    for action in (Action.FORWARD, Action.TURN_LEFT, Action.TURN_RIGHT):
        assert turn_action(action_turn(action)) is action
    assert action_turn(Action.TURN_LEFT) is Turn.LEFT


def test_rest_and_back_have_no_counterpart():
    with pytest.raises(ValueError):
        action_turn(Action.REST)
    with pytest.raises(ValueError):
        turn_action(Turn.BACK)


def test_pixel_to_cell_uses_integer_division():
    assert pixel_to_cell(13, 25, 6) == Point(2, 4)
    assert pixel_to_cell(0, 5, 6) == Point(0, 0)
