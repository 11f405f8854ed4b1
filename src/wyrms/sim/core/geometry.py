from __future__ import annotations

from enum import IntEnum
from typing import Dict, NamedTuple, Tuple


class Direction(IntEnum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3


class Turn(IntEnum):
    FORWARD = 0
    RIGHT = 1
    BACK = 2
    LEFT = 3


class Action(IntEnum):
    FORWARD = 0
    TURN_LEFT = 1
    TURN_RIGHT = 2
    REST = 3


# Candidate order for the movement heuristic; ties keep the earliest entry.
DECISION_TURNS: Tuple[Turn, ...] = (Turn.FORWARD, Turn.LEFT, Turn.RIGHT)

_DIRECTION_DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}

_ACTION_TURNS: Dict[Action, Turn] = {
    Action.FORWARD: Turn.FORWARD,
    Action.TURN_LEFT: Turn.LEFT,
    Action.TURN_RIGHT: Turn.RIGHT,
}

_TURN_ACTIONS: Dict[Turn, Action] = {turn: action for action, turn in _ACTION_TURNS.items()}


class Point(NamedTuple):
    x: int
    y: int

    def move(self, direction: Direction) -> "Point":
        dx, dy = _DIRECTION_DELTAS[direction]
        return Point(self.x + dx, self.y + dy)

    def is_adjacent(self, other: "Point") -> bool:
        return abs(self.x - other.x) + abs(self.y - other.y) == 1


def turn(direction: Direction, relative: Turn) -> Direction:
    return Direction((int(direction) + int(relative)) % 4)


def action_turn(action: Action) -> Turn:
    try:
        return _ACTION_TURNS[action]
    except KeyError:
        raise ValueError(f"{action!r} has no movement direction") from None


def turn_action(relative: Turn) -> Action:
    try:
        return _TURN_ACTIONS[relative]
    except KeyError:
        raise ValueError(f"{relative!r} cannot be chosen as an action") from None


def pixel_to_cell(pixel_x: int, pixel_y: int, cell_size: int) -> Point:
    return Point(int(pixel_x) // cell_size, int(pixel_y) // cell_size)
