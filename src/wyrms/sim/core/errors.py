from __future__ import annotations


class WyrmInvariantError(RuntimeError):
    """Raised when simulation state breaks an invariant; always a bug."""


class GridBoundsError(IndexError):
    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(f"point ({x}, {y}) outside {width}x{height} grid")
        self.x = x
        self.y = y
