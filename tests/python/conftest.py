import os
import sys
from pathlib import Path
from typing import Iterable, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from wyrms.sim.core.config import GridConfig, SimulationConfig, SpawnConfig  # noqa: E402
from wyrms.sim.core.geometry import Direction, Point  # noqa: E402
from wyrms.sim.core.grid import TileGrid  # noqa: E402
from wyrms.sim.core.rng import DeterministicRng  # noqa: E402
from wyrms.sim.core.tiles import Tile  # noqa: E402
from wyrms.sim.core.wyrm import Wyrm  # noqa: E402


class ScriptedRng(DeterministicRng):
    """Seeded generator whose next draws can be forced from queued values."""

    def __init__(self, seed: int = 0):
        super().__init__(seed)
        self.floats: list[float] = []
        self.ranges: list[float] = []
        self.ints: list[int] = []

    def next_float(self) -> float:
        if self.floats:
            return self.floats.pop(0)
        return super().next_float()

    def next_range(self, low: float, high: float) -> float:
        if self.ranges:
            return self.ranges.pop(0)
        return super().next_range(low, high)

    def next_int(self, max_value: int) -> int:
        if self.ints:
            return self.ints.pop(0)
        return super().next_int(max_value)


def quiet_config(width: int = 7, height: int = 7, **overrides) -> SimulationConfig:
    """Empty board with no auto-spawning."""
    return SimulationConfig(
        seed=overrides.pop("seed", 1),
        grid=GridConfig(width=width, height=height, fill_probability=0.0),
        spawn=SpawnConfig(enabled=False),
        **overrides,
    )


def place_wyrm(grid: TileGrid, cells: Sequence[Iterable[int]], direction: Direction) -> Wyrm:
    """Spawn a wyrm on ``cells[0]`` and stretch it over the remaining cells."""
    segments = [Point(*cell) for cell in cells]
    wyrm = grid.spawn(segments[0])
    assert wyrm is not None
    wyrm.segments = segments
    wyrm.direction = direction
    for point in segments:
        grid.set_tile(point, Tile.occupied(wyrm.id))
    return wyrm


@pytest.fixture
def rng() -> ScriptedRng:
    return ScriptedRng(seed=11)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-long-tests",
        action="store_true",
        default=False,
        help="run long simulation soak tests",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "long_run: marks soak tests that run thousands of ticks",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-long-tests"):
        return

    skip_marker = pytest.mark.skip(
        reason="Long soak test (use --run-long-tests)",
    )

    for item in items:
        if "long_run" in item.keywords:
            item.add_marker(skip_marker)
