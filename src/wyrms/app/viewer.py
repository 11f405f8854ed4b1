from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Tuple

import pygame
from pygame.math import Vector2

from ..sim.core.config import SimulationConfig
from ..sim.core.geometry import pixel_to_cell
from ..sim.core.grid import TileGrid
from ..sim.types.snapshot import Snapshot, SnapshotWorld
from .palette import Palette, get_palette

logger = logging.getLogger(__name__)


class GridRenderer:
    """Draws snapshots; it never sees the live grid, so it cannot mutate it."""

    def __init__(self, cell_size: int, palette: Palette):
        self._cell_size = cell_size
        self._palette = palette

    @property
    def cell_size(self) -> int:
        return self._cell_size

    def surface_size(self, world: SnapshotWorld) -> Tuple[int, int]:
        return world.width * self._cell_size, world.height * self._cell_size

    def draw(self, surface: pygame.Surface, snapshot: Snapshot) -> None:
        s = self._cell_size
        surface.fill(self._palette.tile_color("empty"))
        for cell in snapshot.cells:
            rect = pygame.Rect(cell["x"] * s, cell["y"] * s, s, s)
            pygame.draw.rect(surface, self._palette.tile_color(cell["kind"]), rect)
        for wyrm in snapshot.wyrms:
            self._draw_wyrm(surface, wyrm)

    def _draw_wyrm(self, surface: pygame.Surface, wyrm: dict) -> None:
        s = self._cell_size
        color = self._palette.wyrm_color(wyrm["id"])
        segments = wyrm["segments"]
        if len(segments) == 1:
            x, y = segments[0]
            pygame.draw.rect(surface, color, pygame.Rect(x * s, y * s, s, s))
            return

        offset = s * 0.5
        points = [Vector2(x * s + offset, y * s + offset) for x, y in segments]
        pygame.draw.lines(surface, color, False, points, s)
        # Square caps on both ends, matching the cell grid.
        for x, y in (segments[0], segments[-1]):
            pygame.draw.rect(surface, color, pygame.Rect(x * s, y * s, s, s))


class ViewerSession:
    def __init__(self, grid: TileGrid, renderer: GridRenderer):
        self.grid = grid
        self.renderer = renderer

    def step(self) -> Snapshot:
        self.grid.tick()
        return self.grid.snapshot()

    def click(self, pixel_x: int, pixel_y: int) -> Snapshot:
        point = pixel_to_cell(pixel_x, pixel_y, self.renderer.cell_size)
        if self.grid.spawn(point) is None:
            logger.debug("click at (%d, %d) did not spawn a wyrm", point.x, point.y)
        return self.step()

    def draw(self, surface: pygame.Surface, snapshot: Optional[Snapshot] = None) -> None:
        self.renderer.draw(surface, snapshot if snapshot is not None else self.grid.snapshot())


def run_viewer(config: SimulationConfig, max_frames: Optional[int] = None) -> None:
    render = config.render
    grid = TileGrid(config)
    session = ViewerSession(grid, GridRenderer(render.cell_size, get_palette(render.theme)))

    pygame.init()
    screen = pygame.display.set_mode(session.renderer.surface_size(SnapshotWorld(grid.width, grid.height)))
    pygame.display.set_caption("Wyrms")
    clock = pygame.time.Clock()
    logger.info("viewer started: %dx%d grid, theme %s, seed %d", grid.width, grid.height, render.theme, config.seed)

    snapshot = grid.snapshot()
    elapsed_ms = 0
    frames = 0
    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                snapshot = session.click(*event.pos)
                elapsed_ms = 0

        elapsed_ms += clock.tick(60)
        if elapsed_ms >= render.tick_interval_ms:
            elapsed_ms -= render.tick_interval_ms
            snapshot = session.step()

        session.draw(screen, snapshot)
        pygame.display.flip()

        frames += 1
        if max_frames is not None and frames >= max_frames:
            running = False

    logger.info("viewer closed at tick %d with %d wyrms", grid.tick_count, len(grid.wyrms))
    pygame.quit()


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch wyrms crawl in a pygame window")
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--theme", choices=["midnight", "paper"], default=None)
    parser.add_argument("--cell-size", type=int, default=None)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    if args.seed is not None:
        config.seed = args.seed
    if args.theme is not None:
        config.render.theme = args.theme
    if args.cell_size is not None:
        config.render.cell_size = args.cell_size
    run_viewer(config)


if __name__ == "__main__":
    main()
