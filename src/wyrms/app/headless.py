from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.grid import TileGrid
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)


_BASIC_HEADER = [
    "tick",
    "population",
    "spawns",
    "deaths",
    "fights",
    "food_cells",
    "largest_wyrm",
    "avg_size",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "spawns",
    "deaths",
    "fights",
    "reclaimed",
    "food_cells",
    "largest_wyrm",
    "avg_size",
    "tick_ms",
    "occupied_cells",
    "occupied_ratio",
    "food_ratio",
    "deaths_per_wyrm",
    "fights_per_wyrm",
    "tick_ms_per_wyrm",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.spawns,
        metrics.deaths,
        metrics.fights,
        metrics.food_cells,
        metrics.largest_wyrm,
        f"{metrics.average_size:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(grid: TileGrid, metrics: TickMetrics, tick_ms: float) -> list[object]:
    interior = max(1, (grid.width - 2) * (grid.height - 2))
    occupied_cells = sum(wyrm.size for wyrm in grid.wyrms.values())
    population = metrics.population
    if population <= 0:
        deaths_per_wyrm = 0.0
        fights_per_wyrm = 0.0
        tick_ms_per_wyrm = 0.0
    else:
        deaths_per_wyrm = metrics.deaths / population
        fights_per_wyrm = metrics.fights / population
        tick_ms_per_wyrm = tick_ms / population

    return [
        metrics.tick,
        population,
        metrics.spawns,
        metrics.deaths,
        metrics.fights,
        metrics.reclaimed,
        metrics.food_cells,
        metrics.largest_wyrm,
        f"{metrics.average_size:.4f}",
        f"{tick_ms:.3f}",
        occupied_cells,
        f"{occupied_cells / interior:.4f}",
        f"{metrics.food_cells / interior:.4f}",
        f"{deaths_per_wyrm:.4f}",
        f"{fights_per_wyrm:.4f}",
        f"{tick_ms_per_wyrm:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 500,
    config: Optional[SimulationConfig] = None,
) -> TileGrid:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    grid = TileGrid(config)
    logger.info("running %d ticks on a %dx%d grid (seed %d)", steps, grid.width, grid.height, config.seed)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    population_series: list[int] = []
    largest_series: list[int] = []
    total_spawns = 0
    total_deaths = 0
    total_fights = 0
    max_population = (-1, -1)
    max_largest = (-1, -1)

    try:
        for _ in range(steps):
            metrics = grid.tick()
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            tick_ms_series.append(tick_ms)
            population_series.append(metrics.population)
            largest_series.append(metrics.largest_wyrm)
            total_spawns += metrics.spawns
            total_deaths += metrics.deaths
            total_fights += metrics.fights
            if metrics.population > max_population[0]:
                max_population = (metrics.population, metrics.tick)
            if metrics.largest_wyrm > max_largest[0]:
                max_largest = (metrics.largest_wyrm, metrics.tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(grid, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info(
        "finished at tick %d: %d wyrms alive, %d spawned, %d died, %d fights",
        grid.tick_count,
        len(grid.wyrms),
        total_spawns,
        total_deaths,
        total_fights,
    )

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "totals": {"spawns": total_spawns, "deaths": total_deaths, "fights": total_fights},
            "tick_ms": _summary_stats(tick_ms_series),
            "population": _summary_stats([float(v) for v in population_series]),
            "largest_wyrm": _summary_stats([float(v) for v in largest_series]),
            "peaks": {
                "population": {"value": max_population[0], "tick": max_population[1]},
                "largest_wyrm": {"value": max_largest[0], "tick": max_largest[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "population": _summary_stats([float(v) for v in population_series[tail_slice]]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    return grid


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless wyrm simulation")
    parser.add_argument("--steps", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=500,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
    )


if __name__ == "__main__":
    main()
