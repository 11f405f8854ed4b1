from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class GridConfig:
    width: int = 60
    height: int = 90
    fill_probability: float = 1.0 / 16.0
    # Negative start delays the first auto-spawn.
    initial_tick: int = -5


@dataclass
class WyrmConfig:
    poop_probability: float = 1.0 / 30.0


@dataclass
class CombatConfig:
    multiplier_min: float = 0.8
    multiplier_max: float = 1.2
    loss_ratio: float = 0.5


@dataclass
class SpawnConfig:
    enabled: bool = True
    period: int = 10
    box_size: float = 0.1
    jitter_min: float = 0.2
    jitter_max: float = 0.8


@dataclass
class ReclaimConfig:
    food_probability: float = 0.2


@dataclass
class RenderConfig:
    cell_size: int = 6
    theme: str = "midnight"
    tick_interval_ms: int = 90


@dataclass
class SimulationConfig:
    seed: int = 42
    config_version: str = "v1"
    grid: GridConfig = field(default_factory=GridConfig)
    wyrm: WyrmConfig = field(default_factory=WyrmConfig)
    combat: CombatConfig = field(default_factory=CombatConfig)
    spawn: SpawnConfig = field(default_factory=SpawnConfig)
    reclaim: ReclaimConfig = field(default_factory=ReclaimConfig)
    render: RenderConfig = field(default_factory=RenderConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 1


_SECTIONS = {
    "grid": GridConfig,
    "wyrm": WyrmConfig,
    "combat": CombatConfig,
    "spawn": SpawnConfig,
    "reclaim": ReclaimConfig,
    "render": RenderConfig,
}


def load_config(raw: dict) -> SimulationConfig:
    sections = {name: factory(**(raw.get(name) or {})) for name, factory in _SECTIONS.items()}
    sim_values = {k: v for k, v in raw.items() if k not in _SECTIONS}
    return SimulationConfig(**sections, **sim_values)
