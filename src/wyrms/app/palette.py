from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from pygame import Color


@dataclass(frozen=True)
class Palette:
    empty: str
    wall: str
    food: str
    wyrms: Tuple[str, ...]

    def tile_color(self, kind: str) -> Color:
        return Color(getattr(self, kind))

    def wyrm_color(self, wyrm_id: int) -> Color:
        return Color(self.wyrms[wyrm_id % len(self.wyrms)])


THEMES: Dict[str, Palette] = {
    "midnight": Palette(
        empty="#001328",
        wall="#feb3bf",
        food="#880e24",
        wyrms=(
            "#38bc5e",
            "#4fe946",
            "#54ffdb",
            "#5aeb88",
            "#5ec0ff",
            "#66a37c",
            "#92e790",
            "#9ddcff",
            "#afebc6",
            "#b5f458",
            "#d0f392",
            "#e2f73a",
            "#eafffb",
            "#efe5d2",
            "#eff5a7",
            "#f92dc7",
            "#fc2f25",
            "#fed07d",
            "#ffd143",
            "#ffecaf",
        ),
    ),
    "paper": Palette(
        empty="#ffffff",
        wall="#222222",
        food="#664422",
        wyrms=(
            "#dd2222",
            "#22dd22",
            "#2222dd",
            "#dd22dd",
            "#dddd22",
            "#22dddd",
            "#771111",
            "#117711",
            "#111177",
            "#771177",
            "#777711",
            "#117777",
        ),
    ),
}


def get_palette(name: str) -> Palette:
    try:
        return THEMES[name]
    except KeyError:
        raise ValueError(f"Unknown theme: {name} (expected one of {', '.join(sorted(THEMES))})") from None
