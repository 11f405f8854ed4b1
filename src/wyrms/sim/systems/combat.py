from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..core.geometry import Action

if TYPE_CHECKING:
    from ..core.grid import TileGrid
    from ..core.wyrm import Wyrm

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FightOutcome:
    winner_id: int
    loser_id: int
    ratio: float
    multiplier: float
    final_ratio: float


def attacker_wins(attacker_size: int, defender_size: int, multiplier: float, loss_ratio: float = 0.5) -> bool:
    final_ratio = (float(attacker_size) / float(defender_size)) * multiplier
    return not final_ratio < loss_ratio


def resolve_fight(grid: TileGrid, attacker: Optional[Wyrm], defender: Optional[Wyrm]) -> Optional[FightOutcome]:
    """Settle ``attacker`` moving into ``defender``.

    Either side may be ``None`` when it already died earlier in the tick; the
    fight is then skipped. The loser dies and the winner immediately acts
    forward, which can chain into further moves, growth or fights.
    """
    if attacker is None or defender is None:
        return None

    config = grid.config.combat
    ratio = float(attacker.size) / float(defender.size)
    multiplier = grid.rng.next_range(config.multiplier_min, config.multiplier_max)

    if attacker_wins(attacker.size, defender.size, multiplier, config.loss_ratio):
        winner, loser = attacker, defender
    else:
        winner, loser = defender, attacker

    outcome = FightOutcome(
        winner_id=winner.id,
        loser_id=loser.id,
        ratio=ratio,
        multiplier=multiplier,
        final_ratio=ratio * multiplier,
    )
    grid._fights += 1
    logger.debug(
        "wyrm %d beat wyrm %d (ratio %.3f x %.3f = %.3f)",
        winner.id,
        loser.id,
        ratio,
        multiplier,
        outcome.final_ratio,
    )

    loser.die()
    winner.act(Action.FORWARD)
    return outcome
