from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from cultivation_rpg.models.character import Combatant, Player


class CombatTurn(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"


class PostCombatAction(str, Enum):
    DEVOUR_ESSENCE = "devour_essence"


@dataclass
class CombatSession:
    """One fight between the session's player and a single opponent."""

    player: Player
    opponent: Combatant
    turn: CombatTurn = CombatTurn.PLAYER
    post_combat_action: PostCombatAction | None = None
    attack_bonus: int = 0
    round_number: int = 1

    @property
    def is_over(self) -> bool:
        return not self.player.is_alive() or not self.opponent.is_alive()

    @property
    def awaiting_decision(self) -> bool:
        return self.post_combat_action is not None
