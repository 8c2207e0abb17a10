"""Combat math — pure functions, no I/O."""
from __future__ import annotations

import random

from cultivation_rpg.models.character import Combatant
from cultivation_rpg.utils import clamp

FLEE_CHANCE = 0.5


def attack_variance(attack: int) -> int:
    return attack // 5


def roll_damage(attack: int) -> int:
    """Attack power randomized uniformly in ``attack ± attack // 5``."""
    variance = attack_variance(attack)
    return attack + random.randint(-variance, variance)


def mitigate(damage: int, defense: int) -> int:
    return max(0, damage - defense)


def apply_damage(target: Combatant, damage: int) -> int:
    """Subtract defense-mitigated damage from ``target``. Returns damage actually dealt.

    Health is clamped to [0, max_health].
    """
    actual = mitigate(damage, target.defense)
    target.health = clamp(target.health - actual, 0, target.max_health)
    return actual


def heal(target: Combatant, amount: int) -> int:
    """Restore up to ``amount`` health. Returns the amount actually restored."""
    before = target.health
    target.health = clamp(target.health + max(0, amount), 0, target.max_health)
    return target.health - before


def strike(attacker: Combatant, defender: Combatant) -> int:
    """One basic attack from ``attacker`` on ``defender``."""
    return apply_damage(defender, roll_damage(attacker.total_attack))


def flee_succeeds() -> bool:
    return random.random() < FLEE_CHANCE


def health_bar(current: int, maximum: int, width: int = 20) -> str:
    if maximum <= 0:
        return "░" * width
    filled = int(clamp(current, 0, maximum) / maximum * width)
    return "█" * filled + "░" * (width - filled)
