"""Opponent generation — level-scaled monster archetypes and rival cultivators."""
from __future__ import annotations

import random
from typing import TYPE_CHECKING

from cultivation_rpg.mechanics.progression import realm_tier
from cultivation_rpg.models.character import CURRENCY_KEY, Monster, Player

if TYPE_CHECKING:
    from cultivation_rpg.content.catalog import Catalog


def _scaled(pair: list[float], level: int) -> int:
    base, per_level = pair
    return int(base + per_level * level)


def generate_monster(catalog: Catalog, player_level: int) -> Monster:
    """Build the archetype for the player's realm tier, scaled by player level."""
    tier = realm_tier(player_level)
    archetypes = catalog.monsters["archetypes"]
    spec = archetypes.get(tier) or archetypes[max(archetypes)]
    health = _scaled(spec["health"], player_level)
    return Monster(
        name=spec["name"],
        max_health=health,
        health=health,
        attack=_scaled(spec["attack"], player_level),
        defense=_scaled(spec["defense"], player_level),
        cultivation_level=player_level,
        xp_reward=_scaled(spec["xp_reward"], player_level),
        tamable=spec.get("tamable", False),
        tier=tier,
    )


def generate_rival(catalog: Catalog, player_level: int) -> Player:
    """A rival cultivator near the player's level for a duel. Never persisted."""
    rival = catalog.monsters["rival"]
    level = max(1, player_level + random.randint(-2, 2))
    health = _scaled(rival["health"], level)
    max_qi = _scaled(rival["max_qi"], level)
    return Player(
        name=random.choice(rival["names"]),
        max_health=health,
        health=health,
        attack=_scaled(rival["attack"], level),
        defense=_scaled(rival["defense"], level),
        cultivation_level=level,
        max_qi=max_qi,
        current_qi=max_qi,
        resources={CURRENCY_KEY: int(random.random() * rival["stones_per_level"] * level)},
        is_rival=True,
    )
