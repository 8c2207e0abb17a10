"""Spiritual roots, class paths and meditation — pure rules, no I/O."""
from __future__ import annotations

import random
from typing import Any

from cultivation_rpg.models.action import GameMessage, MessageStyle
from cultivation_rpg.models.character import Player

MEDITATION_RATES: dict[str, tuple[float, float]] = {
    "default": (0.25, 0.25),
    "qi_cultivator": (0.30, 0.35),
}


def roll_spiritual_root(roots: list[dict[str, Any]], roll: float | None = None) -> dict[str, Any]:
    """Pick a root from the threshold table. ``roll`` is on a 0-1000 scale."""
    value = random.random() * 1000 if roll is None else roll
    for root in roots:
        if value < root["threshold"]:
            return root
    return roots[-1]


def assign_spiritual_root(player: Player, root: dict[str, Any]) -> tuple[bool, list[GameMessage]]:
    if player.has_rolled_spiritual_root:
        return False, [GameMessage("Your spiritual roots have already been determined.", MessageStyle.ERROR)]
    player.spiritual_root_name = root["name"]
    player.spiritual_root_multiplier = root["multiplier"]
    player.has_rolled_spiritual_root = True
    return True, [
        GameMessage(f"Spiritual Roots: {root['name']}!", MessageStyle.IMPORTANT),
        GameMessage(root.get("message", ""), MessageStyle.NARRATION),
        GameMessage(f"Cultivation speed x{root['multiplier']}.", MessageStyle.SUCCESS),
    ]


def apply_class(player: Player, class_key: str, class_data: dict[str, Any]) -> tuple[bool, list[GameMessage]]:
    """Bind the player to a class path and grant its starting bonus. Happens once."""
    if player.has_class:
        return False, [GameMessage("You have already chosen your path.", MessageStyle.ERROR)]
    if not player.has_rolled_spiritual_root:
        return False, [GameMessage("Discover your spiritual roots before choosing a path.", MessageStyle.ERROR)]

    player.chosen_class_key = class_key
    player.chosen_class_name = class_data["name"]
    player.attack += class_data.get("attack", 0)
    player.max_health += class_data.get("max_health", 0)
    player.max_qi += class_data.get("max_qi", 0)
    if class_data.get("full_heal"):
        player.health = player.max_health
    if class_data.get("full_qi"):
        player.current_qi = player.max_qi
    for key, qty in class_data.get("resources", {}).items():
        player.add_item(key, qty)
    if class_key == "demon_cultivator":
        player.demonic_corruption = 0

    messages = [GameMessage(f"You have chosen the path of the {class_data['name']}!", MessageStyle.IMPORTANT)]
    if class_data.get("message"):
        messages.append(GameMessage(class_data["message"], MessageStyle.SUCCESS))
    return True, messages


def meditate(player: Player) -> list[GameMessage]:
    health_rate, qi_rate = MEDITATION_RATES.get(player.chosen_class_key or "", MEDITATION_RATES["default"])
    messages = [GameMessage(f"{player.name} enters a meditative state...", MessageStyle.NARRATION)]
    if player.chosen_class_key in MEDITATION_RATES:
        messages.append(GameMessage("Your affinity for Qi enhances your meditation.", MessageStyle.SYSTEM))

    health_recovered = int(player.max_health * health_rate)
    qi_recovered = int(player.max_qi * qi_rate)
    player.health = min(player.max_health, player.health + health_recovered)
    player.current_qi = min(player.max_qi, player.current_qi + qi_recovered)
    messages.append(GameMessage(
        f"Health recovered by {health_recovered}. Current Health: {player.health}/{player.max_health}",
        MessageStyle.SUCCESS,
    ))
    messages.append(GameMessage(
        f"Spiritual Energy (QI) recovered by {qi_recovered}. Current QI: {player.current_qi}/{player.max_qi}",
        MessageStyle.QI_RECOVERY,
    ))
    return messages


def devour_essence(player: Player) -> tuple[int, int]:
    """Roll bonus XP and corruption for a demon cultivator consuming a foe."""
    bonus_xp = random.randint(10, 29)
    corruption = random.randint(1, 3)
    player.demonic_corruption += corruption
    return bonus_xp, corruption
