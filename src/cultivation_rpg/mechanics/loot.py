"""Loot tables for monster kills and exploration — pure rolls, no I/O.

Herb chances lean toward the player's next breakthrough: herbs feeding the next
realm are favoured, herbs for realms already passed are suppressed.
"""
from __future__ import annotations

import random
from typing import TYPE_CHECKING

from cultivation_rpg.models.character import CURRENCY_KEY, Player

if TYPE_CHECKING:
    from cultivation_rpg.content.catalog import Catalog

# Monster kill gates
STONE_CHANCE = 0.70
FRAGMENT_CHANCE = 0.50
CORE_CHANCE = 0.25
BONE_CHANCE = 0.15
MONSTER_HERB_GATE = 0.65
MONSTER_RECIPE_GATE = 0.12
MONSTER_RECIPE_WINDOW = (8, 8)

# Exploration gates
EXPLORE_HERB_GATE = 0.45
EXPLORE_RECIPE_GATE = 0.08
EXPLORE_RECIPE_WINDOW = (5, 10)
EXPLORE_STONE_CHANCE = 0.20
ALCHEMIST_BONUS_CHANCE = 0.15
ENCOUNTER_CHANCE = 0.70
STEALTH_PROMPT_CHANCE = 0.30
STEALTH_SUCCESS_CHANCE = 0.70


def _add(drops: dict[str, int], key: str, qty: int) -> None:
    if qty > 0:
        drops[key] = drops.get(key, 0) + qty


def monster_herb_chance(base: float, for_realm_break: int | None, tier: int) -> float:
    if for_realm_break is None:
        return base
    if for_realm_break == tier + 1:
        return base * 1.2
    if for_realm_break <= tier:
        return base * 0.4
    return base


def exploration_herb_chance(base: float, for_realm_break: int | None, tier: int) -> float:
    if for_realm_break is None:
        return base
    if for_realm_break > tier:
        return base * 0.5
    if for_realm_break < tier:
        return base * 0.3
    return base


def _roll_herbs(catalog: Catalog, tier: int, drops: dict[str, int], scale) -> None:
    for entry in catalog.herb_drops.get(tier, []):
        item = catalog.item(entry["item"])
        realm_break = item.for_realm_break if item else None
        if random.random() < scale(entry["chance"], realm_break, tier):
            _add(drops, entry["item"], random.randint(entry["min"], entry["max"]))


def eligible_recipe_scrolls(
    catalog: Catalog, level: int, window: tuple[int, int], exclude_owned: Player | None = None,
) -> list[str]:
    below, above = window
    keys = []
    for recipe in catalog.recipe_scrolls():
        req = recipe.required_cultivation_level
        if not (req - below <= level <= req + above):
            continue
        if exclude_owned is not None and exclude_owned.count(recipe.recipe_item_key) > 0:
            continue
        keys.append(recipe.recipe_item_key)
    return keys


def roll_monster_loot(catalog: Catalog, player_level: int, tier: int) -> dict[str, int]:
    """Independent drop rolls for a defeated monster of the given realm tier."""
    drops: dict[str, int] = {}
    if random.random() < STONE_CHANCE:
        _add(drops, CURRENCY_KEY, int(random.random() * (tier * 2)) + tier)
    if random.random() < FRAGMENT_CHANCE:
        _add(drops, "spirit_stone_fragment", 1)
    if random.random() < CORE_CHANCE:
        _add(drops, "monster_core_weak", 1)
    if tier > 1 and random.random() < BONE_CHANCE:
        _add(drops, "beast_bone_fragment", 1)
    if random.random() < MONSTER_HERB_GATE:
        _roll_herbs(catalog, tier, drops, monster_herb_chance)
    if random.random() < MONSTER_RECIPE_GATE:
        scrolls = eligible_recipe_scrolls(catalog, player_level, MONSTER_RECIPE_WINDOW)
        if scrolls:
            _add(drops, random.choice(scrolls), 1)
    return drops


def roll_exploration_finds(catalog: Catalog, player: Player, tier: int) -> dict[str, int]:
    """Items found while wandering, before any encounter is decided."""
    drops: dict[str, int] = {}
    if random.random() < EXPLORE_HERB_GATE:
        _roll_herbs(catalog, tier, drops, exploration_herb_chance)
    if random.random() < EXPLORE_RECIPE_GATE:
        scrolls = eligible_recipe_scrolls(
            catalog, player.cultivation_level, EXPLORE_RECIPE_WINDOW, exclude_owned=player,
        )
        if scrolls:
            _add(drops, random.choice(scrolls), 1)
    if random.random() < EXPLORE_STONE_CHANCE:
        _add(drops, CURRENCY_KEY, random.randint(1, 2))
    if player.chosen_class_key == "alchemist" and random.random() < ALCHEMIST_BONUS_CHANCE:
        _add(drops, "jadeleaf_grass", 1)
    return drops


def reflection_xp(level: int) -> int:
    """XP for a quiet exploration with no encounter."""
    return int(random.random() * (5 + level)) + 5


def grant_drops(player: Player, drops: dict[str, int]) -> None:
    for key, qty in drops.items():
        player.add_item(key, qty)
