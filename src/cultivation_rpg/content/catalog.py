"""Static game catalog: items, pill recipes, classes, roots, loot and monster tables.

Built once from the data files in this package. The pill table is expanded into
three kinds of entries per row: the recipe, the pill it produces, and (for every
recipe but the basic one) a learnable recipe scroll.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from cultivation_rpg.content.loader import (
    load_all_items,
    load_classes,
    load_herb_drops,
    load_monsters,
    load_pill_effects,
    load_pill_table,
    load_spiritual_roots,
)
from cultivation_rpg.mechanics.crafting import derive_recipe
from cultivation_rpg.models.item import Effect, EffectKind, ItemData, ItemType, PillRecipe
from cultivation_rpg.utils import to_key

logger = logging.getLogger(__name__)

_COMBAT_LOCKED_EFFECTS = {EffectKind.BREAKTHROUGH, EffectKind.PERMANENT_STAT}


class Catalog:
    def __init__(
        self,
        items: dict[str, ItemData],
        recipes: dict[str, PillRecipe],
        classes: dict[str, dict[str, Any]],
        spiritual_roots: list[dict[str, Any]],
        herb_drops: dict[int, list[dict[str, Any]]],
        monsters: dict[str, Any],
    ):
        self.items = items
        self.recipes = recipes
        self.classes = classes
        self.spiritual_roots = spiritual_roots
        self.herb_drops = herb_drops
        self.monsters = monsters

    def item(self, key: str) -> ItemData | None:
        return self.items.get(key)

    def item_name(self, key: str) -> str:
        item = self.items.get(key)
        return item.name if item else key

    def recipe(self, key: str) -> PillRecipe | None:
        return self.recipes.get(key)

    def recipe_scrolls(self) -> list[PillRecipe]:
        return [r for r in self.recipes.values() if r.recipe_item_key]

    def starting_resources(self) -> dict[str, int]:
        """Zeroed counts for every non-scroll item, so a new ledger lists them all."""
        return {key: 0 for key, item in self.items.items() if item.item_type != ItemType.RECIPE}


def _item_from_toml(raw: dict[str, Any]) -> ItemData:
    fields = {k: v for k, v in raw.items() if k != "id"}
    return ItemData(key=raw["id"], **fields)


def _add_pill_rows(
    items: dict[str, ItemData],
    recipes: dict[str, PillRecipe],
    rows: list[dict[str, str]],
    pill_effects: dict[str, dict],
) -> None:
    for row in rows:
        name = row["name"]
        ingredients: dict[str, int] = {}
        ingredient_names: list[str] = []
        for part in row["ingredients"].split(" + "):
            ingredient_name = part.strip()
            if not ingredient_name:
                continue
            ingredient_key = to_key(ingredient_name)
            if ingredient_key not in items:
                logger.warning(f"Unknown ingredient '{ingredient_name}' for pill '{name}'; adding a basic material")
                items[ingredient_key] = ItemData(
                    key=ingredient_key,
                    name=ingredient_name,
                    description=f"Herb for alchemy: {ingredient_name}.",
                    tier=1,
                )
            ingredients[ingredient_key] = ingredients.get(ingredient_key, 0) + 1
            ingredient_names.append(items[ingredient_key].name)

        effects = [Effect(**e) for e in pill_effects.get(name, {}).get("effects", [])]
        if not effects:
            logger.warning(f"Pill '{name}' has no effect entry; it will do nothing when used")
        breakthrough_level = next(
            (e.target_level for e in effects if e.kind == EffectKind.BREAKTHROUGH), None,
        )
        recipe = derive_recipe(name, ingredients, row["use"], breakthrough_level)
        recipes[recipe.recipe_key] = recipe

        if recipe.produces_item_key not in items:
            items[recipe.produces_item_key] = ItemData(
                key=recipe.produces_item_key,
                name=name,
                description=row["use"],
                item_type=ItemType.CONSUMABLE,
                effects=effects,
                usable_in_combat=not any(e.kind in _COMBAT_LOCKED_EFFECTS for e in effects),
            )
        if recipe.recipe_item_key and recipe.recipe_item_key not in items:
            items[recipe.recipe_item_key] = ItemData(
                key=recipe.recipe_item_key,
                name=f"Recipe: {name}",
                description=f"Teaches the method to concoct {name}. Ingredients: {', '.join(ingredient_names)}.",
                item_type=ItemType.RECIPE,
                effects=[Effect(kind=EffectKind.LEARN_RECIPE, recipe_key=recipe.recipe_key)],
            )


def build_catalog(pill_table: Path | None = None) -> Catalog:
    items = {key: _item_from_toml(raw) for key, raw in load_all_items().items()}
    recipes: dict[str, PillRecipe] = {}
    _add_pill_rows(items, recipes, load_pill_table(pill_table), load_pill_effects())
    logger.info(f"Catalog loaded: {len(items)} items, {len(recipes)} recipes")
    return Catalog(
        items=items,
        recipes=recipes,
        classes=load_classes(),
        spiritual_roots=load_spiritual_roots(),
        herb_drops=load_herb_drops(),
        monsters=load_monsters(),
    )


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """The catalog built from the bundled data files."""
    return build_catalog()
