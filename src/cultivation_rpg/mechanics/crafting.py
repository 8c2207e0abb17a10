"""Alchemy (concoction) and class crafting mechanics — pure calculations, no I/O.

A recipe is available when the player knows it (the basic recipe is known by
everyone) and has reached its required cultivation level. Concoction is all or
nothing: every ingredient and the Qi for the whole batch are checked before
anything is deducted.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cultivation_rpg.models.character import BASIC_RECIPE_KEY, Player
from cultivation_rpg.models.item import PillRecipe
from cultivation_rpg.utils import to_key

if TYPE_CHECKING:
    from cultivation_rpg.content.catalog import Catalog

BASIC_RECIPE_NAME = "Basic Qi Recovery Pill"


@dataclass(frozen=True)
class ClassCraft:
    """A fixed transformation a class can perform outside of alchemy."""

    action: str
    class_key: str
    label: str
    materials: dict[str, int]
    qi_cost: int
    produces: str
    verb: str


CLASS_CRAFTS: dict[str, ClassCraft] = {
    "forge_artifact": ClassCraft(
        action="forge_artifact",
        class_key="artifact_refiner",
        label="Forge Rough Sword",
        materials={"rough_iron_ore": 3},
        qi_cost=15,
        produces="rough_sword",
        verb="forge",
    ),
    "draw_talisman": ClassCraft(
        action="draw_talisman",
        class_key="talisman_master",
        label="Draw Fire Talisman",
        materials={"blank_talisman_paper": 1},
        qi_cost=5,
        produces="minor_fire_talisman",
        verb="draw",
    ),
}


def recipe_qi_cost(name: str, ingredient_count: int) -> int:
    return int(5 + ingredient_count * 3 + len(name) / 2)


def required_level_for(name: str, use: str, breakthrough_level: int | None = None) -> int:
    """Cultivation level needed to concoct a pill, inferred from its name and use text."""
    if breakthrough_level is not None:
        return breakthrough_level
    if "Advanced" in name or "Core" in name:
        return 19
    if "Nascent Soul" in name:
        return 28
    use_lower = use.lower()
    if "core cultivators" in use_lower:
        return 19
    if "nascent soul" in use_lower:
        return 28
    return 1


def derive_recipe(
    name: str, ingredients: dict[str, int], use: str = "", breakthrough_level: int | None = None,
) -> PillRecipe:
    key = to_key(name)
    is_basic = name == BASIC_RECIPE_NAME
    return PillRecipe(
        recipe_key=key,
        name=name,
        ingredients=dict(ingredients),
        produces_item_key=key,
        qi_cost=recipe_qi_cost(name, len(ingredients)),
        required_cultivation_level=required_level_for(name, use, breakthrough_level),
        is_basic=is_basic,
        recipe_item_key=None if is_basic else f"recipe_{key}",
        use=use,
    )


def is_recipe_available(player: Player, recipe: PillRecipe) -> bool:
    known = recipe.is_basic or recipe.recipe_key == BASIC_RECIPE_KEY or recipe.recipe_key in player.known_recipes
    return known and player.cultivation_level >= recipe.required_cultivation_level


def available_recipes(player: Player, catalog: Catalog) -> list[PillRecipe]:
    return [r for r in catalog.recipes.values() if is_recipe_available(player, r)]


def max_concoct_quantity(player: Player, recipe: PillRecipe) -> int:
    """Largest batch the player's ingredients and current Qi allow."""
    limits = [player.count(key) // need for key, need in recipe.ingredients.items() if need > 0]
    if recipe.qi_cost > 0:
        limits.append(player.current_qi // recipe.qi_cost)
    return max(0, min(limits)) if limits else 0


def can_concoct(player: Player, recipe: PillRecipe, quantity: int) -> tuple[bool, str]:
    if quantity <= 0:
        return False, "Quantity must be at least 1."
    if not is_recipe_available(player, recipe):
        return False, f"You cannot concoct {recipe.name} yet."
    for key, need in recipe.ingredients.items():
        if player.count(key) < need * quantity:
            return False, f"Not enough ingredients for {quantity} x {recipe.name}."
    if player.current_qi < recipe.qi_cost * quantity:
        return False, f"Not enough QI. Requires {recipe.qi_cost * quantity} QI."
    return True, ""


def concoct(player: Player, recipe: PillRecipe, quantity: int) -> tuple[bool, str]:
    """Validate the whole batch, then deduct Qi and ingredients and credit the pills."""
    ok, reason = can_concoct(player, recipe, quantity)
    if not ok:
        return False, reason
    player.current_qi -= recipe.qi_cost * quantity
    for key, need in recipe.ingredients.items():
        player.remove_item(key, need * quantity)
    player.add_item(recipe.produces_item_key, quantity)
    return True, f"Successfully concocted {quantity} x {recipe.name}!"


def can_class_craft(player: Player, craft: ClassCraft, item_names: dict[str, str] | None = None) -> tuple[bool, str]:
    names = item_names or {}
    if player.chosen_class_key != craft.class_key:
        return False, "Your path does not teach this art."
    for key, need in craft.materials.items():
        if player.count(key) < need:
            return False, f"You need {need} {names.get(key, key)} to {craft.verb} this."
    if player.current_qi < craft.qi_cost:
        return False, f"Not enough QI. Requires {craft.qi_cost} QI."
    return True, ""


def class_craft(player: Player, craft: ClassCraft, item_names: dict[str, str] | None = None) -> tuple[bool, str]:
    ok, reason = can_class_craft(player, craft, item_names)
    if not ok:
        return False, reason
    player.current_qi -= craft.qi_cost
    for key, need in craft.materials.items():
        player.remove_item(key, need)
    player.add_item(craft.produces)
    return True, ""
