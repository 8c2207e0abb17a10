"""Crafting system — alchemy (pill concoction) and class crafts."""
from __future__ import annotations

import logging

from cultivation_rpg.mechanics.crafting import (
    CLASS_CRAFTS,
    available_recipes,
    class_craft,
    concoct,
    max_concoct_quantity,
)
from cultivation_rpg.models.action import Action, ActionResult, Choice, MessageStyle, fail
from cultivation_rpg.models.event import EventType
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)


class CraftingSystem(GameSystem):
    @property
    def system_id(self) -> str:
        return "crafting"

    @property
    def handled_action_types(self) -> set[str]:
        return {"concoct_menu", "concoct"} | set(CLASS_CRAFTS)

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if not context.in_town:
            return []
        choices = [Choice("Concoct Pills", "concoct_menu", style="special")]
        for craft in CLASS_CRAFTS.values():
            if context.player.chosen_class_key == craft.class_key:
                choices.append(Choice(craft.label, craft.action, style="special"))
        return choices

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in.")
        if not context.in_town:
            return fail(action, "You cannot craft right now.")
        action_type = action.action_type.lower()
        if action_type == "concoct_menu":
            return self._resolve_menu(action, context)
        elif action_type == "concoct":
            return self._resolve_concoct(action, context)
        return self._resolve_class_craft(action, context)

    def _resolve_menu(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        recipes = available_recipes(player, context.catalog)
        if not recipes:
            return fail(action, "You do not know any recipes you can concoct yet.")
        result = ActionResult(action_id=action.id, success=True)
        result.say("Choose a pill to concoct:", MessageStyle.SYSTEM)
        for recipe in recipes:
            needs = ", ".join(
                f"{qty} {context.catalog.item_name(key)} ({player.count(key)})"
                for key, qty in recipe.ingredients.items()
            )
            result.say(f"{recipe.name}: {needs}; {recipe.qi_cost} QI each", MessageStyle.NARRATION)
            result.choices.append(
                Choice(f"{recipe.name} (max {max_concoct_quantity(player, recipe)})", "concoct", recipe.recipe_key),
            )
        result.choices.append(Choice("Back", "main_menu", style="neutral"))
        return result

    def _resolve_concoct(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        recipe = context.catalog.recipe(action.target_id or "")
        if recipe is None:
            return fail(action, "Unknown recipe.")
        quantity = action.parameters.get("quantity")
        if quantity is None:
            most = max_concoct_quantity(player, recipe)
            quantity = context.prompt_int(f"How many {recipe.name} to concoct? (max {most})")
            if quantity is None:
                return fail(action, "Concoction cancelled.")
        ok, message = concoct(player, recipe, int(quantity))
        if not ok:
            return fail(action, message)
        logger.info(f"{player.player_id} concocted {quantity} x {recipe.recipe_key}")
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(message, MessageStyle.SUCCESS)
        result.events.append({"event_type": EventType.CONCOCT.value, "recipe": recipe.recipe_key, "quantity": quantity})
        return result

    def _resolve_class_craft(self, action: Action, context: GameContext) -> ActionResult:
        craft = CLASS_CRAFTS[action.action_type.lower()]
        names = {key: context.catalog.item_name(key) for key in craft.materials}
        ok, reason = class_craft(context.player, craft, names)
        if not ok:
            return fail(action, reason)
        product = context.catalog.item_name(craft.produces)
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(f"You {craft.verb} a {product}!", MessageStyle.SUCCESS)
        return result
