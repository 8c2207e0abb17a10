"""Inventory system — browse the bag and use items outside of combat."""
from __future__ import annotations

import logging

from cultivation_rpg.mechanics.effects import use_item
from cultivation_rpg.models.action import Action, ActionResult, Choice, MessageStyle, fail
from cultivation_rpg.models.event import EventType
from cultivation_rpg.models.item import ItemType
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)

USABLE_TYPES = {ItemType.CONSUMABLE, ItemType.WEAPON, ItemType.RECIPE}


class InventorySystem(GameSystem):
    @property
    def system_id(self) -> str:
        return "inventory"

    @property
    def handled_action_types(self) -> set[str]:
        return {"show_inventory", "use_item"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if not context.in_town:
            return []
        return [Choice("Inventory", "show_inventory")]

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in.")
        if context.combat is not None:
            return fail(action, "Use the combat menu to use items in a fight.")
        if action.action_type.lower() == "show_inventory":
            return self._resolve_show(action, context)
        return self._resolve_use(action, context)

    def usable_choices(self, context: GameContext) -> list[Choice]:
        choices = []
        for key, qty in sorted(context.player.resources.items()):
            item = context.catalog.item(key)
            if qty <= 0 or item is None or item.item_type not in USABLE_TYPES:
                continue
            label = "Equip" if item.item_type == ItemType.WEAPON else "Use"
            choices.append(Choice(f"{label} {item.name} ({qty})", "use_item", key))
        return choices

    def _resolve_show(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        context.display.populate_inventory_grid(player)
        result = ActionResult(action_id=action.id, success=True)
        result.say(
            f"Inventory: {player.slots_used()}/{player.max_inventory_slots} slots used. "
            f"Spirit Stones: {player.spirit_stones}",
            MessageStyle.SYSTEM,
        )
        choices = self.usable_choices(context)
        if choices:
            result.choices = choices + [Choice("Back", "main_menu", style="neutral")]
        return result

    def _resolve_use(self, action: Action, context: GameContext) -> ActionResult:
        item = context.catalog.item(action.target_id or "")
        if item is None:
            return fail(action, "Item not found or out of stock.")
        outcome = use_item(context.player, item, catalog=context.catalog)
        result = ActionResult(
            action_id=action.id,
            success=outcome.applied,
            messages=outcome.messages,
            state_changed=outcome.applied,
        )
        if outcome.applied:
            result.events.append({"event_type": EventType.ITEM_USED.value, "item": item.key})
            logger.debug(f"{context.player.player_id} used {item.key}")
        return result
