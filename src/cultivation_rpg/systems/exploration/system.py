"""Exploration system — foraging trips, stealth approaches and rival duels."""
from __future__ import annotations

import logging
import random

from cultivation_rpg.mechanics.loot import (
    ENCOUNTER_CHANCE,
    STEALTH_PROMPT_CHANCE,
    STEALTH_SUCCESS_CHANCE,
    grant_drops,
    reflection_xp,
    roll_exploration_finds,
)
from cultivation_rpg.mechanics.monsters import generate_monster, generate_rival
from cultivation_rpg.mechanics.progression import gain_xp, realm_tier
from cultivation_rpg.models.action import Action, ActionResult, Choice, MessageStyle, fail
from cultivation_rpg.models.character import CURRENCY_KEY
from cultivation_rpg.models.event import EventType
from cultivation_rpg.systems.base import GameContext, GameSystem
from cultivation_rpg.systems.combat.system import start_combat

logger = logging.getLogger(__name__)


def describe_drops(context: GameContext, drops: dict[str, int]) -> str:
    parts = []
    for key, qty in drops.items():
        if key == CURRENCY_KEY:
            parts.append(f"{qty} Spirit Stone(s)")
        else:
            parts.append(f"{context.catalog.item_name(key)} (x{qty})")
    return ", ".join(parts)


class ExplorationSystem(GameSystem):
    @property
    def system_id(self) -> str:
        return "exploration"

    @property
    def handled_action_types(self) -> set[str]:
        return {"explore", "pvp", "stealth_sneak", "stealth_proceed"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if context.player is not None and context.pending_encounter is not None:
            return self._stealth_choices()
        if not context.in_town:
            return []
        return [
            Choice("Explore", "explore", style="confirm"),
            Choice("Challenge a Rival (PvP)", "pvp", style="danger"),
        ]

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in.")
        action_type = action.action_type.lower()
        if action_type in ("stealth_sneak", "stealth_proceed"):
            return self._resolve_stealth(action, context)
        if not context.in_town:
            return fail(action, "You cannot do that right now.")
        if action_type == "explore":
            return self._resolve_explore(action, context)
        return self._resolve_pvp(action, context)

    @staticmethod
    def _stealth_choices() -> list[Choice]:
        return [
            Choice("Attempt a Stealthy Approach", "stealth_sneak", style="special"),
            Choice("Press On Openly", "stealth_proceed", style="neutral"),
        ]

    def _resolve_explore(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        result = ActionResult(action_id=action.id, success=True)
        result.say("Venturing into the wilderness...", MessageStyle.NARRATION)

        drops = roll_exploration_finds(context.catalog, player, realm_tier(player.cultivation_level))
        if drops:
            grant_drops(player, drops)
            result.say(f"You found: {describe_drops(context, drops)}!", MessageStyle.LOOT)
            result.events.append({"event_type": EventType.LOOT.value, "drops": drops})
            result.state_changed = True

        if player.chosen_class_key == "poison_master" and random.random() < STEALTH_PROMPT_CHANCE:
            context.pending_encounter = generate_monster(context.catalog, player.cultivation_level)
            result.say("You sense an opportunity to use your stealth...", MessageStyle.NARRATION)
            result.choices = self._stealth_choices()
            return result

        self._encounter_or_reflect(context, result, found_something=bool(drops))
        return result

    def _encounter_or_reflect(self, context: GameContext, result: ActionResult, found_something: bool) -> None:
        player = context.player
        monster = context.pending_encounter
        context.pending_encounter = None
        if random.random() < ENCOUNTER_CHANCE:
            start_combat(context, monster or generate_monster(context.catalog, player.cultivation_level))
            result.events.append({"event_type": EventType.COMBAT_START.value})
            return
        if not found_something:
            result.say("The area is quiet. You find a moment to reflect.", MessageStyle.NARRATION)
        xp = reflection_xp(player.cultivation_level)
        result.say("Gained insights from your surroundings.", MessageStyle.SUCCESS)
        result.messages.extend(gain_xp(player, xp))
        result.xp_gained = xp
        result.state_changed = True

    def _resolve_stealth(self, action: Action, context: GameContext) -> ActionResult:
        if context.pending_encounter is None:
            return fail(action, "There is nothing to sneak past.")
        result = ActionResult(action_id=action.id, success=True)
        if action.action_type.lower() == "stealth_sneak":
            if random.random() < STEALTH_SUCCESS_CHANCE:
                context.pending_encounter = None
                xp = random.randint(3, 7)
                result.say(
                    "Your stealthy approach was successful! You avoid any immediate danger and gain some insight.",
                    MessageStyle.SUCCESS,
                )
                result.messages.extend(gain_xp(context.player, xp))
                result.xp_gained = xp
                result.state_changed = True
                return result
            result.say("Your stealth attempt failed! A creature noticed you!", MessageStyle.ERROR)
        else:
            result.say("You decide against stealth.", MessageStyle.NARRATION)
        self._encounter_or_reflect(context, result, found_something=True)
        return result

    def _resolve_pvp(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        rival = generate_rival(context.catalog, player.cultivation_level)
        logger.info(f"{player.player_id} challenged rival {rival.name} (lvl {rival.cultivation_level})")
        result = ActionResult(action_id=action.id, success=True)
        result.say(f"You issue a challenge. {rival.name} steps forward to duel!", MessageStyle.IMPORTANT)
        start_combat(context, rival)
        result.events.append({"event_type": EventType.COMBAT_START.value, "opponent": rival.name})
        return result
