"""Combat game system — turn-based duels between the player and one opponent.

The player acts, then (unless the fight ended or the action was refused) the
turn passes to the opponent, who always attacks after a short pacing delay.
The combat log is streamed to the display as it happens; rewards and other
narration come back on the ActionResult.
"""
from __future__ import annotations

import logging
import random
import time
from typing import Any

from cultivation_rpg.mechanics.combat_math import apply_damage, flee_succeeds, roll_damage, strike
from cultivation_rpg.mechanics.cultivation import devour_essence
from cultivation_rpg.mechanics.effects import use_item
from cultivation_rpg.mechanics.loot import grant_drops, roll_monster_loot
from cultivation_rpg.mechanics.progression import combatant_realm_name, gain_xp, lose_progress
from cultivation_rpg.models.action import Action, ActionResult, Choice, GameMessage, MessageStyle, fail
from cultivation_rpg.models.character import Combatant, Monster
from cultivation_rpg.models.combat import CombatSession, CombatTurn, PostCombatAction
from cultivation_rpg.models.event import EventType
from cultivation_rpg.models.item import ItemType
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)

TAME_QI_COST = 15
ORACLE_BONUS_CHANCE = 0.20
ORACLE_BONUS_RATE = 0.15
DUEL_PROGRESS_PENALTY = 20
DEFAULT_TALISMAN = "minor_fire_talisman"


def start_combat(context: GameContext, opponent: Combatant) -> CombatSession:
    """Open a fight against ``opponent``; the player moves first."""
    combat = CombatSession(player=context.player, opponent=opponent)
    context.combat = combat
    context.display.display_combat_action(
        f"{opponent.name} ({combatant_realm_name(opponent)}, Level {opponent.cultivation_level}) appears!",
        MessageStyle.COMBAT_OPPONENT.value,
    )
    context.display.update_combat_ui(context.player, opponent)
    logger.info(f"Combat started: {context.player.player_id} vs {opponent.name} (lvl {opponent.cultivation_level})")
    return combat


class CombatSystem(GameSystem):
    def __init__(self, delay: float = 0.0) -> None:
        self._delay = delay

    def inject(self, *, config: dict | None = None, **kwargs: Any) -> None:
        if config is not None:
            self._delay = float(config.get("game", {}).get("combat_delay", self._delay))

    @property
    def system_id(self) -> str:
        return "combat"

    @property
    def handled_action_types(self) -> set[str]:
        return {"attack", "flee", "attempt_tame", "use_talisman", "combat_item", "devour_essence", "ignore_essence"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        combat = context.combat
        if combat is None:
            return []
        if combat.post_combat_action == PostCombatAction.DEVOUR_ESSENCE:
            return [
                Choice("Devour Essence", "devour_essence", style="danger"),
                Choice("Leave It", "ignore_essence", style="neutral"),
            ]
        player = combat.player
        catalog = context.catalog
        choices = [Choice("Attack", "attack", style="danger"), Choice("Flee", "flee", style="neutral")]
        opponent = combat.opponent
        if player.chosen_class_key == "beast_tamer" and isinstance(opponent, Monster) and opponent.tamable:
            choices.append(Choice(f"Attempt Tame ({TAME_QI_COST} QI)", "attempt_tame", style="special"))
        for key, qty in player.resources.items():
            item = catalog.item(key)
            if qty <= 0 or item is None:
                continue
            if item.item_type == ItemType.TALISMAN:
                choices.append(Choice(f"Use {item.name} ({qty})", "use_talisman", key, style="special"))
            elif item.item_type == ItemType.CONSUMABLE and item.usable_in_combat:
                choices.append(Choice(f"Use {item.name} ({qty})", "combat_item", key))
        return choices

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        action_type = action.action_type.lower()
        combat = context.combat
        if combat is None:
            return fail(action, "You are not in combat.")
        if action_type in ("devour_essence", "ignore_essence"):
            return self._resolve_essence(action, context)
        if combat.awaiting_decision:
            return fail(action, "The fight is over. Decide what to do with the essence.")
        if combat.turn != CombatTurn.PLAYER:
            return fail(action, "It is not your turn.")

        if action_type == "attack":
            result = self._resolve_attack(action, context)
        elif action_type == "flee":
            result = self._resolve_flee(action, context)
        elif action_type == "attempt_tame":
            result = self._resolve_tame(action, context)
        elif action_type == "use_talisman":
            result = self._resolve_talisman(action, context)
        else:
            result = self._resolve_combat_item(action, context)

        if not result.success or context.combat is None:
            return result
        if not combat.is_over:
            self._opponent_turn(context)
        if combat.is_over:
            self._finish(context, result)
        return result

    # -- Player actions --

    def _resolve_attack(self, action: Action, context: GameContext) -> ActionResult:
        combat = context.combat
        player, opponent = combat.player, combat.opponent
        dealt = apply_damage(opponent, roll_damage(player.total_attack + combat.attack_bonus))
        context.display.display_combat_action(
            f"{player.name} attacks {opponent.name} for {dealt} damage!", MessageStyle.COMBAT_PLAYER.value,
        )
        context.display.append_combat_action(
            f"{opponent.name} HP: {opponent.health}/{opponent.max_health}", MessageStyle.COMBAT_PLAYER.value,
        )
        return ActionResult(action_id=action.id, success=True, state_changed=True)

    def _resolve_flee(self, action: Action, context: GameContext) -> ActionResult:
        combat = context.combat
        if flee_succeeds():
            context.display.display_combat_action("You successfully fled!", MessageStyle.COMBAT_PLAYER.value)
            context.combat = None
            return ActionResult(
                action_id=action.id,
                success=True,
                messages=[GameMessage(f"You escaped from {combat.opponent.name}.", MessageStyle.NARRATION)],
                events=[{"event_type": EventType.COMBAT_FLED.value, "opponent": combat.opponent.name}],
                state_changed=True,
            )
        context.display.display_combat_action("You failed to flee!", MessageStyle.COMBAT_PLAYER.value)
        return ActionResult(action_id=action.id, success=True, state_changed=True)

    def _resolve_tame(self, action: Action, context: GameContext) -> ActionResult:
        combat = context.combat
        player, opponent = combat.player, combat.opponent
        if player.chosen_class_key != "beast_tamer":
            return fail(action, "Only Beast Tamers can attempt to tame.")
        if not isinstance(opponent, Monster) or not opponent.tamable:
            return fail(action, f"{opponent.name} cannot be tamed.")
        if player.current_qi < TAME_QI_COST:
            return fail(action, f"Not enough QI to attempt taming ({TAME_QI_COST} needed).")
        player.current_qi -= TAME_QI_COST
        context.display.display_combat_action(
            f"{player.name} reaches out with spiritual sense toward {opponent.name}...",
            MessageStyle.COMBAT_PLAYER.value,
        )
        context.display.append_combat_action(
            "The beast's spirit resists the bond. Taming cannot be completed yet.", MessageStyle.SYSTEM.value,
        )
        return ActionResult(action_id=action.id, success=True, state_changed=True)

    def _resolve_talisman(self, action: Action, context: GameContext) -> ActionResult:
        combat = context.combat
        player = combat.player
        key = action.target_id or DEFAULT_TALISMAN
        item = context.catalog.item(key)
        if item is None or item.item_type != ItemType.TALISMAN:
            return fail(action, "That is not a talisman.")
        if player.count(key) <= 0:
            return fail(action, f"You have no {item.name}.")
        if player.current_qi < item.qi_cost:
            return fail(action, f"Not enough QI to use {item.name}!")
        player.current_qi -= item.qi_cost
        outcome = use_item(player, item, catalog=context.catalog, combat=combat)
        context.display.display_combat_action(f"{player.name} uses a {item.name}!", MessageStyle.COMBAT_PLAYER.value)
        for message in outcome.messages:
            context.display.append_combat_action(message.text, message.style.value)
        return ActionResult(action_id=action.id, success=True, state_changed=True)

    def _resolve_combat_item(self, action: Action, context: GameContext) -> ActionResult:
        combat = context.combat
        player = combat.player
        item = context.catalog.item(action.target_id or "")
        if item is None or item.item_type != ItemType.CONSUMABLE or not item.usable_in_combat:
            return fail(action, "That item cannot be used in combat.")
        outcome = use_item(player, item, catalog=context.catalog, combat=combat)
        if not outcome.applied:
            return ActionResult(action_id=action.id, success=False, messages=outcome.messages)
        context.display.display_combat_action(f"{player.name} uses {item.name}.", MessageStyle.COMBAT_PLAYER.value)
        for message in outcome.messages[1:]:
            context.display.append_combat_action(message.text, message.style.value)
        return ActionResult(action_id=action.id, success=True, state_changed=True)

    # -- Opponent and resolution --

    def _opponent_turn(self, context: GameContext) -> None:
        combat = context.combat
        combat.turn = CombatTurn.OPPONENT
        if self._delay > 0:
            time.sleep(self._delay)
        player, opponent = combat.player, combat.opponent
        dealt = strike(opponent, player)
        context.display.append_combat_action(
            f"{opponent.name} attacks {player.name} for {dealt} damage!", MessageStyle.COMBAT_OPPONENT.value,
        )
        context.display.append_combat_action(
            f"{player.name} HP: {player.health}/{player.max_health}", MessageStyle.COMBAT_OPPONENT.value,
        )
        combat.turn = CombatTurn.PLAYER
        combat.round_number += 1

    def _finish(self, context: GameContext, result: ActionResult) -> None:
        combat = context.combat
        if not combat.opponent.is_alive():
            self._victory(context, result)
        else:
            self._defeat(context, result)
        result.state_changed = True

    def _victory(self, context: GameContext, result: ActionResult) -> None:
        combat = context.combat
        player, opponent = combat.player, combat.opponent
        is_monster = isinstance(opponent, Monster)
        if is_monster:
            result.say(f"You defeated {opponent.name}!", MessageStyle.IMPORTANT)
        else:
            result.say(f"You won the duel against {opponent.name}!", MessageStyle.IMPORTANT)

        xp = opponent.xp_reward if is_monster else 0
        if player.chosen_class_key == "heavenly_oracle" and xp > 0 and random.random() < ORACLE_BONUS_CHANCE:
            bonus = int(xp * ORACLE_BONUS_RATE)
            xp += bonus
            result.say(f"Fate smiles upon you. +{bonus} bonus cultivation experience.", MessageStyle.SUCCESS)
        if xp > 0:
            result.messages.extend(gain_xp(player, xp))
            result.xp_gained = xp

        if is_monster:
            drops = roll_monster_loot(context.catalog, player.cultivation_level, opponent.tier)
            grant_drops(player, drops)
            if drops:
                found = ", ".join(f"{qty} x {context.catalog.item_name(key)}" for key, qty in drops.items())
                result.say(f"Loot: {found}", MessageStyle.LOOT)
                result.events.append({"event_type": EventType.LOOT.value, "drops": drops})
            else:
                result.say(f"{opponent.name} left nothing of value.", MessageStyle.NARRATION)

        result.events.append({"event_type": EventType.COMBAT_VICTORY.value, "opponent": opponent.name, "xp": xp})
        logger.info(f"{player.player_id} defeated {opponent.name}")

        if player.chosen_class_key == "demon_cultivator":
            combat.post_combat_action = PostCombatAction.DEVOUR_ESSENCE
            result.say(
                f"The essence of {opponent.name} lingers. Will you devour it?", MessageStyle.SYSTEM,
            )
            result.choices = self.get_available_actions(context)
        else:
            context.combat = None

    def _defeat(self, context: GameContext, result: ActionResult) -> None:
        combat = context.combat
        player, opponent = combat.player, combat.opponent
        player.health = 1
        result.say(f"You have been defeated by {opponent.name}...", MessageStyle.ERROR)
        result.say("You barely escape with your life.", MessageStyle.NARRATION)
        if opponent.is_player:
            lost = lose_progress(player, DUEL_PROGRESS_PENALTY)
            result.say(f"The humiliation costs you {lost} cultivation progress.", MessageStyle.ERROR)
        result.events.append({"event_type": EventType.COMBAT_DEFEAT.value, "opponent": opponent.name})
        logger.info(f"{player.player_id} was defeated by {opponent.name}")
        context.combat = None

    def _resolve_essence(self, action: Action, context: GameContext) -> ActionResult:
        combat = context.combat
        if combat.post_combat_action != PostCombatAction.DEVOUR_ESSENCE:
            return fail(action, "There is no essence to claim.")
        player = combat.player
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        if action.action_type.lower() == "devour_essence":
            bonus_xp, corruption = devour_essence(player)
            result.say(
                f"You devour the lingering essence. Corruption +{corruption} (now {player.demonic_corruption}).",
                MessageStyle.IMPORTANT,
            )
            result.messages.extend(gain_xp(player, bonus_xp))
            result.xp_gained = bonus_xp
        else:
            result.say("You leave the essence to dissipate.", MessageStyle.NARRATION)
        context.combat = None
        return result
