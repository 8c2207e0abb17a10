"""Cultivation system — meditation, spiritual roots, class paths and the stat sheet."""
from __future__ import annotations

import logging
from typing import Any

from cultivation_rpg.content.panels import render_panel
from cultivation_rpg.mechanics.cultivation import apply_class, assign_spiritual_root, meditate, roll_spiritual_root
from cultivation_rpg.mechanics.progression import realm_name, xp_for_next_level
from cultivation_rpg.models.action import Action, ActionResult, Choice, GameMessage, MessageStyle, fail
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)


class CultivationSystem(GameSystem):
    def __init__(self) -> None:
        self._repos: dict[str, Any] = {}

    def inject(self, *, repos: dict | None = None, **kwargs: Any) -> None:
        if repos is not None:
            self._repos = repos

    @property
    def system_id(self) -> str:
        return "cultivation"

    @property
    def handled_action_types(self) -> set[str]:
        return {"meditate", "roll_spiritual_root", "show_class_info", "choose_class", "view_stats"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        player = context.player
        if player is None or context.combat or context.pending_encounter:
            return []
        if not player.has_rolled_spiritual_root:
            return [Choice("Discover Spiritual Roots", "roll_spiritual_root", style="special")]
        if not player.has_class:
            return [
                Choice(data["name"], "show_class_info", key, style="class_select")
                for key, data in context.catalog.classes.items()
            ]
        return [
            Choice("Meditate", "meditate", style="confirm"),
            Choice("View My Stats", "view_stats"),
        ]

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in.")
        action_type = action.action_type.lower()
        if action_type == "meditate":
            return self._resolve_meditate(action, context)
        elif action_type == "roll_spiritual_root":
            return self._resolve_roll_root(action, context)
        elif action_type == "show_class_info":
            return self._resolve_class_info(action, context)
        elif action_type == "choose_class":
            return self._resolve_choose_class(action, context)
        return self._resolve_view_stats(action, context)

    def _resolve_meditate(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        if context.combat is not None:
            return fail(action, "You cannot meditate in the middle of a fight.")
        if not context.in_town:
            return fail(action, "You cannot meditate right now.")
        if not player.is_alive():
            return fail(action, "Cannot meditate while defeated.")
        return ActionResult(action_id=action.id, success=True, messages=meditate(player), state_changed=True)

    def _resolve_roll_root(self, action: Action, context: GameContext) -> ActionResult:
        root = roll_spiritual_root(context.catalog.spiritual_roots)
        ok, messages = assign_spiritual_root(context.player, root)
        if ok:
            logger.info(f"{context.player.player_id} rolled {root['name']}")
        return ActionResult(action_id=action.id, success=ok, messages=messages, state_changed=ok)

    def _resolve_class_info(self, action: Action, context: GameContext) -> ActionResult:
        class_key = action.target_id or ""
        info = context.catalog.classes.get(class_key)
        if info is None:
            return fail(action, "Unknown cultivation path.")
        choices = [Choice(f"Choose {info['name']}", "choose_class", class_key, style="confirm")]
        choices += [
            Choice(data["name"], "show_class_info", key, style="class_select")
            for key, data in context.catalog.classes.items() if key != class_key
        ]
        return ActionResult(
            action_id=action.id,
            success=True,
            messages=[GameMessage(render_panel("class_info.j2", info=info), MessageStyle.PANEL)],
            choices=choices,
        )

    def _resolve_choose_class(self, action: Action, context: GameContext) -> ActionResult:
        class_key = action.target_id or ""
        info = context.catalog.classes.get(class_key)
        if info is None:
            return fail(action, "Unknown cultivation path.")
        ok, messages = apply_class(context.player, class_key, info)
        return ActionResult(action_id=action.id, success=ok, messages=messages, state_changed=ok)

    def _resolve_view_stats(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        catalog = context.catalog
        sect_name = None
        sect_repo = self._repos.get("sect")
        if player.sect_id and sect_repo:
            sect = sect_repo.get(player.sect_id)
            sect_name = sect.name if sect else None
        text = render_panel(
            "stats.j2",
            player=player,
            realm=realm_name(player.cultivation_level),
            xp_next=xp_for_next_level(player.cultivation_level),
            sect_name=sect_name,
            weapon_name=catalog.item_name(player.equipped_weapon) if player.equipped_weapon else None,
            slots_used=player.slots_used(),
            known_recipes=[catalog.recipe(k).name for k in player.known_recipes if catalog.recipe(k)],
        )
        return ActionResult(action_id=action.id, success=True, messages=[GameMessage(text, MessageStyle.PANEL)])
