"""Sect system — found, join, inspect and leave sects."""
from __future__ import annotations

import logging
from typing import Any

from cultivation_rpg.content.panels import render_panel
from cultivation_rpg.models.action import Action, ActionResult, Choice, GameMessage, MessageStyle, fail
from cultivation_rpg.models.event import EventType
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)

FOUND_SECT_LEVEL = 10
DEFAULT_DESCRIPTION = "A mysterious sect."


class SectSystem(GameSystem):
    def __init__(self) -> None:
        self._repos: dict[str, Any] = {}

    def inject(self, *, repos: dict | None = None, **kwargs: Any) -> None:
        if repos is not None:
            self._repos = repos

    @property
    def system_id(self) -> str:
        return "sect"

    @property
    def handled_action_types(self) -> set[str]:
        return {"sect_menu", "sect_create", "sect_list", "sect_join", "sect_view", "sect_leave"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if not context.in_town:
            return []
        return [Choice("Sects", "sect_menu")]

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in.")
        if not context.in_town:
            return fail(action, "Sect affairs must wait until you are free.")
        if "sect" not in self._repos:
            return fail(action, "Sect records are unavailable.")
        action_type = action.action_type.lower()
        if action_type == "sect_menu":
            return self._resolve_menu(action, context)
        elif action_type == "sect_create":
            return self._resolve_create(action, context)
        elif action_type == "sect_list":
            return self._resolve_list(action, context)
        elif action_type == "sect_join":
            return self._resolve_join(action, context)
        elif action_type == "sect_view":
            return self._resolve_view(action, context)
        return self._resolve_leave(action, context)

    def _resolve_menu(self, action: Action, context: GameContext) -> ActionResult:
        result = ActionResult(action_id=action.id, success=True)
        if context.player.sect_id:
            result.choices = [Choice("View My Sect", "sect_view"), Choice("Leave Sect", "sect_leave", style="danger")]
        else:
            result.choices = [Choice("Found a Sect", "sect_create", style="special")]
        result.choices += [Choice("View All Sects", "sect_list"), Choice("Back", "main_menu", style="neutral")]
        return result

    def _resolve_create(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        if player.cultivation_level < FOUND_SECT_LEVEL:
            return fail(action, f"You must reach Cultivation Level {FOUND_SECT_LEVEL} to found a sect.")
        if player.sect_id:
            return fail(action, "You are already in a sect.")
        name = action.parameters.get("name") or context.prompt("Name your sect:")
        if not name:
            return fail(action, "Sect name cannot be empty.")
        description = action.parameters.get("description")
        if description is None:
            description = context.prompt("Describe your sect (optional):")
        sect = self._repos["sect"].create(name.strip(), player.player_id, description or DEFAULT_DESCRIPTION)
        player.sect_id = sect.sect_id
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(f"You have founded the {sect.name}!", MessageStyle.SUCCESS)
        result.events.append({"event_type": EventType.SECT_CREATED.value, "sect_id": sect.sect_id})
        return result

    def _resolve_list(self, action: Action, context: GameContext) -> ActionResult:
        sects = self._repos["sect"].list_all()
        result = ActionResult(
            action_id=action.id,
            success=True,
            messages=[GameMessage(render_panel("sect_list.j2", sects=sects), MessageStyle.PANEL)],
        )
        if not context.player.sect_id:
            result.choices = [Choice(f"Join {s.name}", "sect_join", s.sect_id) for s in sects]
        result.choices.append(Choice("Back", "sect_menu", style="neutral"))
        return result

    def _resolve_join(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        if player.sect_id:
            return fail(action, "You are already in a sect.")
        sect = self._repos["sect"].add_member(action.target_id or "", player.player_id)
        player.sect_id = sect.sect_id
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(f"You have joined the {sect.name}!", MessageStyle.SUCCESS)
        result.events.append({"event_type": EventType.SECT_JOINED.value, "sect_id": sect.sect_id})
        return result

    def _resolve_view(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        repo = self._repos["sect"]
        sect = repo.get(player.sect_id) if player.sect_id else None
        if sect is None:
            if player.sect_id:
                player.sect_id = None
                return ActionResult(
                    action_id=action.id,
                    success=False,
                    messages=[GameMessage("Your sect no longer exists.", MessageStyle.ERROR)],
                    state_changed=True,
                )
            return fail(action, "You are not in a sect.")
        founder = self._repos["player"].get(sect.founder_id) if "player" in self._repos else None
        text = render_panel(
            "sect.j2",
            sect=sect,
            founder=founder.name if founder else sect.founder_id,
            members=repo.member_names(sect.sect_id),
        )
        return ActionResult(action_id=action.id, success=True, messages=[GameMessage(text, MessageStyle.PANEL)])

    def _resolve_leave(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        if not player.sect_id:
            return fail(action, "You are not in a sect.")
        repo = self._repos["sect"]
        sect = repo.get(player.sect_id)
        disbanded = repo.remove_member(player.sect_id, player.player_id)
        player.sect_id = None
        name = sect.name if sect else "your sect"
        result = ActionResult(action_id=action.id, success=True, state_changed=True)
        result.say(f"You have left {name}.", MessageStyle.NARRATION)
        if disbanded:
            result.say(f"With no members remaining, {name} has been disbanded.", MessageStyle.SYSTEM)
        result.events.append({"event_type": EventType.SECT_LEFT.value, "disbanded": disbanded})
        return result
