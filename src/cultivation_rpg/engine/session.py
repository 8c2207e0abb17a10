"""Game session — one connected player's intent loop.

A session owns its ``GameContext`` outright. Each intent is dispatched, its
messages are rendered, the player document is saved when the action changed
state, and the next set of choices is put in front of the player.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from cultivation_rpg.engine.action_dispatcher import ActionDispatcher
from cultivation_rpg.engine.system_registry import SystemRegistry
from cultivation_rpg.errors import SAVE_FAILED, GameError
from cultivation_rpg.models.action import Action, ActionResult, Choice, MenuTarget, MessageStyle
from cultivation_rpg.storage.repos.chat_repo import ChatSubscription
from cultivation_rpg.systems.base import GameContext

logger = logging.getLogger(__name__)

MAIN_MENU = "main_menu"


class GameSession:
    def __init__(
        self,
        context: GameContext,
        registry: SystemRegistry,
        dispatcher: ActionDispatcher,
        repos: dict[str, Any],
        chat_history: int = 50,
    ):
        self.context = context
        self.registry = registry
        self.dispatcher = dispatcher
        self.repos = repos
        self.chat_history = chat_history
        self.busy = False
        self.current_choices: list[Choice] = []
        self._chat: ChatSubscription | None = None

    @property
    def display(self):
        return self.context.display

    def start(self) -> None:
        self.display.display_message("Welcome, traveller, to the world of cultivation.", MessageStyle.IMPORTANT.value)
        self.show_menu()

    def choose(self, choice: Choice) -> ActionResult | None:
        return self.perform(choice.action, choice.value)

    def perform(self, action_type: str, target_id: str | None = None, **parameters: Any) -> ActionResult | None:
        """Run one intent to completion. Returns None if it was not dispatched."""
        if self.busy:
            logger.warning(f"Rejected re-entrant {action_type} while another action is in flight")
            self.display.display_message("Please wait for the current action to finish.", MessageStyle.SYSTEM.value)
            return None
        if action_type == MAIN_MENU:
            self.show_menu()
            return None

        self.busy = True
        try:
            self.poll_chat()
            before = self.context.player
            action = Action(
                action_type=action_type,
                actor_id=before.player_id if before else "",
                target_id=target_id,
                parameters=parameters,
            )
            result = self.dispatcher.dispatch(action, self.context)
            self.render(result)
            if result.state_changed and self.context.player is not None:
                self.save()
            if self.context.player is not before:
                self._on_player_changed()
            self._refresh(result)
            return result
        finally:
            self.busy = False

    def render(self, result: ActionResult) -> None:
        for message in result.messages:
            self.display.display_message(message.text, message.style.value)

    def save(self) -> bool:
        """Best-effort save. On failure the in-memory state is kept and the player is told."""
        player = self.context.player
        try:
            foreign = self.repos["player"].save(player, self.context.synced_resources)
        except (sqlite3.Error, GameError) as e:
            logger.error(f"Failed to save player {player.player_id}: {e}")
            self.display.display_message(SAVE_FAILED, MessageStyle.ERROR.value)
            return False
        self.context.synced_resources = dict(player.resources)
        if foreign:
            logger.info(f"Merged external resource changes for {player.player_id}: {foreign}")
        return True

    def show_menu(self) -> None:
        target = MenuTarget.COMBAT if self.context.combat is not None else MenuTarget.MAIN
        self.current_choices = self.registry.get_all_available_actions(self.context)
        self.display.populate_action_buttons(self.current_choices, target.value)

    def poll_chat(self) -> int:
        if self._chat is None:
            return 0
        try:
            return self._chat.poll()
        except sqlite3.Error as e:
            logger.warning(f"Chat poll failed: {e}")
            return 0

    def close(self) -> None:
        if self.context.player is not None and self.context.combat is None:
            self.save()
        if self._chat is not None:
            self._chat.unsubscribe()
            self._chat = None

    def _on_player_changed(self) -> None:
        if self._chat is not None:
            self._chat.unsubscribe()
            self._chat = None
        if self.context.player is not None and "chat" in self.repos:
            self._chat = self.repos["chat"].subscribe(self.display.display_chat_message, self.chat_history)

    def _refresh(self, result: ActionResult) -> None:
        context = self.context
        if context.player is not None:
            self.display.update_stats_display(context.player)
        if context.combat is not None:
            self.display.update_combat_ui(context.player, context.combat.opponent)
        if result.choices:
            target = MenuTarget.COMBAT if context.combat is not None else MenuTarget.MAIN
            self.current_choices = result.choices
            self.display.populate_action_buttons(result.choices, target.value)
        else:
            self.show_menu()
