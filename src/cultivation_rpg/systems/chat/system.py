"""Chat system — post to and read the shared world channel."""
from __future__ import annotations

from typing import Any

from cultivation_rpg.models.action import Action, ActionResult, Choice, MessageStyle, fail
from cultivation_rpg.systems.base import GameContext, GameSystem


class ChatSystem(GameSystem):
    def __init__(self, history: int = 50) -> None:
        self._repos: dict[str, Any] = {}
        self._history = history

    def inject(self, *, repos: dict | None = None, config: dict | None = None, **kwargs: Any) -> None:
        if repos is not None:
            self._repos = repos
        if config is not None:
            self._history = int(config.get("game", {}).get("chat_history", self._history))

    @property
    def system_id(self) -> str:
        return "chat"

    @property
    def handled_action_types(self) -> set[str]:
        return {"chat_send", "chat_view"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if not context.in_town:
            return []
        return [Choice("Send Chat", "chat_send"), Choice("Read Chat", "chat_view")]

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        if context.player is None:
            return fail(action, "You must be logged in to chat.")
        if not context.in_town:
            return fail(action, "You cannot chat right now.")
        if "chat" not in self._repos:
            return fail(action, "The world channel is silent.")
        if action.action_type.lower() == "chat_send":
            text = action.parameters.get("text")
            if text is None:
                text = context.prompt("Say:")
            if not text:
                return fail(action, "Message cannot be empty.")
            self._repos["chat"].send(context.player.player_id, context.player.name, text)
            return ActionResult(action_id=action.id, success=True)

        messages = self._repos["chat"].recent(self._history)
        if not messages:
            result = ActionResult(action_id=action.id, success=True)
            result.say("No one has spoken yet.", MessageStyle.CHAT)
            return result
        for message in messages:
            context.display.display_chat_message(message)
        return ActionResult(action_id=action.id, success=True)
