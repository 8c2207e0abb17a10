"""Account system — create a cultivator, log in and log out.

Credentials are compared as stored plaintext.
"""
from __future__ import annotations

import logging
import sqlite3
from typing import Any

from cultivation_rpg.errors import SAVE_FAILED, PersistenceError
from cultivation_rpg.models.action import Action, ActionResult, Choice, MessageStyle, fail
from cultivation_rpg.models.character import Player
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)

DEFAULT_NAME = "Nameless One"


class AccountSystem(GameSystem):
    def __init__(self) -> None:
        self._repos: dict[str, Any] = {}

    def inject(self, *, repos: dict | None = None, **kwargs: Any) -> None:
        if repos is not None:
            self._repos = repos

    @property
    def system_id(self) -> str:
        return "account"

    @property
    def handled_action_types(self) -> set[str]:
        return {"create_account", "login", "logout"}

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        if not context.logged_in:
            return [
                Choice("Create Account", "create_account", style="confirm"),
                Choice("Login", "login"),
            ]
        if context.combat is None and context.pending_encounter is None:
            return [Choice("Logout", "logout", style="neutral")]
        return []

    def resolve(self, action: Action, context: GameContext) -> ActionResult:
        action_type = action.action_type.lower()
        if action_type == "logout":
            return self._resolve_logout(action, context)
        if context.logged_in:
            return fail(action, "You are already logged in.")
        if action_type == "create_account":
            return self._resolve_create(action, context)
        return self._resolve_login(action, context)

    def _credentials(self, action: Action, context: GameContext) -> tuple[str | None, str | None]:
        username = action.parameters.get("username")
        if username is None:
            username = context.prompt("Username:")
        if not username:
            return None, None
        password = action.parameters.get("password")
        if password is None:
            password = context.prompt("Password:", "password")
        return username.strip(), password

    def _resolve_create(self, action: Action, context: GameContext) -> ActionResult:
        repo = self._repos["player"]
        username, password = self._credentials(action, context)
        if not username or not password:
            return fail(action, "Username and password are required.")
        if repo.username_taken(username):
            return fail(action, "This username is already taken. Please choose another.")
        name = action.parameters.get("name")
        if name is None:
            name = context.prompt("Name your cultivator:")
        player = Player(
            username=username,
            password=password,
            name=(name or "").strip() or DEFAULT_NAME,
            resources=context.catalog.starting_resources(),
        )
        repo.create(player)
        context.bind_player(player)
        logger.info(f"Account created: {username} ({player.player_id})")
        result = ActionResult(action_id=action.id, success=True)
        result.say(f"Welcome, {player.name}. Your journey on the path of cultivation begins.", MessageStyle.IMPORTANT)
        result.say("First, discover the nature of your spiritual roots.", MessageStyle.SYSTEM)
        return result

    def _resolve_login(self, action: Action, context: GameContext) -> ActionResult:
        username, password = self._credentials(action, context)
        if not username or not password:
            return fail(action, "Username and password are required.")
        player = self._repos["player"].get_by_username(username)
        if player is None or player.password != password:
            logger.info(f"Failed login for {username}")
            return fail(action, "Invalid username or password.")
        context.bind_player(player)
        logger.info(f"{username} logged in")
        result = ActionResult(action_id=action.id, success=True)
        result.say(f"Welcome back, {player.name}!", MessageStyle.IMPORTANT)
        return result

    def _resolve_logout(self, action: Action, context: GameContext) -> ActionResult:
        player = context.player
        if player is None:
            return fail(action, "You are not logged in.")
        if context.combat is not None:
            return fail(action, "You cannot log out in the middle of a fight.")
        try:
            self._repos["player"].save(player, context.synced_resources)
        except sqlite3.Error as e:
            logger.exception(f"Save on logout failed for {player.player_id}")
            raise PersistenceError(SAVE_FAILED) from e
        context.bind_player(None)
        logger.info(f"{player.username} logged out")
        result = ActionResult(action_id=action.id, success=True)
        result.say("You have logged out. Your progress is saved.", MessageStyle.SYSTEM)
        return result
