from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MessageStyle(str, Enum):
    NARRATION = "narration"
    SYSTEM = "system"
    IMPORTANT = "important"
    SUCCESS = "success"
    ERROR = "error"
    ITEM_USE = "item-use"
    QI_RECOVERY = "qi-recovery"
    LOOT = "loot"
    COMBAT_PLAYER = "combat-player"
    COMBAT_OPPONENT = "combat-opponent"
    CHAT = "chat"
    PANEL = "panel"


class MenuTarget(str, Enum):
    MAIN = "main"
    COMBAT = "combat"


@dataclass
class GameMessage:
    text: str
    style: MessageStyle = MessageStyle.NARRATION


@dataclass
class Choice:
    """A selectable button: ``action`` is dispatched with ``value`` as its target."""

    text: str
    action: str
    value: str | None = None
    style: str = ""


@dataclass
class Action:
    action_type: str
    actor_id: str
    target_id: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass
class ActionResult:
    action_id: str = ""
    success: bool = False
    messages: list[GameMessage] = field(default_factory=list)
    choices: list[Choice] = field(default_factory=list)
    events: list[dict[str, Any]] = field(default_factory=list)
    state_changed: bool = False
    xp_gained: int = 0

    def say(self, text: str, style: MessageStyle = MessageStyle.NARRATION) -> None:
        self.messages.append(GameMessage(text, style))

    @property
    def outcome_description(self) -> str:
        return "\n".join(m.text for m in self.messages)


def fail(action: Action, text: str) -> ActionResult:
    """A rejected action: one error message, no state change."""
    return ActionResult(
        action_id=action.id,
        success=False,
        messages=[GameMessage(text, MessageStyle.ERROR)],
    )
