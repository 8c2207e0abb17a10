"""Abstract display/interaction interface the engine talks to."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cultivation_rpg.models.action import Choice
    from cultivation_rpg.models.character import Combatant, Player
    from cultivation_rpg.models.chat import ChatMessage


class DisplayProvider(ABC):
    @abstractmethod
    def display_message(self, text: str, style: str = "narration") -> None: ...

    @abstractmethod
    def display_combat_action(self, text: str, style: str = "combat-player") -> None:
        """Start a new block in the combat log."""

    @abstractmethod
    def append_combat_action(self, text: str, style: str = "combat-player") -> None: ...

    @abstractmethod
    def update_stats_display(self, player: Player) -> None: ...

    @abstractmethod
    def update_combat_ui(self, player: Player, opponent: Combatant) -> None: ...

    @abstractmethod
    def populate_action_buttons(self, choices: list[Choice], target: str = "main") -> None: ...

    @abstractmethod
    def get_modal_input(self, prompt: str, kind: str = "text") -> str | None:
        """Ask for a line of input. None when the player cancels."""

    @abstractmethod
    def populate_inventory_grid(self, player: Player) -> None: ...

    @abstractmethod
    def display_chat_message(self, message: ChatMessage) -> None: ...
