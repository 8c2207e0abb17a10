"""Base interface for pluggable game systems."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cultivation_rpg.content.catalog import Catalog
    from cultivation_rpg.engine.display import DisplayProvider
    from cultivation_rpg.models.action import Action, ActionResult, Choice
    from cultivation_rpg.models.character import Monster, Player
    from cultivation_rpg.models.combat import CombatSession


class GameContext:
    """Mutable state of one player's session, handed to every system.

    Owned by exactly one ``GameSession``; never shared across sessions.
    """

    def __init__(
        self,
        catalog: Catalog,
        display: DisplayProvider,
        player: Player | None = None,
        combat: CombatSession | None = None,
        config: dict[str, Any] | None = None,
    ):
        self.catalog = catalog
        self.display = display
        self.player = player
        self.combat = combat
        self.pending_encounter: Monster | None = None
        self.synced_resources: dict[str, int] = dict(player.resources) if player else {}
        self.config = config or {}

    @property
    def logged_in(self) -> bool:
        return self.player is not None

    @property
    def in_town(self) -> bool:
        """Free to pick from the main menu: past class selection, no fight, no pending choice."""
        return (
            self.player is not None
            and self.player.has_class
            and self.combat is None
            and self.pending_encounter is None
        )

    def bind_player(self, player: Player | None) -> None:
        self.player = player
        self.combat = None
        self.pending_encounter = None
        self.synced_resources = dict(player.resources) if player else {}

    def apply_delta(self, delta: dict[str, int]) -> None:
        """Mirror a resource change already committed to the store."""
        for key, change in delta.items():
            self.player.resources[key] = max(0, self.player.resources.get(key, 0) + change)
            self.synced_resources[key] = max(0, self.synced_resources.get(key, 0) + change)

    def prompt(self, text: str, kind: str = "text") -> str | None:
        answer = self.display.get_modal_input(text, kind)
        if answer is None:
            return None
        answer = answer.strip()
        return answer or None

    def confirm(self, text: str) -> bool:
        answer = self.prompt(f"{text} (yes/no)")
        return answer is not None and answer.lower() == "yes"

    def prompt_int(self, text: str) -> int | None:
        answer = self.prompt(text, "number")
        if answer is None:
            return None
        try:
            return int(answer)
        except ValueError:
            return None


class GameSystem(ABC):
    """Base class for all pluggable game systems."""

    @property
    @abstractmethod
    def system_id(self) -> str: ...

    @property
    @abstractmethod
    def handled_action_types(self) -> set[str]: ...

    def can_handle(self, action: Action, context: GameContext) -> bool:
        return action.action_type.lower() in self.handled_action_types

    @abstractmethod
    def resolve(self, action: Action, context: GameContext) -> ActionResult: ...

    def get_available_actions(self, context: GameContext) -> list[Choice]:
        return []

    def inject(self, *, repos: dict | None = None, **kwargs: Any) -> None:
        """Inject runtime dependencies. Systems override to accept what they need."""
