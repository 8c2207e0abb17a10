"""Shared fixtures for the cultivation RPG test suite."""
from __future__ import annotations

import random
from typing import Any

import pytest

from cultivation_rpg.engine.display import DisplayProvider


class RecordingDisplay(DisplayProvider):
    """Display double that records every call and answers prompts from a script."""

    def __init__(self, inputs: list[str | None] | None = None) -> None:
        self.inputs: list[str | None] = list(inputs or [])
        self.messages: list[tuple[str, str]] = []
        self.combat_log: list[tuple[str, str]] = []
        self.prompts: list[str] = []
        self.buttons: list[Any] = []
        self.button_target = ""
        self.stats_updates = 0
        self.combat_updates = 0
        self.inventory_shown = 0
        self.chat: list[Any] = []

    def display_message(self, text: str, style: str = "narration") -> None:
        self.messages.append((text, style))

    def display_combat_action(self, text: str, style: str = "combat-player") -> None:
        self.combat_log.append((text, style))

    def append_combat_action(self, text: str, style: str = "combat-player") -> None:
        self.combat_log.append((text, style))

    def update_stats_display(self, player) -> None:
        self.stats_updates += 1

    def update_combat_ui(self, player, opponent) -> None:
        self.combat_updates += 1

    def populate_action_buttons(self, choices, target: str = "main") -> None:
        self.buttons = list(choices)
        self.button_target = target

    def get_modal_input(self, prompt: str, kind: str = "text") -> str | None:
        self.prompts.append(prompt)
        if not self.inputs:
            return None
        return self.inputs.pop(0)

    def populate_inventory_grid(self, player) -> None:
        self.inventory_shown += 1

    def display_chat_message(self, message) -> None:
        self.chat.append(message)

    # -- helpers --

    def texts(self) -> list[str]:
        return [text for text, _ in self.messages]

    def button_actions(self) -> list[str]:
        return [choice.action for choice in self.buttons]


@pytest.fixture
def catalog():
    from cultivation_rpg.content.catalog import get_catalog

    return get_catalog()


@pytest.fixture
def display() -> RecordingDisplay:
    return RecordingDisplay()


@pytest.fixture
def player(catalog):
    """A level-1 cultivator with a rolled root and the martial path."""
    from cultivation_rpg.models.character import Player

    return Player(
        username="lin",
        password="secret",
        name="Lin Feng",
        resources=catalog.starting_resources(),
        spiritual_root_name="Five Spiritual Roots",
        spiritual_root_multiplier=1,
        has_rolled_spiritual_root=True,
        chosen_class_key="martial_cultivator",
        chosen_class_name="Martial Cultivator",
    )


@pytest.fixture
def context(catalog, display, player):
    from cultivation_rpg.systems.base import GameContext

    return GameContext(catalog, display, player=player)


@pytest.fixture
def in_memory_db(tmp_path):
    from cultivation_rpg.storage.database import Database

    db = Database(str(tmp_path / "test.db"))
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def repos(in_memory_db) -> dict[str, Any]:
    from cultivation_rpg.storage.repos import ChatRepo, MarketRepo, PlayerRepo, SectRepo

    return {
        "player": PlayerRepo(in_memory_db),
        "market": MarketRepo(in_memory_db),
        "sect": SectRepo(in_memory_db),
        "chat": ChatRepo(in_memory_db),
    }


@pytest.fixture
def seeded_rng():
    state = random.getstate()
    random.seed(42)
    yield
    random.setstate(state)


@pytest.fixture
def registry(repos):
    """Every default system, wired to the test database with no combat delay."""
    from cultivation_rpg.engine.system_registry import SystemRegistry

    registry = SystemRegistry()
    registry.register_defaults()
    registry.inject_all(repos=repos, config={"game": {"combat_delay": 0}})
    return registry


@pytest.fixture
def make_session(catalog, registry, repos):
    """Factory for sessions sharing one registry and store, each with its own display."""
    from cultivation_rpg.engine.action_dispatcher import ActionDispatcher
    from cultivation_rpg.engine.session import GameSession
    from cultivation_rpg.systems.base import GameContext

    def _make(inputs: list[str | None] | None = None) -> GameSession:
        context = GameContext(catalog, RecordingDisplay(inputs))
        return GameSession(context, registry, ActionDispatcher(registry), repos)

    return _make
