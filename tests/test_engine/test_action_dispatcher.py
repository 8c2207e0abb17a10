"""Tests for src/cultivation_rpg/engine/action_dispatcher.py and system_registry.py."""
from __future__ import annotations

from cultivation_rpg.engine.action_dispatcher import ActionDispatcher
from cultivation_rpg.engine.system_registry import SystemRegistry
from cultivation_rpg.errors import ConflictError
from cultivation_rpg.models.action import Action, ActionResult, Choice, MessageStyle
from cultivation_rpg.systems.base import GameSystem


class _StubSystem(GameSystem):
    def __init__(self, behaviour):
        self.behaviour = behaviour
        self.injected = {}

    @property
    def system_id(self) -> str:
        return "stub"

    @property
    def handled_action_types(self) -> set[str]:
        return {"poke"}

    def resolve(self, action, context):
        return self.behaviour(action)

    def get_available_actions(self, context):
        return [Choice("Poke", "poke")]

    def inject(self, *, repos=None, **kwargs):
        self.injected = {"repos": repos, **kwargs}


class _BrokenMenuSystem(_StubSystem):
    @property
    def system_id(self) -> str:
        return "broken"

    def get_available_actions(self, context):
        raise RuntimeError("menu exploded")


def _dispatcher(system: GameSystem) -> ActionDispatcher:
    registry = SystemRegistry()
    registry.register(system)
    return ActionDispatcher(registry)


class TestDispatch:
    def test_routes_to_system(self, context):
        ok = _dispatcher(_StubSystem(lambda a: ActionResult(action_id=a.id, success=True)))
        result = ok.dispatch(Action("POKE", "p1"), context)
        assert result.success

    def test_unknown_action(self, context):
        dispatcher = _dispatcher(_StubSystem(lambda a: None))
        result = dispatcher.dispatch(Action("dance", "p1"), context)
        assert not result.success
        assert result.messages[0].text == "Unknown action."

    def test_game_error_becomes_message(self, context):
        def refuse(action):
            raise ConflictError("This listing is no longer active.")

        result = _dispatcher(_StubSystem(refuse)).dispatch(Action("poke", "p1"), context)
        assert not result.success
        assert result.messages[0].text == "This listing is no longer active."
        assert result.messages[0].style == MessageStyle.ERROR

    def test_unexpected_error_is_contained(self, context):
        def explode(action):
            raise KeyError("oops")

        result = _dispatcher(_StubSystem(explode)).dispatch(Action("poke", "p1"), context)
        assert not result.success
        assert result.messages[0].text == "Action error."


class TestRegistry:
    def test_broken_menu_is_skipped(self, context):
        registry = SystemRegistry()
        registry.register(_BrokenMenuSystem(lambda a: None))
        registry.register(_StubSystem(lambda a: None))
        assert [c.action for c in registry.get_all_available_actions(context)] == ["poke"]

    def test_inject_all(self):
        registry = SystemRegistry()
        stub = _StubSystem(lambda a: None)
        registry.register(stub)
        registry.inject_all(repos={"chat": None}, config={"game": {}})
        assert stub.injected == {"repos": {"chat": None}, "config": {"game": {}}}

    def test_defaults_cover_every_menu_action(self):
        registry = SystemRegistry()
        registry.register_defaults()
        for system_id in ("combat", "cultivation", "exploration", "inventory", "crafting",
                          "market", "sect", "chat", "account"):
            assert registry.get_system(system_id) is not None
