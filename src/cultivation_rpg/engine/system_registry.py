"""System registry — manages pluggable game systems."""
from __future__ import annotations

import logging
from typing import Any

from cultivation_rpg.models.action import Action, Choice
from cultivation_rpg.systems.base import GameContext, GameSystem

logger = logging.getLogger(__name__)


class SystemRegistry:
    def __init__(self) -> None:
        self._systems: dict[str, GameSystem] = {}

    def register(self, system: GameSystem) -> None:
        self._systems[system.system_id] = system

    def get_system(self, system_id: str) -> GameSystem | None:
        return self._systems.get(system_id)

    def find_system_for_action(self, action: Action, context: GameContext) -> GameSystem | None:
        for system in self._systems.values():
            if system.can_handle(action, context):
                return system
        return None

    def get_all_available_actions(self, context: GameContext) -> list[Choice]:
        actions: list[Choice] = []
        for system in self._systems.values():
            try:
                sys_actions = system.get_available_actions(context)
            except Exception:
                logger.exception(f"Menu build failed in {system.system_id}")
                continue
            if sys_actions:
                actions.extend(sys_actions)
        return actions

    def inject_all(self, **deps: Any) -> None:
        """Inject dependencies into all registered systems."""
        for system in self._systems.values():
            system.inject(**deps)

    def register_defaults(self) -> None:
        from cultivation_rpg.systems.account.system import AccountSystem
        from cultivation_rpg.systems.chat.system import ChatSystem
        from cultivation_rpg.systems.combat.system import CombatSystem
        from cultivation_rpg.systems.crafting.system import CraftingSystem
        from cultivation_rpg.systems.cultivation.system import CultivationSystem
        from cultivation_rpg.systems.exploration.system import ExplorationSystem
        from cultivation_rpg.systems.inventory.system import InventorySystem
        from cultivation_rpg.systems.market.system import MarketSystem
        from cultivation_rpg.systems.sect.system import SectSystem

        self.register(CombatSystem())
        self.register(CultivationSystem())
        self.register(ExplorationSystem())
        self.register(InventorySystem())
        self.register(CraftingSystem())
        self.register(MarketSystem())
        self.register(SectSystem())
        self.register(ChatSystem())
        self.register(AccountSystem())
