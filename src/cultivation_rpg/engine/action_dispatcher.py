"""Action dispatcher — routes actions to appropriate systems."""
from __future__ import annotations

import logging

from cultivation_rpg.engine.system_registry import SystemRegistry
from cultivation_rpg.errors import GameError
from cultivation_rpg.models.action import Action, ActionResult, GameMessage, MessageStyle, fail
from cultivation_rpg.systems.base import GameContext

logger = logging.getLogger(__name__)


class ActionDispatcher:
    def __init__(self, registry: SystemRegistry):
        self.registry = registry

    def dispatch(self, action: Action, context: GameContext) -> ActionResult:
        """Resolve one intent. Never raises: failures come back as a failed result."""
        system = self.registry.find_system_for_action(action, context)
        if not system:
            logger.warning(f"No system found for action type: {action.action_type}")
            return fail(action, "Unknown action.")
        try:
            return system.resolve(action, context)
        except GameError as e:
            logger.info(f"{system.system_id} rejected {action.action_type}: {e.message}")
            return fail(action, e.message)
        except Exception:
            logger.exception(f"Error resolving {action.action_type} in {system.system_id}")
            return ActionResult(
                action_id=action.id,
                success=False,
                messages=[GameMessage("Action error.", MessageStyle.ERROR)],
            )
