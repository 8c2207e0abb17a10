from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    LEVEL_UP = "LEVEL_UP"
    BREAKTHROUGH = "BREAKTHROUGH"
    COMBAT_START = "COMBAT_START"
    COMBAT_VICTORY = "COMBAT_VICTORY"
    COMBAT_DEFEAT = "COMBAT_DEFEAT"
    COMBAT_FLED = "COMBAT_FLED"
    LOOT = "LOOT"
    CONCOCT = "CONCOCT"
    ITEM_USED = "ITEM_USED"
    MARKET_LISTED = "MARKET_LISTED"
    MARKET_PURCHASE = "MARKET_PURCHASE"
    MARKET_REMOVED = "MARKET_REMOVED"
    SECT_CREATED = "SECT_CREATED"
    SECT_JOINED = "SECT_JOINED"
    SECT_LEFT = "SECT_LEFT"
