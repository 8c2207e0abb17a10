from __future__ import annotations

from cultivation_rpg.storage.repos.chat_repo import ChatRepo
from cultivation_rpg.storage.repos.market_repo import MarketRepo
from cultivation_rpg.storage.repos.player_repo import PlayerRepo
from cultivation_rpg.storage.repos.sect_repo import SectRepo

__all__ = [
    "ChatRepo",
    "MarketRepo",
    "PlayerRepo",
    "SectRepo",
]
