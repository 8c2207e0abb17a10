"""Combatant models: the shared stat block plus player and monster variants."""
from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CombatantKind(str, Enum):
    PLAYER = "player"
    MONSTER = "monster"


CURRENCY_KEY = "spirit_stones"
BASIC_RECIPE_KEY = "basic_qi_recovery_pill"


class Combatant(BaseModel):
    """Stats and cultivation state shared by every fighter."""

    model_config = ConfigDict(from_attributes=True)

    kind: CombatantKind
    name: str
    max_health: int = 100
    health: int = 100
    attack: int = 10
    defense: int = 5
    cultivation_level: int = 1
    cultivation_progress: int = 0

    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def total_attack(self) -> int:
        return self.attack

    @property
    def is_player(self) -> bool:
        return self.kind == CombatantKind.PLAYER


class Player(Combatant):
    """A cultivator. Persisted as one JSON document per player."""

    kind: CombatantKind = CombatantKind.PLAYER
    player_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    username: str = ""
    password: str = ""
    resources: dict[str, int] = Field(default_factory=dict)
    max_inventory_slots: int = 50
    spiritual_root_name: str = "Undetermined"
    spiritual_root_multiplier: int = 1
    has_rolled_spiritual_root: bool = False
    chosen_class_key: Optional[str] = None
    chosen_class_name: str = "Undetermined"
    max_qi: int = 50
    current_qi: int = 50
    demonic_corruption: int = 0
    equipped_weapon: Optional[str] = None
    weapon_attack_bonus: int = 0
    sect_id: Optional[str] = None
    known_recipes: list[str] = Field(default_factory=list)
    is_rival: bool = False

    @property
    def total_attack(self) -> int:
        return self.attack + self.weapon_attack_bonus

    @property
    def has_class(self) -> bool:
        return self.chosen_class_key is not None

    @property
    def spirit_stones(self) -> int:
        return self.resources.get(CURRENCY_KEY, 0)

    def count(self, item_key: str) -> int:
        return self.resources.get(item_key, 0)

    def add_item(self, item_key: str, quantity: int = 1) -> None:
        self.resources[item_key] = self.resources.get(item_key, 0) + quantity

    def remove_item(self, item_key: str, quantity: int = 1) -> bool:
        """Deduct quantity of an item. Returns False (no change) if not enough is held."""
        held = self.resources.get(item_key, 0)
        if quantity <= 0 or held < quantity:
            return False
        self.resources[item_key] = held - quantity
        return True

    def unequip_weapon(self) -> None:
        self.equipped_weapon = None
        self.weapon_attack_bonus = 0

    def knows_recipe(self, recipe_key: str) -> bool:
        return recipe_key == BASIC_RECIPE_KEY or recipe_key in self.known_recipes

    def slots_used(self) -> int:
        """Distinct stacks held, currency excluded."""
        return sum(1 for key, qty in self.resources.items() if qty > 0 and key != CURRENCY_KEY)


class Monster(Combatant):
    """An ephemeral opponent built per encounter. Never persisted."""

    kind: CombatantKind = CombatantKind.MONSTER
    xp_reward: int = 0
    tamable: bool = False
    tier: int = 1
