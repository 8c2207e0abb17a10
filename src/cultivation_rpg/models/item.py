"""Static catalog models: items, their effects, and pill recipes."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemType(str, Enum):
    MATERIAL = "material"
    CURRENCY = "currency"
    CONSUMABLE = "consumable"
    WEAPON = "weapon"
    TALISMAN = "talisman"
    RECIPE = "recipe"


class EffectKind(str, Enum):
    HEAL = "heal"
    RESTORE_QI = "restore_qi"
    EQUIP = "equip"
    COMBAT_DAMAGE = "combat_damage"
    LEARN_RECIPE = "learn_recipe"
    BREAKTHROUGH = "breakthrough"
    PERMANENT_STAT = "permanent_stat"
    TEMPORARY_ATTACK = "temporary_attack"


class Effect(BaseModel):
    """One tagged effect. Magnitude is ``amount + floor(per_level * level)``."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    kind: EffectKind
    amount: int = 0
    per_level: float = 0.0
    stat: Optional[str] = None
    target_level: Optional[int] = None
    recipe_key: Optional[str] = None
    message: str = ""

    def magnitude(self, level: int) -> int:
        return self.amount + int(self.per_level * level)


class ItemData(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    name: str
    description: str = ""
    item_type: ItemType = ItemType.MATERIAL
    effects: list[Effect] = Field(default_factory=list)
    usable_in_combat: bool = False
    qi_cost: int = 0
    tier: int = 0
    is_rare: bool = False
    for_realm_break: Optional[int] = None


class PillRecipe(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    recipe_key: str
    name: str
    ingredients: dict[str, int]
    produces_item_key: str
    qi_cost: int
    required_cultivation_level: int = 1
    is_basic: bool = False
    recipe_item_key: Optional[str] = None
    use: str = ""
