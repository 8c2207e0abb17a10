"""Item effect interpreter — applies tagged catalog effects to a player.

Catalog entries stay pure data; every behaviour an item can have is resolved
here by ``apply_effect`` according to its ``EffectKind``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cultivation_rpg.mechanics.combat_math import apply_damage, heal
from cultivation_rpg.mechanics.progression import can_break_through, major_breakthrough
from cultivation_rpg.models.action import GameMessage, MessageStyle
from cultivation_rpg.models.character import Player
from cultivation_rpg.models.combat import CombatSession
from cultivation_rpg.models.item import Effect, EffectKind, ItemData, ItemType

if TYPE_CHECKING:
    from cultivation_rpg.content.catalog import Catalog

_PERMANENT_STATS = {"attack", "defense", "max_health", "max_qi"}


@dataclass
class EffectOutcome:
    applied: bool
    messages: list[GameMessage] = field(default_factory=list)


def restore_qi(player: Player, amount: int) -> int:
    before = player.current_qi
    player.current_qi = min(player.max_qi, player.current_qi + max(0, amount))
    return player.current_qi - before


def apply_effect(
    effect: Effect,
    player: Player,
    item: ItemData,
    *,
    catalog: Catalog | None = None,
    combat: CombatSession | None = None,
) -> EffectOutcome:
    kind = effect.kind
    level = player.cultivation_level
    out = EffectOutcome(applied=True)
    if effect.message:
        out.messages.append(GameMessage(effect.message, MessageStyle.ITEM_USE))

    if kind == EffectKind.HEAL:
        amount = effect.magnitude(level)
        heal(player, amount)
        out.messages.append(GameMessage(f"Restored {amount} HP.", MessageStyle.SUCCESS))

    elif kind == EffectKind.RESTORE_QI:
        amount = effect.magnitude(level)
        restore_qi(player, amount)
        out.messages.append(GameMessage(f"Restored {amount} QI.", MessageStyle.QI_RECOVERY))

    elif kind == EffectKind.EQUIP:
        if player.equipped_weapon == item.key:
            return EffectOutcome(False, [GameMessage(f"{item.name} is already equipped.", MessageStyle.NARRATION)])
        if player.equipped_weapon:
            old_name = catalog.item_name(player.equipped_weapon) if catalog else player.equipped_weapon
            out.messages.append(GameMessage(f"Unequipped {old_name}.", MessageStyle.ITEM_USE))
        player.equipped_weapon = item.key
        player.weapon_attack_bonus = effect.amount
        out.messages.append(GameMessage(f"Equipped {item.name}.", MessageStyle.ITEM_USE))

    elif kind == EffectKind.COMBAT_DAMAGE:
        if combat is None:
            return EffectOutcome(False, [GameMessage(f"{item.name} can only be used in combat.", MessageStyle.ERROR)])
        opponent = combat.opponent
        dealt = apply_damage(opponent, effect.magnitude(level))
        out.messages.append(GameMessage(
            f"{opponent.name} takes {dealt} damage. HP: {opponent.health}/{opponent.max_health}",
            MessageStyle.COMBAT_PLAYER,
        ))

    elif kind == EffectKind.LEARN_RECIPE:
        recipe = catalog.recipe(effect.recipe_key) if catalog and effect.recipe_key else None
        recipe_name = recipe.name if recipe else effect.recipe_key
        if effect.recipe_key in player.known_recipes:
            out.messages.append(GameMessage(f"You already know the recipe for {recipe_name}.", MessageStyle.NARRATION))
        else:
            player.known_recipes.append(effect.recipe_key)
            out.messages.append(GameMessage(f"You learned the recipe for {recipe_name}!", MessageStyle.SUCCESS))

    elif kind == EffectKind.BREAKTHROUGH:
        ok, reason = can_break_through(player, effect.target_level or 0)
        if not ok:
            return EffectOutcome(False, [GameMessage(reason, MessageStyle.ERROR)])
        out.messages.extend(major_breakthrough(player))

    elif kind == EffectKind.PERMANENT_STAT:
        stat = effect.stat or ""
        if stat not in _PERMANENT_STATS:
            raise ValueError(f"Unknown permanent stat '{stat}' on {item.key}")
        setattr(player, stat, getattr(player, stat) + effect.amount)

    elif kind == EffectKind.TEMPORARY_ATTACK:
        if combat is not None:
            combat.attack_bonus += effect.amount
            out.messages.append(GameMessage(f"Your strikes burn hotter (+{effect.amount} attack this fight).", MessageStyle.ITEM_USE))
        else:
            out.messages.append(GameMessage("With no foe before you, the surge fades.", MessageStyle.NARRATION))

    else:
        raise ValueError(f"Unhandled effect kind: {kind}")

    return out


def use_item(
    player: Player,
    item: ItemData,
    *,
    catalog: Catalog | None = None,
    combat: CombatSession | None = None,
) -> EffectOutcome:
    """Use one unit of ``item``: run its effects, consuming it if any took hold.

    Weapons are equipped rather than consumed. A consumable whose effects all
    refuse (for example a breakthrough pill used too early) is left in the bag.
    """
    if player.count(item.key) <= 0:
        return EffectOutcome(False, [GameMessage("Item not found or out of stock.", MessageStyle.ERROR)])
    if combat is not None and item.item_type == ItemType.CONSUMABLE and not item.usable_in_combat:
        return EffectOutcome(False, [GameMessage(f"{item.name} cannot be used in combat.", MessageStyle.ERROR)])
    if item.item_type in (ItemType.MATERIAL, ItemType.CURRENCY) or not item.effects:
        return EffectOutcome(False, [GameMessage(f"{item.name} cannot be used directly.", MessageStyle.NARRATION)])

    messages: list[GameMessage] = []
    if item.item_type in (ItemType.CONSUMABLE, ItemType.RECIPE):
        messages.append(GameMessage(f"Using {item.name}...", MessageStyle.ITEM_USE))
    applied = False
    for effect in item.effects:
        outcome = apply_effect(effect, player, item, catalog=catalog, combat=combat)
        messages.extend(outcome.messages)
        applied = applied or outcome.applied

    if applied and item.item_type != ItemType.WEAPON:
        player.remove_item(item.key)
    return EffectOutcome(applied, messages)
