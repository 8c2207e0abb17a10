"""Cultivation level and realm mechanics — pure math, no I/O."""
from __future__ import annotations

from cultivation_rpg.models.action import GameMessage, MessageStyle
from cultivation_rpg.models.character import Combatant, Player

PLATEAU_LEVELS: tuple[int, ...] = (9, 18, 27, 36, 45)

BREAKTHROUGH_PILLS: dict[int, str] = {
    9: "Foundation Establishment Pill",
    18: "Golden Core Nine Revolutions Pill",
    27: "Nascent Soul Unification Pill",
    36: "Soul Formation Heaven Pill",
    45: "Transcendence Void Elixir",
}

# (minimum level, realm name), highest first
_REALMS: list[tuple[int, str]] = [
    (46, "Transcendent"),
    (37, "Soul Formation"),
    (28, "Nascent Soul"),
    (19, "Core Formation"),
    (10, "Foundation Establishment"),
]

_MONSTER_REALMS: list[tuple[int, str]] = [
    (5, "Weak Beast"),
    (15, "Fierce Beast"),
    (25, "Demonic Beast"),
    (35, "Spirit Beast"),
]

# Stat growth per ordinary level, and the extra surge of a major breakthrough.
LEVEL_UP_HEALTH = 20
LEVEL_UP_ATTACK = 2
LEVEL_UP_DEFENSE = 1
LEVEL_UP_QI = 10
BREAKTHROUGH_HEALTH = 50
BREAKTHROUGH_ATTACK = 5
BREAKTHROUGH_DEFENSE = 3
BREAKTHROUGH_QI = 25
BREAKTHROUGH_SLOTS = 50


def xp_for_next_level(level: int) -> int:
    """Progress needed to leave ``level``."""
    return (level + 1) * 100


def realm_name(level: int) -> str:
    if level <= 0:
        return "Mortal"
    for minimum, name in _REALMS:
        if level >= minimum:
            return name
    return f"Qi Condensation Stage {(level - 1) % 9 + 1}"


def monster_realm_name(level: int) -> str:
    for ceiling, name in _MONSTER_REALMS:
        if level < ceiling:
            return name
    return "Ancient Terror"


def combatant_realm_name(combatant: Combatant) -> str:
    if combatant.is_player:
        return realm_name(combatant.cultivation_level)
    return monster_realm_name(combatant.cultivation_level)


def realm_tier(level: int) -> int:
    """Coarse 1-6 band used for monster and loot selection."""
    if level >= 46:
        return 6
    if level >= 37:
        return 5
    if level >= 28:
        return 4
    if level >= 19:
        return 3
    if level >= 10:
        return 2
    return 1


def is_plateau_level(level: int) -> bool:
    return level in PLATEAU_LEVELS


def is_at_plateau(combatant: Combatant) -> bool:
    """True when sitting at a plateau level with progress already full."""
    level = combatant.cultivation_level
    return is_plateau_level(level) and combatant.cultivation_progress >= xp_for_next_level(level)


def required_breakthrough_pill(level: int) -> str | None:
    return BREAKTHROUGH_PILLS.get(level)


def _peak_messages(combatant: Combatant) -> list[GameMessage]:
    pill = required_breakthrough_pill(combatant.cultivation_level) or "breakthrough pill"
    return [
        GameMessage(
            f"You have reached the peak of {realm_name(combatant.cultivation_level)}. "
            f"You require a {pill} to break through!",
            MessageStyle.SYSTEM,
        ),
        GameMessage("You are no longer gaining cultivation experience until you break through.", MessageStyle.SYSTEM),
    ]


def _level_up(combatant: Combatant) -> None:
    combatant.cultivation_progress -= xp_for_next_level(combatant.cultivation_level)
    combatant.cultivation_level += 1
    combatant.max_health += LEVEL_UP_HEALTH
    combatant.health = combatant.max_health
    combatant.attack += LEVEL_UP_ATTACK
    combatant.defense += LEVEL_UP_DEFENSE
    if isinstance(combatant, Player):
        combatant.max_qi += LEVEL_UP_QI
        combatant.current_qi = min(combatant.max_qi, combatant.current_qi + LEVEL_UP_QI)


def gain_xp(combatant: Combatant, amount: int) -> list[GameMessage]:
    """Credit cultivation experience and run the level-up loop.

    Players multiply ``amount`` by their spiritual root. Progress never passes
    the threshold of a plateau level; only a major breakthrough moves past it.
    """
    if not combatant.is_alive():
        return []

    level = combatant.cultivation_level
    if is_at_plateau(combatant):
        pill = required_breakthrough_pill(level) or "breakthrough pill"
        return [GameMessage(
            f"You are at the peak of {realm_name(level)} and require a {pill}. "
            f"You are not gaining further experience.",
            MessageStyle.SYSTEM,
        )]

    multiplier = combatant.spiritual_root_multiplier if isinstance(combatant, Player) else 1
    gained = int(amount * (multiplier or 1))
    if gained <= 0:
        return []

    messages: list[GameMessage] = []
    needed = xp_for_next_level(level)
    if is_plateau_level(level) and combatant.cultivation_progress + gained >= needed:
        gained = needed - combatant.cultivation_progress
        combatant.cultivation_progress = needed
        messages.append(GameMessage(f"{combatant.name} gained {gained} cultivation experience.", MessageStyle.SUCCESS))
        messages.extend(_peak_messages(combatant))
        return messages

    combatant.cultivation_progress += gained
    messages.append(GameMessage(f"{combatant.name} gained {gained} cultivation experience.", MessageStyle.SUCCESS))

    while combatant.is_alive() and combatant.cultivation_progress >= xp_for_next_level(combatant.cultivation_level):
        _level_up(combatant)
        messages.append(GameMessage(
            f"Congratulations! {combatant.name} has reached {combatant_realm_name(combatant)}!",
            MessageStyle.IMPORTANT,
        ))
        if is_plateau_level(combatant.cultivation_level):
            combatant.cultivation_progress = xp_for_next_level(combatant.cultivation_level)
            messages.extend(_peak_messages(combatant))
            break
    return messages


def lose_progress(combatant: Combatant, amount: int) -> int:
    """Forfeit up to ``amount`` progress, clamped at zero. Returns the amount lost."""
    lost = min(amount, combatant.cultivation_progress)
    combatant.cultivation_progress -= lost
    return lost


def can_break_through(player: Player, plateau_level: int) -> tuple[bool, str]:
    if player.cultivation_level != plateau_level or not is_at_plateau(player):
        return False, (
            f"You are not ready for this breakthrough. "
            f"Reach Level {plateau_level} with full cultivation progress."
        )
    return True, ""


def major_breakthrough(player: Player) -> list[GameMessage]:
    """Advance from a full plateau into the next major realm.

    Applies one ordinary level of growth plus the breakthrough surge, restores
    health and Qi to full and widens the inventory.
    """
    player.cultivation_progress = 0
    player.cultivation_level += 1
    player.max_health += LEVEL_UP_HEALTH + BREAKTHROUGH_HEALTH
    player.attack += LEVEL_UP_ATTACK + BREAKTHROUGH_ATTACK
    player.defense += LEVEL_UP_DEFENSE + BREAKTHROUGH_DEFENSE
    player.max_qi += LEVEL_UP_QI + BREAKTHROUGH_QI
    player.health = player.max_health
    player.current_qi = player.max_qi
    player.max_inventory_slots += BREAKTHROUGH_SLOTS
    realm = realm_name(player.cultivation_level)
    return [
        GameMessage(f"BREAKTHROUGH! You have ascended to the {realm} realm!", MessageStyle.IMPORTANT),
        GameMessage(
            f"Your body and soul are reforged. Max Health {player.max_health}, Attack {player.attack}, "
            f"Defense {player.defense}, Max QI {player.max_qi}.",
            MessageStyle.SUCCESS,
        ),
        GameMessage(f"Your spatial storage expands to {player.max_inventory_slots} slots.", MessageStyle.SUCCESS),
    ]
