# mechduel/engine/queries.py
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Iterable, List

from .models import Combatant, CombatPart
from .rules import direction, in_arena
from ..content.balance import DEFAULTS

if TYPE_CHECKING:
    from .battle import Battle


class CantFireReason(str, Enum):
    NOT_ENOUGH_ENERGY = "Not enough energy"
    NOT_ENOUGH_HEALTH = "Not enough health"
    OUT_OF_USES = "Out of uses"
    ALREADY_USED = "Already used in this turn"
    OUT_OF_RANGE = "Out of range"
    REQUIRE_JUMPING = "Require jumping"
    OUT_OF_RETREATING_RANGE = "Out of retreating range"


def arena_positions() -> List[int]:
    return list(range(DEFAULTS["max_position"] + 1))


def walkable_positions(battle: Battle) -> List[int]:
    attacker, defender = battle.attacker, battle.defender
    legs = attacker.legs
    max_distance = max(legs.stat("walk"), legs.stat("jump"))

    positions = [
        bool(max_distance) and abs(i - attacker.position) <= max_distance
        for i in arena_positions()
    ]

    # Without jumping the mech can't pass the opponent
    if not legs.stat("jump"):
        distance = abs(attacker.position - defender.position)
        dir_ = direction(attacker.position, defender.position)
        positions = [
            ok and i * dir_ < attacker.position * dir_ + distance
            for i, ok in enumerate(positions)
        ]

    positions[attacker.position] = False
    positions[defender.position] = False

    return [i for i, ok in enumerate(positions) if ok]


def teleportable_positions(battle: Battle) -> List[int]:
    occupied = {battle.p1.position, battle.p2.position}
    return [i for i in arena_positions() if i not in occupied]


def positions_in_range(
    battle: Battle,
    player: Combatant,
    part: CombatPart,
    include_out_of_arena: bool = False,
) -> List[int]:
    """Board positions the part can reach from the player's tile, pointing at the opponent."""
    window = part.stats.get("range")
    if not window:
        return arena_positions()

    opponent = battle.get_opponent(player.id)
    dir_ = direction(player.position, opponent.position)
    positions = [player.position + i * dir_ for i in range(window[0], window[1] + 1)]

    if include_out_of_arena:
        return positions
    return [position for position in positions if in_arena(position)]


def why_cant_fire(battle: Battle, part: CombatPart) -> List[CantFireReason]:
    reasons: List[CantFireReason] = []
    attacker, defender = battle.attacker, battle.defender
    stats = part.stats

    if stats.get("energy_cost") and stats["energy_cost"] > attacker.pools.energy:
        reasons.append(CantFireReason.NOT_ENOUGH_ENERGY)

    if stats.get("backfire") and stats["backfire"] >= attacker.pools.health:
        reasons.append(CantFireReason.NOT_ENOUGH_HEALTH)

    if stats.get("uses") is not None and part.times_used >= stats["uses"]:
        reasons.append(CantFireReason.OUT_OF_USES)

    # Weapons only, utilities can be used repeatedly
    if part in attacker.weapons and part in attacker.parts_used_this_turn:
        reasons.append(CantFireReason.ALREADY_USED)

    if stats.get("range") is not None:
        if defender.position not in positions_in_range(battle, attacker, part):
            reasons.append(CantFireReason.OUT_OF_RANGE)

    # Melee parts make the mech jump on their own
    if part.has_tag("require_jump") and not part.has_tag("melee"):
        if not attacker.legs.stat("jump"):
            reasons.append(CantFireReason.REQUIRE_JUMPING)

    if stats.get("retreat") is not None:
        dir_ = direction(attacker.position, defender.position)
        future_position = attacker.position - stats["retreat"] * dir_
        if not in_arena(future_position):
            reasons.append(CantFireReason.OUT_OF_RETREATING_RANGE)

    return reasons


def can_fire(battle: Battle, part: CombatPart, ignored: Iterable[CantFireReason] = ()) -> bool:
    ignored = set(ignored)
    return not [reason for reason in why_cant_fire(battle, part) if reason not in ignored]


def firable_weapons(battle: Battle, ignored: Iterable[CantFireReason] = ()) -> List[CombatPart]:
    ignored = list(ignored)
    return [weapon for weapon in battle.attacker.weapons if can_fire(battle, weapon, ignored)]
