# mechduel/engine/ai.py
from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .dice import sample
from .models import Action, ActionKind, Combatant, CombatPart, ItemType
from .queries import CantFireReason
from .rules import in_arena
from ..content.balance import AI, DEFAULTS
from ..logger import get_logger

if TYPE_CHECKING:
    from .battle import Battle

log = get_logger(__name__)

Thought = Optional[Dict[str, Any]]


def think(battle: Battle, actor_id: str, rng: random.Random) -> Action:
    """Runs the heuristic chain and returns the first action any thought produces."""
    attacker = battle.get_player(actor_id)
    defender = battle.get_opponent(actor_id)

    thoughts = (
        use_scope,
        activate_drone,
        prevent_from_shutting_down,
        use_weapon,
        smart_motion,
        dumb_motion,
    )

    for thought in thoughts:
        decision = thought(battle, attacker, defender, rng)
        if decision:
            log.debug("%s: %s", thought.__name__, decision)
            return Action(actor_id=actor_id, **decision)

    return Action(kind=ActionKind.COOLDOWN, actor_id=actor_id)


# Thoughts

def prevent_from_shutting_down(battle: Battle, attacker: Combatant, defender: Combatant, rng: random.Random) -> Thought:
    if attacker.pools.heat_cap - attacker.pools.heat < AI["heat_margin"]:
        return {"kind": ActionKind.COOLDOWN}
    return None


def use_scope(battle: Battle, attacker: Combatant, defender: Combatant, rng: random.Random) -> Thought:
    scopes = [w for w in battle.get_firable_weapons([CantFireReason.OUT_OF_RANGE]) if has_scope_range(w)]
    if not scopes:
        return None

    # Fire without moving if possible
    firable_scopes = [scope for scope in scopes if battle.can_fire_weapon(scope)]
    if firable_scopes:
        return {"kind": ActionKind.USE_WEAPON, "slot": sample(firable_scopes, rng).slot}

    # One point to move, one to shoot
    if battle.action_points < 2:
        return None

    targets = positions_to_put_opponent_in_range(battle, attacker, defender, scopes)
    if not targets:
        return None

    for position in battle.get_walkable_positions():
        if position in targets:
            return {"kind": ActionKind.WALK, "position": position}

    teleporter = _util(attacker, ItemType.TELEPORTER)
    if teleporter and battle.can_fire_weapon(teleporter):
        landing = [p for p in targets if p in battle.get_teleportable_positions()]
        if landing:
            return {"kind": ActionKind.TELEPORT, "position": sample(landing, rng)}

    return None


def activate_drone(battle: Battle, attacker: Combatant, defender: Combatant, rng: random.Random) -> Thought:
    if attacker.drone is not None and not attacker.drone_active:
        return {"kind": ActionKind.TOGGLE_DRONE}
    return None


def use_weapon(battle: Battle, attacker: Combatant, defender: Combatant, rng: random.Random) -> Thought:
    firable = battle.get_firable_weapons()
    if firable:
        return {"kind": ActionKind.USE_WEAPON, "slot": sample(firable, rng).slot}

    # Not enough points to move and then shoot
    if battle.action_points < 2:
        return None

    out_of_range = battle.get_firable_weapons([CantFireReason.OUT_OF_RANGE])
    targets = positions_to_put_opponent_in_range(battle, attacker, defender, out_of_range)
    if not targets:
        return None

    return reposition(battle, attacker, defender, targets, rng)


def smart_motion(battle: Battle, attacker: Combatant, defender: Combatant, rng: random.Random) -> Thought:
    """Moves somewhere that lets non-scope weapons fire next turn."""
    weapons = [
        weapon for weapon in battle.get_firable_weapons([CantFireReason.OUT_OF_RANGE])
        if not has_scope_range(weapon)
    ]
    targets = positions_to_put_opponent_in_range(battle, attacker, defender, weapons)
    if not targets:
        return None

    return reposition(battle, attacker, defender, targets, rng)


def dumb_motion(battle: Battle, attacker: Combatant, defender: Combatant, rng: random.Random) -> Thought:
    """Random utility, else a random walk."""
    utils = [util for util in attacker.utils if util.type != ItemType.DRONE]
    rng.shuffle(utils)

    for util in utils:
        if not battle.can_fire_weapon(util):
            continue
        if util.type == ItemType.CHARGE_ENGINE:
            return {"kind": ActionKind.CHARGE}
        if util.type == ItemType.TELEPORTER:
            position = sample(battle.get_teleportable_positions(), rng)
            if position is not None:
                return {"kind": ActionKind.TELEPORT, "position": position}
        if util.type == ItemType.GRAPPLING_HOOK:
            return {"kind": ActionKind.HOOK}

    position = sample(battle.get_walkable_positions(), rng)
    if position is not None:
        return {"kind": ActionKind.WALK, "position": position}

    return None


# Utils

def reposition(battle: Battle, attacker: Combatant, defender: Combatant, targets: List[int], rng: random.Random) -> Thought:
    """Walk, charge, hook or teleport so the opponent ends up in weapon range."""
    walk_to = [position for position in battle.get_walkable_positions() if position in targets]
    if walk_to:
        return {"kind": ActionKind.WALK, "position": sample(walk_to, rng)}

    dir_ = battle.get_positional_direction(attacker.id)
    weapon_ranges: List[int] = []
    for weapon in attacker.weapons:
        weapon_ranges.extend(battle.get_positions_in_range(weapon, player=attacker))

    has_range_1_weapon = attacker.position + dir_ in weapon_ranges
    has_range_2_weapon = attacker.position + 2 * dir_ in weapon_ranges

    # Charging lands next to the opponent and knocks them back a tile unless cornered
    charge_engine = _util(attacker, ItemType.CHARGE_ENGINE)
    if charge_engine and battle.can_fire_weapon(charge_engine):
        cornered = defender.position in (0, DEFAULTS["max_position"])
        if (cornered and has_range_1_weapon) or (not cornered and has_range_2_weapon):
            return {"kind": ActionKind.CHARGE}

    grappling_hook = _util(attacker, ItemType.GRAPPLING_HOOK)
    if has_range_1_weapon and grappling_hook and battle.can_fire_weapon(grappling_hook):
        return {"kind": ActionKind.HOOK}

    teleporter = _util(attacker, ItemType.TELEPORTER)
    if teleporter and battle.can_fire_weapon(teleporter):
        landing = [p for p in targets if p in battle.get_teleportable_positions()]
        if landing:
            return {"kind": ActionKind.TELEPORT, "position": sample(landing, rng)}

    return None


def has_scope_range(part: CombatPart) -> bool:
    window = part.stats.get("range")
    return bool(window and window[0] > AI["scope_min_range"])


def positions_to_put_opponent_in_range(
    battle: Battle,
    attacker: Combatant,
    defender: Combatant,
    weapons: List[CombatPart],
) -> List[int]:
    """
    Tiles the attacker could stand on to have the defender inside a weapon's window.
    Duplicates are kept: a tile covering several weapons is sampled more often.
    """
    positions: List[int] = []
    for weapon in weapons:
        for in_range in battle.get_positions_in_range(weapon, include_out_of_arena=True, player=attacker):
            position_to_move = attacker.position - (in_range - defender.position)
            if in_arena(position_to_move):
                positions.append(position_to_move)
    return positions


def _util(attacker: Combatant, item_type: ItemType) -> Optional[CombatPart]:
    for util in attacker.utils:
        if util.type == item_type:
            return util
    return None
