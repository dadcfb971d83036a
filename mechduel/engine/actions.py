# mechduel/engine/actions.py
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict

from . import effects
from .errors import InvalidAction, MissingEquipment, MissingTarget
from .models import Action, ActionKind, Combatant, CombatPart, LogType, Slot, WEAPON_SLOTS
from .rules import clamp_position, direction, in_arena

if TYPE_CHECKING:
    from .battle import Battle

# Every handler returns the damage it dealt to the defender.
Handler = Callable[["Battle", Combatant, Action, float], int]


def _require_part(attacker: Combatant, slot: Slot, label: str) -> CombatPart:
    part = attacker.part(slot)
    if part is None:
        raise MissingEquipment(f"{attacker.name} tried to use {label}, but didn't equip one")
    return part


def _require_position(action: Action) -> int:
    if action.position is None:
        raise MissingTarget(f'Invalid "position" property: {action.position}')
    if not in_arena(action.position):
        raise InvalidAction(f'Invalid "position" property: {action.position}')
    return action.position


def cooldown(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    pools = attacker.pools
    previous_heat = pools.heat
    pools.heat = max(0, pools.heat - pools.heat_cooling)

    battle.push_log(f"{attacker.name} cooled down ({previous_heat - pools.heat} heat)", LogType.ACTION)
    return 0


def walk(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    position = _require_position(action)
    defender = battle.get_opponent(attacker.id)
    if position in (attacker.position, defender.position):
        raise InvalidAction(f"Position {position} is occupied")

    previous_position = attacker.position
    attacker.position = position

    battle.push_log(f"{attacker.name} moved from position {previous_position} to position {position}", LogType.ACTION)
    return 0


def stomp(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    legs = _require_part(attacker, Slot.LEGS, "legs")
    defender = battle.get_opponent(attacker.id)
    damage = battle.get_damage_for_part(legs, scale)

    effects.deal_damage_and_backfire(attacker, defender, legs, damage)
    effects.update_positions(attacker, defender, legs)
    effects.count_usage(attacker, legs)

    battle.push_log(f"{attacker.name} stomped! ({damage} damage)", LogType.ACTION)
    return damage


def use_weapon(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    if action.slot is None:
        raise MissingTarget(f'Invalid "slot" property: {action.slot}')
    try:
        slot = Slot(action.slot)
    except ValueError:
        raise InvalidAction(f'Invalid "slot" property: {action.slot}')
    if slot not in WEAPON_SLOTS:
        raise InvalidAction(f'Invalid "slot" property: {slot.name}')

    weapon = attacker.part(slot)
    if weapon is None:
        raise MissingEquipment(f"{attacker.name} has no item at slot {slot.name}")

    defender = battle.get_opponent(attacker.id)
    damage = battle.get_damage_for_part(weapon, scale)

    # Swords close the gap before the hit lands
    if weapon.has_tag("sword"):
        attacker.position = defender.position - direction(attacker.position, defender.position)

    effects.deal_damage_and_backfire(attacker, defender, weapon, damage)
    effects.update_positions(attacker, defender, weapon)
    effects.count_usage(attacker, weapon)

    battle.push_log(f"{attacker.name} used {weapon.name}! ({damage} damage)", LogType.ACTION)
    return damage


def toggle_drone(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    drone = attacker.drone
    if drone is None:
        raise MissingEquipment(f"{attacker.name} tried to toggle drone, but didn't equip one")

    attacker.drone_active = not attacker.drone_active

    # Refill uses
    if attacker.drone_active and drone.stats.get("uses"):
        drone.times_used = 0

    state = "enabled" if attacker.drone_active else "disabled"
    battle.push_log(f"{attacker.name} {state} the drone", LogType.ACTION)
    return 0


def charge(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    engine = _require_part(attacker, Slot.CHARGE_ENGINE, "charge engine")
    defender = battle.get_opponent(attacker.id)
    damage = battle.get_damage_for_part(engine, scale)

    dir_ = direction(attacker.position, defender.position)
    attacker.position = defender.position - dir_

    effects.deal_damage_and_backfire(attacker, defender, engine, damage)
    effects.count_usage(attacker, engine)

    # Knockback from the impact
    defender.position = clamp_position(defender.position + dir_)

    battle.push_log(f"{attacker.name} used {engine.name}! ({damage} damage)", LogType.ACTION)
    return damage


def teleport(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    teleporter = _require_part(attacker, Slot.TELEPORTER, "teleporter")
    position = _require_position(action)
    if position not in battle.get_teleportable_positions():
        raise InvalidAction(f"Can't teleport to occupied position {position}")

    defender = battle.get_opponent(attacker.id)
    previous_position = attacker.position

    # Only hits when landing right next to the opponent
    adjacent = abs(position - defender.position) == 1
    damage = battle.get_damage_for_part(teleporter, scale) if adjacent else 0

    effects.apply_costs(attacker, teleporter)
    if adjacent:
        effects.apply_hit(defender, teleporter, damage)
    effects.count_usage(attacker, teleporter)

    attacker.position = position
    effects.update_positions(attacker, defender, teleporter)

    battle.push_log(
        f"{attacker.name} teleported from position {previous_position} to position {attacker.position} ({damage} damage)",
        LogType.ACTION,
    )
    return damage


def hook(battle: Battle, attacker: Combatant, action: Action, scale: float) -> int:
    grappling_hook = _require_part(attacker, Slot.GRAPPLING_HOOK, "grappling hook")
    defender = battle.get_opponent(attacker.id)
    damage = battle.get_damage_for_part(grappling_hook, scale)

    effects.deal_damage_and_backfire(attacker, defender, grappling_hook, damage)
    effects.count_usage(attacker, grappling_hook)

    defender.position = attacker.position + direction(attacker.position, defender.position)

    battle.push_log(f"{attacker.name} used {grappling_hook.name}! ({damage} damage)", LogType.ACTION)
    return damage


HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.COOLDOWN: cooldown,
    ActionKind.WALK: walk,
    ActionKind.STOMP: stomp,
    ActionKind.USE_WEAPON: use_weapon,
    ActionKind.TOGGLE_DRONE: toggle_drone,
    ActionKind.CHARGE: charge,
    ActionKind.TELEPORT: teleport,
    ActionKind.HOOK: hook,
}

DAMAGE_KINDS = frozenset({
    ActionKind.STOMP,
    ActionKind.USE_WEAPON,
    ActionKind.CHARGE,
    ActionKind.TELEPORT,
    ActionKind.HOOK,
})
