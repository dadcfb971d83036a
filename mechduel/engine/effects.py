# mechduel/engine/effects.py
from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import MissingEquipment
from .models import Combatant, CombatPart, LogType
from .rules import clamp_position, direction, element_prefix

if TYPE_CHECKING:
    from .battle import Battle


def apply_costs(attacker: Combatant, part: CombatPart) -> None:
    """Self-inflicted side of activating a part: backfire, heat, energy."""
    pools = attacker.pools
    pools.health -= part.stat("backfire")
    pools.heat += part.stat("heat_cost")
    pools.energy = max(0, pools.energy - part.stat("energy_cost"))


def apply_hit(defender: Combatant, part: CombatPart, damage: int) -> None:
    """Damage plus every stat-damage substat the part carries."""
    pools = defender.pools
    pools.health -= damage
    pools.heat += part.stat("heat_dmg")

    prefix = element_prefix(part.element)
    if prefix:
        res_key = f"{prefix}_res"
        setattr(pools, res_key, getattr(pools, res_key) - part.stat(f"{prefix}_res_dmg"))

    if part.stat("heat_cap_dmg"):
        pools.heat_cap = max(1, pools.heat_cap - part.stat("heat_cap_dmg"))

    if part.stat("heat_cooling_dmg"):
        pools.heat_cooling = max(1, pools.heat_cooling - part.stat("heat_cooling_dmg"))

    if part.stat("energy_dmg"):
        pools.energy = min(pools.energy_cap, max(0, pools.energy - part.stat("energy_dmg")))

    if part.stat("energy_cap_dmg"):
        pools.energy_cap = max(1, pools.energy_cap - part.stat("energy_cap_dmg"))
        pools.energy = min(pools.energy_cap, pools.energy)

    if part.stat("energy_regen_dmg"):
        pools.energy_regen = max(1, pools.energy_regen - part.stat("energy_regen_dmg"))


def deal_damage_and_backfire(attacker: Combatant, defender: Combatant, part: CombatPart, damage: int) -> int:
    """Returns the damage dealt."""
    apply_costs(attacker, part)
    apply_hit(defender, part, damage)
    return damage


def update_positions(attacker: Combatant, defender: Combatant, part: CombatPart) -> None:
    dir_ = direction(attacker.position, defender.position)

    # Movements on attacker

    if part.stat("recoil"):
        attacker.position = clamp_position(attacker.position - part.stat("recoil") * dir_)

    # Pre-validated by the "Out of retreating range" rule
    if part.stat("retreat"):
        attacker.position -= part.stat("retreat") * dir_

    if part.stat("advance"):
        if attacker.position * dir_ + part.stat("advance") < defender.position * dir_:
            attacker.position += part.stat("advance") * dir_
        else:
            attacker.position = defender.position - dir_

    # Movements on defender

    if part.stat("push"):
        defender.position = clamp_position(defender.position + part.stat("push") * dir_)

    if part.stat("pull"):
        if defender.position * dir_ - part.stat("pull") > attacker.position * dir_:
            defender.position -= part.stat("pull") * dir_
        else:
            defender.position = attacker.position + dir_


def count_usage(attacker: Combatant, part: CombatPart) -> None:
    part.times_used += 1
    attacker.parts_used_this_turn.append(part)


def fire_drone(battle: Battle, attacker: Combatant, damage: int) -> int:
    drone = attacker.drone
    if drone is None:
        raise MissingEquipment(f"Failed to fire drone: {attacker.name} does not have a drone equipped")

    defender = battle.get_opponent(attacker.id)
    deal_damage_and_backfire(attacker, defender, drone, damage)
    update_positions(attacker, defender, drone)
    count_usage(attacker, drone)

    # Uses are refilled when the drone is toggled back on
    if drone.stats.get("uses") and drone.times_used >= drone.stats["uses"]:
        attacker.drone_active = False

    battle.push_log(f"{attacker.name}'s {drone.name} fired! ({damage} damage)", LogType.ACTION, attacker.id)
    return damage


def force_cooldown(battle: Battle, player: Combatant) -> bool:
    """
    Forced cooldown at the start of an overheated turn.
    Returns True for a double cooldown (shutdown), which forfeits the turn.
    """
    pools = player.pools
    double = pools.heat - pools.heat_cooling > pools.heat_cap
    amount = pools.heat_cooling * (2 if double else 1)

    pools.heat = max(0, pools.heat - amount)

    label = "double cooldown" if double else "cooldown"
    battle.push_log(f"{player.name} was forced to {label} (-{amount} heat)", LogType.INFO, player.id)
    return double


def regen(player: Combatant) -> None:
    """End-of-turn regeneration: energy, then module health regen."""
    pools = player.pools
    pools.energy = min(pools.energy_cap, pools.energy + pools.energy_regen)

    for module in player.modules:
        if module.stat("health_regen"):
            pools.health = min(pools.health_cap, pools.health + module.stat("health_regen"))
