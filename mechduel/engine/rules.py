# mechduel/engine/rules.py
import math
import random
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import InvalidAction, InvalidLoadout
from .models import Combatant, CombatPart, Element, ItemType, Slot, WEAPON_SLOTS, MODULE_SLOTS
from ..content.balance import DEFAULTS, LIMITS

ELEMENT_PREFIXES = {
    Element.PHYSICAL: "phys",
    Element.EXPLOSIVE: "expl",
    Element.ELECTRIC: "elec",
}

SUMMARY_KEYS = (
    "weight", "health", "energy_cap", "energy_regen",
    "heat_cap", "heat_cooling", "phys_res", "expl_res", "elec_res",
)


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def in_arena(position: int) -> bool:
    return 0 <= position <= DEFAULTS["max_position"]


def clamp_position(position: int) -> int:
    return clamp(position, 0, DEFAULTS["max_position"])


def direction(from_position: int, to_position: int) -> int:
    # +1 when the opponent is to the right
    return 1 if from_position < to_position else -1


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def element_prefix(element: Element) -> Optional[str]:
    """COMBINED has no single matching stat prefix."""
    return ELEMENT_PREFIXES.get(Element(element))


def summarize_stats(stat_bags: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Sum pool stats across equipped parts, then apply the overweight health penalty."""
    summary = {key: 0 for key in SUMMARY_KEYS}
    for stats in stat_bags:
        for key in SUMMARY_KEYS:
            summary[key] += int(stats.get(key, 0) or 0)

    if summary["weight"] > LIMITS["weight"]:
        overload = summary["weight"] - LIMITS["weight"]
        summary["health"] -= overload * LIMITS["overload_health_penalty"]

    return summary


def check_setup(items: List[Optional[Dict[str, Any]]]) -> None:
    """
    Validates a full loadout (catalog entries in Slot order, None for empty).
    Raises InvalidLoadout with a player-facing message.
    """
    items = list(items) + [None] * (len(Slot) - len(items))

    if not items[Slot.TORSO]:
        raise InvalidLoadout("Missing torso")

    legs = items[Slot.LEGS]
    if not legs:
        raise InvalidLoadout("Missing legs")

    if not (legs.get("stats") or {}).get("jump"):
        for slot in WEAPON_SLOTS:
            weapon = items[slot]
            if not weapon:
                continue
            stats = weapon.get("stats") or {}
            if "advance" in stats or "retreat" in stats:
                raise InvalidLoadout(f"{weapon['name']} requires jumping! The legs you're using can't jump.")

    resistances = set()
    for slot in MODULE_SLOTS:
        module = items[slot]
        if not module:
            continue
        for prefix in ELEMENT_PREFIXES.values():
            key = f"{prefix}_res"
            if key not in (module.get("stats") or {}):
                continue
            if key in resistances:
                raise InvalidLoadout("Can not use multiple modules with the same resistance type in battle.")
            resistances.add(key)

    weight = sum(int((item.get("stats") or {}).get("weight", 0) or 0) for item in items if item)
    if weight > LIMITS["overload"]:
        raise InvalidLoadout("Too heavy")


def damage_for_part(part: CombatPart, defender: Combatant, scale: float) -> int:
    if part.type in (ItemType.TORSO, ItemType.MODULE):
        raise InvalidAction(f"Can't get damage for item of type {part.type.value}")

    prefix = element_prefix(part.element)
    prefixes = [prefix] if prefix else list(ELEMENT_PREFIXES.values())
    ranges = [part.stats[f"{p}_dmg"] for p in prefixes if part.stats.get(f"{p}_dmg")]

    damage = 0
    if ranges:
        dmg_min = sum(r[0] for r in ranges)
        dmg_max = sum(r[1] for r in ranges)
        damage = dmg_min + round_half_up(scale * (dmg_max - dmg_min))

        resistance = defender.pools.resistance(prefix) if prefix else 0
        if resistance:
            damage = max(1, damage - resistance)

    # energy break
    energy_dmg = part.stat("energy_dmg")
    if energy_dmg:
        damage += max(0, energy_dmg - defender.pools.energy)

    return damage


def random_starting_positions(r: random.Random) -> Tuple[int, int]:
    return tuple(r.choice(DEFAULTS["starting_positions"]))
