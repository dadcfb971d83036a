# mechduel/content/items.py
from typing import Any, Dict, Optional

ITEMS: Dict[int, Dict[str, Any]] = {
    # Torsos
    1: {
        "name": "Brutal Torso",
        "type": "TORSO",
        "element": "PHYSICAL",
        "stats": {"weight": 260, "health": 420, "energy_cap": 190, "energy_regen": 45,
                  "heat_cap": 200, "heat_cooling": 60, "phys_res": 10},
    },
    2: {
        "name": "Heat Hulk",
        "type": "TORSO",
        "element": "EXPLOSIVE",
        "stats": {"weight": 280, "health": 380, "energy_cap": 150, "energy_regen": 35,
                  "heat_cap": 260, "heat_cooling": 80, "expl_res": 12},
    },
    3: {
        "name": "Zarks Frame",
        "type": "TORSO",
        "element": "ELECTRIC",
        "stats": {"weight": 240, "health": 360, "energy_cap": 240, "energy_regen": 60,
                  "heat_cap": 170, "heat_cooling": 50, "elec_res": 12},
    },

    # Legs
    10: {
        "name": "Stomp Walkers",
        "type": "LEGS",
        "element": "PHYSICAL",
        "stats": {"weight": 110, "health": 160, "walk": 2, "phys_dmg": [40, 60], "range": [1, 1],
                  "heat_cost": 10},
    },
    11: {
        "name": "Jump Jets",
        "type": "LEGS",
        "element": "EXPLOSIVE",
        "stats": {"weight": 100, "health": 130, "walk": 1, "jump": 3, "expl_dmg": [30, 50],
                  "range": [1, 1], "heat_cost": 12},
    },
    12: {
        "name": "Rolling Treads",
        "type": "LEGS",
        "element": "ELECTRIC",
        "stats": {"weight": 90, "health": 120, "walk": 3},
        "tags": {"roller": True},
    },

    # Side weapons
    20: {
        "name": "Iron Cannon",
        "type": "SIDE_WEAPON",
        "element": "PHYSICAL",
        "stats": {"weight": 60, "phys_dmg": [70, 90], "range": [1, 3], "heat_cost": 20,
                  "recoil": 1},
    },
    21: {
        "name": "Flame Thrower",
        "type": "SIDE_WEAPON",
        "element": "EXPLOSIVE",
        "stats": {"weight": 55, "expl_dmg": [50, 70], "heat_dmg": 35, "range": [1, 2],
                  "heat_cost": 30},
    },
    22: {
        "name": "Shock Fist",
        "type": "SIDE_WEAPON",
        "element": "ELECTRIC",
        "stats": {"weight": 50, "elec_dmg": [45, 65], "energy_dmg": 40, "range": [1, 1],
                  "energy_cost": 25, "push": 2},
        "tags": {"melee": True},
    },
    23: {
        "name": "Thunder Blade",
        "type": "SIDE_WEAPON",
        "element": "ELECTRIC",
        "stats": {"weight": 70, "elec_dmg": [80, 110], "energy_cap_dmg": 20, "range": [1, 3],
                  "energy_cost": 40},
        "tags": {"melee": True, "sword": True},
    },
    24: {
        "name": "Hook Shot",
        "type": "SIDE_WEAPON",
        "element": "PHYSICAL",
        "stats": {"weight": 45, "phys_dmg": [30, 40], "pull": 2, "range": [2, 5],
                  "heat_cost": 15},
    },
    25: {
        "name": "Backstep Mortar",
        "type": "SIDE_WEAPON",
        "element": "EXPLOSIVE",
        "stats": {"weight": 65, "expl_dmg": [60, 80], "retreat": 2, "range": [1, 4],
                  "heat_cost": 25},
        "tags": {"require_jump": True},
    },

    # Top weapons
    30: {
        "name": "Long Range Rail",
        "type": "TOP_WEAPON",
        "element": "ELECTRIC",
        "stats": {"weight": 80, "elec_dmg": [90, 120], "range": [7, 9], "energy_cost": 60,
                  "elec_res_dmg": 5},
    },
    31: {
        "name": "Cluster Rockets",
        "type": "TOP_WEAPON",
        "element": "EXPLOSIVE",
        "stats": {"weight": 85, "expl_dmg": [100, 140], "range": [3, 6], "heat_cost": 45,
                  "uses": 2, "expl_res_dmg": 6, "heat_cooling_dmg": 10},
    },
    32: {
        "name": "Reactor Breaker",
        "type": "TOP_WEAPON",
        "element": "ELECTRIC",
        "stats": {"weight": 75, "elec_dmg": [60, 80], "range": [2, 5], "energy_cost": 35,
                  "energy_regen_dmg": 10, "backfire": 20},
    },
    33: {
        "name": "Overheater",
        "type": "TOP_WEAPON",
        "element": "EXPLOSIVE",
        "stats": {"weight": 80, "expl_dmg": [40, 55], "range": [2, 4], "heat_cost": 20,
                  "heat_dmg": 60, "heat_cap_dmg": 15},
    },

    # Utilities
    40: {
        "name": "Bee Drone",
        "type": "DRONE",
        "element": "PHYSICAL",
        "stats": {"weight": 30, "phys_dmg": [20, 30], "uses": 3, "heat_cost": 5},
    },
    41: {
        "name": "Ram Charger",
        "type": "CHARGE_ENGINE",
        "element": "PHYSICAL",
        "stats": {"weight": 40, "phys_dmg": [50, 70], "uses": 1, "heat_cost": 20,
                  "range": [2, 9]},
    },
    42: {
        "name": "Blink Teleporter",
        "type": "TELEPORTER",
        "element": "ELECTRIC",
        "stats": {"weight": 35, "elec_dmg": [30, 40], "uses": 1, "energy_cost": 50},
    },
    43: {
        "name": "Grapple Claw",
        "type": "GRAPPLING_HOOK",
        "element": "PHYSICAL",
        "stats": {"weight": 35, "phys_dmg": [20, 30], "uses": 1, "heat_cost": 15,
                  "range": [3, 9]},
    },

    # Modules
    50: {
        "name": "Armor Plating",
        "type": "MODULE",
        "element": "PHYSICAL",
        "stats": {"weight": 25, "health": 60, "phys_res": 6},
    },
    51: {
        "name": "Heat Sink",
        "type": "MODULE",
        "element": "EXPLOSIVE",
        "stats": {"weight": 20, "heat_cap": 60, "heat_cooling": 20},
    },
    52: {
        "name": "Capacitor",
        "type": "MODULE",
        "element": "ELECTRIC",
        "stats": {"weight": 20, "energy_cap": 60, "energy_regen": 15, "elec_res": 5},
    },
    53: {
        "name": "Repair Kit",
        "type": "MODULE",
        "element": "PHYSICAL",
        "stats": {"weight": 30, "health_regen": 15},
    },
    54: {
        "name": "Blast Shield",
        "type": "MODULE",
        "element": "EXPLOSIVE",
        "stats": {"weight": 25, "expl_res": 8},
    },

    # Hybrid
    60: {
        "name": "Prism Launcher",
        "type": "SIDE_WEAPON",
        "element": "COMBINED",
        "stats": {"weight": 70, "phys_dmg": [20, 30], "expl_dmg": [20, 30], "elec_dmg": [20, 30],
                  "range": [2, 4], "heat_cost": 20, "energy_cost": 20},
        "tags": {"premium": True},
    },
}


def get_item(item_id: int, catalog: Optional[Dict[int, Dict[str, Any]]] = None) -> Optional[Dict[str, Any]]:
    """0 means an empty slot."""
    if not item_id:
        return None
    return (catalog if catalog is not None else ITEMS).get(int(item_id))
