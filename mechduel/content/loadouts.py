# mechduel/content/loadouts.py
# Setups are listed in slot order: torso, legs, side 1-4, top 1-2, drone,
# charge engine, teleporter, grappling hook, modules 1-8. 0 is an empty slot.
LOADOUTS = {
    "brawler": {
        "name": "Brawler",
        "setup": [1, 10, 20, 22, 21, 0, 31, 0, 40, 41, 0, 43, 50, 51, 0, 0, 0, 0, 0, 0],
    },
    "sniper": {
        "name": "Sniper",
        "setup": [3, 11, 24, 25, 0, 0, 30, 32, 0, 0, 42, 0, 52, 53, 0, 0, 0, 0, 0, 0],
    },
    "pyro": {
        "name": "Pyro",
        "setup": [2, 10, 21, 60, 0, 0, 33, 31, 40, 0, 0, 0, 51, 54, 0, 0, 0, 0, 0, 0],
    },
    "duelist": {
        "name": "Duelist",
        "setup": [3, 11, 23, 22, 0, 0, 0, 0, 0, 41, 42, 43, 52, 50, 0, 0, 0, 0, 0, 0],
    },
}
