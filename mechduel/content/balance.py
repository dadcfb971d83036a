# mechduel/content/balance.py
DEFAULTS = {
    "max_position": 9,
    "action_points": 2,
    "starter_action_points": 1,
    "forced_cooldown_action_points": 1,
    "starting_positions": [(4, 5), (3, 6), (2, 7)],
}

LIMITS = {
    "weight": 1000,
    "overload": 1015,
    "overload_health_penalty": 15,
}

AI = {
    "heat_margin": 50,
    "scope_min_range": 6,
}
