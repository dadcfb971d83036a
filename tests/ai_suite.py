"""Scenarios for the heuristic opponent: single decisions and full AI turns."""

from __future__ import annotations

import random
from typing import List, Tuple

from battle_fixtures import CHARGER, DRONE, HOOK, KNUCKLE, RAIL, RANGE_GUN, STUCK_LEGS, make_battle
from mechduel.engine import battle as battle_module
from mechduel.engine.ai import think
from mechduel.engine.models import Action, ActionKind, LogType, Slot


def _decide(battle, actor_id: str = "p1") -> Action:
    return think(battle, actor_id, random.Random(0))


def scenario_cools_down_near_heat_cap() -> bool:
    battle = make_battle({Slot.SIDE_WEAPON_1: RANGE_GUN})
    battle.p1.pools.heat = 560
    assert _decide(battle).kind == ActionKind.COOLDOWN, "Within 50 of the cap the AI cools down first"
    return True


def scenario_turns_on_drone() -> bool:
    battle = make_battle({Slot.DRONE: DRONE, Slot.SIDE_WEAPON_1: RANGE_GUN})
    assert _decide(battle).kind == ActionKind.TOGGLE_DRONE

    battle.p1.drone_active = True
    decision = _decide(battle)
    assert decision.kind == ActionKind.USE_WEAPON and decision.slot == Slot.SIDE_WEAPON_1
    return True


def scenario_walks_into_range() -> bool:
    battle = make_battle({Slot.SIDE_WEAPON_1: KNUCKLE}, p1_position=2, p2_position=5)
    decision = _decide(battle)
    assert decision.kind == ActionKind.WALK
    assert decision.position == 4, decision
    return True


def scenario_scope_weapons() -> bool:
    firing = make_battle({Slot.TOP_WEAPON_1: RAIL}, p1_position=0, p2_position=8)
    decision = _decide(firing)
    assert decision.kind == ActionKind.USE_WEAPON and decision.slot == Slot.TOP_WEAPON_1

    backing_off = make_battle({Slot.TOP_WEAPON_1: RAIL}, p1_position=3, p2_position=9)
    backing_off.action_points = 2
    decision = _decide(backing_off)
    assert decision.kind == ActionKind.WALK and decision.position == 1, decision
    return True


def scenario_charge_and_hook_reposition() -> bool:
    charge = make_battle(
        {Slot.LEGS: STUCK_LEGS, Slot.SIDE_WEAPON_1: KNUCKLE, Slot.CHARGE_ENGINE: CHARGER},
        p1_position=5,
        p2_position=9,
    )
    charge.action_points = 2
    assert _decide(charge).kind == ActionKind.CHARGE, "Cornered opponent + range 1 weapon means charge"

    hook = make_battle(
        {Slot.LEGS: STUCK_LEGS, Slot.SIDE_WEAPON_1: KNUCKLE, Slot.GRAPPLING_HOOK: HOOK},
        p1_position=0,
        p2_position=5,
    )
    hook.action_points = 2
    assert _decide(hook).kind == ActionKind.HOOK
    return True


def scenario_falls_back_to_cooldown() -> bool:
    battle = make_battle({Slot.LEGS: STUCK_LEGS})
    assert battle.get_walkable_positions() == []
    assert _decide(battle).kind == ActionKind.COOLDOWN
    return True


def scenario_ai_plays_full_turn() -> bool:
    battle = make_battle(p2_parts={Slot.SIDE_WEAPON_1: RANGE_GUN}, p2_ai=True)
    battle.submit_action(Action(kind=ActionKind.COOLDOWN, actor_id="p1"))

    assert battle.attacker.id == "p1", "AI spends both points and hands the turn back"
    assert battle.action_points == 2
    assert 300 <= battle.p1.pools.health <= 400, "AI should fire the in-range gun"
    assert battle.p2.position in (4, 5, 7, 8), "Second point goes to a walk"

    ai_actions = [entry for entry in battle.logs if entry.actor_id == "p2" and entry.type == LogType.ACTION]
    assert len(ai_actions) == 2, [entry.message for entry in ai_actions]
    return True


def scenario_ai_starter_moves_on_start() -> bool:
    battle = make_battle(p2_parts={Slot.SIDE_WEAPON_1: RANGE_GUN}, starter="p2", p2_ai=True)
    assert battle.attacker.id == "p2"

    battle.start()
    assert battle.attacker.id == "p1"
    assert battle.p1.pools.health <= 400
    return True


def scenario_ai_errors_fall_back_to_cooldown() -> bool:
    def broken(battle, actor_id, rng):
        raise RuntimeError("boom")

    real_think = battle_module.think
    battle_module.think = broken
    try:
        battle = make_battle(starter="p2", p2_ai=True)
        battle.p2.pools.heat = 150
        battle.start()
    finally:
        battle_module.think = real_think

    assert battle.attacker.id == "p1"
    assert battle.p2.pools.heat == 50, "Fallback action is a cooldown"
    assert any(entry.type == LogType.ERROR and "AI caused an error: boom" in entry.message for entry in battle.logs)
    return True


def scenario_rejected_ai_action_still_ends_turn() -> bool:
    def blocked_walk(battle, actor_id, rng):
        return Action(kind=ActionKind.WALK, actor_id=actor_id, position=battle.get_opponent(actor_id).position)

    real_think = battle_module.think
    battle_module.think = blocked_walk
    try:
        battle = make_battle(starter="p2", p2_ai=True)
        battle.start()
    finally:
        battle_module.think = real_think

    assert battle.attacker.id == "p1", "Rejected AI action is replaced by a cooldown"
    assert any(entry.type == LogType.ERROR for entry in battle.logs)
    assert battle.p2.position == 6
    return True


SCENARIOS = [
    scenario_cools_down_near_heat_cap,
    scenario_turns_on_drone,
    scenario_walks_into_range,
    scenario_scope_weapons,
    scenario_charge_and_hook_reposition,
    scenario_falls_back_to_cooldown,
    scenario_ai_plays_full_turn,
    scenario_ai_starter_moves_on_start,
    scenario_ai_errors_fall_back_to_cooldown,
    scenario_rejected_ai_action_still_ends_turn,
]


def run_all() -> List[Tuple[str, bool, str]]:
    results: List[Tuple[str, bool, str]] = []
    for scenario in SCENARIOS:
        try:
            scenario()
            results.append((scenario.__name__, True, ""))
        except AssertionError as exc:
            results.append((scenario.__name__, False, str(exc)))
    return results
