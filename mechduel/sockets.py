# mechduel/sockets.py
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple
import random
import time

from flask import request
from flask_socketio import emit, join_room, leave_room

from . import state
from .content.items import get_item
from .content.loadouts import LOADOUTS
from .engine.battle import Battle
from .engine.dice import damage_scale
from .engine.errors import InvalidLoadout
from .engine.models import Action, ActionKind, CombatantSetup, Slot, WEAPON_SLOTS
from .engine.rules import check_setup, random_starting_positions
from .logger import get_logger

log = get_logger(__name__)

PART_FOR_ACTION = {
    ActionKind.STOMP: Slot.LEGS,
    ActionKind.CHARGE: Slot.CHARGE_ENGINE,
    ActionKind.TELEPORT: Slot.TELEPORTER,
    ActionKind.HOOK: Slot.GRAPPLING_HOOK,
}


def snapshot_for(battle: Battle, viewer_id: Optional[str]) -> Dict[str, Any]:
    """
    Returns a UI-friendly snapshot from the viewer's side (p1's when viewer_id is None).
    """
    you = battle.p2 if viewer_id == battle.p2.id else battle.p1
    enemy = battle.get_opponent(you.id)

    def pack(combatant):
        return {
            "id": combatant.id,
            "name": combatant.name,
            "ai": combatant.ai,
            "position": combatant.position,
            "drone_active": combatant.drone_active,
            **asdict(combatant.pools),
            "parts": {
                slot.name.lower(): part.name
                for slot, part in zip(Slot, combatant.slots)
                if part is not None
            },
        }

    completion = battle.completion
    last_event = battle.events[-1] if battle.events else None
    return {
        "turn_holder": battle.attacker.id,
        "action_points": battle.action_points,
        "you": pack(you),
        "enemy": pack(enemy),
        "log": [
            {"type": entry.type.value, "message": entry.message, "actor_id": entry.actor_id, "time": entry.timestamp}
            for entry in battle.logs[-30:]
        ],
        "log_length": len(battle.logs),
        "winner": completion.winner_id if completion else None,
        "quit": completion.quit if completion else False,
        "last_event": asdict(last_event) if last_event else None,
    }


def read_loadout(payload: Any) -> Tuple[str, List[int]]:
    """Pulls (name, setup) out of a client payload. Raises InvalidLoadout."""
    if not isinstance(payload, dict):
        payload = {}
    name = str(payload.get("name") or "Pilot").strip()[:24] or "Pilot"

    setup = payload.get("setup")
    if not isinstance(setup, list):
        raise InvalidLoadout("Missing setup")
    try:
        ids = [int(item_id or 0) for item_id in setup[:len(Slot)]]
    except (TypeError, ValueError):
        raise InvalidLoadout("Setup must be a list of item ids")

    items = []
    for item_id in ids:
        item = get_item(item_id)
        if item_id and item is None:
            raise InvalidLoadout(f"No item with id ({item_id}) in the current pack.")
        items.append(item)
    check_setup(items)
    return name, ids


def authorize(battle: Battle, action: Action) -> Optional[str]:
    """
    Server-side legality check for a client action. Returns the reason it is
    refused, or None when the action may be marked canonical.
    """
    if battle.completion is not None:
        return "The battle is over."
    if action.actor_id != battle.attacker.id:
        return "It's not your turn."

    attacker = battle.attacker

    if action.kind == ActionKind.COOLDOWN:
        return None

    if action.kind == ActionKind.WALK:
        if action.position not in battle.get_walkable_positions():
            return f"Can't walk to position {action.position}."
        return None

    if action.kind == ActionKind.TOGGLE_DRONE:
        if attacker.drone is None:
            return "No drone equipped."
        return None

    if action.kind == ActionKind.USE_WEAPON:
        if action.slot not in WEAPON_SLOTS:
            return "Pick a weapon slot."
        part = attacker.part(action.slot)
    else:
        part = attacker.part(PART_FOR_ACTION[action.kind])

    if part is None:
        return "Nothing equipped for that action."

    if action.kind == ActionKind.TELEPORT and action.position not in battle.get_teleportable_positions():
        return f"Can't teleport to position {action.position}."

    reasons = battle.why_cant_fire(part)
    if reasons:
        return f"Can't use {part.name}: {', '.join(reason.value for reason in reasons)}."
    return None


def register_battle_socket_handlers(socketio):
    def broadcast(room):
        for sid, player_id in room.players.items():
            socketio.emit("battle_snapshot", snapshot_for(room.battle, player_id), to=sid)

    def finish_if_complete(room):
        if room.battle.completion is None:
            return
        socketio.emit("battle_system", "Battle ended.", to=room.room_id)
        state.cleanup_room(room.room_id)

    @socketio.on("battle_queue")
    def battle_queue(payload):
        sid = request.sid
        if state.get_room_by_sid(sid):
            emit("battle_system", "Already in a battle.")
            return
        try:
            name, setup = read_loadout(payload)
        except InvalidLoadout as exc:
            emit("battle_system", f"Invalid loadout: {exc}")
            return

        state.enqueue(sid, name, setup)
        emit("battle_system", "Queued for BATTLE...")

        # Players who went on to fight the AI stay out of the pairing
        state.battle_queue[:] = [entry for entry in state.battle_queue if not state.get_room_by_sid(entry.sid)]
        if len(state.battle_queue) >= 2:
            first = state.battle_queue.pop(0)
            second = state.battle_queue.pop(0)
            seed = int(time.time() * 1000) & 0xFFFFFFFF
            rng = random.Random(seed)
            p1_position, p2_position = random_starting_positions(rng)

            battle = Battle(
                CombatantSetup(id="p1", name=first.name, setup=first.setup, position=p1_position),
                CombatantSetup(id="p2", name=second.name, setup=second.setup, position=p2_position),
                starter_id=rng.choice(["p1", "p2"]),
                online=True,
                seed=seed,
            )
            room_id = f"battle-{first.sid[:5]}-{second.sid[:5]}"
            room = state.create_room(room_id, battle, {first.sid: "p1", second.sid: "p2"}, seed)

            join_room(room_id, sid=first.sid)
            join_room(room_id, sid=second.sid)
            log.info("Matched %s vs %s in %s", first.name, second.name, room_id)

            socketio.emit("battle_system", "Match found. Battle begins.", to=room_id)
            broadcast(room)

    @socketio.on("battle_vs_ai")
    def battle_vs_ai(payload):
        sid = request.sid
        if state.get_room_by_sid(sid):
            emit("battle_system", "Already in a battle.")
            return
        try:
            name, setup = read_loadout(payload)
        except InvalidLoadout as exc:
            emit("battle_system", f"Invalid loadout: {exc}")
            return
        state.dequeue(sid)

        seed = int(time.time() * 1000) & 0xFFFFFFFF
        rng = random.Random(seed)
        opponent_key = payload.get("opponent") if isinstance(payload, dict) else None
        if opponent_key not in LOADOUTS:
            opponent_key = rng.choice(sorted(LOADOUTS))
        opponent = LOADOUTS[opponent_key]
        p1_position, p2_position = random_starting_positions(rng)

        battle = Battle(
            CombatantSetup(id="p1", name=name, setup=setup, position=p1_position),
            CombatantSetup(id="p2", name=opponent["name"], setup=opponent["setup"], ai=True, position=p2_position),
            starter_id=rng.choice(["p1", "p2"]),
            seed=seed,
        )
        room_id = f"battle-{sid[:5]}-ai"
        room = state.create_room(room_id, battle, {sid: "p1"}, seed)
        join_room(room_id)
        log.info("%s vs AI %s in %s", name, opponent["name"], room_id)

        emit("battle_system", f"Battle against {opponent['name']} begins.")
        battle.start()
        broadcast(room)
        finish_if_complete(room)

    @socketio.on("battle_action")
    def battle_action(payload):
        sid = request.sid
        room = state.get_room_by_sid(sid)
        if not room:
            emit("battle_system", "Not in a battle.")
            return

        battle = room.battle
        try:
            action = Action.from_dict(payload if isinstance(payload, dict) else {}, room.players[sid])
        except (TypeError, ValueError):
            emit("battle_system", "Unknown action. Try again.")
            return

        problem = authorize(battle, action)
        if problem:
            log.info("Refused %s from %s: %s", action.kind.value, sid[:5], problem)
            emit("battle_system", problem)
            return

        # Rolled here so every client resolves the same numbers
        action.damage_scale = damage_scale(room.rng)
        action.drone_damage_scale = damage_scale(room.rng)
        action.from_server = True

        result = battle.submit_action(action)
        if not result.ok:
            emit("battle_system", result.message)
            return

        socketio.emit("battle_action", action.to_dict(), to=room.room_id)
        broadcast(room)
        finish_if_complete(room)

    @socketio.on("battle_quit")
    def battle_quit(*args):
        sid = request.sid
        room = state.get_room_by_sid(sid)
        if not room:
            emit("battle_system", "Not in a battle.")
            return
        room.battle.quit(room.players[sid])
        broadcast(room)
        finish_if_complete(room)

    @socketio.on("disconnect")
    def battle_disconnect(*args):
        sid = request.sid
        state.dequeue(sid)
        room = state.get_room_by_sid(sid)
        if not room:
            return
        if room.battle.completion is None:
            room.battle.quit(room.players[sid])
        room_id = room.room_id
        leave_room(room_id, sid=sid)
        socketio.emit("battle_system", "Opponent disconnected. Battle ended.", to=room_id)
        state.cleanup_room(room_id)
