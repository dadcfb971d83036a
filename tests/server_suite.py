"""Socket and HTTP scenarios, driven through Flask-SocketIO's test client."""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

import battle_fixtures  # noqa: F401  (puts the repo root on sys.path)
from flask import Flask
from flask_socketio import SocketIO

from mechduel import init_mech_duel, state
from mechduel.content.loadouts import LOADOUTS


def _make_app(**config):
    state.reset()
    app = Flask(__name__)
    app.config.update(config)
    socketio = SocketIO(app)
    init_mech_duel(app, socketio)
    return app, socketio


def _received(client, name: str) -> List[Any]:
    return [msg["args"][0] for msg in client.get_received() if msg["name"] == name and msg["args"]]


def _split(messages) -> Tuple[List[str], List[dict], List[dict]]:
    system = [msg["args"][0] for msg in messages if msg["name"] == "battle_system"]
    snapshots = [msg["args"][0] for msg in messages if msg["name"] == "battle_snapshot"]
    actions = [msg["args"][0] for msg in messages if msg["name"] == "battle_action"]
    return system, snapshots, actions


def scenario_item_and_loadout_routes() -> bool:
    app, _ = _make_app(MECHDUEL_LOG_LEVEL="WARNING")
    package_logger = logging.getLogger("mechduel")
    assert package_logger.level == logging.WARNING and not package_logger.propagate
    assert len(package_logger.handlers) == 1
    _make_app(MECHDUEL_LOG_LEVEL="INFO")
    assert package_logger.level == logging.INFO
    assert len(package_logger.handlers) == 1, "Reconfiguring replaces the handlers"
    http = app.test_client()

    items = http.get("/battle/items")
    assert items.status_code == 200
    assert items.get_json()["items"]["1"]["name"] == "Brutal Torso"

    loadouts = http.get("/battle/loadouts").get_json()["loadouts"]
    assert set(loadouts) == set(LOADOUTS)

    assert http.get("/battle/rooms/nope").status_code == 404
    return True


def scenario_rejects_bad_loadouts_and_actions() -> bool:
    app, socketio = _make_app()
    client = socketio.test_client(app)

    client.emit("battle_queue", {"name": "Nobody", "setup": [0] * 20})
    assert "Invalid loadout: Missing torso" in _received(client, "battle_system")
    assert state.battle_queue == []

    client.emit("battle_vs_ai", {"setup": [1, 10, 999]})
    assert any("999" in message for message in _received(client, "battle_system"))

    client.emit("battle_action", {"kind": "cooldown"})
    assert "Not in a battle." in _received(client, "battle_system")
    return True


def scenario_vs_ai_battle() -> bool:
    app, socketio = _make_app()
    client = socketio.test_client(app)

    client.emit("battle_vs_ai", {"name": "Tester", "setup": LOADOUTS["brawler"]["setup"], "opponent": "sniper"})
    system, snapshots, _ = _split(client.get_received())
    assert "Battle against Sniper begins." in system
    assert snapshots, "Joining a battle sends a snapshot"
    snapshot = snapshots[-1]
    assert snapshot["you"]["name"] == "Tester" and snapshot["enemy"]["name"] == "Sniper"
    assert snapshot["turn_holder"] == "p1", "AI finishes its opening turn before returning"

    room_id = next(iter(state.battle_rooms))
    assert not state.battle_rooms[room_id].battle.online

    http = app.test_client()
    assert http.get(f"/battle/rooms/{room_id}").get_json()["you"]["id"] == "p1"

    client.emit("battle_action", {"kind": "dance"})
    assert "Unknown action. Try again." in _received(client, "battle_system")

    client.emit("battle_action", {"kind": "walk", "position": 99})
    assert "Can't walk to position 99." in _received(client, "battle_system")

    client.emit("battle_action", {"kind": "cooldown"})
    _, snapshots, actions = _split(client.get_received())
    assert actions and actions[0]["kind"] == "cooldown"
    assert actions[0]["damage_scale"] is not None, "Server rolls the damage scale"
    assert snapshots[-1]["turn_holder"] == "p1"

    client.emit("battle_quit")
    system, snapshots, _ = _split(client.get_received())
    assert snapshots[-1]["winner"] == "p2" and snapshots[-1]["quit"]
    assert "Battle ended." in system
    assert state.battle_rooms == {} and state.sid_to_room == {}
    assert http.get(f"/battle/rooms/{room_id}").status_code == 404
    return True


def scenario_matchmaking_and_turns() -> bool:
    app, socketio = _make_app()
    one = socketio.test_client(app)
    two = socketio.test_client(app)

    one.emit("battle_queue", {"name": "One", "setup": LOADOUTS["brawler"]["setup"]})
    assert "Queued for BATTLE..." in _received(one, "battle_system")
    assert len(state.battle_queue) == 1

    two.emit("battle_queue", {"name": "Two", "setup": LOADOUTS["pyro"]["setup"]})
    assert state.battle_queue == []
    assert len(state.battle_rooms) == 1
    room = next(iter(state.battle_rooms.values()))
    assert room.battle.online

    system, snapshots, _ = _split(one.get_received())
    assert "Match found. Battle begins." in system
    snapshot = snapshots[-1]
    two.get_received()

    holder, waiting = (one, two) if snapshot["you"]["id"] == snapshot["turn_holder"] else (two, one)

    waiting.emit("battle_action", {"kind": "cooldown"})
    assert "It's not your turn." in _received(waiting, "battle_system")

    holder.emit("battle_action", {"kind": "cooldown"})
    assert [action["kind"] for action in _received(holder, "battle_action")] == ["cooldown"]
    assert [action["kind"] for action in _received(waiting, "battle_action")] == ["cooldown"]
    assert room.battle.attacker.id != snapshot["turn_holder"], "Starter's single point is spent"

    two.disconnect()
    assert "Opponent disconnected. Battle ended." in _received(one, "battle_system")
    assert room.battle.completion is not None and room.battle.completion.quit
    assert state.battle_rooms == {}
    return True


def scenario_vs_ai_leaves_the_queue() -> bool:
    app, socketio = _make_app()
    one = socketio.test_client(app)
    two = socketio.test_client(app)

    one.emit("battle_queue", {"name": "One", "setup": LOADOUTS["brawler"]["setup"]})
    assert len(state.battle_queue) == 1

    one.emit("battle_vs_ai", {"name": "One", "setup": LOADOUTS["brawler"]["setup"], "opponent": "sniper"})
    assert state.battle_queue == [], "Starting a vs-AI battle drops the queue entry"
    assert len(state.battle_rooms) == 1

    two.emit("battle_queue", {"name": "Two", "setup": LOADOUTS["pyro"]["setup"]})
    assert len(state.battle_rooms) == 1, "No match against a player already fighting the AI"
    assert [entry.name for entry in state.battle_queue] == ["Two"]
    assert "Match found. Battle begins." not in _received(two, "battle_system")

    # A stale entry for the AI fighter is skipped when the next pair forms
    ai_room = next(iter(state.battle_rooms.values()))
    one_sid = next(iter(ai_room.players))
    state.enqueue(one_sid, "One", LOADOUTS["brawler"]["setup"])

    three = socketio.test_client(app)
    three.emit("battle_queue", {"name": "Three", "setup": LOADOUTS["pyro"]["setup"]})
    assert state.battle_queue == []
    assert len(state.battle_rooms) == 2
    matched = [room for room in state.battle_rooms.values() if room is not ai_room][0]
    assert one_sid not in matched.players
    assert {matched.battle.p1.name, matched.battle.p2.name} == {"Two", "Three"}
    return True


SCENARIOS = [
    scenario_item_and_loadout_routes,
    scenario_rejects_bad_loadouts_and_actions,
    scenario_vs_ai_battle,
    scenario_matchmaking_and_turns,
    scenario_vs_ai_leaves_the_queue,
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
