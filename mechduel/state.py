# mechduel/state.py
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .engine.battle import Battle


@dataclass
class QueuedPlayer:
    sid: str
    name: str
    setup: List[int]


@dataclass
class BattleRoom:
    room_id: str
    battle: Battle
    players: Dict[str, str]                # sid -> combatant id
    rng: random.Random = field(default_factory=random.Random)


battle_queue: List[QueuedPlayer] = []
battle_rooms: Dict[str, BattleRoom] = {}
sid_to_room: Dict[str, str] = {}


def enqueue(sid: str, name: str, setup: List[int]) -> None:
    if not any(entry.sid == sid for entry in battle_queue):
        battle_queue.append(QueuedPlayer(sid=sid, name=name, setup=list(setup)))


def dequeue(sid: str) -> None:
    battle_queue[:] = [entry for entry in battle_queue if entry.sid != sid]


def create_room(room_id: str, battle: Battle, players: Dict[str, str], seed: Any = None) -> BattleRoom:
    room = BattleRoom(room_id=room_id, battle=battle, players=dict(players), rng=random.Random(seed))
    battle_rooms[room_id] = room
    for sid in players:
        sid_to_room[sid] = room_id
    return room


def get_room_by_sid(sid: str) -> Optional[BattleRoom]:
    room_id = sid_to_room.get(sid)
    if not room_id:
        return None
    return battle_rooms.get(room_id)


def cleanup_room(room_id: str) -> None:
    room = battle_rooms.pop(room_id, None)
    if not room:
        return
    for sid in room.players:
        sid_to_room.pop(sid, None)


def reset() -> None:
    battle_queue.clear()
    battle_rooms.clear()
    sid_to_room.clear()
