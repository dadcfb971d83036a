# mechduel/routes.py
from flask import Blueprint, abort, jsonify

from . import state
from .content.items import ITEMS
from .content.loadouts import LOADOUTS
from .sockets import snapshot_for

battle_bp = Blueprint("battle", __name__, url_prefix="/battle")


@battle_bp.route("/items")
def items():
    return jsonify({"items": {str(item_id): item for item_id, item in ITEMS.items()}})


@battle_bp.route("/loadouts")
def loadouts():
    return jsonify({"loadouts": LOADOUTS})


@battle_bp.route("/rooms/<room_id>")
def room_snapshot(room_id):
    room = state.battle_rooms.get(room_id)
    if room is None:
        abort(404)
    return jsonify(snapshot_for(room.battle, None))
