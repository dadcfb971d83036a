# mechduel/engine/errors.py
from enum import Enum


class ActionError(str, Enum):
    WRONG_TURN_HOLDER = "wrong_turn_holder"
    NO_ACTION_POINTS = "no_action_points"
    BATTLE_ALREADY_COMPLETE = "battle_already_complete"
    UNAUTHORIZED_ACTION = "unauthorized_action"
    UNKNOWN_ACTION = "unknown_action"
    MISSING_TARGET = "missing_target"
    MISSING_EQUIPMENT = "missing_equipment"
    INVALID_ACTION = "invalid_action"


class BattleError(Exception):
    """Raised by action handlers; the battle turns it into a rejected action."""
    kind = ActionError.INVALID_ACTION


class InvalidAction(BattleError):
    kind = ActionError.INVALID_ACTION


class UnknownAction(BattleError):
    kind = ActionError.UNKNOWN_ACTION


class MissingTarget(BattleError):
    kind = ActionError.MISSING_TARGET


class MissingEquipment(BattleError):
    kind = ActionError.MISSING_EQUIPMENT


class InvalidLoadout(ValueError):
    """A loadout the battle cannot be built from."""
