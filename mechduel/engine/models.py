# mechduel/engine/models.py
import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from .errors import ActionError


class Slot(IntEnum):
    TORSO = 0
    LEGS = 1
    SIDE_WEAPON_1 = 2
    SIDE_WEAPON_2 = 3
    SIDE_WEAPON_3 = 4
    SIDE_WEAPON_4 = 5
    TOP_WEAPON_1 = 6
    TOP_WEAPON_2 = 7
    DRONE = 8
    CHARGE_ENGINE = 9
    TELEPORTER = 10
    GRAPPLING_HOOK = 11
    MODULE_1 = 12
    MODULE_2 = 13
    MODULE_3 = 14
    MODULE_4 = 15
    MODULE_5 = 16
    MODULE_6 = 17
    MODULE_7 = 18
    MODULE_8 = 19


WEAPON_SLOTS = (
    Slot.SIDE_WEAPON_1,
    Slot.SIDE_WEAPON_2,
    Slot.SIDE_WEAPON_3,
    Slot.SIDE_WEAPON_4,
    Slot.TOP_WEAPON_1,
    Slot.TOP_WEAPON_2,
)
UTIL_SLOTS = (Slot.DRONE, Slot.CHARGE_ENGINE, Slot.TELEPORTER, Slot.GRAPPLING_HOOK)
MODULE_SLOTS = tuple(slot for slot in Slot if slot >= Slot.MODULE_1)


class ItemType(str, Enum):
    TORSO = "TORSO"
    LEGS = "LEGS"
    SIDE_WEAPON = "SIDE_WEAPON"
    TOP_WEAPON = "TOP_WEAPON"
    DRONE = "DRONE"
    CHARGE_ENGINE = "CHARGE_ENGINE"
    TELEPORTER = "TELEPORTER"
    GRAPPLING_HOOK = "GRAPPLING_HOOK"
    MODULE = "MODULE"


class Element(str, Enum):
    PHYSICAL = "PHYSICAL"
    EXPLOSIVE = "EXPLOSIVE"
    ELECTRIC = "ELECTRIC"
    COMBINED = "COMBINED"


class ActionKind(str, Enum):
    COOLDOWN = "cooldown"
    WALK = "walk"
    STOMP = "stomp"
    USE_WEAPON = "use_weapon"
    TOGGLE_DRONE = "toggle_drone"
    CHARGE = "charge"
    TELEPORT = "teleport"
    HOOK = "hook"


class LogType(str, Enum):
    INFO = "info"
    ACTION = "action"
    ERROR = "error"


@dataclass(eq=False)
class CombatPart:
    id: int
    name: str
    type: ItemType
    element: Element
    slot: Slot
    stats: Dict[str, Any] = field(default_factory=dict)
    tags: Dict[str, bool] = field(default_factory=dict)
    times_used: int = 0

    @classmethod
    def from_item(cls, item_id: int, item: Dict[str, Any], slot: Slot) -> "CombatPart":
        return cls(
            id=int(item_id),
            name=item["name"],
            type=ItemType(item["type"]),
            element=Element(item.get("element", "PHYSICAL")),
            slot=slot,
            stats={key: (list(value) if isinstance(value, (list, tuple)) else value)
                   for key, value in (item.get("stats") or {}).items()},
            tags=dict(item.get("tags") or {}),
        )

    def stat(self, key: str, default: int = 0) -> Any:
        value = self.stats.get(key)
        return default if value is None else value

    def has_tag(self, tag: str) -> bool:
        return bool(self.tags.get(tag))


@dataclass
class Pools:
    health: int
    health_cap: int
    energy: int
    energy_cap: int
    energy_regen: int
    heat: int
    heat_cap: int
    heat_cooling: int
    phys_res: int = 0
    expl_res: int = 0
    elec_res: int = 0

    def resistance(self, prefix: str) -> int:
        return getattr(self, f"{prefix}_res")


@dataclass
class CombatantSetup:
    id: str
    name: str
    setup: List[int]                       # part ids in Slot order, 0 = empty
    ai: bool = False
    position: int = 0


@dataclass(eq=False)
class Combatant:
    id: str
    name: str
    slots: List[Optional[CombatPart]]      # indexed by Slot
    pools: Pools
    position: int
    ai: bool = False
    drone_active: bool = False
    parts_used_this_turn: List[CombatPart] = field(default_factory=list)

    def part(self, slot: Slot) -> Optional[CombatPart]:
        return self.slots[slot]

    @property
    def torso(self) -> CombatPart:
        return self.slots[Slot.TORSO]

    @property
    def legs(self) -> CombatPart:
        return self.slots[Slot.LEGS]

    @property
    def drone(self) -> Optional[CombatPart]:
        return self.slots[Slot.DRONE]

    @property
    def weapons(self) -> List[CombatPart]:
        return [self.slots[slot] for slot in WEAPON_SLOTS if self.slots[slot] is not None]

    @property
    def utils(self) -> List[CombatPart]:
        return [self.slots[slot] for slot in UTIL_SLOTS if self.slots[slot] is not None]

    @property
    def modules(self) -> List[CombatPart]:
        return [self.slots[slot] for slot in MODULE_SLOTS if self.slots[slot] is not None]


@dataclass
class Action:
    kind: ActionKind
    actor_id: str
    slot: Optional[Slot] = None
    position: Optional[int] = None
    damage_scale: Optional[float] = None
    drone_damage_scale: Optional[float] = None
    from_server: bool = False

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], actor_id: str) -> "Action":
        """Build from a client payload. Raises ValueError on malformed fields."""
        kind = ActionKind(str(payload.get("kind", "")).strip())
        slot = payload.get("slot")
        position = payload.get("position")
        return cls(
            kind=kind,
            actor_id=actor_id,
            slot=Slot(int(slot)) if slot is not None else None,
            position=int(position) if position is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value if isinstance(self.kind, ActionKind) else str(self.kind),
            "actor_id": self.actor_id,
            "slot": int(self.slot) if self.slot is not None else None,
            "position": self.position,
            "damage_scale": self.damage_scale,
            "drone_damage_scale": self.drone_damage_scale,
        }


@dataclass
class BattleLog:
    type: LogType
    message: str
    actor_id: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class Completion:
    winner_id: str
    quit: bool = False


@dataclass
class BattleEvent:
    """What one action (or autofire / forced cooldown) changed, for presentation layers."""
    kind: str
    actor_id: str
    positions_before: Dict[str, int]
    positions_after: Dict[str, int]
    damage: int = 0
    deltas: Dict[str, Dict[str, int]] = field(default_factory=dict)


@dataclass
class ActionResult:
    ok: bool
    error: Optional[ActionError] = None
    message: str = ""
    queued: bool = False
    event: Optional[BattleEvent] = None
