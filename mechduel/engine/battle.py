# mechduel/engine/battle.py
import random
from collections import deque
from dataclasses import asdict
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional

from . import effects, queries
from .actions import DAMAGE_KINDS, HANDLERS
from .ai import think
from .dice import damage_scale
from .errors import ActionError, BattleError, InvalidLoadout, UnknownAction
from .models import (
    Action,
    ActionKind,
    ActionResult,
    BattleEvent,
    BattleLog,
    Combatant,
    CombatantSetup,
    CombatPart,
    Completion,
    LogType,
    Pools,
    Slot,
)
from .queries import CantFireReason
from .rules import damage_for_part, direction, in_arena, summarize_stats
from ..content.balance import DEFAULTS
from ..content.items import get_item
from ..logger import get_logger

log = get_logger(__name__)


def build_combatant(setup: CombatantSetup, catalog: Optional[Dict[int, Dict[str, Any]]] = None) -> Combatant:
    """
    Turns a loadout (part ids in Slot order) into a live Combatant.
    Raises InvalidLoadout when torso or legs are missing or an id is unknown.
    """
    ids = list(setup.setup) + [0] * (len(Slot) - len(setup.setup))
    slots: List[Optional[CombatPart]] = []
    for slot in Slot:
        item_id = ids[slot]
        item = get_item(item_id, catalog)
        if item_id and item is None:
            raise InvalidLoadout(f"No item with id ({item_id}) in the current pack.")
        slots.append(CombatPart.from_item(item_id, item, slot) if item else None)

    if slots[Slot.TORSO] is None or slots[Slot.LEGS] is None:
        raise InvalidLoadout("Torso and legs are necessary to battle")

    if not in_arena(setup.position):
        raise InvalidLoadout(f"Invalid starting position {setup.position}")

    summary = summarize_stats(part.stats for part in slots if part is not None)
    pools = Pools(
        health=summary["health"],
        health_cap=summary["health"],
        energy=summary["energy_cap"],
        energy_cap=summary["energy_cap"],
        energy_regen=summary["energy_regen"],
        heat=0,
        heat_cap=summary["heat_cap"],
        heat_cooling=max(1, summary["heat_cooling"]),
        phys_res=summary["phys_res"],
        expl_res=summary["expl_res"],
        elec_res=summary["elec_res"],
    )

    return Combatant(
        id=setup.id,
        name=setup.name,
        slots=slots,
        pools=pools,
        position=setup.position,
        ai=setup.ai,
    )


class Battle:
    """
    Turn/action-point state machine for one match between two combatants.

    All mutation goes through submit_action (or quit). Actions submitted while
    another one is being processed, including the AI's own follow-ups, are
    queued and drained in submission order before the outer call returns.
    """

    def __init__(
        self,
        p1: CombatantSetup,
        p2: CombatantSetup,
        starter_id: str,
        online: bool = False,
        on_update: Optional[Callable[["Battle"], None]] = None,
        catalog: Optional[Dict[int, Dict[str, Any]]] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ):
        if p1.id == p2.id:
            raise ValueError(f"Combatants need distinct ids, got {p1.id!r} twice")
        if p1.position == p2.position:
            raise ValueError(f"Combatants can't share position {p1.position}")
        if starter_id not in (p1.id, p2.id):
            raise ValueError(f'No player in battle with ID "{starter_id}"')

        self.p1 = build_combatant(p1, catalog)
        self.p2 = build_combatant(p2, catalog)

        self.attacker = self.p1 if self.p1.id == starter_id else self.p2
        self.defender = self.p2 if self.attacker is self.p1 else self.p1

        self.action_points = DEFAULTS["starter_action_points"]
        self.online = online
        self.on_update = on_update
        self.rng = rng if rng is not None else random.Random(seed)

        self.completion: Optional[Completion] = None
        self.logs: List[BattleLog] = []
        self.events: List[BattleEvent] = []

        self._processing = False
        self._queue: Deque[Action] = deque()

        self.push_log("Battle started!")
        log.info("Battle created: %s vs %s, %s starts", self.p1.name, self.p2.name, self.attacker.name)

    # Public protocol

    def start(self) -> None:
        """Lets an AI starter take its first turn."""
        if self._processing:
            return
        self._processing = True
        try:
            self._on_idle()
        finally:
            self._processing = False
        self._drain()

    def submit_action(self, action: Action) -> ActionResult:
        if self._processing:
            self._queue.append(action)
            return ActionResult(ok=True, queued=True)

        result = self._run(action)
        self._drain()
        return result

    def quit(self, player_id: str) -> ActionResult:
        player = self.get_player(player_id)
        if self.completion is not None:
            return ActionResult(
                ok=False,
                error=ActionError.BATTLE_ALREADY_COMPLETE,
                message=f"{player.name} tried to quit, but the battle is already complete",
            )
        self.push_log(f"{player.name} quit the battle", LogType.INFO, player.id)
        self._set_completion(self.get_opponent(player_id), quit=True)
        return ActionResult(ok=True)

    def push_log(self, message: str, type: LogType = LogType.INFO, actor_id: Optional[str] = None) -> None:
        self.logs.append(BattleLog(type=type, message=message, actor_id=actor_id or self.attacker.id))
        self._notify()

    # Queries

    def get_player(self, player_id: str) -> Combatant:
        if player_id == self.p1.id:
            return self.p1
        if player_id == self.p2.id:
            return self.p2
        raise ValueError(f'No player found with id "{player_id}"')

    def get_opponent(self, player_id: str) -> Combatant:
        if player_id == self.p1.id:
            return self.p2
        if player_id == self.p2.id:
            return self.p1
        raise ValueError(f'No player found with id "{player_id}", therefore no opponent was found')

    def get_positional_direction(self, player_id: str) -> int:
        player = self.get_player(player_id)
        return direction(player.position, self.get_opponent(player_id).position)

    def get_walkable_positions(self) -> List[int]:
        return queries.walkable_positions(self)

    def get_teleportable_positions(self) -> List[int]:
        return queries.teleportable_positions(self)

    def get_positions_in_range(self, part: CombatPart, include_out_of_arena: bool = False,
                               player: Optional[Combatant] = None) -> List[int]:
        return queries.positions_in_range(self, player or self.attacker, part, include_out_of_arena)

    def why_cant_fire(self, part: CombatPart) -> List[CantFireReason]:
        return queries.why_cant_fire(self, part)

    def can_fire_weapon(self, part: CombatPart, ignored: Iterable[CantFireReason] = ()) -> bool:
        return queries.can_fire(self, part, ignored)

    def get_firable_weapons(self, ignored: Iterable[CantFireReason] = ()) -> List[CombatPart]:
        return queries.firable_weapons(self, ignored)

    def get_damage_for_part(self, part: CombatPart, scale: float) -> int:
        return damage_for_part(part, self.defender, scale)

    # Pipeline

    def _run(self, action: Action) -> ActionResult:
        self._processing = True
        try:
            rejection = self._check(action)
            if rejection is not None:
                return rejection
            return self._process(action)
        finally:
            self._processing = False

    def _drain(self) -> None:
        while self._queue:
            self._run(self._queue.popleft())

    def _reject(self, error: ActionError, message: str) -> ActionResult:
        self.push_log(message, LogType.ERROR)
        log.warning("Rejected action (%s): %s", error.value, message)
        return ActionResult(ok=False, error=error, message=message)

    def _check(self, action: Action) -> Optional[ActionResult]:
        if self.completion is not None:
            return self._reject(
                ActionError.BATTLE_ALREADY_COMPLETE,
                f"{self.attacker.name} tried to make an action, but the battle is already complete",
            )

        if action.actor_id != self.attacker.id:
            if action.actor_id == self.defender.id:
                message = f"{self.defender.name} tried to make an action, but it's their opponent's turn"
            else:
                message = f'No player in battle with ID "{action.actor_id}"'
            return self._reject(ActionError.WRONG_TURN_HOLDER, message)

        if self.action_points <= 0:
            return self._reject(
                ActionError.NO_ACTION_POINTS,
                f"{self.attacker.name} tried to make an action, but they're out of action points",
            )

        if self.online and not action.from_server:
            return self._reject(ActionError.UNAUTHORIZED_ACTION, "Online battle but action didn't come from server!")

        return None

    def _process(self, action: Action) -> ActionResult:
        try:
            event = self._execute(action)
        except BattleError as exc:
            result = self._reject(exc.kind, str(exc))
            if self.attacker.ai:
                self._queue.append(Action(kind=ActionKind.COOLDOWN, actor_id=self.attacker.id,
                                          from_server=self.online))
            return result

        # Quit from an observer mid-action already settled the battle
        if self.completion is not None:
            return ActionResult(ok=True, event=event)

        self.action_points -= 1
        self._notify()

        if self._has_dead_player():
            self._complete_by_knockout()
        elif self.action_points == 0:
            self._end_turn(action)
        else:
            self._on_idle()

        return ActionResult(ok=True, event=event)

    def _execute(self, action: Action) -> BattleEvent:
        try:
            kind = ActionKind(action.kind)
        except ValueError:
            raise UnknownAction(f'Unknown action "{action.kind}"')

        scale = 0.0
        if kind in DAMAGE_KINDS:
            scale = action.damage_scale if action.damage_scale is not None else damage_scale(self.rng)

        attacker = self.attacker
        before = self._capture()
        damage = HANDLERS[kind](self, attacker, action, scale)
        return self._record(kind.value, attacker.id, before, damage)

    def _end_turn(self, action: Action) -> None:
        attacker = self.attacker
        drone = attacker.drone

        if drone is not None and attacker.drone_active and self.can_fire_weapon(drone):
            scale = action.drone_damage_scale
            if scale is None:
                scale = damage_scale(self.rng)
            damage = self.get_damage_for_part(drone, scale)

            before = self._capture()
            effects.fire_drone(self, attacker, damage)
            self._record("drone", attacker.id, before, damage)

            if self._has_dead_player():
                self._complete_by_knockout()
            if self.completion is not None:
                return

        self._pass_turn()

    def _pass_turn(self) -> None:
        while True:
            self.action_points = 0

            self.attacker.parts_used_this_turn = []
            effects.regen(self.attacker)

            self.attacker, self.defender = self.defender, self.attacker

            if self.attacker.pools.heat > self.attacker.pools.heat_cap:
                before = self._capture()
                double = effects.force_cooldown(self, self.attacker)
                self._record("shutdown" if double else "forced_cooldown", self.attacker.id, before, 0)
                if self.completion is not None:
                    return
                if double:
                    continue
                self.action_points = DEFAULTS["forced_cooldown_action_points"]
            else:
                self.action_points = DEFAULTS["action_points"]
            break

        self._notify()
        self._on_idle()

    def _on_idle(self) -> None:
        if self.completion is not None or not self.attacker.ai or self.action_points <= 0:
            return

        actor_id = self.attacker.id
        try:
            action = think(self, actor_id, self.rng)
        except Exception as exc:  # a broken heuristic degrades to cooldown
            log.exception("AI caused an error")
            self.push_log(f"AI caused an error: {exc}", LogType.ERROR, actor_id)
            action = Action(kind=ActionKind.COOLDOWN, actor_id=actor_id)

        log.debug("AI %s chose %s", actor_id, action)
        action.from_server = self.online
        self.submit_action(action)

    # Completion

    def _has_dead_player(self) -> bool:
        return self.p1.pools.health <= 0 or self.p2.pools.health <= 0

    def _complete_by_knockout(self) -> None:
        p1_health, p2_health = self.p1.pools.health, self.p2.pools.health
        if p1_health == p2_health:
            # The turn holder loses a simultaneous knockout
            log.warning("Simultaneous knockout at %s health, awarding %s", p1_health, self.defender.name)
            winner = self.defender
        else:
            winner = self.p1 if p1_health > p2_health else self.p2
        self._set_completion(winner)

    def _set_completion(self, winner: Combatant, quit: bool = False) -> None:
        self.completion = Completion(winner_id=winner.id, quit=quit)
        self.action_points = 0
        self._queue.clear()
        self.push_log(f"{winner.name} won!")
        log.info("Battle complete: %s won%s", winner.name, " by forfeit" if quit else "")

    # Events

    def _capture(self) -> Dict[str, Dict[str, int]]:
        return {c.id: {"position": c.position, **asdict(c.pools)} for c in (self.p1, self.p2)}

    def _record(self, kind: str, actor_id: str, before: Dict[str, Dict[str, int]], damage: int) -> BattleEvent:
        after = self._capture()
        deltas = {
            player_id: {
                key: after[player_id][key] - value
                for key, value in values.items()
                if key != "position" and after[player_id][key] != value
            }
            for player_id, values in before.items()
        }
        event = BattleEvent(
            kind=kind,
            actor_id=actor_id,
            positions_before={player_id: values["position"] for player_id, values in before.items()},
            positions_after={player_id: values["position"] for player_id, values in after.items()},
            damage=damage,
            deltas=deltas,
        )
        self.events.append(event)
        return event

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self)
