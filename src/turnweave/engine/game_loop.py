"""Simulation run loop.

The loop owns every live collaborator (roster, world, gates, scheduler,
storyteller) and drives them one turn at a time. State is written to
the JSON store only when the loop stops.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from turnweave.core.config import Settings, get_settings
from turnweave.core.exceptions import InvalidGameStateError
from turnweave.core.logging import get_logger
from turnweave.engine.catalog import default_action_catalog
from turnweave.engine.gates import GateRegistry
from turnweave.engine.roster import UnitRoster
from turnweave.engine.storyteller import StoryTeller
from turnweave.engine.turn_manager import SchedulerState, TurnOrderBuilder, TurnScheduler
from turnweave.models.actions import ActionCatalog, DiaryEntry, ExecutedAction
from turnweave.models.enums import LoopState
from turnweave.models.goals import GoalDefinition
from turnweave.models.units import Unit
from turnweave.models.world import World
from turnweave.storage.json_store import JsonStore


logger = get_logger(__name__)


class GameEvent:
    """A loop lifecycle notification.

    Attributes:
        event_type: One of ``start``, ``turn_start``, ``turn_end``, ``stop``.
        data: Event payload.
    """

    def __init__(self, event_type: str, data: dict[str, Any] | None = None) -> None:
        self.event_type = event_type
        self.data = data or {}

    def __repr__(self) -> str:
        return f"GameEvent(type={self.event_type!r}, data={self.data!r})"


@dataclass
class LoopSnapshot:
    """Read-only copy of the simulation for renderers."""

    state: LoopState
    turn: int
    round: int
    turn_order: list[str]
    units: list[Unit] = field(default_factory=list)
    world: World | None = None
    diary: list[DiaryEntry] = field(default_factory=list)


class GameLoop:
    """Drives the simulation turn by turn.

    Attributes:
        roster: Live units.
        world: Maps.
        gates: Gate registry.
        scheduler: Round/turn state machine.
        turn_order: Persistent acting order.
        storyteller: Per-turn orchestration.
        store: Persistence used on stop; None disables saving.
    """

    def __init__(
        self,
        world: World | None = None,
        *,
        units: Iterable[Unit] | None = None,
        gates: GateRegistry | None = None,
        catalog: ActionCatalog | None = None,
        goals: Sequence[GoalDefinition] | None = None,
        store: JsonStore | None = None,
        scheduler_state: SchedulerState | None = None,
        diary: Sequence[DiaryEntry] | None = None,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        simulation = self.settings.simulation
        self._rng = rng or random.Random(simulation.random_seed)

        self.world = world or World()
        self.roster = UnitRoster(units)
        self.gates = gates or GateRegistry()
        self.store = store
        self.scheduler = TurnScheduler(scheduler_state)
        self.turn_order = TurnOrderBuilder(self._rng)
        self.storyteller = StoryTeller(
            self.roster,
            self.world,
            catalog=catalog or default_action_catalog(),
            goals=goals,
            gates=self.gates,
            scheduler=self.scheduler,
            settings=simulation,
            rng=self._rng,
        )
        if diary:
            self.storyteller.load_diary(diary)

        self._state = LoopState.IDLE
        self._session_turns = 0
        self._stop_requested = False
        self._in_turn = False
        self._in_run = False
        self._event_handlers: dict[str, list[Any]] = {}

        logger.info("GameLoop initialized", units=len(self.roster), maps=len(self.world.maps))

    @classmethod
    def from_store(
        cls,
        store: JsonStore,
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> GameLoop:
        """Resume from persisted state.

        The global turn continues from the last turn in the diary. With
        ``clear_units_on_start`` the persisted roster is discarded.
        """
        settings = settings or get_settings()
        units = [] if settings.simulation.clear_units_on_start else store.load_units()
        last_turn = store.get_last_turn_number()
        logger.info("Resuming simulation", last_turn=last_turn, units=len(units))
        return cls(
            store.load_world(),
            units=units,
            gates=GateRegistry(store.load_gates()),
            catalog=store.load_action_catalog(),
            store=store,
            scheduler_state=SchedulerState(current_turn=last_turn),
            diary=store.load_diary(),
            settings=settings,
            rng=rng,
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def session_turns(self) -> int:
        """Turns processed since the last ``run`` started."""
        return self._session_turns

    def add_unit(self, unit: Unit) -> None:
        """Add a unit; it joins the turn order when the next round starts."""
        self.roster.add(unit)
        logger.info("Unit added", unit=unit.name, unit_id=unit.id)

    def snapshot(self) -> LoopSnapshot:
        """Deep copies of the current simulation state."""
        return LoopSnapshot(
            state=self._state,
            turn=self.scheduler.get_current_turn(),
            round=self.scheduler.get_current_round(),
            turn_order=self.scheduler.get_turn_order(),
            units=self.roster.snapshot(),
            world=self.world.model_copy(deep=True),
            diary=[entry.model_copy(deep=True) for entry in self.storyteller.get_diary()],
        )

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def process_turn(self) -> ExecutedAction | None:
        """Play the next actor's turn, starting a new round if needed.

        Returns:
            The executed action, or None when nobody could act.

        Raises:
            TurnManagementError: If the scheduler rejects the action.
        """
        actor = self._next_actor()
        if actor is None:
            logger.warning("No living units to schedule")
            return None

        turn = self.scheduler.get_current_turn() + 1
        self._in_turn = True
        try:
            self._emit_event(GameEvent("turn_start", {"turn": turn, "actor_id": actor.id}))
            executed = self.storyteller.generate_story_action(turn)
            if executed is not None:
                self.scheduler.process_action(executed.action)
            self.scheduler.end_turn()
            self._session_turns += 1
            self._emit_event(GameEvent("turn_end", {"turn": turn, "actor_id": actor.id}))
        finally:
            self._in_turn = False

        if self._state == LoopState.STOPPING and not self._in_run:
            self._shutdown()
        return executed

    def _next_actor(self) -> Unit | None:
        while True:
            if not self.scheduler.has_pending_turns():
                order = self.turn_order.build(self.roster.all())
                if not order:
                    return None
                self.scheduler.start_new_round(order)

            actor_id = self.scheduler.get_current_actor_id()
            unit = self.roster.get(actor_id) if actor_id is not None else None
            if unit is not None and unit.is_alive():
                return unit
            self.scheduler.skip_turn("actor is not alive")

    def run(self, max_turns: int | None = None) -> int:
        """Process turns until the session limit or a stop request.

        Args:
            max_turns: Overrides ``max_turns_per_session`` for this run.

        Returns:
            Number of turns processed.

        Raises:
            InvalidGameStateError: If the loop is already running.
        """
        if self._state in (LoopState.RUNNING, LoopState.STOPPING):
            raise InvalidGameStateError(
                f"Cannot start from {self._state} state",
                current_state=self._state.value,
                expected_states=[LoopState.IDLE.value, LoopState.STOPPED.value],
            )

        simulation = self.settings.simulation
        limit = max_turns
        if limit is None and not simulation.run_indefinitely:
            limit = simulation.max_turns_per_session

        self._state = LoopState.RUNNING
        self._stop_requested = False
        self._session_turns = 0
        self._emit_event(GameEvent("start", {"limit": limit}))
        logger.info("Game loop started", limit=limit, next_turn=self.scheduler.get_current_turn() + 1)

        self._in_run = True
        try:
            while not self._stop_requested and (limit is None or self._session_turns < limit):
                if not self.roster.alive():
                    logger.warning("No living units left, stopping")
                    break
                self.process_turn()
        except Exception:
            logger.exception("Error processing turn", turn=self.scheduler.get_current_turn() + 1)
            raise
        finally:
            self._in_run = False
            if self._state != LoopState.STOPPED:
                self._shutdown()
        return self._session_turns

    def stop(self) -> None:
        """Request a stop.

        Inside a turn the request is honored once the turn completes;
        otherwise the loop shuts down and persists immediately.
        """
        if self._state == LoopState.STOPPED:
            return
        self._stop_requested = True
        if self._in_turn:
            self._state = LoopState.STOPPING
            logger.info("Stop requested, finishing current turn")
            return
        self._shutdown()

    def _shutdown(self) -> None:
        self._state = LoopState.STOPPING
        self._emit_event(GameEvent("stop", {"session_turns": self._session_turns}))
        self.persist()
        self._state = LoopState.STOPPED
        logger.info("Game loop stopped", session_turns=self._session_turns)

    def persist(self) -> None:
        """Write units, diary, world and gates to the store, if any."""
        if self.store is None:
            return
        self.store.save_units(self.roster.all())
        self.store.save_diary(self.storyteller.get_diary())
        self.store.save_world(self.world)
        self.store.save_gates(self.gates.forward_gates())
        logger.info("Simulation state saved", path=str(self.store.base_dir))

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def on_event(self, event_type: str, handler: Any) -> None:
        """Register a handler for ``start``, ``turn_start``, ``turn_end`` or ``stop``."""
        self._event_handlers.setdefault(event_type, []).append(handler)

    def _emit_event(self, event: GameEvent) -> None:
        for handler in self._event_handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler error", event_type=event.event_type)


__all__ = [
    "GameEvent",
    "LoopSnapshot",
    "GameLoop",
]
