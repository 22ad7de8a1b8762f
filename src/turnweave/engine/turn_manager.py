"""Round and turn scheduling.

A round fixes an ordered list of unit ids and hands the turn to each of
them in sequence. The scheduler is an explicit state machine: it is
either idle (a new round may start) or has a round active (exactly one
current actor). Its state is a pydantic model so it can be persisted and
restored between sessions.

Turn order is computed once by ``TurnOrderBuilder`` and kept across
rounds: newcomers are appended and the dead dropped without reshuffling
the survivors.
"""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Self

from pydantic import BaseModel, Field, model_validator

from turnweave.core.exceptions import TurnManagementError
from turnweave.core.logging import get_logger
from turnweave.models.actions import Action
from turnweave.models.enums import SchedulerPhase
from turnweave.models.units import Unit, is_number


logger = get_logger(__name__)


# =============================================================================
# State
# =============================================================================


class SchedulerState(BaseModel):
    """Serializable scheduler state.

    Attributes:
        phase: Whether a round is in progress.
        current_turn: Global count of completed turns.
        current_round: Number of the last round started.
        turn_order: Unit ids of the active round, in acting order.
        turn_index: Index of the current actor in ``turn_order``.
    """

    phase: SchedulerPhase = SchedulerPhase.IDLE
    current_turn: int = Field(default=0, ge=0)
    current_round: int = Field(default=0, ge=0)
    turn_order: list[str] = Field(default_factory=list)
    turn_index: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_active_round(self) -> Self:
        """An active round needs an actor left to play; otherwise it is idle."""
        if self.phase == SchedulerPhase.ROUND_ACTIVE and self.turn_index >= len(self.turn_order):
            self.phase = SchedulerPhase.IDLE
            self.turn_order = []
            self.turn_index = 0
        return self


@dataclass
class TurnRecord:
    """An action processed by the scheduler."""

    number: int
    round: int
    turn_in_round: int
    turn_order: list[str]
    actor_id: str | None
    actions: list[Action] = field(default_factory=list)


# =============================================================================
# Scheduler
# =============================================================================


class TurnScheduler:
    """Hands out turns one actor at a time.

    Example:
        >>> scheduler = TurnScheduler()
        >>> scheduler.start_new_round(["a", "b"])
        >>> scheduler.get_current_actor_id()
        'a'
        >>> scheduler.end_turn()
        >>> scheduler.get_current_actor_id()
        'b'
    """

    def __init__(self, state: SchedulerState | None = None) -> None:
        self._state = state.model_copy(deep=True) if state is not None else SchedulerState()
        self._history: list[TurnRecord] = []

    @property
    def state(self) -> SchedulerState:
        """A copy of the current state, suitable for persisting."""
        return self._state.model_copy(deep=True)

    @property
    def round_in_progress(self) -> bool:
        return self._state.phase == SchedulerPhase.ROUND_ACTIVE

    # -------------------------------------------------------------------------
    # Rounds
    # -------------------------------------------------------------------------

    def start_new_round(self, turn_order: list[str], round_number: int | None = None) -> None:
        """Start a round with a fixed acting order.

        Args:
            turn_order: Unit ids in acting order.
            round_number: Explicit round number; defaults to the next one.

        Raises:
            TurnManagementError: If the order is empty or a round is active.
        """
        if not turn_order:
            raise TurnManagementError("Cannot start a round with an empty turn order")
        if self.round_in_progress:
            raise TurnManagementError(
                "Cannot start a new round while one is in progress",
                round_number=self._state.current_round,
            )

        number = round_number if round_number is not None else self._state.current_round + 1
        self._state.phase = SchedulerPhase.ROUND_ACTIVE
        self._state.current_round = number
        self._state.turn_order = list(turn_order)
        self._state.turn_index = 0

        logger.info("Round started", round=number, turn_order=list(turn_order))

    def get_current_actor_id(self) -> str | None:
        """The unit whose turn it is, or None outside a round."""
        if not self.has_pending_turns():
            return None
        return self._state.turn_order[self._state.turn_index]

    def end_turn(self) -> None:
        """Complete the current turn and pass it to the next actor."""
        self._state.current_turn += 1
        if self.round_in_progress:
            self._advance()

    def skip_turn(self, reason: str = "") -> None:
        """Pass over the current actor without counting a global turn."""
        if not self.round_in_progress:
            return
        logger.info(
            "Turn skipped",
            actor_id=self.get_current_actor_id(),
            round=self._state.current_round,
            reason=reason,
        )
        self._advance()

    def _advance(self) -> None:
        self._state.turn_index += 1
        if self._state.turn_index >= len(self._state.turn_order):
            logger.debug("Round complete", round=self._state.current_round)
            self._state.phase = SchedulerPhase.IDLE
            self._state.turn_order = []
            self._state.turn_index = 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_current_round(self) -> int:
        return self._state.current_round

    def get_turn_order(self) -> list[str]:
        return list(self._state.turn_order)

    def get_turn_index_in_round(self) -> int:
        """Zero-based index of the current actor; 0 outside a round."""
        return self._state.turn_index if self.round_in_progress else 0

    def has_pending_turns(self) -> bool:
        return self.round_in_progress and self._state.turn_index < len(self._state.turn_order)

    def get_current_turn(self) -> int:
        return self._state.current_turn

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    def process_action(self, action: Action) -> TurnRecord:
        """Validate an action and record it against the current turn.

        Raises:
            TurnManagementError: If the action has no type or no player.
        """
        if not action.type or not action.player:
            raise TurnManagementError(
                "Invalid action: type and player are required",
                round_number=self._state.current_round,
            )

        record = TurnRecord(
            number=self._state.current_turn,
            round=self._state.current_round,
            turn_in_round=self.get_turn_index_in_round() + 1,
            turn_order=self.get_turn_order(),
            actor_id=action.player,
            actions=[action],
        )
        self._history.append(record)
        logger.debug(
            "Action processed",
            turn=record.number,
            round=record.round,
            action_type=action.type,
            player=action.player,
        )
        return record

    def get_history(self) -> list[TurnRecord]:
        return list(self._history)

    def reset(self) -> None:
        """Return to turn 0, round 0 with no round in progress."""
        self._state = SchedulerState()
        self._history = []


# =============================================================================
# Turn Order
# =============================================================================


class TurnOrderBuilder:
    """Computes a persistent acting order from living units.

    The first call sorts by descending ``experience``; ties are broken by
    a random key drawn from the seeded RNG, then by name. Later calls keep
    that order, drop units that died and append newcomers sorted the same
    way.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._order: list[str] = []

    @property
    def order(self) -> list[str]:
        return list(self._order)

    def build(self, units: Iterable[Unit]) -> list[str]:
        """Return the acting order for the next round.

        Args:
            units: Every unit in play; only living ones are scheduled.

        Returns:
            Unit ids in acting order.
        """
        living = [unit for unit in units if unit.is_alive()]
        living_ids = {unit.id for unit in living}

        kept = [unit_id for unit_id in self._order if unit_id in living_ids]
        known = set(kept)
        newcomers = [unit for unit in living if unit.id not in known]

        if newcomers:
            logger.debug("Units joined turn order", units=[unit.name for unit in newcomers])
        self._order = kept + [unit.id for unit in self._sorted(newcomers)]
        return list(self._order)

    def reset(self) -> None:
        self._order = []

    def _sorted(self, units: list[Unit]) -> list[Unit]:
        keyed = [(unit, self._rng.random()) for unit in units]
        keyed.sort(key=lambda pair: (-_experience(pair[0]), pair[1], pair[0].name))
        return [unit for unit, _ in keyed]


def _experience(unit: Unit) -> float:
    value = unit.get_property_value("experience")
    return value if is_number(value) else 0


__all__ = [
    "SchedulerState",
    "TurnRecord",
    "TurnScheduler",
    "TurnOrderBuilder",
]
