"""Tests for round/turn scheduling and turn order."""

from __future__ import annotations

import random
from collections.abc import Callable

import pytest

from turnweave.core.exceptions import TurnManagementError
from turnweave.engine.turn_manager import SchedulerState, TurnOrderBuilder, TurnScheduler
from turnweave.models import Action, Unit
from turnweave.models.enums import SchedulerPhase


class TestSchedulerState:
    """Tests for SchedulerState."""

    def test_exhausted_round_restored_idle(self) -> None:
        """Test a persisted round with no actor left loads as idle."""
        state = SchedulerState(phase=SchedulerPhase.ROUND_ACTIVE, turn_order=["a"], turn_index=1, current_turn=4)

        assert state.phase == SchedulerPhase.IDLE
        assert state.turn_order == []
        assert state.current_turn == 4

    def test_negative_counters_rejected(self) -> None:
        with pytest.raises(ValueError):
            SchedulerState(current_turn=-1)


class TestTurnScheduler:
    """Tests for TurnScheduler."""

    def test_round_sequence(self) -> None:
        """Test actors take turns in order and the round ends idle."""
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a", "b"])

        assert scheduler.get_current_round() == 1
        assert scheduler.get_current_actor_id() == "a"
        scheduler.end_turn()
        assert scheduler.get_current_actor_id() == "b"
        assert scheduler.get_turn_index_in_round() == 1
        scheduler.end_turn()

        assert scheduler.get_current_actor_id() is None
        assert scheduler.round_in_progress is False
        assert scheduler.get_current_turn() == 2
        assert scheduler.get_turn_order() == []

    def test_start_with_empty_order(self) -> None:
        """Test an empty round is rejected."""
        with pytest.raises(TurnManagementError):
            TurnScheduler().start_new_round([])

    def test_start_while_active(self) -> None:
        """Test a second round cannot start mid-round."""
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a", "b"])

        with pytest.raises(TurnManagementError) as exc_info:
            scheduler.start_new_round(["c"])

        assert exc_info.value.details["round_number"] == 1
        assert scheduler.get_current_actor_id() == "a"

    def test_explicit_round_number(self) -> None:
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a"], round_number=7)
        assert scheduler.get_current_round() == 7

    def test_skip_turn_does_not_count(self) -> None:
        """Test skipping advances the actor but not the global turn."""
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a", "b"])

        scheduler.skip_turn("dead")

        assert scheduler.get_current_actor_id() == "b"
        assert scheduler.get_current_turn() == 0

    def test_end_turn_outside_round(self) -> None:
        """Test ending a turn with no round only counts the turn."""
        scheduler = TurnScheduler()
        scheduler.end_turn()
        assert scheduler.get_current_turn() == 1
        assert scheduler.round_in_progress is False

    def test_process_action_records_history(self) -> None:
        """Test processed actions carry round context."""
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a", "b"])
        scheduler.end_turn()

        record = scheduler.process_action(Action(type="rest", player="b"))

        assert record.number == 1
        assert record.round == 1
        assert record.turn_in_round == 2
        assert record.turn_order == ["a", "b"]
        assert scheduler.get_history() == [record]

    def test_process_action_requires_player(self) -> None:
        """Test actions without a player are rejected."""
        action = Action(type="rest")
        with pytest.raises(TurnManagementError):
            TurnScheduler().process_action(action)

    def test_state_is_a_copy(self) -> None:
        """Test the exposed state cannot mutate the scheduler."""
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a"])

        state = scheduler.state
        state.turn_order.append("zzz")

        assert scheduler.get_turn_order() == ["a"]

    def test_restore_from_state(self) -> None:
        """Test resuming mid-round from persisted state."""
        scheduler = TurnScheduler(
            SchedulerState(
                phase=SchedulerPhase.ROUND_ACTIVE,
                current_turn=5,
                current_round=2,
                turn_order=["a", "b"],
                turn_index=1,
            )
        )

        assert scheduler.get_current_actor_id() == "b"
        assert scheduler.get_current_turn() == 5

    def test_reset(self) -> None:
        scheduler = TurnScheduler()
        scheduler.start_new_round(["a"])
        scheduler.process_action(Action(type="rest", player="a"))

        scheduler.reset()

        assert scheduler.get_current_round() == 0
        assert scheduler.get_history() == []
        assert scheduler.round_in_progress is False


class TestTurnOrderBuilder:
    """Tests for TurnOrderBuilder."""

    def test_experience_descending(self, warrior: Unit, archer: Unit) -> None:
        """Test more experienced units act first."""
        builder = TurnOrderBuilder(random.Random(1))
        assert builder.build([archer, warrior]) == ["warrior", "archer"]

    def test_ties_are_deterministic(self, make_unit: Callable[..., Unit]) -> None:
        """Test the same seed gives the same order for tied units."""
        units = [make_unit(name, experience=3) for name in ("A", "B", "C", "D")]

        first = TurnOrderBuilder(random.Random(9)).build(units)
        second = TurnOrderBuilder(random.Random(9)).build(units)

        assert first == second
        assert sorted(first) == ["a", "b", "c", "d"]

    def test_order_persists_across_rounds(self, make_unit: Callable[..., Unit]) -> None:
        """Test survivors keep their slots, the dead drop out and newcomers append."""
        veteran = make_unit("Veteran", experience=9)
        rookie = make_unit("Rookie", experience=1)
        builder = TurnOrderBuilder(random.Random(2))
        assert builder.build([veteran, rookie]) == ["veteran", "rookie"]

        rookie.set_property("experience", 50)
        champion = make_unit("Champion", experience=99)
        veteran.set_property("status", "dead")

        assert builder.build([veteran, rookie, champion]) == ["rookie", "champion"]

    def test_non_numeric_experience(self, make_unit: Callable[..., Unit]) -> None:
        """Test units without numeric experience sort last."""
        vague = make_unit("Vague", experience="lots")
        known = make_unit("Known", experience=1)

        assert TurnOrderBuilder().build([vague, known]) == ["known", "vague"]

    def test_reset(self, warrior: Unit) -> None:
        builder = TurnOrderBuilder()
        builder.build([warrior])
        builder.reset()
        assert builder.order == []
