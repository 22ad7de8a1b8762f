"""Tests for condition string evaluation."""

from __future__ import annotations

import pytest

from turnweave.engine.conditions import ConditionParser


class TestConditionParser:
    """Tests for ConditionParser."""

    @pytest.mark.parametrize(
        "condition,value,expected",
        [
            ("health <= 30", 30, True),
            ("health <= 30", 31, False),
            ("health >= 50", 50, True),
            ("health < 30", 30, False),
            ("health > 30", 31, True),
            ("mana<=10", 5, True),
        ],
    )
    def test_comparisons(self, condition: str, value: float, expected: bool) -> None:
        """Test each supported operator."""
        assert ConditionParser.evaluate_condition(condition, value) is expected

    @pytest.mark.parametrize("condition", ["health == 30", "health <= lots", ""])
    def test_unrecognized_is_false(self, condition: str) -> None:
        """Test unsupported conditions evaluate to False."""
        assert ConditionParser.evaluate_condition(condition, 30) is False
