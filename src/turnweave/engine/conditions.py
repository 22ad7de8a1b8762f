"""Evaluation of simple comparison strings such as ``health <= 30``."""

from __future__ import annotations

import operator
from collections.abc import Callable


_OPERATORS: tuple[tuple[str, Callable[[float, float], bool]], ...] = (
    ("<=", operator.le),
    (">=", operator.ge),
    ("<", operator.lt),
    (">", operator.gt),
)


class ConditionParser:
    """Evaluates ``<name> <op> <threshold>`` conditions against a value.

    Two-character operators are tried first so ``<=`` is never read as ``<``.
    Unrecognized conditions evaluate to False.
    """

    @staticmethod
    def evaluate_condition(condition: str, value: float) -> bool:
        for symbol, check in _OPERATORS:
            if symbol not in condition:
                continue
            threshold_text = condition.split(symbol, 1)[1].strip()
            try:
                threshold = float(threshold_text)
            except ValueError:
                return False
            return check(value, threshold)
        return False


__all__ = [
    "ConditionParser",
]
