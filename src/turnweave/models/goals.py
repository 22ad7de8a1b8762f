"""Goal catalog models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from turnweave.models.enums import CompletionType, GoalScope


class GoalCompletion(BaseModel):
    """When a goal counts as satisfied.

    ``stat_at_least`` uses ``stat`` and ``value``; ``condition_met`` uses
    ``condition``.
    """

    type: CompletionType = CompletionType.NONE
    stat: str | None = None
    value: float | None = None
    condition: str | None = None


class GoalDefinition(BaseModel):
    """A static behavioral objective mapped to candidate action types."""

    id: str = Field(min_length=1)
    label: str = ""
    scope: GoalScope = GoalScope.UNIT
    completion: GoalCompletion = Field(default_factory=GoalCompletion)
    candidate_actions: list[str] = Field(default_factory=list)


__all__ = [
    "GoalCompletion",
    "GoalDefinition",
]
