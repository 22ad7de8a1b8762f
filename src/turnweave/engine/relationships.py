"""Ally/neutral/hostile classification between units.

Pure functions: an explicit per-actor ``relationships`` mapping wins,
then identity, then faction comparison. A missing or blank faction is
the neutral faction.
"""

from __future__ import annotations

from typing import Any

from turnweave.core.constants import DEFAULT_FACTION
from turnweave.models.enums import Relationship
from turnweave.models.units import Unit


def get_faction(unit: Unit | None) -> str:
    if unit is None:
        return DEFAULT_FACTION
    return unit.faction


def classify_factions(
    actor_faction: str | None,
    target_faction: str | None,
    override: Relationship | str | None = None,
) -> Relationship:
    """Classify two factions.

    Args:
        actor_faction: Faction of the acting unit.
        target_faction: Faction of the other unit.
        override: Explicit relationship that wins over inference.

    Returns:
        The relationship of the actor toward the target.
    """
    if override is not None:
        return Relationship(override)
    actor_faction = (actor_faction or "").strip() or DEFAULT_FACTION
    target_faction = (target_faction or "").strip() or DEFAULT_FACTION
    if DEFAULT_FACTION in (actor_faction, target_faction):
        return Relationship.NEUTRAL
    if actor_faction == target_faction:
        return Relationship.ALLY
    return Relationship.HOSTILE


def _explicit_relationship(actor: Unit, target: Unit) -> Relationship | None:
    mapping: Any = actor.get_property_value("relationships")
    if not isinstance(mapping, dict):
        return None
    value = mapping.get(target.id)
    if value in tuple(Relationship):
        return Relationship(value)
    return None


def get_relationship(actor: Unit | None, target: Unit | None) -> Relationship:
    """Relationship of ``actor`` toward ``target``.

    Missing units are neutral and a unit is always its own ally.
    """
    if actor is None or target is None:
        return Relationship.NEUTRAL
    if actor.id == target.id:
        return Relationship.ALLY
    return classify_factions(
        get_faction(actor),
        get_faction(target),
        _explicit_relationship(actor, target),
    )


def is_ally(actor: Unit | None, target: Unit | None) -> bool:
    return get_relationship(actor, target) == Relationship.ALLY


def is_hostile(actor: Unit | None, target: Unit | None) -> bool:
    return get_relationship(actor, target) == Relationship.HOSTILE


def is_neutral(actor: Unit | None, target: Unit | None) -> bool:
    return get_relationship(actor, target) == Relationship.NEUTRAL


__all__ = [
    "get_faction",
    "classify_factions",
    "get_relationship",
    "is_ally",
    "is_hostile",
    "is_neutral",
]
