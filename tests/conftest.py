"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the turnweave test suite.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

import pytest

from turnweave.core.config import SimulationSettings
from turnweave.engine.catalog import default_action_catalog
from turnweave.models.actions import ActionCatalog
from turnweave.models.units import Unit
from turnweave.models.world import TileMap, World


if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from turnweave.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every test from a temporary directory so default data dirs land there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "TURNWEAVE_DEBUG": "true",
        "TURNWEAVE_LOG_LEVEL": "DEBUG",
        "TURNWEAVE_SIM_MAX_TURNS_PER_SESSION": "25",
        "TURNWEAVE_SIM_COOLDOWN_PERIOD": "2",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def sim_settings() -> SimulationSettings:
    """Simulation settings with a fixed seed."""
    return SimulationSettings(random_seed=7)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random generator."""
    return random.Random(42)


# =============================================================================
# World Fixtures
# =============================================================================


@pytest.fixture
def open_map() -> TileMap:
    """A 10x10 map of plains."""
    return TileMap(name="main", width=10, height=10)


@pytest.fixture
def world(open_map: TileMap) -> World:
    """A world holding the open map."""
    world = World()
    world.add_map(open_map)
    return world


# =============================================================================
# Unit Fixtures
# =============================================================================


@pytest.fixture
def make_unit() -> Callable[..., Unit]:
    """Factory for units placed on the main map.

    Returns:
        A callable ``(name, x=0, y=0, map_id="main", **values) -> Unit``.
    """

    def _make(name: str, x: int = 0, y: int = 0, map_id: str | None = "main", **values: Any) -> Unit:
        defaults: dict[str, Any] = {
            "health": 100,
            "maxHealth": 100,
            "mana": 50,
            "maxMana": 50,
            "status": "alive",
            "movementRange": 3,
        }
        defaults.update(values)
        unit = Unit.from_values(name, kind=defaults.pop("kind", "warrior"), unit_id=name.lower(), **defaults)
        if map_id is not None:
            unit.set_position(map_id, x, y)
        return unit

    return _make


@pytest.fixture
def warrior(make_unit: Callable[..., Unit]) -> Unit:
    """A healthy vanguard warrior at (0, 0)."""
    return make_unit("Warrior", 0, 0, faction="vanguard", attack=20, defense=15, experience=10)


@pytest.fixture
def archer(make_unit: Callable[..., Unit]) -> Unit:
    """A ranger archer at (5, 0), hostile to the warrior."""
    return make_unit(
        "Archer",
        5,
        0,
        kind="archer",
        faction="rangers",
        health=70,
        maxHealth=70,
        mana=30,
        maxMana=30,
        attack=25,
        defense=10,
        experience=5,
    )


@pytest.fixture
def catalog() -> ActionCatalog:
    """The built-in action catalog."""
    return default_action_catalog()
