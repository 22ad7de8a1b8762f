"""Integration tests for saving and resuming a simulation."""

from __future__ import annotations

import json
import random
from pathlib import Path

import pytest

from turnweave.core.config import Settings, SimulationSettings
from turnweave.engine.catalog import default_units
from turnweave.engine.game_loop import GameLoop
from turnweave.engine.gates import GateRegistry
from turnweave.models import Gate, Point, TileMap, Unit, World
from turnweave.storage import JsonStore


@pytest.fixture
def store(tmp_path: Path) -> JsonStore:
    return JsonStore(tmp_path / "save")


@pytest.fixture
def settings() -> Settings:
    return Settings(simulation=SimulationSettings(max_turns_per_session=3))


class TestSimulationPersistence:
    """State written on stop and read back on resume."""

    def test_stop_persists_everything(
        self,
        store: JsonStore,
        settings: Settings,
        world: World,
        warrior: Unit,
        archer: Unit,
    ) -> None:
        """Stopping writes units, world, gates and the diary."""
        world.add_map(TileMap(name="cave", width=4, height=4))
        gates = GateRegistry(
            [
                Gate(
                    name="door",
                    map_from="main",
                    position_from=Point(x=9, y=9),
                    map_to="cave",
                    position_to=Point(x=0, y=0),
                    bidirectional=True,
                )
            ]
        )
        loop = GameLoop(world, units=[warrior, archer], gates=gates, store=store, settings=settings, rng=random.Random(2))

        loop.run()

        assert [unit.id for unit in store.load_units()] == ["warrior", "archer"]
        assert len(store.load_diary()) == 3
        saved_world = store.load_world()
        assert saved_world is not None
        assert sorted(saved_world.maps) == ["cave", "main"]
        assert [gate.name for gate in store.load_gates()] == ["door"]
        assert json.loads(store.diary_path.read_text(encoding="utf-8"))[0]["turn"] == 1

    def test_nothing_written_before_stop(
        self,
        store: JsonStore,
        settings: Settings,
        world: World,
        warrior: Unit,
    ) -> None:
        """Single turns do not touch the disk."""
        loop = GameLoop(world, units=[warrior], store=store, settings=settings)

        loop.process_turn()

        assert not store.units_path.exists()
        assert not store.diary_path.exists()

    def test_resume_continues_turns(
        self,
        store: JsonStore,
        settings: Settings,
        world: World,
        warrior: Unit,
        archer: Unit,
    ) -> None:
        """A resumed loop picks up after the last diary turn."""
        first = GameLoop(world, units=[warrior, archer], store=store, settings=settings, rng=random.Random(2))
        first.run()
        moved_to = warrior.position

        resumed = GameLoop.from_store(store, settings=settings, rng=random.Random(2))

        assert resumed.scheduler.get_current_turn() == 3
        assert len(resumed.storyteller.get_diary()) == 3
        restored = resumed.roster.require("warrior")
        assert restored.position == moved_to

        executed = resumed.process_turn()

        assert executed is not None
        assert executed.turn == 4
        assert executed.round == 1

    def test_resume_with_cleared_units(self, store: JsonStore, world: World) -> None:
        """clear_units_on_start discards the saved roster."""
        store.save_units(default_units("main"))
        store.save_world(world)
        settings = Settings(simulation=SimulationSettings(clear_units_on_start=True))

        resumed = GameLoop.from_store(store, settings=settings)

        assert len(resumed.roster) == 0
        assert resumed.world.has_map("main")

    def test_resume_uses_saved_catalog(self, store: JsonStore, world: World, warrior: Unit) -> None:
        """actions.json replaces the built-in catalog."""
        store.actions_path.write_text(
            json.dumps(
                {
                    "default": [
                        {
                            "type": "pray",
                            "description": "{{unitName}} prays.",
                            "effects": [{"property": "faith", "value": 4}],
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )
        store.save_units([warrior])
        store.save_world(world)

        resumed = GameLoop.from_store(store, settings=Settings())
        executed = resumed.process_turn()

        assert executed is not None
        assert executed.action.type == "pray"
        assert executed.action.description == "Warrior prays."
        assert resumed.roster.require("warrior").get_property_value("faith") == 5
