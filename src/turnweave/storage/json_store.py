"""JSON file persistence for turnweave.

Provides storage for:
- The unit roster
- World maps and the gate registry
- The diary of executed turns
- The action catalog (read only)

Every write goes to a temporary file in the same directory that then
replaces the target, so a crash never leaves a half-written file behind.
Missing files load as empty; unreadable ones raise ``PersistenceError``.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from turnweave.core.config import StorageSettings, get_settings
from turnweave.core.exceptions import PersistenceError, ValidationError
from turnweave.core.logging import get_logger
from turnweave.models.actions import ActionCatalog, DiaryEntry
from turnweave.models.units import Unit
from turnweave.models.world import Gate, World


logger = get_logger(__name__)

_units_adapter = TypeAdapter(list[Unit])
_gates_adapter = TypeAdapter(list[Gate])
_diary_adapter = TypeAdapter(list[DiaryEntry])


class JsonStore:
    """Reads and writes simulation state as JSON documents.

    Attributes:
        base_dir: Directory that holds every file.
    """

    def __init__(
        self,
        base_dir: str | Path | None = None,
        *,
        settings: StorageSettings | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            base_dir: Data directory. Defaults to the configured ``data_dir``.
            settings: File names; defaults to the application settings.
        """
        self._settings = settings or get_settings().storage
        self.base_dir = Path(base_dir) if base_dir is not None else self._settings.data_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def units_path(self) -> Path:
        return self.base_dir / self._settings.units_file

    @property
    def world_path(self) -> Path:
        return self.base_dir / self._settings.world_file

    @property
    def gates_path(self) -> Path:
        return self.base_dir / self._settings.gates_file

    @property
    def diary_path(self) -> Path:
        return self.base_dir / self._settings.diary_file

    @property
    def actions_path(self) -> Path:
        return self.base_dir / self._settings.actions_file

    # =========================================================================
    # Units
    # =========================================================================

    def save_units(self, units: Iterable[Unit]) -> None:
        units = list(units)
        self._write(self.units_path, _units_adapter.dump_python(units, mode="json"))
        logger.debug("Units saved", path=str(self.units_path), count=len(units))

    def load_units(self) -> list[Unit]:
        """Load the persisted roster; an absent file means no units."""
        return self._load(self.units_path, _units_adapter, default=[])

    # =========================================================================
    # World
    # =========================================================================

    def save_world(self, world: World) -> None:
        self._write(self.world_path, world.model_dump(mode="json"))
        logger.debug("World saved", path=str(self.world_path), maps=len(world.maps))

    def load_world(self) -> World | None:
        """Load the persisted world, or None when none was saved."""
        return self._load(self.world_path, TypeAdapter(World), default=None)

    def save_gates(self, gates: Iterable[Gate]) -> None:
        """Persist gates as added.

        Callers pass ``GateRegistry.forward_gates()`` so reverse records
        are regenerated on load rather than stored twice.
        """
        self._write(self.gates_path, _gates_adapter.dump_python(list(gates), mode="json"))

    def load_gates(self) -> list[Gate]:
        return self._load(self.gates_path, _gates_adapter, default=[])

    # =========================================================================
    # Diary
    # =========================================================================

    def append_diary(self, entry: DiaryEntry) -> None:
        """Add one entry to the end of the persisted diary."""
        entries = self.load_diary()
        entries.append(entry)
        self.save_diary(entries)

    def save_diary(self, entries: Iterable[DiaryEntry]) -> None:
        entries = list(entries)
        self._write(self.diary_path, _diary_adapter.dump_python(entries, mode="json"))
        logger.debug("Diary saved", path=str(self.diary_path), entries=len(entries))

    def load_diary(self) -> list[DiaryEntry]:
        return self._load(self.diary_path, _diary_adapter, default=[])

    def get_last_turn_number(self) -> int:
        """Highest turn recorded in the diary, 0 when the diary is empty."""
        entries = self.load_diary()
        return max((entry.turn for entry in entries), default=0)

    # =========================================================================
    # Catalog
    # =========================================================================

    def load_action_catalog(self) -> ActionCatalog | None:
        """Load ``actions.json``, or None when the file does not exist.

        Raises:
            PersistenceError: If the file cannot be read or parsed.
            ValidationError: If the document is not a valid catalog.
        """
        data = self._read(self.actions_path)
        if data is None:
            return None
        try:
            return ActionCatalog.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"Invalid action catalog in {self.actions_path}",
                field_name="actions",
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    # =========================================================================
    # File helpers
    # =========================================================================

    def _load(self, path: Path, adapter: TypeAdapter[Any], *, default: Any) -> Any:
        data = self._read(path)
        if data is None:
            return default
        try:
            return adapter.validate_python(data)
        except PydanticValidationError as exc:
            raise PersistenceError(
                f"Malformed data in {path.name}",
                path=str(path),
                details={"errors": exc.errors(include_url=False)},
            ) from exc

    @staticmethod
    def _read(path: Path) -> Any:
        if not path.exists():
            return None
        try:
            with path.open(encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {path.name}: {exc}", path=str(path)) from exc

    @staticmethod
    def _write(path: Path, data: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write {path.name}: {exc}", path=str(path)) from exc


__all__ = [
    "JsonStore",
]
