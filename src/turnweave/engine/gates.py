"""Registry of inter-map gates.

Adding a bidirectional gate stores two directional records: the gate
itself and a reverse record named ``<name>_reverse`` that is never
bidirectional. Duplicate adds and unknown removals are reported through
the boolean return value.
"""

from __future__ import annotations

from turnweave.core.constants import GATE_REVERSE_SUFFIX
from turnweave.core.logging import get_logger
from turnweave.models.world import Gate


logger = get_logger(__name__)


class GateRegistry:
    """Stores gates and answers lookups by source tile.

    Example:
        >>> registry = GateRegistry()
        >>> registry.add_gate(Gate(name="G1", map_from="A", position_from=Point(x=0, y=0),
        ...                        map_to="B", position_to=Point(x=9, y=9), bidirectional=True))
        True
        >>> registry.has_gate("B", 9, 9)
        True
    """

    def __init__(self, gates: list[Gate] | None = None) -> None:
        self._gates: list[Gate] = []
        for gate in gates or []:
            self.add_gate(gate)

    def add_gate(self, gate: Gate) -> bool:
        """Register a gate and, if bidirectional, its reverse record.

        Returns:
            False if a gate with the same name already exists.
        """
        if any(existing.name == gate.name for existing in self._gates):
            logger.warning("Duplicate gate rejected", gate=gate.name)
            return False

        self._gates.append(gate)
        if gate.bidirectional:
            self._gates.append(
                Gate(
                    name=gate.name + GATE_REVERSE_SUFFIX,
                    map_from=gate.map_to,
                    position_from=gate.position_to,
                    map_to=gate.map_from,
                    position_to=gate.position_from,
                    bidirectional=False,
                )
            )
        logger.debug(
            "Gate added",
            gate=gate.name,
            map_from=gate.map_from,
            map_to=gate.map_to,
            bidirectional=gate.bidirectional,
        )
        return True

    def remove_gate(self, name_prefix: str) -> bool:
        """Remove every gate whose name starts with ``name_prefix``.

        Returns:
            True if anything was removed.
        """
        remaining = [gate for gate in self._gates if not gate.name.startswith(name_prefix)]
        removed = len(self._gates) - len(remaining)
        self._gates = remaining
        if removed:
            logger.debug("Gates removed", prefix=name_prefix, count=removed)
        return removed > 0

    def get_destination(self, map_id: str, x: int, y: int) -> Gate | None:
        """Return the gate whose mouth is at the given tile, if any."""
        for gate in self._gates:
            if gate.map_from == map_id and gate.position_from.x == x and gate.position_from.y == y:
                return gate
        return None

    def has_gate(self, map_id: str, x: int, y: int) -> bool:
        return self.get_destination(map_id, x, y) is not None

    def get_gates_for_map(self, map_id: str) -> list[Gate]:
        return [gate for gate in self._gates if gate.map_from == map_id]

    def get_all_gates(self) -> list[Gate]:
        return list(self._gates)

    def forward_gates(self) -> list[Gate]:
        """Gates as originally added, without generated reverse records."""
        reverse_names = {gate.name + GATE_REVERSE_SUFFIX for gate in self._gates if gate.bidirectional}
        return [gate for gate in self._gates if gate.name not in reverse_names]

    def clear(self) -> None:
        self._gates = []

    def __len__(self) -> int:
        return len(self._gates)


__all__ = [
    "GateRegistry",
]
