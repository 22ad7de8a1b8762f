"""Storage module for turnweave persistence.

Provides JSON file storage for:
- Units, world maps and gates
- The diary of executed turns
- The action catalog
"""

from turnweave.storage.json_store import JsonStore

__all__ = [
    "JsonStore",
]
