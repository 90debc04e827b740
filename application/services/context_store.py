# application/services/context_store.py
from __future__ import annotations

from typing import Dict, Optional

from application.ports.storage import StoragePort
from domain.context import Context
from domain.exceptions import ContextConflictError
from domain.string_map import ensure_string_map


class ContextStore:
    """
    The current context, persisted in a single storage slot.

    save() replaces the whole mapping. Callers that accumulate values load,
    mutate in memory and save once per execution boundary.
    """

    def __init__(self, storage: StoragePort):
        self._storage = storage

    def load(self) -> Dict[str, str]:
        return dict(self.load_current().values)

    def load_current(self) -> Context:
        return self._storage.get_context()

    def save(self, mapping: Dict[str, str], expected_version: Optional[int] = None) -> Context:
        values = ensure_string_map(mapping, "context")
        current = self._storage.get_context()
        if expected_version is not None and current.version != expected_version:
            raise ContextConflictError(expected_version, current.version)
        saved = Context(values=values, version=current.version + 1)
        self._storage.put_context(saved)
        return saved

    def clear(self) -> Context:
        return self.save({})
