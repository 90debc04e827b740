# tests/fakes.py
"""Recording logger and printer shared by the tests."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from application.ports.logger import LoggerPort
from application.ports.printer import PrinterPort
from domain.project import Project
from infrastructure.storage.in_memory_storage import InMemoryStorage


class RecordingLogger(LoggerPort):
    def __init__(self, events: Optional[List[Tuple[str, str, Dict[str, Any]]]] = None, bound=None):
        self.events = events if events is not None else []
        self.bound: Dict[str, Any] = dict(bound or {})

    def bind(self, **fields: Any) -> "RecordingLogger":
        return RecordingLogger(self.events, {**self.bound, **fields})

    def debug(self, event: str, **fields: Any) -> None:
        self.events.append(("debug", event, {**self.bound, **fields}))

    def info(self, event: str, **fields: Any) -> None:
        self.events.append(("info", event, {**self.bound, **fields}))

    def warning(self, event: str, **fields: Any) -> None:
        self.events.append(("warning", event, {**self.bound, **fields}))

    def error(self, event: str, **fields: Any) -> None:
        self.events.append(("error", event, {**self.bound, **fields}))

    def names(self) -> List[str]:
        return [event for _, event, _ in self.events]

    def find(self, name: str) -> List[Dict[str, Any]]:
        return [fields for _, event, fields in self.events if event == name]


class RecordingPrinter(PrinterPort):
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.responses: List[str] = []
        self.extracted_text: List[str] = []
        self.clipboard: List[str] = []

    def info(self, line: str) -> None:
        self.lines.append(line)

    def response(self, text: str) -> None:
        self.responses.append(text)

    def extracted(self, text: str) -> None:
        self.extracted_text.append(text)

    def to_clipboard(self, text: str) -> None:
        self.clipboard.append(text)


def seeded_storage(*actions, storage=None):
    """Storage (InMemoryStorage by default) holding project "shop" and the given actions."""
    storage = storage if storage is not None else InMemoryStorage()
    storage.put_project(
        Project(name="shop", test_url="https://api.test", prod_url="https://api.prod", conf={"tenant": "acme"})
    )
    for action in actions:
        storage.upsert_action(action)
    return storage
