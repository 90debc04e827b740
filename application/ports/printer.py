# application/ports/printer.py
from __future__ import annotations

from abc import ABC, abstractmethod


class PrinterPort(ABC):
    @abstractmethod
    def info(self, line: str) -> None:
        ...

    @abstractmethod
    def response(self, text: str) -> None:
        ...

    @abstractmethod
    def extracted(self, text: str) -> None:
        ...

    @abstractmethod
    def to_clipboard(self, text: str) -> None:
        ...


class NullPrinter(PrinterPort):
    def info(self, line: str) -> None:
        return None

    def response(self, text: str) -> None:
        return None

    def extracted(self, text: str) -> None:
        return None

    def to_clipboard(self, text: str) -> None:
        return None
