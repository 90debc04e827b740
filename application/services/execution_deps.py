# application/services/execution_deps.py
from __future__ import annotations

from dataclasses import dataclass, field, replace

from application.ports.logger import LoggerPort
from application.ports.printer import NullPrinter, PrinterPort


@dataclass(frozen=True)
class ExecutionDeps:
    logger: LoggerPort
    printer: PrinterPort = field(default_factory=NullPrinter)

    def with_logger(self, logger: LoggerPort) -> "ExecutionDeps":
        return replace(self, logger=logger)
