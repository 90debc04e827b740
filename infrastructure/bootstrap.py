# infrastructure/bootstrap.py
from __future__ import annotations

from typing import Optional

from application.ports.logger import LoggerPort
from application.ports.printer import PrinterPort
from application.ports.requests_client import RequestsHttpClient
from application.workbench import Workbench
from infrastructure.config.settings import Settings
from infrastructure.logging.composite_logger import CompositeLogger
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.log_setup import setup_console_logging
from infrastructure.logging.loguru_logger import LoguruLogger
from infrastructure.printing.console_printer import ConsolePrinter
from infrastructure.storage.sqlalchemy_storage import SqlAlchemyStorage


def build_logger(settings: Settings) -> LoggerPort:
    if settings.log_backend == "console":
        return ConsoleLogger()
    setup_console_logging(settings.log_level)
    if settings.log_backend == "both":
        return CompositeLogger([ConsoleLogger(), LoguruLogger()])
    return LoguruLogger()


def build_workbench(settings: Settings, printer: Optional[PrinterPort] = None) -> Workbench:
    return Workbench(
        storage=SqlAlchemyStorage.from_url(settings.db_url),
        http_client=RequestsHttpClient(timeout_sec=settings.timeout_sec),
        logger=build_logger(settings),
        printer=printer or ConsolePrinter(quiet=True, clip_command=settings.clip_command),
        continue_on_error=settings.continue_on_error,
        check_context_version=settings.check_context_version,
    )
