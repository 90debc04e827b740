from __future__ import annotations

from infrastructure.bootstrap import build_logger, build_workbench
from infrastructure.config.settings import Settings
from infrastructure.logging.composite_logger import CompositeLogger
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.loguru_logger import LoguruLogger


def test_build_logger_per_backend() -> None:
    assert isinstance(build_logger(Settings()), ConsoleLogger)
    assert isinstance(build_logger(Settings(log_backend="loguru", log_level="WARNING")), LoguruLogger)


def test_build_logger_both_fans_out_to_console_and_loguru() -> None:
    logger = build_logger(Settings(log_backend="both", log_level="WARNING"))

    assert isinstance(logger, CompositeLogger)
    assert [type(child) for child in logger.loggers] == [ConsoleLogger, LoguruLogger]


def test_build_workbench_on_sqlite() -> None:
    workbench = build_workbench(Settings(db_url="sqlite://"))

    workbench.create_project("shop", test_url="https://api.test")

    assert workbench.project_info("shop").actions == []
    assert workbench.current_context().version == 0


def test_build_workbench_passes_context_version_check() -> None:
    workbench = build_workbench(Settings(db_url="sqlite://", check_context_version=True))
    assert workbench._check_context_version is True
