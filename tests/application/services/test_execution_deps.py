# tests/application/services/test_execution_deps.py
import pytest

from application.ports.printer import NullPrinter
from application.services.execution_deps import ExecutionDeps
from fakes import RecordingLogger, RecordingPrinter


class TestExecutionDeps:
    def test_default_printer_is_null(self):
        deps = ExecutionDeps(logger=RecordingLogger())
        assert isinstance(deps.printer, NullPrinter)

    def test_with_logger_creates_new_deps(self):
        printer = RecordingPrinter()
        logger1 = RecordingLogger()
        deps1 = ExecutionDeps(logger=logger1, printer=printer)

        logger2 = logger1.bind(run_id="run-1")
        deps2 = deps1.with_logger(logger2)

        assert deps2 is not deps1
        assert deps2.logger is logger2
        assert deps2.printer is printer
        assert deps1.logger is logger1

    def test_bound_fields_reach_events(self):
        deps = ExecutionDeps(logger=RecordingLogger())
        deps = deps.with_logger(deps.logger.bind(flow="checkout"))

        deps.logger.info("flow.start", steps=2)

        assert deps.logger.find("flow.start") == [{"flow": "checkout", "steps": 2}]

    def test_execution_deps_frozen(self):
        deps = ExecutionDeps(logger=RecordingLogger())
        with pytest.raises(Exception):  # FrozenInstanceError
            deps.logger = RecordingLogger()
