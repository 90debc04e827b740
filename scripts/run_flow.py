#!/usr/bin/env python3
"""
Run a stored flow (or, with --suite, a test suite) against the configured database

Usage:
  python scripts/run_flow.py <flow-name> [--continue-on-error]
  python scripts/run_flow.py <suite-name> --suite
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.exceptions import ReqflowError
from infrastructure.bootstrap import build_workbench
from infrastructure.config.settings import load_settings
from infrastructure.printing.console_printer import ConsolePrinter


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a stored flow or test suite")
    parser.add_argument("name", type=str, help="flow name (suite name with --suite)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--suite", action="store_true", help="run a test suite instead of a flow")
    mode.add_argument("--continue-on-error", action="store_true", help="skip failed steps instead of aborting")
    return parser


def _run_suite(workbench, name: str) -> bool:
    report = workbench.run_test_suite(name)
    for result in report.passed:
        print(f"PASS {result.flow_name}")
    for result in report.failed:
        print(f"FAIL {result.flow_name}: {result.reason}")
    return report.ok


def _run_flow(workbench, name: str, continue_on_error: bool) -> bool:
    report = workbench.run_flow(name, continue_on_error=True if continue_on_error else None)
    print(f"Flow {report.flow_name}: {report.state.value}")
    if report.abort_reason:
        print(f"  {report.abort_reason}")
    return report.ok


def main() -> None:
    args = _build_parser().parse_args(sys.argv[1:])

    try:
        settings = load_settings()
        workbench = build_workbench(settings, printer=ConsolePrinter(clip_command=settings.clip_command))
        if args.suite:
            ok = _run_suite(workbench, args.name)
        else:
            ok = _run_flow(workbench, args.name, args.continue_on_error)
    except ReqflowError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
