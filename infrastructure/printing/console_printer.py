# infrastructure/printing/console_printer.py
from __future__ import annotations

import json
import shlex
import subprocess
from typing import Optional

from application.ports.printer import PrinterPort

PREVIEW_LINES = 10


class ConsolePrinter(PrinterPort):
    """
    quiet: no informational lines
    grep:  raw response text (or the extracted values, one per line) on
           stdout for piping; otherwise a short pretty-printed preview of
           the response is shown as information
    clip_command: shell command receiving clipboard text on stdin (e.g. "pbcopy")
    """

    def __init__(self, quiet: bool = False, grep: bool = False, clip_command: Optional[str] = None):
        self._quiet = quiet
        self._grep = grep
        self._clip_command = clip_command

    def info(self, line: str) -> None:
        if not self._quiet:
            print(line)

    def response(self, text: str) -> None:
        if self._grep:
            print(text)
            return
        if self._quiet:
            return
        print("Received response: ")
        print("\n".join(self._pretty(text).split("\n")[:PREVIEW_LINES]))
        print("...")

    def extracted(self, text: str) -> None:
        # extracted values are already shown as info lines
        if self._grep:
            print(text)

    def to_clipboard(self, text: str) -> None:
        if not self._clip_command or not text:
            return
        try:
            subprocess.run(shlex.split(self._clip_command), input=text.encode("utf-8"), check=True)
        except (OSError, subprocess.CalledProcessError) as e:
            self.info(f"Could not copy to clipboard: {e}")

    def _pretty(self, text: str) -> str:
        try:
            return json.dumps(json.loads(text), indent=2, ensure_ascii=False)
        except ValueError:
            return text
