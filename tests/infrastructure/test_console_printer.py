from __future__ import annotations

import json
import subprocess

from infrastructure.printing.console_printer import ConsolePrinter


def test_info_printed_unless_quiet(capsys) -> None:
    ConsolePrinter().info("Status code: 200")
    ConsolePrinter(quiet=True).info("hidden")

    assert capsys.readouterr().out == "Status code: 200\n"


def test_response_preview_is_pretty_and_truncated(capsys) -> None:
    body = json.dumps({f"k{i}": i for i in range(20)})

    ConsolePrinter().response(body)

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Received response: "
    assert lines[1] == "{"
    assert lines[2] == '  "k0": 0,'
    assert len(lines) == 12
    assert lines[-1] == "..."


def test_grep_mode_prints_raw_text(capsys) -> None:
    ConsolePrinter(grep=True, quiet=True).response('{"a": 1}')
    assert capsys.readouterr().out == '{"a": 1}\n'


def test_clipboard_command_receives_text(monkeypatch) -> None:
    calls = []

    def fake_run(args, input, check):
        calls.append((args, input))
        return subprocess.CompletedProcess(args, 0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    ConsolePrinter(clip_command="xclip -selection clipboard").to_clipboard("abc123")

    assert calls == [(["xclip", "-selection", "clipboard"], b"abc123")]


def test_clipboard_failure_is_reported(monkeypatch, capsys) -> None:
    def fake_run(args, input, check):
        raise FileNotFoundError("no such command")

    monkeypatch.setattr(subprocess, "run", fake_run)

    ConsolePrinter(clip_command="pbcopy").to_clipboard("abc123")

    assert "Could not copy to clipboard" in capsys.readouterr().out


def test_clipboard_disabled_without_command(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(subprocess, "run", lambda *args, **kwargs: calls.append(args))

    ConsolePrinter().to_clipboard("abc123")

    assert calls == []


def test_extracted_text_only_printed_in_grep_mode(capsys) -> None:
    ConsolePrinter().extracted("abc123")
    assert capsys.readouterr().out == ""

    ConsolePrinter(grep=True, quiet=True).extracted("abc123\nAnn")
    assert capsys.readouterr().out == "abc123\nAnn\n"
