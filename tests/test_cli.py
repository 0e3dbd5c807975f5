"""Behavioral tests for the plains CLI."""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import pytest

import plains_cli.main as cli_main
from plains_cli.main import build_parser, main, normalize_tokens
from plains_core.log import configure_logging


@pytest.fixture(autouse=True)
def _record_logging_setup(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, bool]]:
    calls: list[dict[str, bool]] = []
    monkeypatch.setattr(cli_main, "configure_logging", lambda **kwargs: calls.append(kwargs))
    return calls


def _project(tmp_path: Path) -> Path:
    styles = tmp_path / "src" / "styles"
    styles.mkdir(parents=True)
    (styles / "site.scss").write_text("nav { ul { margin: 0; } }\n", encoding="utf-8")
    (tmp_path / "plains.toml").write_text(
        '[workers.sass_compiler]\nentry = "styles/*.scss"\n', encoding="utf-8"
    )
    return tmp_path


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["sass"])

    assert args.task == "sass"
    assert args.src is None
    assert not args.list
    assert not args.verbose


def test_key_value_tokens_are_normalized() -> None:
    tokens = normalize_tokens(["task=sass", "src=./web", "verbose=true", "silent=false", "--list"])

    assert tokens == ["sass", "--src", "./web", "--verbose", "--list"]
    assert normalize_tokens(["verbose", "clean"]) == ["--verbose", "clean"]


def test_cli_runs_the_requested_task(tmp_path: Path) -> None:
    project = _project(tmp_path)

    code = main(["sass", "--silent"], start_dir=project)

    assert code == 0
    css = (project / "dist" / "styles" / "site.css").read_text(encoding="utf-8")
    assert "nav ul" in css


def test_cli_accepts_key_value_tokens(tmp_path: Path) -> None:
    project = _project(tmp_path)
    (project / "web" / "styles").mkdir(parents=True)
    (project / "web" / "styles" / "app.scss").write_text("p { margin: 0; }\n", encoding="utf-8")

    code = main(["task=sass", "src=web", "dist=out", "silent"], start_dir=project)

    assert code == 0
    assert (project / "out" / "styles" / "app.css").is_file()
    assert not (project / "dist").exists()


def test_cli_unknown_task_reports_available_tasks(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    code = main(["missing-task"], start_dir=_project(tmp_path))

    assert code == 1
    assert "missing-task" in caplog.text
    assert "available tasks: clean, sass" in caplog.text


def test_cli_missing_source_root_fails(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    code = main(["sass"], start_dir=tmp_path)

    assert code == 1
    assert "root path does not exist" in caplog.text


def test_cli_lists_tasks(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--list", "--silent"], start_dir=_project(tmp_path))

    assert code == 0
    assert capsys.readouterr().out.split() == ["clean", "sass"]


def test_cli_prints_status(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--status", "--silent", "--environment", "development"], start_dir=_project(tmp_path))

    out = capsys.readouterr().out
    assert code == 0
    assert "environment: development" in out
    assert "sass_compiler" in out
    assert "1 entry" in out


def test_cli_without_task_prints_help(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["--silent"], start_dir=_project(tmp_path))

    assert code == 0
    assert "usage: plains" in capsys.readouterr().out


def test_cli_version_and_usage_errors(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    assert "plains v0.1.0" in capsys.readouterr().out
    assert main(["--verbose", "--silent"]) == 2


def test_console_module_entrypoint_uses_cli_main() -> None:
    module = importlib.import_module("plains_cli.__main__")
    cli_module = importlib.import_module("plains_cli.main")

    assert module.main is cli_module.main
    assert cli_module.main is main


def test_cli_forwards_verbosity_flags(
    tmp_path: Path, _record_logging_setup: list[dict[str, bool]]
) -> None:
    main(["--list", "--verbose"], start_dir=_project(tmp_path))

    assert _record_logging_setup == [{"verbose": True, "silent": False}]


@pytest.mark.parametrize(
    ("verbose", "silent", "expected"),
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.WARNING),
    ],
)
def test_configure_logging_levels(verbose: bool, silent: bool, expected: int) -> None:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        assert configure_logging(verbose=verbose, silent=silent) == expected
        assert root.level == expected
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
