"""CLI parser behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from pomgen.cli import _build_parser, main


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "app"])
    assert args.verbose is True
    assert args.command == "app"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["app", "src/shop", "--verbose"])
    assert args.verbose is True
    assert args.path == "src/shop"


def test_cli_generation_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["lib", "ui", "-o", "out", "--header", "// {FileName}", "--test-suffix", "e2e", "-p", "ui"]
    )
    assert args.command == "lib"
    assert args.output == "out"
    assert args.header == "// {FileName}"
    assert args.test_suffix == "e2e"
    assert args.project == "ui"


def test_cli_workspace_workers_default() -> None:
    parser = _build_parser()
    assert parser.parse_args(["workspace"]).workers == 1
    assert parser.parse_args(["workspace", "--workers", "4"]).workers == 4


def test_cli_artifact_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["artifacts", "--selectors", "--tests"])
    assert args.selectors is True
    assert args.tests is True
    assert args.page_objects is False
    assert args.all is False


def test_cli_requires_command() -> None:
    with pytest.raises(SystemExit):
        _build_parser().parse_args([])


def test_main_generates_application(repo_builder, tmp_path: Path, capsys) -> None:
    root = repo_builder.angular_app()

    main(["app", str(root), "-o", str(tmp_path / "out")])

    output = capsys.readouterr().out
    assert "10 file(s) generated, 0 warning(s), 0 error(s)" in output
    assert (tmp_path / "out/pages/login.page.ts").is_file()


def test_main_reports_failure(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["app", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "pomgen app failed:" in captured.err
    assert "Path not found:" in captured.err


def test_main_rejects_empty_artifact_selection(repo_builder, capsys) -> None:
    root = repo_builder.angular_app()

    with pytest.raises(SystemExit):
        main(["artifacts", str(root)])

    assert "No generation options specified" in capsys.readouterr().err


def test_main_writes_realtime_mock(tmp_path: Path, capsys) -> None:
    main(["signalr-mock", str(tmp_path)])

    assert (tmp_path / "signalr-mock.fixture.ts").is_file()
    assert "1 file(s) generated" in capsys.readouterr().out


def test_main_writes_log_file(repo_builder, tmp_path: Path) -> None:
    root = repo_builder.angular_app()
    log_file = tmp_path / "pomgen.log"

    main(["--log-file", str(log_file), "app", str(root), "-o", str(tmp_path / "out"), "--verbose"])

    content = log_file.read_text(encoding="utf-8")
    assert "INFO pomgen.orchestrator: Finished: 10 produced, 0 warned, 0 failed" in content
    assert "DEBUG pomgen.analyzers.template: Detected" in content
