"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from labspace import cli
from labspace.cli import _build_parser
from labspace.errors import AnalysisError
from labspace.models import ServiceEntry, TechStackEntry
from tests._fixtures.listing_builder import make_profile


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze", "octo/demo"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.reference == "octo/demo"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "octo/demo", "--verbose"])
    assert args.verbose is True
    assert args.command == "generate"


def test_cli_generate_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "octo/demo"])
    assert args.output_dir == Path(".")
    assert args.zip is False


def test_cli_serve_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve", "--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


class _StubOrchestrator:
    def __init__(self, *, error: Exception | None = None) -> None:
        self.error = error

    def analyze(self, reference: str):
        if self.error is not None:
            raise self.error
        return make_profile(
            tech_stack=[TechStackEntry(name="Python", icon="🐍", version="3.9+")],
            services=[ServiceEntry(name="Redis", type="redis", port=6379)],
        )


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_analyze_json_prints_profile(
    isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "Orchestrator", lambda config: _StubOrchestrator())

    cli.main(["analyze", "octo/demo", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert payload["name"] == "demo"
    assert payload["ports"] == [6379]


def test_analyze_summary_lists_stack(
    isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "Orchestrator", lambda config: _StubOrchestrator())

    cli.main(["analyze", "octo/demo"])

    out = capsys.readouterr().out
    assert "Repository: octo/demo" in out
    assert "🐍 Python (3.9+)" in out
    assert "service Redis on port 6379" in out


def test_analysis_failure_exits_non_zero(
    isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    stub = _StubOrchestrator(error=AnalysisError("Failed to analyze repository: 404"))
    monkeypatch.setattr(cli, "Orchestrator", lambda config: stub)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["generate", "octo/demo"])

    assert excinfo.value.code == 1
    assert "labspace generate failed" in capsys.readouterr().err


def test_invalid_config_exits_non_zero(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (isolated_cwd / ".labspace.yml").write_text("- not\n- a mapping\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["analyze", "octo/demo"])

    assert excinfo.value.code == 1
    assert "mapping" in capsys.readouterr().err
