"""Tests for the tyr command line."""

import json

import pytest
from click.testing import CliRunner

import tyr.cli as cli
from conftest import make_reply, make_threat
from tyr.models import AnalysisResult
from tyr.services.analyzer import ThreatAnalyzer


@pytest.fixture
def runner(monkeypatch, fake_provider):
    monkeypatch.setattr(cli, "ThreatAnalyzer", lambda: ThreatAnalyzer(provider=fake_provider))
    return CliRunner()


@pytest.fixture
def design(tmp_path):
    path = tmp_path / "design.md"
    path.write_text("Browser -> API gateway -> Postgres")
    return path


def test_analyze_console(runner, fake_provider, design):
    fake_provider.replies = [make_reply([make_threat(title="JWT forgery", risk_level="Critical")], ["Pin alg"])]

    result = runner.invoke(cli.main, ["analyze", "-i", str(design)])

    assert result.exit_code == 0, result.output
    assert "JWT forgery" in result.output
    assert "Pin alg" in result.output
    assert fake_provider.analyze_calls[0][1] == "architecture diagram"
    assert fake_provider.analyze_calls[0][2] is True


def test_analyze_json_to_file(runner, fake_provider, design, tmp_path):
    fake_provider.replies = [make_reply([make_threat()])]
    out = tmp_path / "report.json"

    result = runner.invoke(
        cli.main,
        ["analyze", "-i", str(design), "-t", "k8s", "-f", "json", "-o", str(out), "--no-explain"],
    )

    assert result.exit_code == 0, result.output
    loaded = AnalysisResult.model_validate_json(out.read_text())
    assert loaded.summary.total_threats == 1
    assert loaded.input_type.value == "Kubernetes"
    assert fake_provider.analyze_calls[0][2] is False


def test_analyze_html_default_path(runner, fake_provider, design, tmp_path):
    fake_provider.replies = [make_reply([make_threat()])]

    result = runner.invoke(cli.main, ["analyze", "-i", str(design), "-f", "html"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "threat_report.html").read_text().startswith("<!DOCTYPE html>")


def test_analyze_unknown_input_type(runner, design):
    result = runner.invoke(cli.main, ["analyze", "-i", str(design), "-t", "docker"])
    assert result.exit_code == 2
    assert "Unknown input type" in result.output


def test_analyze_bad_reply_exits_nonzero(runner, fake_provider, design):
    fake_provider.replies = ["no json"]
    result = runner.invoke(cli.main, ["analyze", "-i", str(design)])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_scan_json(runner, fake_provider, tmp_path):
    infra = tmp_path / "infra"
    infra.mkdir()
    (infra / "main.tf").write_text("x")
    (infra / "skip.txt").write_text("x")
    fake_provider.replies = [make_reply([make_threat()])]
    out = tmp_path / "scan.json"

    result = runner.invoke(cli.main, ["scan", "-d", str(infra), "-f", "json", "-o", str(out)])

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert len(data["files"]) == 1
    assert data["failures"] == []


def test_scan_missing_directory(runner, tmp_path):
    result = runner.invoke(cli.main, ["scan", "-d", str(tmp_path / "nope")])
    assert result.exit_code == 2


def test_interactive_session(runner, fake_provider, design):
    fake_provider.replies = ["Consider rate limiting.", "Use prepared statements."]

    result = runner.invoke(
        cli.main,
        ["interactive", "-c", str(design)],
        input="help\nWhat about DoS?\nclear\nSQL injection?\nexit\n",
    )

    assert result.exit_code == 0, result.output
    assert "Available commands" in result.output
    assert "Consider rate limiting." in result.output
    assert "Use prepared statements." in result.output
    first, second = fake_provider.query_calls
    assert first == ("Browser -> API gateway -> Postgres\n\nWhat about DoS?", [])
    assert second == ("SQL injection?", [])


def test_interactive_error_keeps_looping(runner, fake_provider):
    from tyr.exceptions import ProviderError

    fake_provider.replies = [ProviderError("offline"), "back online"]
    result = runner.invoke(cli.main, ["interactive"], input="one\ntwo\n")

    assert result.exit_code == 0, result.output
    assert "offline" in result.output
    assert "back online" in result.output


def test_providers_lists_backends(runner):
    result = runner.invoke(cli.main, ["providers"])
    assert result.exit_code == 0, result.output
    assert "claude" in result.output
    assert "ollama" in result.output
    assert "llama3.1:8b" in result.output


def test_analyze_json_to_stdout_is_parseable(runner, fake_provider, design):
    fake_provider.replies = [make_reply([make_threat()], ["Pin alg"])]

    result = runner.invoke(cli.main, ["analyze", "-i", str(design), "-f", "json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["summary"]["total_threats"] == 1
    assert data["recommendations"] == ["Pin alg"]
    assert "TYR - AI THREAT MODELING ASSISTANT" in result.stderr
    assert "Starting threat analysis" in result.stderr


def test_scan_json_to_stdout_is_parseable(runner, fake_provider, tmp_path):
    infra = tmp_path / "infra"
    infra.mkdir()
    (infra / "main.tf").write_text("x")
    fake_provider.replies = [make_reply([make_threat()])]

    result = runner.invoke(cli.main, ["scan", "-d", str(infra), "-f", "json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [f["path"] for f in data["files"]] == [str(infra / "main.tf")]


def test_analyze_non_utf8_input_exits_cleanly(runner, tmp_path):
    bad = tmp_path / "diagram.bin"
    bad.write_bytes(b"\xff\xfe\x00binary")

    result = runner.invoke(cli.main, ["analyze", "-i", str(bad)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error" in result.stderr


def test_interactive_non_utf8_context_exits_cleanly(runner, tmp_path):
    bad = tmp_path / "context.md"
    bad.write_bytes(b"\xff\xfe\x00binary")

    result = runner.invoke(cli.main, ["interactive", "-c", str(bad)], input="exit\n")

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Error" in result.stderr
