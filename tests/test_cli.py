"""Tests for the CLI."""

from pathlib import Path

import httpx
import pytest
import respx
import typer
from httpx import Response
from typer.testing import CliRunner

from conftest import LOGIN_PAGE, LOGIN_URL, login_handler
from redfox.cli import app, main
from redfox.modules.session import SessionStore

runner = CliRunner()


@pytest.fixture
def no_dns(monkeypatch) -> None:
    """Skip the DNS pre-check; targets are mocked."""
    monkeypatch.setattr("redfox.modules.scanner.scanner.check_resolvable", lambda target: None)


@pytest.fixture
def mock_target():
    with respx.mock(assert_all_called=False) as mock:
        mock.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
        yield mock


def scan_args(*extra: str) -> list[str]:
    return ["-q", "scan", "-u", LOGIN_URL, "-U", "admin,root", "-P", "123456,admin", "--rate-limit", "0", *extra]


class TestCLIApp:
    """Test the CLI application structure."""

    def test_app_is_typer_instance(self):
        assert isinstance(app, typer.Typer)

    def test_main_function_exists(self):
        assert callable(main)

    def test_all_commands_registered(self):
        names = {cmd.name or cmd.callback.__name__ for cmd in app.registered_commands}

        assert {
            "scan",
            "benchmark",
            "validate",
            "generate",
            "list-wordlists",
            "sessions",
            "resume",
            "report",
            "config",
            "version",
        } <= names

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "RedFoxTool" in result.output


class TestScanCommand:
    """``redfox scan`` end to end against a mocked target."""

    def test_scan_saves_report_and_history(self, redfox_home: Path, no_dns, mock_target):
        route = mock_target.post(LOGIN_URL).mock(side_effect=login_handler({("admin", "admin")}))

        result = runner.invoke(app, scan_args())

        assert result.exit_code == 0, result.output
        assert route.call_count == 4
        assert "Valid credentials" in result.output
        results_dir = redfox_home / "results"
        reports = list(results_dir.glob("redfox_*.json"))
        assert len(reports) == 1
        with SessionStore.in_results_dir(results_dir) as store:
            (record,) = store.list_recent()
            assert record.state == "completed"
            assert record.succeeded == 1
            assert record.report_path == str(reports[0])

    def test_no_valid_credentials_still_exits_zero(self, redfox_home: Path, no_dns, mock_target):
        mock_target.post(LOGIN_URL).mock(side_effect=login_handler(set()))

        result = runner.invoke(app, scan_args("--no-save"))

        assert result.exit_code == 0, result.output
        assert "No valid credentials found" in result.output
        assert not (redfox_home / "results").exists()

    def test_unreachable_target_exits_with_connectivity_code(self, redfox_home: Path, no_dns):
        with respx.mock:
            respx.get(LOGIN_URL).mock(side_effect=httpx.ConnectError("[Errno 111] Connection refused"))

            result = runner.invoke(app, scan_args("--no-save"))

        assert result.exit_code == 3, result.output

    def test_missing_wordlist_exits_with_input_code(self, redfox_home: Path, temp_dir: Path):
        result = runner.invoke(
            app, ["scan", "-u", LOGIN_URL, "-U", "admin", "-P", str(temp_dir / "missing.txt")]
        )

        assert result.exit_code == 2
        assert "not found" in result.output

    def test_out_of_scope_target(self, redfox_home: Path):
        (redfox_home / "config.yml").write_text(
            "scanning:\n  allowed_targets:\n    - '*.lab.test'\n", encoding="utf-8"
        )

        result = runner.invoke(app, scan_args())

        assert result.exit_code == 2
        assert "Out of scope" in result.output

    def test_invalid_json_option(self, redfox_home: Path):
        result = runner.invoke(app, scan_args("--data", "{broken"))

        assert result.exit_code == 2
        assert "--data must be a JSON object" in result.output

    def test_conflicting_policies(self, redfox_home: Path):
        result = runner.invoke(app, scan_args("--stop-on-success", "--per-user"))

        assert result.exit_code == 2

    def test_bad_config_file(self, redfox_home: Path, temp_dir: Path):
        result = runner.invoke(app, ["--config", str(temp_dir / "missing.yml"), "sessions"])

        assert result.exit_code == 2

    def test_stop_then_resume(self, redfox_home: Path, no_dns, mock_target):
        route = mock_target.post(LOGIN_URL).mock(side_effect=login_handler({("admin", "123456")}))

        first = runner.invoke(app, scan_args("-f", "-t", "1"))
        assert first.exit_code == 0, first.output
        assert route.call_count == 1

        with SessionStore.in_results_dir(redfox_home / "results") as store:
            (record,) = store.list_recent()
        assert record.state == "stopped"
        assert record.resume_offset == 1

        resumed = runner.invoke(app, ["-q", "resume", record.id[:8]])

        assert resumed.exit_code == 0, resumed.output
        assert route.call_count == 4
        with SessionStore.in_results_dir(redfox_home / "results") as store:
            states = sorted(r.state for r in store.list_recent())
        assert states == ["completed", "stopped"]

    def test_resume_rejects_completed_session(self, redfox_home: Path, no_dns, mock_target):
        mock_target.post(LOGIN_URL).mock(side_effect=login_handler(set()))
        runner.invoke(app, scan_args())
        with SessionStore.in_results_dir(redfox_home / "results") as store:
            (record,) = store.list_recent()

        result = runner.invoke(app, ["resume", record.id])

        assert result.exit_code == 2
        assert "only stopped or aborted" in result.output


class TestOtherCommands:
    def test_sessions_empty(self, redfox_home: Path):
        result = runner.invoke(app, ["sessions"])

        assert result.exit_code == 0
        assert "No sessions recorded yet" in result.output

    def test_report_conversion(self, redfox_home: Path, no_dns, mock_target):
        mock_target.post(LOGIN_URL).mock(side_effect=login_handler({("admin", "admin")}))
        runner.invoke(app, scan_args())
        (report,) = (redfox_home / "results").glob("redfox_*.json")

        result = runner.invoke(app, ["report", str(report), "--format", "csv"])

        assert result.exit_code == 0, result.output
        converted = report.with_suffix(".csv")
        assert converted.exists()
        assert "admin,admin,success" in converted.read_text(encoding="utf-8")

    def test_report_missing_file(self, redfox_home: Path, temp_dir: Path):
        result = runner.invoke(app, ["report", str(temp_dir / "none.json")])

        assert result.exit_code == 2

    def test_generate(self, redfox_home: Path, temp_dir: Path):
        output = temp_dir / "out" / "words.txt"

        result = runner.invoke(
            app, ["generate", "--output", str(output), "--size", "12", "--charset", "digits", "--max-length", "2"]
        )

        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8").split() == [str(i) for i in range(10)] + ["00", "01"]

    def test_list_wordlists(self, redfox_home: Path):
        result = runner.invoke(app, ["list-wordlists"])

        assert result.exit_code == 0
        assert "@default-passwords" in result.output

    def test_validate(self, redfox_home: Path):
        ok = runner.invoke(app, ["validate", "https://example.com/login"])
        bad = runner.invoke(app, ["validate", "example.com"])

        assert ok.exit_code == 0
        assert "valid target" in ok.output
        assert bad.exit_code == 2

    def test_config_init_and_show(self, redfox_home: Path):
        init = runner.invoke(app, ["config", "init"])
        show = runner.invoke(app, ["config", "show"])

        assert init.exit_code == 0
        assert (redfox_home / "config.yml").exists()
        assert show.exit_code == 0
        assert "scanning:" in show.output

    def test_benchmark(self, redfox_home: Path, temp_dir: Path, users_file: Path, passwords_file: Path):
        with respx.mock:
            respx.get(LOGIN_URL).mock(return_value=Response(200, text=LOGIN_PAGE))
            route = respx.post(LOGIN_URL).mock(side_effect=login_handler(set()))

            result = runner.invoke(
                app,
                [
                    "-q",
                    "benchmark",
                    "--url",
                    LOGIN_URL,
                    "--users-file",
                    str(users_file),
                    "--passwords-file",
                    str(passwords_file),
                    "--iterations",
                    "2",
                    "--rate-limit",
                    "0",
                ],
            )

        assert result.exit_code == 0, result.output
        assert route.call_count == 8
        assert "Attempts/s" in result.output
        assert not (redfox_home / "results").exists()
