"""Unit tests for the pagechain CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock

from typer.testing import CliRunner

from pagechain.cli.app import APP_HELP, app
from pagechain.cli.run_cmd import configure_logging
from pagechain.cli.settings_cmd import check_settings
from pagechain.exceptions import ActionError
from pagechain.settings.config import Settings

runner = CliRunner()


def _write_script(tmp_path: Path, steps: list[dict] | None = None) -> Path:
    path = tmp_path / "chain.json"
    path.write_text(
        json.dumps(
            {
                "name": "example",
                "steps": steps
                or [
                    {"action": "goto", "url": "https://example.com"},
                    {"action": "evaluate_with_return", "name": "title", "script": "document.title"},
                ],
            }
        )
    )
    return path


class TestAppCallback:
    def test_no_command_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "run" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.startswith("pagechain ")


class TestRunCommand:
    """``pagechain run`` with the browser replaced by a stub."""

    def test_prints_captured_values_as_json(self, tmp_path: Path, monkeypatch) -> None:
        fake = AsyncMock(return_value={"title": "Example Domain"})
        monkeypatch.setattr("pagechain.cli.run_cmd._run_script", fake)

        result = runner.invoke(app, ["run", str(_write_script(tmp_path)), "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"title": "Example Domain"}
        script, settings, artifacts_dir = fake.await_args.args
        assert script.name == "example"
        assert Path(artifacts_dir) == Path(settings.output.artifacts_dir)

    def test_headed_flag_overrides_settings(self, tmp_path: Path, monkeypatch) -> None:
        fake = AsyncMock(return_value={})
        monkeypatch.setattr("pagechain.cli.run_cmd._run_script", fake)

        result = runner.invoke(
            app, ["run", str(_write_script(tmp_path)), "--headed", "--output", str(tmp_path / "out")]
        )

        assert result.exit_code == 0, result.output
        _, settings, artifacts_dir = fake.await_args.args
        assert settings.browser.headless is False
        assert artifacts_dir == tmp_path / "out"
        assert "2 step(s) completed" in result.output

    def test_action_error_exits_nonzero(self, tmp_path: Path, monkeypatch) -> None:
        fake = AsyncMock(side_effect=ActionError("goto", 0, RuntimeError("net::ERR_NAME_NOT_RESOLVED")))
        monkeypatch.setattr("pagechain.cli.run_cmd._run_script", fake)

        result = runner.invoke(app, ["run", str(_write_script(tmp_path))])

        assert result.exit_code == 1

    def test_invalid_script_exits_nonzero(self, tmp_path: Path, monkeypatch) -> None:
        fake = AsyncMock(return_value={})
        monkeypatch.setattr("pagechain.cli.run_cmd._run_script", fake)
        path = _write_script(tmp_path, steps=[{"action": "goto"}])

        result = runner.invoke(app, ["run", str(path)])

        assert result.exit_code == 1
        fake.assert_not_awaited()

    def test_missing_file_rejected(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", str(tmp_path / "absent.json")])
        assert result.exit_code != 0


class TestSettingsCommand:
    def test_show_prints_json(self) -> None:
        result = runner.invoke(app, ["settings", "show"])
        assert result.exit_code == 0
        assert "browser" in result.output

    def test_validate(self) -> None:
        result = runner.invoke(app, ["settings", "validate"])
        assert result.exit_code == 0
        assert "Settings are valid" in result.output

    def test_validate_unknown_env_profile_fails(self, monkeypatch) -> None:
        monkeypatch.setenv("PAGECHAIN_ENV", "staging")
        result = runner.invoke(app, ["settings", "validate"])
        assert result.exit_code == 1
        assert "staging" in result.output

    def test_validate_artifacts_path_is_file_fails(self, tmp_path: Path, monkeypatch) -> None:
        blocker = tmp_path / "artifacts"
        blocker.write_text("not a directory")
        monkeypatch.setenv("PAGECHAIN_OUTPUT__ARTIFACTS_DIR", str(blocker))
        result = runner.invoke(app, ["settings", "validate"])
        assert result.exit_code == 1


class TestCheckSettings:
    """Domain checks behind ``settings validate``."""

    def test_known_profile_passes(self, tmp_path: Path) -> None:
        errors, _ = check_settings(Settings(env="ci", output={"artifacts_dir": str(tmp_path)}))
        assert errors == []

    def test_missing_profile_reported(self, tmp_path: Path) -> None:
        errors, _ = check_settings(Settings(env="staging", output={"artifacts_dir": str(tmp_path)}))
        assert len(errors) == 1
        assert "settings.staging.toml" in errors[0]

    def test_missing_artifacts_dir_is_a_note(self, tmp_path: Path) -> None:
        errors, notes = check_settings(Settings(output={"artifacts_dir": str(tmp_path / "later")}))
        assert errors == []
        assert any("created on first capture" in note for note in notes)

    def test_non_positive_timeout_reported(self, tmp_path: Path) -> None:
        settings = Settings(browser={"timeout_ms": 0}, output={"artifacts_dir": str(tmp_path)})
        errors, _ = check_settings(settings)
        assert errors == ["browser.timeout_ms must be positive, got 0"]

    def test_password_without_username_reported(self, tmp_path: Path) -> None:
        settings = Settings(browser={"http_password": "secret"}, output={"artifacts_dir": str(tmp_path)})
        errors, _ = check_settings(settings)
        assert errors == ["browser.http_password is set without browser.http_username"]


class TestHelpAndLogging:
    def test_help_lists_every_config_layer(self) -> None:
        for layer in ("settings.default.toml", "settings.<env>.toml", "settings.local.toml", "PAGECHAIN_"):
            assert layer in APP_HELP

    def test_configure_logging_quiets_playwright(self) -> None:
        configure_logging("DEBUG")
        assert logging.getLogger("playwright").level == logging.WARNING
        assert logging.getLogger("asyncio").level == logging.WARNING
