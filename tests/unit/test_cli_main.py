"""Unit tests for the specflow CLI."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from src.cli.main import app, parse_vars
from tests.factories import WorkflowFactory
from tests.helpers.fakes import session_factory_for


@pytest.fixture
def runner():
    return CliRunner()


class TestParseVars:
    def test_pairs(self):
        assert parse_vars(["a=1", "b=x=y", "a=2"]) == {"a": "2", "b": "x=y"}

    @pytest.mark.parametrize("pair", ["novalue", "=value"])
    def test_malformed(self, pair):
        with pytest.raises(typer.BadParameter):
            parse_vars([pair])


class TestMainApp:
    def test_name(self):
        assert app.info.name == "specflow"

    def test_help_lists_commands(self, runner):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("serve", "agents", "render", "workflows"):
            assert command in result.stdout


class TestAgents:
    def test_lists_pipeline(self, runner):
        result = runner.invoke(app, ["agents"])

        assert result.exit_code == 0
        assert "Agent Pipeline" in result.stdout
        assert "analyst" in result.stdout


class TestRender:
    def test_substitutes_vars(self, runner):
        result = runner.invoke(app, ["render", "analyst", "--var", "product_domain=Fintech"])

        assert result.exit_code == 0
        assert "Fintech" in result.stdout
        assert "[target_users not specified]" in result.stdout

    def test_constitution_file(self, runner, tmp_path):
        constitution = tmp_path / "constitution.md"
        constitution.write_text("All APIs are versioned.", encoding="utf-8")

        result = runner.invoke(app, ["render", "architect", "-c", str(constitution)])

        assert result.exit_code == 0
        assert "the project constitution" in result.stdout
        assert "Project Constitution:\nAll APIs are versioned." in result.stdout

    def test_placeholders(self, runner):
        result = runner.invoke(app, ["render", "scrum_master", "--placeholders"])

        assert result.exit_code == 0
        assert sorted(result.stdout.split()) == [
            "constitution_file",
            "sprint_duration",
            "team_size",
            "velocity_baseline",
        ]

    def test_bad_var(self, runner):
        result = runner.invoke(app, ["render", "analyst", "--var", "oops"])
        assert result.exit_code != 0

    def test_unknown_agent(self, runner):
        result = runner.invoke(app, ["render", "qa_engineer"])
        assert result.exit_code != 0


class TestServe:
    def test_uses_settings_defaults(self, runner, mock_settings):
        with patch("uvicorn.run") as run:
            result = runner.invoke(app, ["serve", "--port", "9000"])

        assert result.exit_code == 0
        kwargs = run.call_args.kwargs
        assert run.call_args.args[0] == "src.api.main:app"
        assert kwargs["port"] == 9000
        assert kwargs["host"] == mock_settings.api_host
        assert kwargs["workers"] == mock_settings.api_workers


class TestWorkflows:
    def test_lists_rows(self, runner, mock_db_session):
        repo = MagicMock()
        repo.list_all = AsyncMock(return_value=[WorkflowFactory(name="Billing")])
        repo.count = AsyncMock(return_value=1)

        with (
            patch("src.storage.get_session", session_factory_for(mock_db_session)),
            patch("src.storage.close_db", AsyncMock()) as close_db,
            patch("src.dal.WorkflowRepository", return_value=repo),
        ):
            result = runner.invoke(app, ["workflows", "--limit", "5"])

        assert result.exit_code == 0
        assert "Billing" in result.stdout
        repo.list_all.assert_awaited_once_with(limit=5)
        close_db.assert_awaited_once()

    def test_empty(self, runner, mock_db_session):
        repo = MagicMock()
        repo.list_all = AsyncMock(return_value=[])
        repo.count = AsyncMock(return_value=0)

        with (
            patch("src.storage.get_session", session_factory_for(mock_db_session)),
            patch("src.storage.close_db", AsyncMock()),
            patch("src.dal.WorkflowRepository", return_value=repo),
        ):
            result = runner.invoke(app, ["workflows"])

        assert result.exit_code == 0
        assert "No workflows found" in result.stdout
