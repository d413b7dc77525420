"""Unit tests for issue_steward.main CLI module."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from issue_steward.exceptions import ConfigurationError, DailyIssueError
from issue_steward.main import _run, cli, load_settings, write_outputs
from issue_steward.models.domain import RunReport, RunStatistics


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def report():
    return RunReport(
        issue_url="https://github.com/acme/widgets/issues/1",
        summary_preview="Quiet day...",
        actions_preview="Review #1...",
        statistics=RunStatistics(processed=2, created=1, existed=1),
        generated=True,
    )


def read_outputs(path):
    return path.read_text(encoding="utf-8")


class TestHelp:
    def test_main_help(self, cli_runner):
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "run" in result.output

    def test_run_help(self, cli_runner):
        result = cli_runner.invoke(cli, ["run", "--help"])

        assert result.exit_code == 0
        assert "--date" in result.output


class TestRun:
    @patch("issue_steward.main.StewardSettings.from_env")
    def test_configuration_error(self, mock_from_env, cli_runner):
        mock_from_env.side_effect = ConfigurationError(
            "Missing required environment variables: GITHUB_TOKEN"
        )

        result = cli_runner.invoke(cli, ["run"])

        assert result.exit_code == 1
        assert "GITHUB_TOKEN" in result.output

    @patch("issue_steward.main._run", new_callable=AsyncMock)
    @patch("issue_steward.main.load_settings")
    def test_success_reports_outputs(
        self, mock_load, mock_run, cli_runner, settings, report, tmp_path
    ):
        output_file = tmp_path / "github_output"
        mock_load.return_value = settings.model_copy(update={"github_output": output_file})
        mock_run.return_value = report

        result = cli_runner.invoke(cli, ["run", "--date", "2026-10-19"])

        assert result.exit_code == 0
        assert "Output issue_url: https://github.com/acme/widgets/issues/1" in result.output
        assert mock_run.await_args.args[1].isoformat() == "2026-10-19"
        written = read_outputs(output_file)
        assert 'sub_issues_processed={"processed":2,"created":1,"existed":1}' in written
        assert "reminder=Quiet day..." in written

    @patch("issue_steward.main._run", new_callable=AsyncMock)
    @patch("issue_steward.main.load_settings")
    def test_fatal_error_in_ci_exits_nonzero(
        self, mock_load, mock_run, cli_runner, settings, tmp_path
    ):
        output_file = tmp_path / "github_output"
        mock_load.return_value = settings.model_copy(
            update={"github_output": output_file, "ci": True}
        )
        mock_run.side_effect = DailyIssueError("Could not create tracking issue")

        result = cli_runner.invoke(cli, ["run"])

        assert result.exit_code == 1
        assert "error=Could not create tracking issue" in read_outputs(output_file)

    @patch("issue_steward.main._run", new_callable=AsyncMock)
    @patch("issue_steward.main.load_settings")
    def test_fatal_error_outside_ci_exits_zero(self, mock_load, mock_run, cli_runner, settings):
        mock_load.return_value = settings
        mock_run.side_effect = DailyIssueError("Could not create tracking issue")

        result = cli_runner.invoke(cli, ["run"])

        assert result.exit_code == 0
        assert "Could not create tracking issue" in result.output


class TestRunHelper:
    @pytest.mark.asyncio
    @patch("issue_steward.main.DailyRunOrchestrator")
    @patch("issue_steward.main.OpenAINarrativeProvider")
    @patch("issue_steward.main.GitHubRestProvider")
    async def test_connect_is_retried(
        self, mock_tracker_class, mock_generator_class, mock_orchestrator_class, settings, report
    ):
        tracker = mock_tracker_class.return_value
        tracker.connect = AsyncMock(side_effect=[ConnectionError("reset"), None])
        tracker.disconnect = AsyncMock()
        generator = mock_generator_class.return_value
        generator.aclose = AsyncMock()
        mock_orchestrator_class.return_value.run = AsyncMock(return_value=report)

        result = await _run(settings, None)

        assert result is report
        assert tracker.connect.await_count == 2
        tracker.disconnect.assert_awaited_once()
        generator.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    @patch("issue_steward.main.OpenAINarrativeProvider")
    @patch("issue_steward.main.GitHubRestProvider")
    async def test_connect_failure_closes_clients(
        self, mock_tracker_class, mock_generator_class, settings
    ):
        tracker = mock_tracker_class.return_value
        tracker.connect = AsyncMock(side_effect=ConnectionError("down"))
        tracker.disconnect = AsyncMock()
        mock_generator_class.return_value.aclose = AsyncMock()

        with pytest.raises(ConnectionError):
            await _run(settings, None)

        assert tracker.connect.await_count == 3
        tracker.disconnect.assert_awaited_once()


class TestLoadSettings:
    @patch("issue_steward.main.StewardSettings.from_yaml")
    def test_config_path_uses_yaml(self, mock_from_yaml):
        load_settings("steward.yaml")

        mock_from_yaml.assert_called_once_with("steward.yaml")

    @patch("issue_steward.main.StewardSettings.from_env")
    def test_default_uses_environment(self, mock_from_env):
        load_settings(None)

        mock_from_env.assert_called_once_with()


class TestWriteOutputs:
    def test_no_path_is_noop(self):
        write_outputs(None, {"issue_url": "x"})

    def test_single_line(self, tmp_path):
        path = tmp_path / "out"

        write_outputs(path, {"issue_url": "https://example.test/1"})

        assert read_outputs(path) == "issue_url=https://example.test/1\n"

    def test_multi_line_uses_delimiter(self, tmp_path):
        path = tmp_path / "out"

        write_outputs(path, {"reminder": "line one\nline two"})

        lines = read_outputs(path).splitlines()
        assert lines[0].startswith("reminder<<ghadelimiter_")
        delimiter = lines[0].split("<<", 1)[1]
        assert lines[1:] == ["line one", "line two", delimiter]

    def test_appends(self, tmp_path):
        path = tmp_path / "out"
        path.write_text("existing=1\n", encoding="utf-8")

        write_outputs(path, {"error": "boom"})

        assert read_outputs(path) == "existing=1\nerror=boom\n"
