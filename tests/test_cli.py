"""Tests for the gits command line."""

import json
import pytest
from datetime import datetime, timezone
from unittest.mock import patch

from click.testing import CliRunner

from conftest import ScriptedPort, ok, repo_port
from gits.cli import cli
from gits.config import load_settings
from gits.domain import SyncReport, SyncStatus
from gits.exit_codes import ConfigError, NetworkError
from gits.infra.inventory_store import InventoryStore

SETTINGS = """
[remotes."gitlab.example.com"]
token = "GITLAB_TOKEN"
api_url = "https://gitlab.example.com/api/v4"
project_directory = "{project_directory}"
last_pull = "2024-01-01T00:00:00Z"

[remotes."github.com"]
host_kind = "github"
api_url = "https://api.github.com"
user = "octocat"
project_directory = "{project_directory}"
"""


def json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith("{")]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_dir(tmp_path):
    root = tmp_path / "config"
    root.mkdir()
    (root / "config.toml").write_text(SETTINGS.format(project_directory=tmp_path / "src"))
    return root


class TestListCommand:
    """Tests for `gits list`."""

    def test_lists_selection_lines(self, runner, config_dir):
        store = InventoryStore(config_dir)
        store.merge("gitlab.example.com", "squad/tools", "b")
        store.merge("gitlab.example.com", "squad/tools", "a")
        store.merge("github.com", "octocat", "Hello-World")

        result = runner.invoke(cli, ["--config-dir", str(config_dir), "list"])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "github.com octocat/Hello-World",
            "gitlab.example.com squad/tools/a",
            "gitlab.example.com squad/tools/b",
        ]

    def test_lists_watched(self, runner, config_dir):
        store = InventoryStore(config_dir)
        store.merge("gitlab.example.com", "squad", "all")
        store.merge("gitlab.example.com", "squad", "mine", watched=True)

        result = runner.invoke(cli, ["--config-dir", str(config_dir), "list", "--watched"])

        assert result.output.splitlines() == ["gitlab.example.com squad/mine"]

    def test_empty_table(self, runner, config_dir):
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "list", "--table"])
        assert result.exit_code == 0


class TestBrowseCommand:
    """Tests for `gits browse`."""

    def test_output_prints_url(self, runner, config_dir):
        result = runner.invoke(cli, [
            "--config-dir", str(config_dir), "--output", "browse", "gitlab.example.com squad/tools/a",
        ])

        assert result.exit_code == 0
        assert result.output.strip() == "https://gitlab.example.com/squad/tools/a"

    def test_dryrun(self, runner, config_dir):
        with patch("gits.cli_utils.click.launch") as mock_launch:
            result = runner.invoke(cli, [
                "--config-dir", str(config_dir), "--dryrun", "browse", "github.com octocat/x",
            ])

        assert result.exit_code == 0
        assert "DRY RUN:: command open remote https://github.com/octocat/x" in result.output
        mock_launch.assert_not_called()

    def test_invalid_selection(self, runner, config_dir):
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "browse", "nonsense"])
        assert result.exit_code == 70


class TestCommitCommand:
    """Tests for `gits commit`."""

    def test_dryrun_commit_and_push(self, runner, config_dir):
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "--dryrun", "commit", "fix", "it"])

        assert result.exit_code == 0
        assert "Committed (checked against origin/main)" in result.output
        assert "Pushing: Dry run output" in result.output

    def test_commit_joins_message(self, runner, config_dir):
        port = repo_port()
        with patch("gits.cli_utils.create_command_port", return_value=port):
            result = runner.invoke(cli, [
                "--config-dir", str(config_dir), "commit", "--no-push", "fix", "the", "bug",
            ])

        assert result.exit_code == 0
        assert ["git", "commit", "-m", "fix the bug"] in port.calls
        assert ["git", "push"] not in port.calls

    def test_divergence_blocks_commit(self, runner, config_dir):
        port = repo_port(merge_base="abc123", remote_tip="def456")
        with patch("gits.cli_utils.create_command_port", return_value=port):
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "commit", "msg"])

        assert result.exit_code == 73
        assert "Pull or rebase onto origin/main" in result.output
        assert "def456" in result.output
        assert not any(call[:2] == ["git", "commit"] for call in port.calls)

    def test_no_trunk(self, runner, config_dir):
        port = repo_port(branches=())
        with patch("gits.cli_utils.create_command_port", return_value=port):
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "commit", "msg"])

        assert result.exit_code == 72
        assert "No trunk branch found" in result.output

    def test_requires_message(self, runner, config_dir):
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "commit"])
        assert result.exit_code == 2


class TestRemoteCommand:

    def test_prints_web_url(self, runner, config_dir):
        port = ScriptedPort({"git remote get-url origin": ok("git@gitlab.com:squad/app.git\n")})
        with patch("gits.cli_utils.create_command_port", return_value=port):
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "-o", "remote"])

        assert result.exit_code == 0
        assert result.output.strip() == "https://gitlab.com/squad/app"


class TestSyncCommand:
    """Tests for `gits sync`."""

    def reports(self, *failed_hosts):
        newest = datetime(2025, 4, 1, tzinfo=timezone.utc)
        return [
            SyncReport.failed(host, NetworkError("unreachable")) if host in failed_hosts
            else SyncReport(host=host, status=SyncStatus.SUCCESS, discovered=2, merged=2,
                            newest_created_at=newest)
            for host in ["github.com", "gitlab.example.com"]
        ]

    def test_sync_advances_watermark(self, runner, config_dir):
        with patch("gits.commands.sync.SyncService") as mock_service:
            mock_service.return_value.sync_all.return_value = self.reports()
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "sync"])

        assert result.exit_code == 0
        lines = json_lines(result.output)
        assert [line["host"] for line in lines] == ["github.com", "gitlab.example.com"]
        settings = load_settings(config_dir)
        assert settings.remote("gitlab.example.com").last_pull == datetime(2025, 4, 1, tzinfo=timezone.utc)
        assert settings.remote("github.com").last_pull == datetime(2025, 4, 1, tzinfo=timezone.utc)

    def test_keep_watermark(self, runner, config_dir):
        before = (config_dir / "config.toml").read_bytes()
        with patch("gits.commands.sync.SyncService") as mock_service:
            mock_service.return_value.sync_all.return_value = self.reports()
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "sync", "--keep-watermark"])

        assert result.exit_code == 0
        assert (config_dir / "config.toml").read_bytes() == before

    def test_partial_failure(self, runner, config_dir):
        with patch("gits.commands.sync.SyncService") as mock_service:
            mock_service.return_value.sync_all.return_value = self.reports("github.com")
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "sync"])

        assert result.exit_code == 71
        settings = load_settings(config_dir)
        assert settings.remote("github.com").last_pull is None
        assert settings.remote("gitlab.example.com").last_pull == datetime(2025, 4, 1, tzinfo=timezone.utc)

    def test_watermark_save_failure_keeps_report(self, runner, config_dir):
        """A failed last_pull write still prints every report and tries every host."""
        with patch("gits.commands.sync.SyncService") as mock_service, \
                patch("gits.commands.sync.save_watermark",
                      side_effect=[ConfigError("read-only file system"), None]) as mock_save:
            mock_service.return_value.sync_all.return_value = self.reports()
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "sync"])

        assert result.exit_code == 66
        assert [line["host"] for line in json_lines(result.output)] == ["github.com", "gitlab.example.com"]
        assert [c.args[1] for c in mock_save.call_args_list] == ["github.com", "gitlab.example.com"]
        assert "last_pull was not saved for github.com" in result.output

    def test_total_failure(self, runner, config_dir):
        with patch("gits.commands.sync.SyncService") as mock_service:
            mock_service.return_value.sync_all.return_value = self.reports("github.com", "gitlab.example.com")
            result = runner.invoke(cli, ["--config-dir", str(config_dir), "sync"])

        assert result.exit_code == 1

    def test_single_host(self, runner, config_dir):
        with patch("gits.commands.sync.SyncService") as mock_service:
            mock_service.return_value.sync_all.return_value = []
            runner.invoke(cli, ["--config-dir", str(config_dir), "sync", "--host", "github.com"])

        remotes = mock_service.return_value.sync_all.call_args.args[0]
        assert [r.host for r in remotes] == ["github.com"]

    def test_unknown_host(self, runner, config_dir):
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "sync", "--host", "nope.example"])
        assert result.exit_code == 66

    def test_missing_settings(self, runner, tmp_path):
        result = runner.invoke(cli, ["--config-dir", str(tmp_path), "sync"])
        assert result.exit_code == 66


class TestSyncWatchedCommand:

    def test_dryrun_clones_nothing(self, runner, config_dir, tmp_path):
        InventoryStore(config_dir).merge("gitlab.example.com", "squad", "app", watched=True)

        result = runner.invoke(cli, ["--config-dir", str(config_dir), "--dryrun", "sync-watched"])

        assert result.exit_code == 0
        lines = json_lines(result.output)
        assert lines == [{
            "repo": "gitlab.example.com squad/app",
            "path": str(tmp_path / "src" / "gitlab.example.com" / "squad" / "app"),
            "action": "cloned",
        }]
        assert not (tmp_path / "src").exists()


class TestCloneCommand:

    def test_clone_watches(self, runner, config_dir):
        result = runner.invoke(cli, [
            "--config-dir", str(config_dir), "--dryrun", "clone", "github.com octocat/x",
        ])

        assert result.exit_code == 0
        assert InventoryStore(config_dir).load("github.com", watched=True).groups == {"octocat": ("x",)}

    def test_clone_unconfigured_host(self, runner, config_dir):
        result = runner.invoke(cli, ["--config-dir", str(config_dir), "--dryrun", "clone", "other.host g/x"])
        assert result.exit_code == 66


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output
