"""Tests for the CLI entry point and commands."""

import json
import os
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from ghsweep_cli.cli import main
from ghsweep_core.gh.client import GitHubClient
from ghsweep_core.results import ActionResult
from ghsweep_store.models import RepositoryRecord

# Menu positions as shown by RichShell.choose.
ARCHIVE_KEY = "1"
SKIP_KEY = "5"


def _record(repo_id, name, owner="acme", archived=False):
    return RepositoryRecord(id=repo_id, owner=owner, name=name, archived=archived, url=f"https://github.com/{owner}/{name}")


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("INCLUDE_ARCHIVED", raising=False)
    return tmp_path


@pytest.fixture
def gh_client(mocker):
    client = MagicMock(spec=GitHubClient)
    client.list_repositories.return_value = [_record(1, "web"), _record(2, "api")]
    client.archive_repo.return_value = ActionResult.success()
    mocker.patch("ghsweep_cli.commands.run.GitHubClient", return_value=client)
    mocker.patch("ghsweep_cli.commands.run.resolve_github_token", return_value="tok")
    return client


def _decisions(workdir):
    return json.loads((workdir / "data" / "decisions.json").read_text())


class TestRunCommand:
    def test_declining_start_exits_cleanly(self, workdir, gh_client):
        result = CliRunner().invoke(main, ["run"], input="n\n")

        assert result.exit_code == 0
        gh_client.list_repositories.assert_not_called()
        assert not (workdir / "data" / "decisions.json").exists()

    def test_full_walk_persists_decisions(self, workdir, gh_client):
        # ready, process acme, skip web, archive api + confirm
        result = CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n{ARCHIVE_KEY}\ny\n")

        assert result.exit_code == 0, result.output
        assert "Found 2 repos across 1 owners" in result.output
        repos = _decisions(workdir)["acme"]["repos"]
        assert repos["web"]["skipped"] is True
        assert repos["api"]["archived"] is True
        assert [e["action"] for e in repos["api"]["decisions"]] == ["Archive"]
        gh_client.archive_repo.assert_called_once_with("acme", "api")

    def test_repository_list_is_cached(self, workdir, gh_client):
        CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n{SKIP_KEY}\n")

        assert (workdir / "data" / "repos.v1.json").exists()
        result = CliRunner().invoke(main, ["run"], input="y\n")

        assert result.exit_code == 0
        gh_client.list_repositories.assert_called_once()
        assert "All repos in acme are marked" in result.output

    def test_refresh_fetches_again(self, workdir, gh_client):
        CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n{SKIP_KEY}\n")
        CliRunner().invoke(main, ["run", "--refresh"], input="y\n")

        assert gh_client.list_repositories.call_count == 2

    def test_interrupt_mid_walk_saves_progress(self, workdir, gh_client):
        # Input runs out at the "api" menu, which click reports as an abort.
        result = CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n")

        assert result.exit_code == 0
        assert "saving your current decisions" in result.output
        repos = _decisions(workdir)["acme"]["repos"]
        assert repos["web"]["skipped"] is True
        assert repos["api"] == {}

    def test_interrupt_while_loading_saves_nothing(self, workdir, gh_client):
        gh_client.list_repositories.side_effect = KeyboardInterrupt

        result = CliRunner().invoke(main, ["run"], input="y\n")

        assert result.exit_code == 0
        assert "nothing to save yet" in result.output
        assert not (workdir / "data" / "decisions.json").exists()

    def test_archived_repos_skipped_unless_included(self, workdir, gh_client):
        gh_client.list_repositories.return_value = [_record(1, "old", archived=True), _record(2, "web")]

        result = CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n")
        assert "process 1 repo(s) in acme" in result.output

        result = CliRunner().invoke(main, ["run", "--include-archived"], input="y\n")
        assert "All repos in acme are marked" in result.output

    def test_include_archived_from_environment(self, workdir, gh_client, monkeypatch):
        monkeypatch.setenv("INCLUDE_ARCHIVED", "true")
        gh_client.list_repositories.return_value = [_record(1, "old", archived=True), _record(2, "web")]

        result = CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n")

        assert "process 2 repo(s) in acme" in result.output

    def test_decision_log_write_failure_is_fatal(self, workdir, gh_client):
        (workdir / "data" / "decisions.json").mkdir(parents=True)

        result = CliRunner().invoke(main, ["run"], input=f"y\ny\n{SKIP_KEY}\n{SKIP_KEY}\n")

        assert result.exit_code == 1
        assert "Could not write decision log" in result.output

    def test_missing_token_and_no_answer(self, workdir, mocker):
        mocker.patch("ghsweep_cli.commands.run.resolve_github_token", return_value=None)
        client_cls = mocker.patch("ghsweep_cli.commands.run.GitHubClient")

        result = CliRunner().invoke(main, ["run"], input="\n")

        assert result.exit_code != 0
        assert "No GitHub token found" in result.output
        client_cls.assert_not_called()


class TestStatusCommand:
    def _seed(self, workdir):
        data = workdir / "data"
        data.mkdir()
        (data / "repos.v1.json").write_text(
            json.dumps(
                {
                    "acme": {
                        "1": {"id": 1, "owner": "acme", "name": "web"},
                        "2": {"id": 2, "owner": "acme", "name": "api"},
                    },
                    "octo": {"3": {"id": 3, "owner": "octo", "name": "cli"}},
                }
            )
        )
        (data / "decisions.json").write_text(
            json.dumps(
                {
                    "acme": {"repos": {"web": {"decisions": [{"action": "Delete", "time": "t"}], "deleted": True}}},
                    "octo": {"skipped": True, "repos": {}},
                }
            )
        )

    def test_reports_pending_counts(self, workdir):
        self._seed(workdir)

        result = CliRunner().invoke(main, ["status"])

        assert result.exit_code == 0, result.output
        assert "acme" in result.output
        assert "octo" in result.output
        assert "1 of 3 repo(s) still pending" in result.output

    def test_single_owner(self, workdir):
        self._seed(workdir)

        result = CliRunner().invoke(main, ["status", "--owner", "acme"])

        assert "1 of 2 repo(s) still pending" in result.output

    def test_requires_cache(self, workdir):
        result = CliRunner().invoke(main, ["status"])

        assert result.exit_code != 0
        assert "ghsweep run" in result.output


class TestHistoryCommand:
    def _seed(self, workdir):
        data = workdir / "data"
        data.mkdir()
        (data / "decisions.json").write_text(
            json.dumps(
                {
                    "acme": {
                        "decisions": [{"name": "Process", "time": "2024-01-01T10:00:00+00:00"}],
                        "repos": {
                            "web": {
                                "decisions": [
                                    {"action": "CloseIssues", "time": "2024-01-01T10:01:00+00:00", "extra": {"issues": [4, 9]}},
                                    {"action": "Skip", "time": "2024-01-01T10:02:00+00:00"},
                                ],
                                "skipped": True,
                            },
                            "api": {"decisions": [{"action": "Archive", "time": "2024-01-01T10:03:00+00:00"}]},
                        },
                    }
                }
            )
        )

    def test_lists_owner_and_repo_events(self, workdir):
        self._seed(workdir)

        result = CliRunner().invoke(main, ["history", "--owner", "acme"])

        assert result.exit_code == 0, result.output
        assert "Process" in result.output
        assert "Archive" in result.output
        assert "#4, #9" in result.output

    def test_filter_by_repo(self, workdir):
        self._seed(workdir)

        result = CliRunner().invoke(main, ["history", "--owner", "acme", "--repo", "api"])

        assert "Archive" in result.output
        assert "Skip" not in result.output
        assert "Process" not in result.output

    def test_unknown_owner(self, workdir):
        result = CliRunner().invoke(main, ["history", "--owner", "nobody"])

        assert result.exit_code == 0
        assert "No decisions recorded for nobody" in result.output


# ---------------------------------------------------------------------------
# auth.py
# ---------------------------------------------------------------------------


class TestResolveGithubToken:
    def test_returns_env_var_when_set(self, monkeypatch):
        from ghsweep_cli.auth import resolve_github_token

        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert resolve_github_token() == "env-token"

    def test_falls_back_to_gh_cli(self, monkeypatch):
        from ghsweep_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="gh-token\n")
            result = resolve_github_token()
        assert result == "gh-token"

    def test_returns_none_when_gh_not_installed(self, monkeypatch):
        from ghsweep_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run", side_effect=FileNotFoundError):
            assert resolve_github_token() is None

    def test_returns_none_when_gh_times_out(self, monkeypatch):
        from ghsweep_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="gh", timeout=5)):
            assert resolve_github_token() is None

    def test_returns_none_when_gh_returns_error(self, monkeypatch):
        from ghsweep_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="")
            assert resolve_github_token() is None


class TestProvisionGithubToken:
    def test_writes_token_to_env_file(self, tmp_path, monkeypatch):
        from ghsweep_cli.auth import provision_github_token
        from ghsweep_cli.shell import RichShell

        # setenv so monkeypatch restores the variable the env file reload overwrites.
        monkeypatch.setenv("GITHUB_TOKEN", "placeholder")
        env_file = tmp_path / ".env"
        shell = MagicMock(spec=RichShell)
        shell.ask.return_value = "ghp_secret\n"

        token = provision_github_token(shell, str(env_file))

        assert token == "ghp_secret"
        assert "GITHUB_TOKEN" in env_file.read_text()
        assert "ghp_secret" in env_file.read_text()
        assert os.environ["GITHUB_TOKEN"] == "ghp_secret"
        shell.ask.assert_called_once_with("What is your token?", hide_input=True)

    def test_empty_answer_returns_none(self, tmp_path):
        from ghsweep_cli.auth import provision_github_token
        from ghsweep_cli.shell import RichShell

        env_file = tmp_path / ".env"
        shell = MagicMock(spec=RichShell)
        shell.ask.return_value = "  "

        assert provision_github_token(shell, str(env_file)) is None
        assert not env_file.exists()
