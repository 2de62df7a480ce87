"""Tests for GitHub token lookup."""

from subprocess import CompletedProcess
from unittest.mock import patch

import pytest

from cslaunch.gateway.http.auth import fetch_github_token, resolve_github_token


def test_fetch_github_token_strips_output() -> None:
    """The token is read from gh auth token for the given host."""
    completed = CompletedProcess(args=[], returncode=0, stdout="gho_abc123\n", stderr="")
    with patch("cslaunch.subprocess_utils.subprocess.run", return_value=completed) as run:
        token = fetch_github_token("github.example.com")

    assert token == "gho_abc123"
    assert run.call_args.args[0] == ["gh", "auth", "token", "--hostname", "github.example.com"]


def test_fetch_github_token_rejects_empty_output() -> None:
    """An empty token is an error rather than an anonymous client."""
    completed = CompletedProcess(args=[], returncode=0, stdout="\n", stderr="")
    with patch("cslaunch.subprocess_utils.subprocess.run", return_value=completed):
        with pytest.raises(ValueError, match="empty token"):
            fetch_github_token("github.com")


def test_gh_token_wins_over_github_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """GH_TOKEN is preferred and gh is never asked."""
    monkeypatch.setenv("GH_TOKEN", "gh-env")
    monkeypatch.setenv("GITHUB_TOKEN", "github-env")
    with patch("cslaunch.gateway.http.auth.fetch_github_token") as fetch:
        assert resolve_github_token("github.com") == "gh-env"

    fetch.assert_not_called()


def test_github_token_used_when_gh_token_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    """A blank GH_TOKEN falls through to GITHUB_TOKEN."""
    monkeypatch.setenv("GH_TOKEN", "  ")
    monkeypatch.setenv("GITHUB_TOKEN", "github-env")

    assert resolve_github_token("github.com") == "github-env"


def test_gh_cli_is_the_last_resort(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without env tokens the gh CLI is asked for the given host."""
    monkeypatch.delenv("GH_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    with patch("cslaunch.gateway.http.auth.fetch_github_token", return_value="gh-cli") as fetch:
        assert resolve_github_token("ghe.example.com") == "gh-cli"

    fetch.assert_called_once_with("ghe.example.com")
