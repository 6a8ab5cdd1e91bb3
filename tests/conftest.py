"""Pytest configuration for Relay tests."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

from relay.providers.agent_provider import AgentProvider  # noqa: E402


class RecordingProvider(AgentProvider):
    """Agent double that returns canned responses and remembers prompts."""

    name = "recording"

    def __init__(self, response="", on_run=None):
        self.response = response
        self.on_run = on_run
        self.prompts: list[str] = []

    @property
    def called(self) -> bool:
        return bool(self.prompts)

    def run(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.on_run is not None:
            self.on_run(prompt)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def git(path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=path, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    git(tmp_path, "init")
    git(tmp_path, "config", "user.email", "test@example.com")
    git(tmp_path, "config", "user.name", "Test User")
    git(tmp_path, "config", "commit.gpgsign", "false")
    (tmp_path / "README.md").write_text("# Sample\n\nInitial content\n", encoding="utf-8")
    git(tmp_path, "add", ".")
    git(tmp_path, "commit", "-m", "chore: initial")
    return tmp_path


@pytest.fixture
def make_provider():
    return RecordingProvider


@pytest.fixture
def run_git():
    return git
