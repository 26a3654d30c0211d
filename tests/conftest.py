# SPDX-License-Identifier: Apache-2.0
"""Shared test fixtures for the jsonguard test suite.

FIXTURES PROVIDED:
- reset_jsonguard_logging: drops handlers the CLI attaches to the package logger
- git_repo: empty git repository with an identity configured (skips without git)
- stage: writes a file into ``git_repo`` and adds it to the index
- commit: records the current index as a commit
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Union

import pytest

from tests.base import run_git

GIT = shutil.which("git")


@pytest.fixture(autouse=True)
def reset_jsonguard_logging():
    """Remove CLI log handlers so they don't outlive a CliRunner stream."""
    yield
    package_logger = logging.getLogger("jsonguard")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """Empty repository at ``tmp_path / "repo"``.

    Example:
        def test_staged(git_repo, stage):
            stage("a.json", "{}")
    """
    if GIT is None:
        pytest.skip("git is not installed")

    for var in ("GIT_DIR", "GIT_WORK_TREE", "GIT_INDEX_FILE"):
        monkeypatch.delenv(var, raising=False)

    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    run_git(repo, "config", "user.email", "dev@example.com")
    run_git(repo, "config", "user.name", "Dev")
    run_git(repo, "config", "commit.gpgsign", "false")
    return repo


@pytest.fixture
def stage(git_repo):
    """Write ``content`` to ``name`` inside the repository and stage it."""

    def _stage(name: str, content: Union[str, bytes]) -> Path:
        path = git_repo / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        run_git(git_repo, "add", "--", name)
        return path

    return _stage


@pytest.fixture
def commit(git_repo):
    def _commit(message: str = "commit") -> None:
        run_git(git_repo, "commit", "-q", "--no-verify", "-m", message)

    return _commit
