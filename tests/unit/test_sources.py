# SPDX-License-Identifier: Apache-2.0
"""Unit tests for staged path discovery."""

from __future__ import annotations

import sys

import pytest

from jsonguard.errors import FatalCheckError
from jsonguard.sources import (
    DIFF_FILTER,
    EMPTY_TREE,
    StagedPathSource,
    hooks_dir,
    repository_root,
    resolve_against,
)
from tests.base import run_git


class ScriptedSource(StagedPathSource):
    """Runs a Python snippet in place of git."""

    def __init__(self, script: str) -> None:
        super().__init__()
        self.script = script

    def command(self):
        return [sys.executable, "-c", self.script]


class TestStagedPathSource:
    def test_command_line(self):
        source = StagedPathSource(against="HEAD")

        assert source.command() == [
            "git",
            "-c",
            "core.quotePath=false",
            "diff-index",
            "--cached",
            "--name-only",
            f"--diff-filter={DIFF_FILTER}",
            "HEAD",
        ]

    def test_diff_filter_excludes_deletions(self):
        assert "d" in DIFF_FILTER
        assert "D" not in DIFF_FILTER

    def test_yields_each_output_line(self):
        script = "print('a.json'); print('notes.txt'); print('dir/b.json')"

        with ScriptedSource(script) as source:
            lines = list(source)

        assert [line.strip() for line in lines] == ["a.json", "notes.txt", "dir/b.json"]

    def test_nonzero_exit_is_fatal(self):
        script = "import sys; print('a.json'); sys.exit(128)"

        with pytest.raises(FatalCheckError, match="status 128"):
            with ScriptedSource(script) as source:
                list(source)

    def test_exception_in_block_kills_process(self):
        script = "import time; print('a.json', flush=True); time.sleep(30)"
        source = ScriptedSource(script)

        with pytest.raises(KeyError):
            with source:
                next(iter(source))
                proc = source._proc
                raise KeyError("boom")

        assert proc.returncode is not None

    def test_iterating_before_enter_raises(self):
        with pytest.raises(RuntimeError):
            list(StagedPathSource())

    def test_missing_executable_is_fatal(self):
        class MissingSource(StagedPathSource):
            def command(self):
                return ["definitely-not-a-real-git-binary-xyz"]

        with pytest.raises(FatalCheckError, match="cannot start"):
            with MissingSource():
                pass


class TestGitHelpers:
    def test_repository_root(self, git_repo):
        subdir = git_repo / "a" / "b"
        subdir.mkdir(parents=True)

        assert repository_root(subdir).resolve() == git_repo.resolve()

    def test_repository_root_outside_repo(self, tmp_path, git_repo):
        outside = tmp_path / "elsewhere"
        outside.mkdir()

        with pytest.raises(FatalCheckError, match="not inside a git work tree"):
            repository_root(outside)

    def test_resolve_against_falls_back_to_empty_tree(self, git_repo):
        assert resolve_against("HEAD", git_repo) == EMPTY_TREE

    def test_resolve_against_existing_head(self, git_repo, stage, commit):
        stage("a.json", "{}")
        commit()

        assert resolve_against("HEAD", git_repo) == "HEAD"

    def test_resolve_against_unknown_ref(self, git_repo):
        with pytest.raises(FatalCheckError, match="unknown revision: nope"):
            resolve_against("nope", git_repo)

    def test_hooks_dir(self, git_repo):
        assert hooks_dir(git_repo).resolve() == (git_repo / ".git" / "hooks").resolve()

    def test_staged_paths_from_real_git(self, git_repo, stage, commit):
        stage("old.json", "{}")
        commit()
        stage("new.json", "[]")
        stage("notes.txt", "hello")
        run_git(git_repo, "rm", "-q", "old.json")

        with StagedPathSource("HEAD", cwd=git_repo) as source:
            paths = sorted(line.strip() for line in source)

        # Deleted files are filtered out by git itself.
        assert paths == ["new.json", "notes.txt"]

    def test_staged_paths_before_first_commit(self, git_repo, stage):
        stage("first.json", "{}")

        with StagedPathSource(resolve_against("HEAD", git_repo), cwd=git_repo) as source:
            paths = [line.strip() for line in source]

        assert paths == ["first.json"]

    def test_non_ascii_paths_are_not_quoted(self, git_repo, stage):
        stage("données.json", "{}")

        with StagedPathSource(EMPTY_TREE, cwd=git_repo) as source:
            paths = [line.strip() for line in source]

        assert paths == ["données.json"]
