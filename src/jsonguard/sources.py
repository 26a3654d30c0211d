# SPDX-License-Identifier: Apache-2.0
"""Staged path discovery through git."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import FatalCheckError

# Added, copied, modified, renamed, type-changed, unmerged, unknown and
# broken pairs; lowercase ``d`` excludes deletions.
DIFF_FILTER = "ACdMRTUXB"

# Object id of git's empty tree, used before the first commit exists.
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

PathLike = Union[str, Path]

logger = logging.getLogger(__name__)


def _git(args: List[str], cwd: Optional[PathLike] = None) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise FatalCheckError(f"cannot run git: {e}") from e


def repository_root(cwd: Optional[PathLike] = None) -> Path:
    """Return the top-level directory of the work tree containing ``cwd``."""
    result = _git(["rev-parse", "--show-toplevel"], cwd)
    if result.returncode != 0:
        raise FatalCheckError(f"not inside a git work tree: {result.stderr.strip()}")
    return Path(result.stdout.strip())


def resolve_against(ref: str = "HEAD", cwd: Optional[PathLike] = None) -> str:
    """Return the tree-ish to diff the index against.

    ``HEAD`` falls back to the empty tree when the repository has no commits
    yet; any other unresolvable ref is an error.
    """
    result = _git(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd)
    if result.returncode == 0:
        return ref
    if ref == "HEAD":
        logger.debug("HEAD does not resolve, diffing against the empty tree")
        return EMPTY_TREE
    raise FatalCheckError(f"unknown revision: {ref}")


def hooks_dir(cwd: Optional[PathLike] = None) -> Path:
    """Return the hooks directory of the repository containing ``cwd``."""
    result = _git(["rev-parse", "--git-path", "hooks"], cwd)
    if result.returncode != 0:
        raise FatalCheckError(f"not inside a git repository: {result.stderr.strip()}")
    path = Path(result.stdout.strip())
    if not path.is_absolute():
        path = Path(cwd or ".") / path
    return path


class StagedPathSource:
    """Line iterator over the output of ``git diff-index --cached``.

    Use as a context manager: git is started on entry and reaped on exit,
    where a non-zero exit status raises ``FatalCheckError``. Leaving the
    block on an exception kills git instead.
    """

    def __init__(
        self,
        against: str = "HEAD",
        diff_filter: str = DIFF_FILTER,
        cwd: Optional[PathLike] = None,
    ) -> None:
        self.against = against
        self.diff_filter = diff_filter
        self.cwd = cwd
        self._proc: Optional[subprocess.Popen] = None

    def command(self) -> List[str]:
        return [
            "git",
            "-c",
            "core.quotePath=false",
            "diff-index",
            "--cached",
            "--name-only",
            f"--diff-filter={self.diff_filter}",
            self.against,
        ]

    def __enter__(self) -> StagedPathSource:
        cmd = self.command()
        logger.debug("Running %s", " ".join(cmd))
        try:
            self._proc = subprocess.Popen(
                cmd,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
            )
        except OSError as e:
            raise FatalCheckError(f"cannot start git diff-index: {e}") from e
        return self

    def __iter__(self) -> Iterator[str]:
        if self._proc is None or self._proc.stdout is None:
            raise RuntimeError("StagedPathSource must be entered before iterating")
        try:
            for line in self._proc.stdout:
                yield line
        except OSError as e:
            raise FatalCheckError(f"error reading git diff-index output: {e}") from e

    def __exit__(self, exc_type, exc, tb) -> bool:
        proc, self._proc = self._proc, None
        if proc is None:
            return False

        if exc_type is not None:
            proc.kill()
            proc.wait()
            if proc.stdout is not None:
                proc.stdout.close()
            return False

        if proc.stdout is not None:
            proc.stdout.close()
        returncode = proc.wait()
        if returncode != 0:
            raise FatalCheckError(f"git diff-index exited with status {returncode}")
        return False
