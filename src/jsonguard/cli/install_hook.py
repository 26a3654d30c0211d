# SPDX-License-Identifier: Apache-2.0
"""Install jsonguard as a git pre-commit hook."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer

HOOK_TEMPLATE = """#!/bin/sh
# Installed by jsonguard: reject commits that stage malformed JSON.
# To skip once: git commit --no-verify
exec "{python}" -m jsonguard
"""


def install_hook(
    repo: Optional[Path] = typer.Option(
        None, "--repo", help="Repository to install into (default: current directory)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing hook"),
):
    """Install a pre-commit hook that runs the staged JSON check."""
    from jsonguard.errors import FatalCheckError
    from jsonguard.sources import hooks_dir

    try:
        hooks = hooks_dir(repo if repo is not None else Path.cwd())
    except FatalCheckError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    hook = hooks / "pre-commit"
    if hook.exists() and not force:
        typer.echo(f"❌ {hook} already exists. Use --force to overwrite it.", err=True)
        raise typer.Exit(1)

    hooks.mkdir(parents=True, exist_ok=True)
    hook.write_text(HOOK_TEMPLATE.format(python=sys.executable), encoding="utf-8")
    hook.chmod(0o755)

    print(f"✅ Pre-commit hook installed at {hook}")
    print("💡 To skip once: git commit --no-verify")
