# SPDX-License-Identifier: Apache-2.0
"""jsonguard command line interface."""

from __future__ import annotations

import typer

from .check import check, default
from .install_hook import install_hook

app = typer.Typer(
    add_completion=False,
    help="Validate staged JSON files before they are committed.",
)

app.callback(invoke_without_command=True)(default)
app.command(name="check")(check)
app.command(name="install-hook")(install_hook)

__all__ = ["app"]
