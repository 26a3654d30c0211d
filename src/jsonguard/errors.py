# SPDX-License-Identifier: Apache-2.0
"""Exceptions shared across the check."""

from __future__ import annotations


class FatalCheckError(RuntimeError):
    """Infrastructure failure that makes the whole check unreliable.

    Raised for files that cannot be opened, stat'ed or read back, and for a
    path source that cannot be started or read. Unlike a JSON syntax error
    this aborts the run.
    """

    pass
