# SPDX-License-Identifier: Apache-2.0
"""Fake file validator for coordinator tests."""

from __future__ import annotations

import random
import threading
import time
from typing import Iterable, Optional

from jsonguard.errors import FatalCheckError
from jsonguard.validator import FileValidator, ParseOutcome


class FakeFileValidator(FileValidator):
    """Validator that never touches the filesystem.

    Paths listed in ``invalid`` fail, paths in ``fatal`` raise
    ``FatalCheckError`` and paths in ``crash`` raise ``ValueError``. Every
    call sleeps for up to ``max_delay`` seconds so completion order varies.
    """

    def __init__(
        self,
        invalid: Iterable[str] = (),
        fatal: Iterable[str] = (),
        crash: Iterable[str] = (),
        max_delay: float = 0.0,
        seed: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.invalid = set(invalid)
        self.fatal = set(fatal)
        self.crash = set(crash)
        self.max_delay = max_delay
        self.seen: list[str] = []
        self.running = 0
        self.max_running = 0
        self._lock = threading.Lock()
        self._random = random.Random(seed)

    def validate(self, path: str) -> ParseOutcome:
        with self._lock:
            self.seen.append(path)
            self.running += 1
            self.max_running = max(self.max_running, self.running)
            delay = self._random.uniform(0, self.max_delay) if self.max_delay else 0.0
        try:
            if delay:
                time.sleep(delay)
            if path in self.fatal:
                raise FatalCheckError(f"cannot open {path}: Permission denied")
            if path in self.crash:
                raise ValueError(f"unexpected failure for {path}")
            if path in self.invalid:
                if self.on_failure is not None:
                    self.on_failure(path)
                return ParseOutcome.invalid(path, "Expecting value")
            return ParseOutcome(path)
        finally:
            with self._lock:
                self.running -= 1
