# SPDX-License-Identifier: Apache-2.0
"""Threaded fan-out of file validations."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .errors import FatalCheckError
from .metrics import FILES_CHECKED, FILES_INVALID, INFLIGHT, VALIDATION_LATENCY
from .validator import FileValidator

JSON_SUFFIX = ".json"

# Closes the failure signal queue.
_CLOSED = object()

logger = logging.getLogger(__name__)


def is_candidate(path: str) -> bool:
    """Return True if ``path`` names a JSON file that should be validated."""
    return len(path) >= len(JSON_SUFFIX) and path.endswith(JSON_SUFFIX)


class CompletionBarrier:
    """Counter of outstanding validations.

    ``wait`` blocks until the count drops to zero. An error handed to
    ``fail`` wakes the waiter straight away and is re-raised from ``wait``.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._count = 0
        self._error: Optional[BaseException] = None

    def add(self, n: int = 1) -> None:
        with self._cond:
            self._count += n

    def done(self) -> None:
        with self._cond:
            if self._count == 0:
                raise RuntimeError("CompletionBarrier.done() called more times than add()")
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def fail(self, error: BaseException) -> None:
        with self._cond:
            if self._error is None:
                self._error = error
            self._cond.notify_all()

    @property
    def pending(self) -> int:
        with self._cond:
            return self._count

    @property
    def failed(self) -> bool:
        with self._cond:
            return self._error is not None

    def wait(self) -> None:
        with self._cond:
            self._cond.wait_for(lambda: self._count == 0 or self._error is not None)
            if self._error is not None:
                raise self._error


@dataclass
class AggregateStatus:
    """Failure tally written only by the aggregation thread."""

    failures: int = 0

    @property
    def failed(self) -> bool:
        return self.failures > 0


class CheckCoordinator:
    """Fan candidate paths out to one validation thread each.

    While ``run`` is in progress the coordinator replaces
    ``validator.on_failure`` with its own hook, which still forwards to the
    hook the caller set; the original is put back when ``run`` returns.
    Each failure is pushed through a single-slot queue to an aggregation
    thread, which is the only writer of ``status``. ``workers`` caps the
    number of validations running at once; ``None`` starts a thread per
    file without limit.

    A coordinator is good for a single ``run``.
    """

    def __init__(self, validator: FileValidator, workers: Optional[int] = None) -> None:
        self.validator = validator
        self.workers = workers
        self.status = AggregateStatus()
        self.dispatched = 0

        self._caller_hook: Optional[Callable[[str], None]] = None
        self._signals: queue.Queue = queue.Queue(maxsize=1)
        self._barrier = CompletionBarrier()
        self._slots = threading.BoundedSemaphore(workers) if workers else None

    # ---------------------------------------------------------------
    def _signal(self, path: str) -> None:
        if self._caller_hook is not None:
            self._caller_hook(path)
        self._signals.put(path)

    def _aggregate(self) -> None:
        for path in iter(self._signals.get, _CLOSED):
            logger.debug("Failure signalled for %s", path)
            self.status.failures += 1
            FILES_INVALID.inc()

    def _validate(self, path: str) -> None:
        INFLIGHT.inc()
        try:
            with VALIDATION_LATENCY.time():
                self.validator.validate(path)
            FILES_CHECKED.inc()
        except Exception as e:
            self._barrier.fail(e)
        finally:
            INFLIGHT.dec()
            if self._slots is not None:
                self._slots.release()
            self._barrier.done()

    def _dispatch(self, path: str) -> None:
        if self._slots is not None:
            self._slots.acquire()
        self._barrier.add()
        self.dispatched += 1
        logger.debug("Dispatching validation %d for %s", self.dispatched, path)

        worker = threading.Thread(
            target=self._validate,
            args=(path,),
            name=f"jsonguard-validate-{self.dispatched}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as e:
            if self._slots is not None:
                self._slots.release()
            self._barrier.done()
            raise FatalCheckError(f"cannot start validation of {path}: {e}") from e

    # ---------------------------------------------------------------
    def run(self, lines: Iterable[str]) -> int:
        """Validate every JSON path in ``lines`` and return the exit code.

        Returns:
            0 if every file parsed, 1 if at least one did not

        Raises:
            FatalCheckError: If any validation hit an infrastructure error;
                remaining validations are abandoned
        """
        self._caller_hook = self.validator.on_failure
        self.validator.on_failure = self._signal
        try:
            aggregator = threading.Thread(
                target=self._aggregate, name="jsonguard-aggregate", daemon=True
            )
            aggregator.start()

            for line in lines:
                if self._barrier.failed:
                    break
                path = line.strip()
                if not is_candidate(path):
                    continue
                self._dispatch(path)

            self._barrier.wait()
            self._signals.put(_CLOSED)
            aggregator.join()
        finally:
            self.validator.on_failure = self._caller_hook

        logger.debug(
            "Validated %d file(s), %d invalid", self.dispatched, self.status.failures
        )
        return 1 if self.status.failed else 0
