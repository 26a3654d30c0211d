# SPDX-License-Identifier: Apache-2.0
"""Per-file JSON syntax validation with context diagnostics."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Tuple, Union

from .errors import FatalCheckError
from .window import LEADING_LINES, TRAILING_LINES, extract_window

WINDOW_SIZE = 4096

PathLike = Union[str, Path]

# A string literal, or one of the constants Python's decoder accepts but JSON does not.
_CONSTANT_TOKEN = re.compile(r'"(?:[^"\\]|\\.)*"|(-?Infinity|NaN)', re.DOTALL)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParseOutcome:
    """Result of validating a single file.

    ``offset`` is a byte position in the file; 0 means the decoder reported
    no usable position. ``snippet`` is only set for non-zero offsets.
    """

    path: str
    valid: bool = True
    message: str = ""
    offset: int = 0
    snippet: Optional[str] = None

    @classmethod
    def invalid(
        cls, path: str, message: str, offset: int = 0, snippet: Optional[str] = None
    ) -> ParseOutcome:
        return cls(path=path, valid=False, message=message, offset=offset, snippet=snippet)

    def render(self) -> str:
        """Format the outcome as a diagnostic line."""
        if self.snippet is None:
            return f"{self.path}: {self.message}"
        return f"{self.path}:{self.offset}: {self.message}; context:\n{self.snippet}\n\n"


def byte_offset(text: str, pos: int) -> int:
    """Convert a character index into ``text`` to a UTF-8 byte offset."""
    return len(text[:pos].encode("utf-8"))


class NonStandardConstant(ValueError):
    """Raised for ``NaN``, ``Infinity`` or ``-Infinity`` in a document."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


def _reject_constant(name: str) -> None:
    raise NonStandardConstant(name)


def constant_position(text: str, name: str) -> int:
    """Return the character index of the first ``name`` token outside strings.

    The decoder stops at the first constant it meets, so everything before it
    is well-formed and string literals can be skipped with a plain pattern.
    """
    for match in _CONSTANT_TOKEN.finditer(text):
        if match.group(1) == name:
            return match.start(1)
    return 0


def read_window(fh: BinaryIO, offset: int, window_size: int = WINDOW_SIZE) -> Tuple[bytes, int]:
    """Read at most ``window_size`` bytes of ``fh`` centred on ``offset``.

    Returns:
        Tuple of the bytes read and the file position they start at.

    Raises:
        FatalCheckError: If the file cannot be stat'ed, seeked or fully read
    """
    name = getattr(fh, "name", "<stream>")
    try:
        size = os.fstat(fh.fileno()).st_size
    except OSError as e:
        raise FatalCheckError(f"cannot stat {name}: {e}") from e

    start = max(0, offset - window_size // 2)
    end = min(start + window_size, size)
    length = max(end - start, 0)

    try:
        fh.seek(start)
        buf = fh.read(length)
    except OSError as e:
        raise FatalCheckError(f"cannot read {name}: {e}") from e

    if len(buf) != length:
        raise FatalCheckError(
            f"short read from {name}: wanted {length} bytes at {start}, got {len(buf)}"
        )
    return buf, start


class FileValidator:
    """Check that a file holds exactly one well-formed JSON value.

    Paths are resolved against ``root`` when one is given. Each invalid file
    produces one diagnostic on this module's logger; ``on_failure`` is called
    with the path as soon as a decode error is seen, before the context
    window is read back from disk.
    """

    def __init__(
        self,
        root: Optional[PathLike] = None,
        window_size: int = WINDOW_SIZE,
        leading_lines: int = LEADING_LINES,
        trailing_lines: int = TRAILING_LINES,
        on_failure: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.root = Path(root) if root is not None else None
        self.window_size = window_size
        self.leading_lines = leading_lines
        self.trailing_lines = trailing_lines
        self.on_failure = on_failure

    def resolve(self, path: str) -> Path:
        return self.root / path if self.root is not None else Path(path)

    def validate(self, path: str) -> ParseOutcome:
        """Validate ``path`` and log a diagnostic if it is not valid JSON.

        Raises:
            FatalCheckError: If the file cannot be opened, or its context
                window cannot be read back
        """
        try:
            fh = open(self.resolve(path), "rb")
        except OSError as e:
            raise FatalCheckError(f"cannot open {path}: {e.strerror or e}") from e

        with fh:
            error = self._decode(fh)
            if error is None:
                return ParseOutcome(path)

            message, offset = error
            if self.on_failure is not None:
                self.on_failure(path)

            if offset == 0:
                outcome = ParseOutcome.invalid(path, message)
            else:
                buf, start = read_window(fh, offset, self.window_size)
                snippet = extract_window(
                    buf, offset - start, self.leading_lines, self.trailing_lines
                )
                outcome = ParseOutcome.invalid(
                    path, message, offset, snippet.decode("utf-8", errors="replace")
                )

        logger.error("%s", outcome.render())
        return outcome

    @staticmethod
    def _decode(fh: BinaryIO) -> Optional[Tuple[str, int]]:
        """Return ``(message, byte_offset)`` for an invalid document, else None."""
        try:
            data = fh.read()
        except OSError as e:
            return f"read error: {e}", 0

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            return f"invalid UTF-8 byte 0x{data[e.start]:02x}: {e.reason}", e.start

        # Numbers stay as strings: only syntax matters, and int() refuses
        # very long literals.
        try:
            json.loads(
                text, parse_int=str, parse_float=str, parse_constant=_reject_constant
            )
        except json.JSONDecodeError as e:
            return str(e), byte_offset(text, e.pos)
        except NonStandardConstant as e:
            pos = constant_position(text, e.name)
            return f"{e.name} is not a valid JSON value", byte_offset(text, pos)
        except RecursionError:
            return "document is nested too deeply to decode", 0
        return None
