# SPDX-License-Identifier: Apache-2.0
"""Context window extraction around a byte offset."""

from __future__ import annotations

LEADING_LINES = 3
TRAILING_LINES = 2

_NEWLINE = 0x0A


def extract_window(
    buf: bytes,
    offset: int,
    leading: int = LEADING_LINES,
    trailing: int = TRAILING_LINES,
) -> bytes:
    """Return the lines of ``buf`` surrounding ``offset``.

    The window opens at the ``leading``-th newline found scanning backward
    from ``offset`` (or at index 0) and closes at the ``trailing``-th newline
    found scanning forward (or at the end of the buffer). The byte at
    ``offset`` takes part in both scans. Carriage returns and newlines are
    trimmed from both ends of the result.

    Offsets outside the buffer are clamped to its first or last byte.

    Examples:
        >>> extract_window(b"a\\nb\\nc\\nd\\ne\\nf", 6)
        b'b\\nc\\nd\\ne'
    """
    if not buf:
        return b""
    offset = min(max(offset, 0), len(buf) - 1)

    start = offset
    newlines = 0
    while start > 0:
        if buf[start] == _NEWLINE:
            newlines += 1
            if newlines == leading:
                break
        start -= 1

    end = offset
    newlines = 0
    while end < len(buf):
        if buf[end] == _NEWLINE:
            newlines += 1
            if newlines == trailing:
                break
        end += 1

    return buf[start:end].strip(b"\r\n")
