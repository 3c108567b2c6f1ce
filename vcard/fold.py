"""
vCard line folding and unfolding.

Unfolding happens byte by byte, ahead of the parser, so that a soft line
break may fall anywhere (even in the middle of a name or a UTF-8 sequence):

    "PR\\r\\n OP:va\\r\\n\\tlue\\r\\n"  ->  "PROP:value\\n"

Folding works on characters, so it never splits an encoded character:

    fold("BEGIN:VCARD", 10)  ->  "BEGIN:VC\\r\\n ARD"

The two are not exact inverses. A logical line that itself starts with a
space or tab cannot survive folding, since after unfolding the inserted
continuation space looks the same as the original leading whitespace.
"""

from __future__ import annotations

import io
from typing import BinaryIO

from vcard.spec import CR, LF, SPACE, TAB, DEFAULT_FOLD_WIDTH, MIN_FOLD_WIDTH


class UnfoldingReader:
    """
    Byte reader that unfolds continuation lines as they are read.

    "\\r\\n" and "\\n" come out as a single "\\n", unless followed by a space
    or tab, in which case the terminator and the whitespace byte are dropped.
    A lone "\\r" passes through. ``None`` marks the end of input, for every
    read past the end.

    Usage:
        reader = UnfoldingReader(open("contacts.vcf", "rb"))
        while (b := reader.read_byte()) is not None:
            ...
    """

    def __init__(self, source: BinaryIO) -> None:
        self._source = source
        self._line = 1
        self._last_line = 1
        self._exhausted = False
        self._unread: list[int] = []  # raw bytes read ahead, popped before the source
        self._peeked: tuple[int | None, int] | None = None  # (byte, folds skipped before it)

    @property
    def line(self) -> int:
        """Physical line number of the read position.

        Counts every line terminator consumed so far, whether it came out as
        "\\n" or was dropped by unfolding.
        """
        return self._line

    @property
    def last_line(self) -> int:
        """Physical line of the byte most recently read."""
        return self._last_line

    def peek_line(self) -> int:
        """Physical line of the byte peek_byte() returns."""
        self.peek_byte()
        return self._line + self._peeked[1]

    def read_byte(self) -> int | None:
        """Read one unfolded byte, or None at end of input."""
        if self._peeked is not None:
            b, folds = self._peeked
            self._peeked = None
        else:
            b, folds = self._next()
        self._line += folds
        self._last_line = self._line
        if b == LF:
            self._line += 1
        return b

    def peek_byte(self) -> int | None:
        """Return the next unfolded byte without consuming it."""
        if self._peeked is None:
            self._peeked = self._next()
        return self._peeked[0]

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` unfolded bytes (all remaining if negative)."""
        out = bytearray()
        while size < 0 or len(out) < size:
            b = self.read_byte()
            if b is None:
                break
            out.append(b)
        return bytes(out)

    def _next(self) -> tuple[int | None, int]:
        # Returns the next logical byte and the number of continuation
        # terminators dropped before it.
        folds = 0
        while True:
            b = self._raw()
            if b == CR:
                b2 = self._raw()
                if b2 != LF:
                    self._push(b2)
                    return CR, folds
                b = LF
            if b == LF:
                b2 = self._raw()
                if b2 == SPACE or b2 == TAB:
                    folds += 1
                    continue
                self._push(b2)
            return b, folds

    def _raw(self) -> int | None:
        if self._unread:
            return self._unread.pop()
        if self._exhausted:
            return None
        chunk = self._source.read(1)
        if not chunk:
            self._exhausted = True
            return None
        return chunk[0]

    def _push(self, b: int | None) -> None:
        if b is not None:
            self._unread.append(b)


def unfold(data: bytes | str) -> str:
    """Unfold a complete vCard text. Line endings come out as "\\n"."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return UnfoldingReader(io.BytesIO(data)).read().decode("utf-8")


def fold(text: str, width: int = DEFAULT_FOLD_WIDTH) -> str:
    """Fold text so that no physical line exceeds ``width`` bytes.

    ``width`` includes the two bytes of the "\\r\\n" terminator, so the
    default of 77 leaves 75 bytes of content per line. Every "\\n" is written
    as "\\r\\n". A "\\r" not followed by "\\n" counts as an ordinary character.
    A character wider than ``width - 3`` bytes can overflow its line.
    """
    if width < MIN_FOLD_WIDTH:
        raise ValueError(f"Fold width must be at least {MIN_FOLD_WIDTH}, got {width}")
    limit = width - 2

    out = io.StringIO()
    line: list[str] = []
    line_len = 0
    last_cr = False

    def wrap_if(extra: int) -> None:
        nonlocal line_len
        # A line of one byte or less is never wrapped
        if line_len + extra > limit and line_len > 1:
            out.write("".join(line) + "\r\n")
            line.clear()
            line.append(" ")
            line_len = 1

    def end_line() -> None:
        nonlocal line_len
        out.write("".join(line) + "\r\n")
        line.clear()
        line_len = 0

    for c in text:
        if last_cr:
            last_cr = False
            if c == "\n":
                end_line()
                continue
            wrap_if(1)
            line.append("\r")
            line_len += 1
        if c == "\r":
            last_cr = True
        elif c == "\n":
            end_line()
        else:
            n = len(c.encode("utf-8"))
            wrap_if(n)
            line.append(c)
            line_len += n

    if last_cr:
        wrap_if(1)
        line.append("\r")

    out.write("".join(line))
    return out.getvalue()
