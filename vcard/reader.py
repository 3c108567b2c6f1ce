"""
vCard Reader - Recursive-descent parser for vCard text.

Grammar (on unfolded input, names upper-cased as they are read):
    card      := "BEGIN:VCARD" property* "END:VCARD"
    property  := [group "."] name (";" parameter)* ":" value ("," value)* EOL
    parameter := name "=" pvalue ("," pvalue)*
    pvalue    := '"' quote-safe* '"' | safe*
    value     := (value-char | escape)*

Streaming features:
  - Input is pulled one byte at a time through an UnfoldingReader
  - One byte of lookahead, no backtracking
  - Cards can be taken one at a time (Parser.next_card) or all at once

Error features:
  - ParseError carries the physical line number and the expected construct
  - Running out of input inside a card raises UnexpectedEndError
  - Errors from the byte source propagate unchanged
  - No recovery: parsing stops at the first error
"""

from __future__ import annotations

import builtins
import io
import logging
from pathlib import Path
from typing import BinaryIO, Iterator

from vcard.card import Card, Property
from vcard.errors import ParseError, UnexpectedEndError
from vcard.fold import UnfoldingReader
from vcard.spec import (
    BEGIN, END, RECORD_TYPE, MAGIC, MAX_FILE_SIZE, MAX_MAGIC_SCAN_BYTES,
    LF, COMMA, DQUOTE, DOT, COLON, SEMICOLON, EQUALS, BACKSLASH,
    is_name_byte, is_value_byte, is_quote_safe_byte, is_safe_byte,
)

logger = logging.getLogger(__name__)


def _show(b: int) -> str:
    return repr(chr(b))


def _decode(bs: bytearray, line: int) -> str:
    try:
        return bs.decode("utf-8")
    except UnicodeDecodeError:
        raise ParseError(line, "invalid UTF-8 sequence") from None


class Parser:
    """
    Pulls cards out of a byte source.

    Usage:
        parser = Parser(open("contacts.vcf", "rb"))
        for card in parser:
            print(card.value("FN"))

    ``strict`` controls duplicate parameter names within one property: an
    error when strict, otherwise the first occurrence wins.
    """

    def __init__(self, source: BinaryIO, strict: bool = True) -> None:
        self.r = UnfoldingReader(source)
        self.strict = strict

    @property
    def line(self) -> int:
        return self.r.line

    def next_card(self) -> Card | None:
        """Parse the next card, or return None if the input is exhausted."""
        if self.r.peek_byte() is None:
            return None
        card = self._parse_card()
        logger.debug("parsed card with %d properties, next line %d", len(card), self.r.line)
        return card

    def __iter__(self) -> Iterator[Card]:
        return self

    def __next__(self) -> Card:
        card = self.next_card()
        if card is None:
            raise StopIteration
        return card

    # --- Productions ---

    def _parse_card(self) -> Card:
        card = Card()
        line, name, prop = self._parse_property()
        if name != BEGIN or not _is_marker(prop):
            raise ParseError(line, "expected beginning of card")

        while True:
            if self.r.peek_byte() is None:
                raise UnexpectedEndError(self.r.peek_line(), "unexpected end of input before ending card")
            line, name, prop = self._parse_property()
            if name == END:
                if not _is_marker(prop):
                    raise ParseError(line, "malformed end tag")
                return card
            if name == BEGIN:
                raise ParseError(line, "unexpected BEGIN inside card")
            card.properties.setdefault(name, []).append(prop)

    def _parse_property(self) -> tuple[int, str, Property]:
        """Parse one property. Returns (start line, name, property)."""
        start = self.r.peek_line()
        group = ""
        params: dict[str, list[str]] = {}

        name = self._parse_name("expected property name")
        b = self._demand_byte("expected parameters or property value")
        if b == DOT:
            group = name
            name = self._parse_name("expected property name")
            b = self._demand_byte("expected parameters or property value")

        if b == SEMICOLON:
            params = self._parse_parameters()
            b = self._demand_byte("expected property value")

        if b != COLON:
            raise ParseError(self.r.last_line, "expected ':'")

        values = self._parse_values()

        b = self.r.read_byte()
        if b is not None and b != LF:
            raise ParseError(self.r.last_line, f"unexpected character {_show(b)} after property value")

        return start, name, Property(values, group=group, params=params)

    def _parse_values(self) -> list[str]:
        values = [self._parse_value()]
        while self.r.peek_byte() == COMMA:
            self.r.read_byte()
            values.append(self._parse_value())
        return values

    def _parse_value(self) -> str:
        """Parse one property value. An empty value is still a value."""
        bs = bytearray()
        start = self.r.peek_line()
        while True:
            b = self.r.peek_byte()
            if b is None or not is_value_byte(b):
                return _decode(bs, start)
            self.r.read_byte()
            if b != BACKSLASH:
                bs.append(b)
                continue
            b2 = self._demand_byte("expected escaped character")
            if b2 == COMMA or b2 == BACKSLASH:
                bs.append(b2)
            elif b2 == ord("n"):
                bs.append(LF)
            elif b2 == SEMICOLON:
                # Kept escaped: structured values are split on ";" later
                bs += b"\\;"
            else:
                raise ParseError(self.r.last_line, f"{_show(b2)} cannot be escaped")

    def _parse_parameters(self) -> dict[str, list[str]]:
        params: dict[str, list[str]] = {}
        while True:
            line = self.r.peek_line()
            key, values = self._parse_parameter()
            if key in params:
                if self.strict:
                    raise ParseError(line, f"duplicate parameter {key!r}")
                logger.debug("line %d: ignoring duplicate parameter %r", line, key)
            else:
                params[key] = values
            if self.r.peek_byte() != SEMICOLON:
                return params
            self.r.read_byte()

    def _parse_parameter(self) -> tuple[str, list[str]]:
        key = self._parse_name("expected parameter name")
        msg = f"expected '=' after parameter name {key}"
        if self._demand_byte(msg) != EQUALS:
            raise ParseError(self.r.last_line, msg)

        values = [self._parse_parameter_value()]
        while self.r.peek_byte() == COMMA:
            self.r.read_byte()
            values.append(self._parse_parameter_value())
        return key, values

    def _parse_parameter_value(self) -> str:
        if self.r.peek_byte() == DQUOTE:
            self.r.read_byte()
            return self._parse_quoted_parameter_value()
        return self._parse_unquoted_parameter_value()

    def _parse_quoted_parameter_value(self) -> str:
        """Parse the inside of a quoted parameter value, and the closing quote."""
        bs = bytearray()
        start = self.r.line
        while True:
            b = self.r.read_byte()
            if b is None:
                raise UnexpectedEndError(self.r.line, "unexpected end of quoted parameter value")
            if b == DQUOTE:
                return _decode(bs, start)
            if not is_quote_safe_byte(b):
                raise ParseError(self.r.last_line, f"unexpected byte {_show(b)} in quoted parameter value")
            bs.append(b)

    def _parse_unquoted_parameter_value(self) -> str:
        bs = bytearray()
        start = self.r.peek_line()
        while True:
            b = self.r.peek_byte()
            if b is None or not is_safe_byte(b):
                return _decode(bs, start)
            self.r.read_byte()
            bs.append(b)

    def _parse_name(self, missing: str) -> str:
        """Parse a property name, group or parameter name, upper-cased."""
        bs = bytearray()
        while True:
            b = self.r.peek_byte()
            if b is None or not is_name_byte(b):
                break
            self.r.read_byte()
            bs.append(b)
        if not bs:
            if b is None:
                raise UnexpectedEndError(self.r.peek_line(), missing)
            raise ParseError(self.r.peek_line(), missing)
        return bs.decode("ascii").upper()

    def _demand_byte(self, missing: str) -> int:
        """Read the next byte; running out of input is an error."""
        b = self.r.read_byte()
        if b is None:
            raise UnexpectedEndError(self.r.line, missing)
        return b


def _is_marker(prop: Property) -> bool:
    return (
        not prop.group
        and not prop.params
        and len(prop.values) == 1
        and prop.values[0].upper() == RECORD_TYPE
    )


def parse_all(source: BinaryIO, strict: bool = True) -> list[Card]:
    """Parse cards until the input is exhausted.

    On failure, the cards parsed before it are kept in the error's ``cards``
    attribute. This holds for a ParseError and for an OSError raised by the
    source, which propagates unwrapped.
    """
    parser = Parser(source, strict=strict)
    cards: list[Card] = []
    while True:
        try:
            card = parser.next_card()
        except (ParseError, OSError) as e:
            logger.debug("parse failed after %d cards: %s", len(cards), e)
            e.cards = cards
            raise
        if card is None:
            return cards
        cards.append(card)


def unescape_value(text: str) -> str:
    """Decode a single escaped property value (inverse of escape_value)."""
    parser = Parser(io.BytesIO(text.encode("utf-8")))
    value = parser._parse_value()
    b = parser.r.peek_byte()
    if b is not None:
        raise ParseError(parser.line, f"unexpected character {_show(b)} in value")
    return value


class VCardReader:
    """
    vCard file reader.

    Usage:
        # Full parse
        cards = VCardReader.read("contacts.vcf")

        # Lazy - cards are parsed as they are iterated
        with VCardReader.open("contacts.vcf") as reader:
            for card in reader:
                ...
    """

    @staticmethod
    def is_vcard(path: str | Path) -> bool:
        """Fast check if a file looks like vCard. Reads only the first 64 bytes."""
        with builtins.open(path, "rb") as f:
            head = f.read(MAX_MAGIC_SCAN_BYTES)
        return VCardReader.is_vcard_bytes(head)

    @staticmethod
    def is_vcard_bytes(data: bytes) -> bool:
        """Fast check if bytes look like vCard."""
        head = data[:MAX_MAGIC_SCAN_BYTES]
        if head.startswith(b"\xef\xbb\xbf"):
            head = head[3:]
        return head.lstrip().upper().startswith(MAGIC.encode("ascii"))

    @classmethod
    def read(cls, path: str | Path, max_size: int = MAX_FILE_SIZE, strict: bool = True) -> list[Card]:
        """Fully parse a vCard file."""
        path = Path(path)
        file_size = path.stat().st_size
        if file_size > max_size:
            raise ValueError(
                f"File size {file_size} exceeds maximum {max_size} bytes. "
                f"Pass max_size= to override."
            )
        with builtins.open(path, "rb") as f:
            return parse_all(f, strict=strict)

    @classmethod
    def parse(cls, data: bytes | str, max_size: int = MAX_FILE_SIZE, strict: bool = True) -> list[Card]:
        """Parse vCard text (bytes or str) into cards."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        if len(data) > max_size:
            raise ValueError(
                f"Input size {len(data)} exceeds maximum {max_size} bytes. "
                f"Pass max_size= to override."
            )
        return parse_all(io.BytesIO(data), strict=strict)

    @classmethod
    def open(cls, path: str | Path, strict: bool = True) -> VCardReaderHandle:
        """Open a vCard file for lazy, card-by-card reading."""
        return VCardReaderHandle(builtins.open(Path(path), "rb"), strict=strict)


class VCardReaderHandle:
    """
    Handle for card-by-card access to a vCard file.

    Only as much of the file as the cards taken so far is read.
    """

    def __init__(self, handle: BinaryIO, strict: bool = True) -> None:
        self._handle = handle
        self._parser = Parser(handle, strict=strict)
        self.cards_read = 0

    def next_card(self) -> Card | None:
        card = self._parser.next_card()
        if card is not None:
            self.cards_read += 1
        return card

    def __iter__(self) -> Iterator[Card]:
        while (card := self.next_card()) is not None:
            yield card

    @property
    def line(self) -> int:
        return self._parser.line

    def close(self) -> None:
        self._handle.close()

    def __enter__(self) -> VCardReaderHandle:
        return self

    def __exit__(self, *args) -> None:
        self.close()
