"""
Error types for vCard parsing.

Errors raised by the underlying byte source (OSError and friends) are never
wrapped in these types.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vcard.card import Card


class VCardError(Exception):
    """Base exception for all vCard errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        return self.message


class ParseError(VCardError):
    """
    Raised when input does not follow the vCard grammar.

    Examples:
    - Missing or malformed BEGIN/END markers
    - Empty property or parameter names
    - Bad escape sequences in values
    - Control characters in quoted parameter values

    ``line`` is the 1-based physical line the error was detected on.
    ``cards`` holds the cards parsed before the failure when the error comes
    out of a batch parse.
    """

    def __init__(self, line: int, message: str) -> None:
        self.line = line
        self.cards: list[Card] = []
        super().__init__(message)

    def _format_message(self) -> str:
        return f"on line {self.line}: {self.message}"


class UnexpectedEndError(ParseError):
    """
    Raised when the input ends while more of a card was required.

    Running out of input between cards is not an error.
    """

    pass
