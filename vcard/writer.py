"""
vCard Writer - Serializes Card objects to vCard text.

Two steps:
  1. Write the card as logical lines ("\\n" endings, nothing folded)
  2. Fold the result to the line width, turning "\\n" into "\\r\\n"

Only the folded form is wire-ready; the unfolded form is for debugging.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Iterable

from vcard.fold import fold
from vcard.spec import (
    BEGIN, END, RECORD_TYPE, PRIORITY_PROPERTY, DEFAULT_FOLD_WIDTH,
    escape_value, quote_param_value,
)

if TYPE_CHECKING:
    from vcard.card import Card, Property

logger = logging.getLogger(__name__)


class VCardWriter:

    @staticmethod
    def serialize(
        card: Card,
        width: int = DEFAULT_FOLD_WIDTH,
        priority: str | None = PRIORITY_PROPERTY,
    ) -> str:
        """Serialize a Card to folded vCard text. Does not mutate the card.

        Property values are escaped but not otherwise checked. A value holding
        a carriage return or another control character (tab and newline
        aside) is written unchanged, and the parser rejects the result.
        """
        return fold(VCardWriter.serialize_unfolded(card, priority=priority), width)

    @staticmethod
    def serialize_unfolded(card: Card, priority: str | None = PRIORITY_PROPERTY) -> str:
        """Serialize a Card as logical lines, without folding."""
        out = io.StringIO()
        out.write(f"{BEGIN}:{RECORD_TYPE}\n")

        names = list(card.properties)
        if priority and priority.upper() in card.properties:
            # Priority property first, everything else in insertion order
            names.remove(priority.upper())
            names.insert(0, priority.upper())

        for name in names:
            for prop in card.properties[name]:
                _write_property(out, name, prop)

        out.write(f"{END}:{RECORD_TYPE}\n")
        return out.getvalue()

    @staticmethod
    def serialize_all(
        cards: Iterable[Card],
        width: int = DEFAULT_FOLD_WIDTH,
        priority: str | None = PRIORITY_PROPERTY,
    ) -> str:
        """Serialize several cards, one after the other."""
        return "".join(VCardWriter.serialize(card, width, priority) for card in cards)

    @staticmethod
    def write(
        cards: Card | Iterable[Card],
        path: str,
        width: int = DEFAULT_FOLD_WIDTH,
        mode: int = 0o644,
    ) -> int:
        """Write cards to a file atomically. Returns bytes written.

        Uses write-to-temp-then-rename so the target is never left
        half-written. Pass mode=0o600 for address books that should not be
        world-readable.
        """
        import os
        import tempfile
        from vcard.card import Card

        if isinstance(cards, Card):
            cards = [cards]
        data = VCardWriter.serialize_all(cards, width).encode("utf-8")

        dir_name = os.path.dirname(os.path.abspath(path)) or "."
        fd, tmp_path = tempfile.mkstemp(dir=dir_name, suffix=".vcf.tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        logger.debug("wrote %d bytes to %s", len(data), path)
        return len(data)


def _write_property(out: io.StringIO, name: str, prop: Property) -> None:
    if prop.group:
        out.write(f"{prop.group}.")
    out.write(name)
    for key, values in prop.params.items():
        out.write(f";{key}=")
        out.write(",".join(quote_param_value(v) for v in values))
    out.write(":")
    out.write(",".join(escape_value(v) for v in prop.values))
    out.write("\n")
