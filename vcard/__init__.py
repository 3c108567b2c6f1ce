"""
vcard - vCard parsing and serialization.

Streaming parser with byte-level line unfolding, and a writer that folds
its output to the recommended line width.
"""

__version__ = "0.3.0"

from vcard.spec import DEFAULT_FOLD_WIDTH, PRIORITY_PROPERTY, escape_value
from vcard.errors import VCardError, ParseError, UnexpectedEndError
from vcard.fold import UnfoldingReader, fold, unfold
from vcard.card import Card, Property
from vcard.reader import Parser, VCardReader, parse_all, unescape_value
from vcard.writer import VCardWriter
