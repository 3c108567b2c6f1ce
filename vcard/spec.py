"""
vCard Format Notes
==================

Layout (after unfolding):
    BEGIN:VCARD                          <- Begin marker (a property like any other)
    VERSION:3.0                          <- Priority property, written first
    [group.]NAME[;PARAM=v1,"v;2"]:a,b    <- Property: group, name, parameters, values
    ...
    END:VCARD                            <- End marker

Folding:
    - Physical lines end in CRLF and carry at most 75 bytes of content
    - A long logical line is continued by CRLF followed by one space (or tab)
    - Unfolding removes the terminator and the single whitespace byte
    - Folding never splits a UTF-8 encoded character

Value Escaping:
    - "\\,"  -> ","        "\\\\" -> "\\"        "\\n" -> newline
    - "\\;"  -> "\\;"      (kept verbatim, structured values split on ";" later)
    - Anything else after a backslash is an error
    - Writer doubles a backslash unless it precedes ";", and escapes
      commas and newlines

Names:
    - Property names, groups and parameter names use A-Z, a-z, 0-9 and "-"
    - They are case-insensitive and always stored upper-cased
    - Values and parameter values keep their case
"""

# Markers
BEGIN = "BEGIN"
END = "END"
RECORD_TYPE = "VCARD"
MAGIC = f"{BEGIN}:{RECORD_TYPE}"

# Written first when present
PRIORITY_PROPERTY = "VERSION"

# Folding: 75 content bytes + CRLF
DEFAULT_FOLD_WIDTH = 77
MIN_FOLD_WIDTH = 4

# Safety limits
MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB max input for reader
MAX_MAGIC_SCAN_BYTES = 64          # BOM + whitespace + "BEGIN:VCARD"

# File extensions
EXTENSIONS = (".vcf", ".vcard")

# Bytes
TAB = 0x09
LF = 0x0A
CR = 0x0D
SPACE = 0x20
BANG = 0x21
DQUOTE = 0x22
COMMA = 0x2C
DASH = 0x2D
DOT = 0x2E
COLON = 0x3A
SEMICOLON = 0x3B
EQUALS = 0x3D
BACKSLASH = 0x5C

NAME_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-")


def is_name_byte(b: int) -> bool:
    return (0x41 <= b <= 0x5A) or (0x61 <= b <= 0x7A) or (0x30 <= b <= 0x39) or b == DASH


def is_value_byte(b: int) -> bool:
    """Whether a byte may appear in a property value (commas separate values)."""
    return b == TAB or (b >= SPACE and b != COMMA)


def is_quote_safe_byte(b: int) -> bool:
    """Whether a byte may appear inside a double-quoted parameter value."""
    return b == SPACE or b == TAB or b == BANG or b > DQUOTE


def is_safe_byte(b: int) -> bool:
    """Whether a byte may appear in an unquoted parameter value.

    The RFC lists "," as safe; it is excluded here since it separates
    parameter values.
    """
    return b == SPACE or b == TAB or b == BANG or (
        b > DQUOTE and b != SEMICOLON and b != COLON and b != COMMA
    )


def is_name(name: str) -> bool:
    return bool(name) and all(c in NAME_CHARS for c in name)


def escape_value(value: str) -> str:
    """Escape a property value for writing.

    A backslash directly before ";" is left alone so that "\\;" read from a
    structured value is written back unchanged.
    """
    out: list[str] = []
    last = len(value) - 1
    for i, c in enumerate(value):
        if c == "\\":
            if i < last and value[i + 1] == ";":
                out.append("\\")
            else:
                out.append("\\\\")
        elif c == ",":
            out.append("\\,")
        elif c == "\n":
            out.append("\\n")
        else:
            out.append(c)
    return "".join(out)


def is_param_value(value: str) -> bool:
    """Whether a parameter value can be written (quoted if need be)."""
    return all(c == "\t" or (c >= " " and c != '"') for c in value)


def quote_param_value(value: str) -> str:
    """Render one parameter value, quoting it when it holds a delimiter.

    Raises ValueError for a double quote or a control character other than
    tab, which the grammar cannot carry.
    """
    if not is_param_value(value):
        raise ValueError(
            f"Invalid parameter value: {value!r}. "
            f"Double quotes and control characters are not allowed."
        )
    if any(c in value for c in ";:,"):
        return f'"{value}"'
    return value
