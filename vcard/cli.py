"""
vcard CLI - Command-line interface for vCard files.

Commands:
  vcard inspect  - List the cards and properties in a file
  vcard validate - Check that a file parses
  vcard format   - Re-serialize a file (normalized, folded)
  vcard fold     - Fold raw text to a line width
  vcard unfold   - Unfold raw text
  vcard convert  - Convert to/from JSON
  vcard identify - Quick check if a file is vCard
  vcard view     - Browse a file in the terminal (TUI)

Environment:
  VCARD_FOLD_WIDTH - Default line width for format/fold (77)
  LOG_LEVEL        - Logging level (WARNING)
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)


def _default_width() -> int:
    from vcard.spec import DEFAULT_FOLD_WIDTH

    raw = os.environ.get("VCARD_FOLD_WIDTH", "")
    if not raw:
        return DEFAULT_FOLD_WIDTH
    try:
        return int(raw)
    except ValueError:
        print(f"Error: VCARD_FOLD_WIDTH must be an integer, got {raw!r}", file=sys.stderr)
        sys.exit(1)


def _require_file(path: str) -> Path:
    p = Path(path)
    if not p.is_file():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    return p


def _load(path: str, strict: bool = True) -> list:
    """Parse a file, exiting with the line number on failure."""
    from vcard.errors import ParseError
    from vcard.reader import VCardReader

    p = _require_file(path)
    try:
        return VCardReader.read(p, strict=strict)
    except ParseError as e:
        print(f"FAIL: {path}: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _emit(text: str, output: str | None) -> None:
    if output:
        Path(output).write_bytes(text.encode("utf-8"))
        print(f"Wrote {output}")
    else:
        sys.stdout.write(text)


def cmd_inspect(args: argparse.Namespace) -> None:
    """Inspect a vCard file - show each card and its properties."""
    cards = _load(args.path, strict=not args.lenient)
    print(f"CARDS: {len(cards)}")
    for i, card in enumerate(cards, 1):
        print()
        title = card.value("FN") or f"card {i}"
        print(f"[{i}] {title}")
        for name, prop in card:
            label = f"{prop.group}.{name}" if prop.group else name
            params = ";".join(f"{k}={','.join(v)}" for k, v in prop.params.items())
            if params:
                label = f"{label};{params}"
            values = ", ".join(prop.values)
            # Truncate long values
            display = values if len(values) <= 60 else values[:57] + "..."
            print(f"  {label:28s}  {display!r}")


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a vCard file."""
    cards = _load(args.path, strict=not args.lenient)
    print(f"OK: {args.path} ({len(cards)} cards)")


def cmd_format(args: argparse.Namespace) -> None:
    """Re-serialize a vCard file."""
    from vcard.writer import VCardWriter

    cards = _load(args.path, strict=not args.lenient)
    if args.unfolded:
        text = "".join(VCardWriter.serialize_unfolded(card) for card in cards)
    else:
        width = args.width or _default_width()
        try:
            text = VCardWriter.serialize_all(cards, width)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    _emit(text, args.output)


def cmd_fold(args: argparse.Namespace) -> None:
    """Fold a text file to a line width."""
    from vcard.fold import fold

    data = _require_file(args.path).read_bytes()
    try:
        text = fold(data.decode("utf-8"), args.width or _default_width())
    except UnicodeDecodeError as e:
        print(f"Error: {args.path} is not valid UTF-8: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    _emit(text, args.output)


def cmd_unfold(args: argparse.Namespace) -> None:
    """Unfold a text file."""
    from vcard.fold import unfold

    data = _require_file(args.path).read_bytes()
    try:
        text = unfold(data)
    except UnicodeDecodeError as e:
        print(f"Error: {args.path} is not valid UTF-8: {e}", file=sys.stderr)
        sys.exit(1)
    _emit(text, args.output)


def cmd_convert(args: argparse.Namespace) -> None:
    """Convert to/from JSON."""
    from vcard.converters import to_json, from_json
    from vcard.writer import VCardWriter

    if args.direction == "to":
        cards = _load(args.input)
        _emit(to_json(cards) + "\n", args.output)
        return

    path = _require_file(args.input)
    try:
        cards = from_json(path.read_text(encoding="utf-8"))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError too
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    if args.output:
        nbytes = VCardWriter.write(cards, args.output, width=_default_width())
        print(f"Wrote {args.output} ({nbytes} bytes)")
    else:
        sys.stdout.write(VCardWriter.serialize_all(cards, _default_width()))


def cmd_identify(args: argparse.Namespace) -> None:
    """Quick check if a file is vCard."""
    from vcard.reader import VCardReader

    path = _require_file(args.path)
    if VCardReader.is_vcard(path):
        print(f"{args.path}: vCard")
    else:
        print(f"{args.path}: not vCard")
        sys.exit(1)


def cmd_view(args: argparse.Namespace) -> None:
    """Browse a vCard file in the terminal."""
    try:
        from vcard.tui.viewer import run_viewer
    except ImportError:
        print("Error: the viewer needs textual (pip install textual)", file=sys.stderr)
        sys.exit(1)
    run_viewer(args.path)


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> None:
    from vcard import __version__

    parser = argparse.ArgumentParser(prog="vcard", description="vCard file tools")
    parser.add_argument("--version", action="version", version=f"vcard {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # inspect
    p_inspect = sub.add_parser("inspect", help="List the cards in a vCard file")
    p_inspect.add_argument("path", help="Path to .vcf file")
    p_inspect.add_argument("--lenient", action="store_true", help="Allow duplicate parameters")

    # validate
    p_validate = sub.add_parser("validate", help="Check that a vCard file parses")
    p_validate.add_argument("path", help="Path to .vcf file")
    p_validate.add_argument("--lenient", action="store_true", help="Allow duplicate parameters")

    # format
    p_format = sub.add_parser("format", help="Re-serialize a vCard file")
    p_format.add_argument("path", help="Path to .vcf file")
    p_format.add_argument("-o", "--output", help="Output file path (default: stdout)")
    p_format.add_argument("-w", "--width", type=int, help="Line width including CRLF (or set VCARD_FOLD_WIDTH)")
    p_format.add_argument("--unfolded", action="store_true", help="Do not fold; use LF line endings")
    p_format.add_argument("--lenient", action="store_true", help="Allow duplicate parameters")

    # fold
    p_fold = sub.add_parser("fold", help="Fold text to a line width")
    p_fold.add_argument("path", help="Path to text file")
    p_fold.add_argument("-o", "--output", help="Output file path (default: stdout)")
    p_fold.add_argument("-w", "--width", type=int, help="Line width including CRLF (or set VCARD_FOLD_WIDTH)")

    # unfold
    p_unfold = sub.add_parser("unfold", help="Unfold folded text")
    p_unfold.add_argument("path", help="Path to text file")
    p_unfold.add_argument("-o", "--output", help="Output file path (default: stdout)")

    # convert
    p_convert = sub.add_parser("convert", help="Convert to/from JSON")
    p_convert.add_argument("direction", choices=["to", "from"], help="Conversion direction")
    p_convert.add_argument("format", choices=["json"], help="Other format")
    p_convert.add_argument("input", help="Input file path")
    p_convert.add_argument("-o", "--output", help="Output file path (default: stdout)")

    # identify
    p_identify = sub.add_parser("identify", help="Quick check if a file is vCard")
    p_identify.add_argument("path", help="Path to file")

    # view
    p_view = sub.add_parser("view", help="Browse a vCard file (TUI)")
    p_view.add_argument("path", help="Path to .vcf file")

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    commands = {
        "inspect": cmd_inspect,
        "validate": cmd_validate,
        "format": cmd_format,
        "fold": cmd_fold,
        "unfold": cmd_unfold,
        "convert": cmd_convert,
        "identify": cmd_identify,
        "view": cmd_view,
    }

    logger.debug("running %s", args.command)
    commands[args.command](args)


if __name__ == "__main__":
    main()
