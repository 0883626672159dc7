import argparse
import json
import sys
from pathlib import Path
from typing import Any

from cli.rich_display import (
    console,
    print_error_panel,
    print_json_panel,
    print_result_panel,
    print_start_panel,
    setup_logging,
)
from settings import get_settings


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description="Apply a model-generated edit patch to a slide deck document.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Apply model output given inline
  slide-patch --document deck.json --text '{"ops": [{"op": "set_text", "slideIndex": 1, "objectId": "title", "text": "Hi"}]}'

  # Apply model output from a file, honoring locks
  slide-patch --document deck.json --file reply.txt --locks locks.json

  # Restrict edits to slide 2 and write the new state to a file
  slide-patch -d deck.json -f reply.txt --slide-index 2 --output next.json
""",
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        "--text", "-t", type=str, help="Raw model output containing the patch"
    )
    input_group.add_argument(
        "--file", "-f", type=Path, help="File with raw model output"
    )

    parser.add_argument(
        "--document",
        "-d",
        type=Path,
        required=True,
        help="Deck document JSON file",
    )
    parser.add_argument(
        "--locks",
        "-l",
        type=Path,
        help="Element locks JSON file (optional)",
    )
    parser.add_argument(
        "--allow",
        "-a",
        action="append",
        default=[],
        metavar="SLIDE_INDEX:OBJECT_ID",
        help="Only allow edits on this target (repeatable)",
    )
    parser.add_argument(
        "--slide-index",
        type=int,
        help="Only allow edits on this slide (1-based)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output file for the new document (default: stdout)",
    )
    settings = get_settings()
    parser.add_argument(
        "--pretty",
        "-p",
        action="store_true",
        help=f"Format JSON with indentation ({settings.OUTPUT_INDENT} spaces)",
    )
    parser.add_argument(
        "--report",
        "-r",
        action="store_true",
        help="Show a report panel with the apply counters",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Silent mode (only final result)",
    )

    return parser


def _fail(message: str, args: argparse.Namespace) -> None:
    if args.report and not args.quiet:
        print_error_panel(message)
    else:
        print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _read_input_text(args: argparse.Namespace) -> str:
    """Read the raw model output from args (direct text or file)."""
    if args.text is not None:
        return args.text

    if not args.file.exists():
        _fail(f"File not found: {args.file}", args)
    return args.file.read_text(encoding="utf-8")


def _read_json_file(path: Path, label: str, args: argparse.Namespace) -> Any:
    if not path.exists():
        _fail(f"{label} file not found: {path}", args)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _fail(f"Invalid {label.lower()} JSON: {e}", args)


def _handle_output(result: dict[str, Any], args: argparse.Namespace) -> None:
    """Write or print the new document and, if asked, the report."""
    indent = get_settings().OUTPUT_INDENT if args.pretty else None
    output_json = json.dumps(result["nextState"], indent=indent, ensure_ascii=False)

    if args.report and not args.quiet:
        print_result_panel(result)

    if args.output:
        args.output.write_text(output_json, encoding="utf-8")
        if not args.quiet:
            message = f"Result saved in: {args.output}"
            if args.report:
                console.print(f"[green]{message}[/green]")
            else:
                print(message)
                print(
                    f"Applied: {result['applied']}, "
                    f"skipped (locked): {result['skippedLocked']}, "
                    f"skipped (missing): {result['skippedMissing']}"
                )
    elif args.report and not args.quiet:
        print_json_panel(result["nextState"])
    else:
        print(output_json)


def main(argv: list[str] | None = None):
    """Entry point of the CLI."""
    from main import run_edit

    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(get_settings().LOG_LEVEL)

    text = _read_input_text(args)
    document = _read_json_file(args.document, "Document", args)
    if not isinstance(document, dict):
        _fail("Document must be a JSON object", args)
    locks = _read_json_file(args.locks, "Locks", args) if args.locks else None

    if args.report and not args.quiet:
        slides = document.get("slides")
        print_start_panel(
            len(slides) if isinstance(slides, list) else 0,
            len(text),
            locks is not None,
        )

    try:
        result = run_edit(
            text,
            document,
            locks=locks,
            allowed_targets=args.allow,
            slide_index=args.slide_index,
        )
    except TypeError as e:
        _fail(f"Document is not JSON-shaped: {e}", args)

    if not result["ok"]:
        _fail(result["error"], args)

    _handle_output(result, args)
