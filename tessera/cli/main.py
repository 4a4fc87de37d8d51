"""
Tessera CLI Main Module
=======================

Main CLI entry point with all commands.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import orjson

from tessera import __version__
from tessera.core.config import get_config
from tessera.errors import TemplateError
from tessera.templates.views import View, ViewRegistry
from tessera.utils.logger import configure_logging, get_logger

logger = get_logger("tessera.cli")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="tessera",
        description="Tessera template parser",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  tessera parse page.html                 Print the AST of a template as JSON
  tessera parse page.html --views views/  Resolve views from a directory
  tessera parse title.txt --string        Parse a plain string template
  tessera check views/*.html              Validate several templates
        """,
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"Tessera {__version__}",
    )
    parser.add_argument(
        "--config",
        help="JSON configuration file",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (debug, info, warning, error)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Log output format",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Parse command
    parse_parser = subparsers.add_parser(
        "parse",
        help="Parse a template and print its AST",
    )
    parse_parser.add_argument(
        "file",
        help="Template file",
    )
    parse_parser.add_argument(
        "--name",
        help="View name (defaults to the file name without extension)",
    )
    parse_parser.add_argument(
        "--string",
        action="store_true",
        help="Parse as a plain string template",
    )
    parse_parser.add_argument(
        "--unminified",
        action="store_true",
        help="Do not collapse whitespace before parsing",
    )
    parse_parser.add_argument(
        "--views",
        help="Directory of views available to the template",
    )
    parse_parser.add_argument(
        "--indent",
        action="store_true",
        help="Pretty-print the JSON output",
    )

    # Check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check that templates parse",
    )
    check_parser.add_argument(
        "files",
        nargs="+",
        help="Template files",
    )
    check_parser.add_argument(
        "--views",
        help="Directory of views available to the templates",
    )

    return parser


def cli(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    config = get_config()
    if parsed.config:
        config.load_file(parsed.config)
    configure_logging(
        level=parsed.log_level or config.get("logging.level", "WARNING"),
        format=parsed.log_format or config.get("logging.format", "text"),
        log_file=parsed.log_file,
    )

    if not parsed.command:
        parser.print_help()
        return 0

    handlers = {
        "parse": handle_parse,
        "check": handle_check,
    }

    try:
        return handlers[parsed.command](parsed)
    except KeyboardInterrupt:
        print("\nAborted.")
        return 130
    except (TemplateError, OSError) as e:
        logger.error("Command failed", command=parsed.command, error=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _registry(views_dir: Optional[str]) -> ViewRegistry:
    registry = ViewRegistry()
    if views_dir:
        registry.load_directory(views_dir)
    return registry


def _register_file(registry: ViewRegistry, path: Path, name: Optional[str] = None, **options) -> View:
    return registry.register(
        name or path.stem,
        path.read_text(encoding="utf-8"),
        **options,
    )


def handle_parse(args: argparse.Namespace) -> int:
    """Handle parse command."""
    registry = _registry(args.views)
    view = _register_file(
        registry,
        Path(args.file),
        args.name,
        string=args.string,
        unminified=True if args.unminified else None,
    )
    template = view.parse()

    option = orjson.OPT_INDENT_2 if args.indent else 0
    sys.stdout.write(orjson.dumps(template.to_dict(), option=option).decode("utf-8") + "\n")
    return 0


def handle_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    registry = _registry(args.views)
    failed = 0

    for file in args.files:
        path = Path(file)
        try:
            _register_file(registry, path).parse()
        except TemplateError as e:
            failed += 1
            print(f"FAIL {file}: {e.message.splitlines()[0]}")
            logger.debug("Template failed", file=file, error=e.message)
        else:
            print(f"OK   {file}")

    logger.info("Checked templates", files=len(args.files), failed=failed)
    return 1 if failed else 0


def main() -> None:
    """Main entry point."""
    sys.exit(cli())


if __name__ == "__main__":
    main()
