"""Command line entry point for the Anyventure effects engine."""

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from anyventure.config import get_settings
from anyventure.game.effects.parser import validate_data_code
from anyventure.game.systems.build import rebuild
from anyventure.game.world.loader import (
    ContentLoadError,
    ContentValidationError,
    load_character,
    load_content,
)
from anyventure.logs import configure_logging

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="anyventure", description="Anyventure data-code compiler and character recompute"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    validate = commands.add_parser("validate", help="Check data codes for unrecognized tokens")
    validate.add_argument("codes", nargs="+", help="Data codes to check")

    recompute = commands.add_parser("recompute", help="Build a character and print its state")
    recompute.add_argument("character", type=Path, help="Character YAML file")
    recompute.add_argument(
        "--content", type=Path, default=None, help="Content directory (default from settings)"
    )

    return parser


def cmd_validate(codes: Sequence[str]) -> int:
    """Print a validation report for each code; exit status 1 if any is invalid."""
    results = []
    for code in codes:
        result = validate_data_code(code)
        results.append({"code": code, "is_valid": result.is_valid, "errors": result.errors})

    print(json.dumps(results, indent=2))
    return 0 if all(entry["is_valid"] for entry in results) else 1


def cmd_recompute(character_path: Path, content_dir: Path | None) -> int:
    """Load, build and print one character."""
    content_dir = content_dir or get_settings().content_dir
    try:
        library = load_content(content_dir)
        character = load_character(character_path, library)
    except (ContentLoadError, ContentValidationError) as e:
        logger.error("content_error", error=str(e))
        return 2

    rebuild(character)

    diagnostics = [
        {
            "kind": record.kind.value,
            "message": record.message,
            "token": record.token,
            "source": record.source,
        }
        for record in [*character.build_diagnostics, *character.diagnostics]
    ]
    output = {
        "name": character.name,
        "state": character.state.to_dict(),
        "diagnostics": diagnostics,
    }
    print(json.dumps(output, indent=2, default=str))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)
    configure_logging()

    if args.command == "validate":
        return cmd_validate(args.codes)
    return cmd_recompute(args.character, args.content)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
