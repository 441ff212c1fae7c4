"""
================================================================================
=== [Media Sort] - Sort photos and videos into date folders by metadata date
================================================================================

Moves media files from a source directory into a date-derived folder tree. The
date of each file is the earliest date found in its metadata (date taken,
media created, and every other date property the metadata service exposes).

Default target structure: <source>/Sorted/<year>/<year>-<month>/<year>-<month>-<day>/<filename>
"""

import locale
import sys
from pathlib import Path
from typing import List, Optional

from common.argument_parser import (
    ScriptArgumentParser,
    create_standard_arguments,
    merge_arguments,
)

from .media_sorter import MediaSorter
from .settings import DEFAULT_FOLDER_PATTERN, load_settings

SCRIPT_INFO = {
    "name": "Media Sort",
    "prog": "mediasort",
    "description": """Sort photos and videos into date folders using their metadata dates

Target directory structure (default pattern):
  <target>/<year>/<year>-<month>/<year>-<month>-<day>/<filename>

Files whose metadata holds no readable date are left untouched. Name
collisions get _1, _2, ... appended to the file name.""",
    "examples": [
        "/path/to/photos",
        "/path/to/photos --target /path/to/library --dry-run",
        "/path/to/photos --pattern %Y/%m --verbose",
        "--source /path/to/videos --backend exiftool --all-files",
    ],
}

SCRIPT_ARGUMENTS = {
    "source": {
        "positional": True,
        "help": "Source directory containing photos/videos",
    },
    "target": {
        "flag": "--target",
        "short": "-t",
        "help": "Destination root (default: <source>/Sorted)",
    },
    "pattern": {
        "flag": "--pattern",
        "short": "-p",
        "help": f"Folder pattern in strftime syntax, '/' between levels "
        f"(default: {DEFAULT_FOLDER_PATTERN})",
    },
    "backend": {
        "flag": "--backend",
        "choices": ["auto", "shell", "exiftool"],
        "help": "Metadata backend (default: shell on Windows, exiftool elsewhere)",
    },
    "slot_count": {
        "flag": "--slot-count",
        "type": int,
        "help": "Number of metadata property slots to scan",
    },
    "all_files": {
        "flag": "--all-files",
        "action": "store_true",
        "help": "Sort every file, not only images and videos",
    },
    "day_first": {
        "flag": "--day-first",
        "action": "store_true",
        "help": "Read ambiguous dates like 03/04/2023 as day/month",
    },
    "env": {
        "flag": "--env",
        "default": "dev",
        "help": "Environment whose .env.<env> file is loaded",
    },
}

# Merge with standard arguments (verbose, quiet, dry_run)
ARGUMENTS = merge_arguments(create_standard_arguments(), SCRIPT_ARGUMENTS)


def build_settings(resolved_args: dict):
    """Settings from .env files and the environment, overridden by the CLI."""
    settings = load_settings(env=resolved_args.get("env") or "dev")
    overrides = {}
    if resolved_args.get("backend"):
        overrides["metadata_backend"] = resolved_args["backend"]
    if resolved_args.get("slot_count") is not None:
        overrides["slot_count"] = resolved_args["slot_count"]
    if resolved_args.get("all_files"):
        overrides["media_only"] = False
    if resolved_args.get("day_first"):
        overrides["day_first"] = True
    if resolved_args.get("verbose"):
        overrides["debug"] = True
    if overrides:
        settings = settings.model_validate({**settings.model_dump(), **overrides})
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point. Returns the process exit code."""
    parser = ScriptArgumentParser(SCRIPT_INFO, ARGUMENTS)
    args = parser.parse_args(argv)
    resolved_args = parser.validate_required_args(args)

    if not resolved_args.get("quiet"):
        parser.print_header()

    try:
        settings = build_settings(resolved_args)
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    logger = parser.setup_logging(
        resolved_args, "mediasort", config=settings, packages=["mediasort"]
    )

    # Metadata services render dates in the user's locale
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        logger.warning(f"Cannot activate the user's locale, using defaults: {e}")

    source = Path(resolved_args["source"])
    target = Path(resolved_args["target"]) if resolved_args.get("target") else None
    parser.display_configuration(
        {**resolved_args, "target": target or source / settings.destination_name},
        {"source": "Source directory", "target": "Target directory", "pattern": "Pattern"},
    )

    try:
        sorter = MediaSorter(
            source=source,
            target=target,
            pattern=resolved_args.get("pattern"),
            dry_run=bool(resolved_args.get("dry_run")),
            settings=settings,
            logger=logger,
        )
        stats = sorter.run()
    except (OSError, ValueError) as e:
        logger.error(f"Error during media sort: {e}")
        return 1

    if not resolved_args.get("quiet"):
        print()
        print("Media sort completed")
        print(f"Files processed: {stats['processed']}")
        print(f"Files {'to move' if sorter.dry_run else 'moved'}: {stats['moved']}")
        if stats["skipped"]:
            print(f"Files skipped (no date): {stats['skipped']}")
        if stats["errors"]:
            print(f"Errors encountered: {stats['errors']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
