"""Destination folder naming from a date and a strftime pattern."""

from datetime import datetime
from pathlib import PurePath

from .settings import DEFAULT_FOLDER_PATTERN

__all__ = ["DEFAULT_FOLDER_PATTERN", "format_folder", "validate_pattern"]

_SAMPLE_DATE = datetime(2003, 11, 22, 13, 45, 30)


def format_folder(date: datetime, pattern: str = DEFAULT_FOLDER_PATTERN) -> PurePath:
    """Relative folder for ``date``; ``/`` in the pattern separates levels.

    With the default pattern, 15 July 2023 maps to ``2023/2023-07/2023-07-15``.

    Raises:
        ValueError: if the pattern yields an empty, absolute or dot segment
    """
    rendered = date.strftime(pattern)
    if rendered.startswith(("/", "\\")):
        raise ValueError(f"Folder pattern '{pattern}' must be relative")

    segments = rendered.replace("\\", "/").split("/")
    for segment in segments:
        if not segment.strip() or segment in (".", ".."):
            raise ValueError(
                f"Folder pattern '{pattern}' yields an invalid folder name {segment!r}"
            )
    return PurePath(*segments)


def validate_pattern(pattern: str) -> str:
    """Format a sample date so bad patterns fail at startup, not per file."""
    if not pattern or not pattern.strip():
        raise ValueError("Folder pattern must not be empty")
    format_folder(_SAMPLE_DATE, pattern)
    return pattern
