"""
Move files without overwriting.

When the destination name is taken by a different file, ``_1``, ``_2``, ...
is appended to the stem until a free name is found: ``img.jpg`` becomes
``img_1.jpg``, then ``img_2.jpg``. Moving a file onto itself is a no-op.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import AbstractSet, NamedTuple, Optional, Set

logger = logging.getLogger(__name__)


class MoveResult(NamedTuple):
    source: Path
    destination: Path
    moved: bool


def is_same_file(source: Path, destination: Path) -> bool:
    """True when both paths name the same file on disk."""
    if not destination.exists():
        return False
    try:
        return os.path.samefile(source, destination)
    except OSError:
        return source.resolve() == destination.resolve()


def unique_destination(
    source: Path, destination: Path, claimed: AbstractSet[Path] = frozenset()
) -> Path:
    """First free variant of ``destination`` (or ``destination`` itself).

    A destination that already is ``source`` is returned unchanged. Paths in
    ``claimed`` count as taken even when nothing is on disk yet.
    """
    source = Path(source)
    destination = Path(destination)

    def taken(candidate: Path) -> bool:
        if candidate in claimed:
            return True
        return candidate.exists() and not is_same_file(source, candidate)

    if not taken(destination):
        return destination

    stem, suffix = destination.stem, destination.suffix
    counter = 1
    candidate = destination.with_name(f"{stem}_{counter}{suffix}")
    while taken(candidate):
        counter += 1
        candidate = destination.with_name(f"{stem}_{counter}{suffix}")
    return candidate


def move_with_rename(
    source: Path,
    destination: Path,
    dry_run: bool = False,
    claimed: Optional[Set[Path]] = None,
) -> MoveResult:
    """
    Move ``source`` to ``destination``, renaming on collision.

    Args:
        source: File to move
        destination: Desired destination path
        dry_run: Compute the final destination without touching the disk
        claimed: Destinations already handed out in this run; the final
            destination is added to it

    Returns:
        MoveResult with the final destination; ``moved`` is False when the
        source already is the destination (or in dry-run mode).

    Raises:
        OSError: if the file cannot be moved
    """
    source = Path(source)
    final = unique_destination(source, destination, claimed or frozenset())

    if is_same_file(source, final):
        logger.debug(f"Already in place: {source}")
        return MoveResult(source, final, False)

    if not dry_run:
        final.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(final))
    if claimed is not None:
        claimed.add(final)
    return MoveResult(source, final, not dry_run)
