"""Recursive discovery of the files to sort."""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, NamedTuple

from common.file_manager import FileManager

logger = logging.getLogger(__name__)


class MediaFile(NamedTuple):
    """A discovered file: full path, base name, extension and parent folder."""

    path: Path
    name: str
    extension: str
    parent: Path

    @classmethod
    def from_path(cls, path: Path) -> "MediaFile":
        path = Path(path)
        return cls(path, path.stem, path.suffix, path.parent)


def walk_files(
    root: Path, exclude: Iterable[Path] = (), media_only: bool = True
) -> Iterator[MediaFile]:
    """
    Yield regular files under ``root``, recursively, in sorted order.

    Args:
        root: Directory to scan
        exclude: Directories to prune (e.g. a destination inside the source)
        media_only: Only yield image and video files

    Hidden files and folders (dot names) are skipped, as are symlinks.
    """
    root = Path(root)
    excluded = {Path(p).resolve() for p in exclude}

    def on_error(error: OSError) -> None:
        logger.warning(f"Cannot read {error.filename}: {error.strerror}")

    for current, dirs, filenames in os.walk(root, onerror=on_error):
        current_path = Path(current)
        kept: List[str] = []
        for name in sorted(dirs):
            if name.startswith("."):
                continue
            if (current_path / name).resolve() in excluded:
                logger.debug(f"Skipping excluded folder {current_path / name}")
                continue
            kept.append(name)
        dirs[:] = kept

        for filename in sorted(filenames):
            file_path = current_path / filename
            if FileManager.is_hidden(file_path):
                continue
            if file_path.is_symlink() or not file_path.is_file():
                continue
            if media_only and not FileManager.is_media_file(file_path):
                logger.debug(f"Skipping non-media file {file_path}")
                continue
            yield MediaFile.from_path(file_path)
