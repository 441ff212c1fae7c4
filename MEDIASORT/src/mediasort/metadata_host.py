"""
Metadata hosts - scoped connections to a file-metadata service.

A host exposes numbered property slots. Without a file, a slot resolves to its
human-readable name; with a file, to the locale-formatted display value of
that property. Two backends are provided:

- ShellMetadataHost: the Windows Shell (``Shell.Application`` / GetDetailsOf)
- ExifToolMetadataHost: a persistent ``exiftool -stay_open`` process whose
  slot table is a configured, ordered list of tag names

Hosts are context managers; the underlying service is acquired on ``open()``
and released on ``close()`` on every exit path.
"""

import json
import logging
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .settings import DEFAULT_EXIFTOOL_DATE_FORMAT, SorterSettings

logger = logging.getLogger(__name__)


class MediaSortError(Exception):
    """Base class for sorter errors."""


class MetadataUnavailableError(MediaSortError):
    """The metadata service could not be acquired or stopped responding."""


class MetadataHost(ABC):
    """Base class for metadata hosts."""

    name = "metadata host"
    default_date_taken_label = ""
    default_media_created_label = ""

    def __init__(self):
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    @abstractmethod
    def default_slot_count(self) -> int:
        """Exclusive upper bound of the host's property slots."""

    def open(self) -> "MetadataHost":
        """Acquire the service. Raises MetadataUnavailableError on failure."""
        if not self._is_open:
            self._open()
            self._is_open = True
            logger.debug(f"Opened {self.name}")
        return self

    def close(self) -> None:
        """Release the service. Safe to call more than once."""
        if self._is_open:
            self._is_open = False
            self._close()
            logger.debug(f"Closed {self.name}")

    def __enter__(self) -> "MetadataHost":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _require_open(self) -> None:
        if not self._is_open:
            raise MetadataUnavailableError(f"{self.name} is not open")

    @abstractmethod
    def _open(self) -> None:
        ...

    @abstractmethod
    def _close(self) -> None:
        ...

    @abstractmethod
    def property_name(self, index: int) -> str:
        """Name of property slot ``index``, or "" if the slot is unused."""

    @abstractmethod
    def property_value(self, path: Path, index: int) -> str:
        """Display value of slot ``index`` for ``path``, or "" if unset."""


class ShellMetadataHost(MetadataHost):
    """Windows Shell metadata through ``Shell.Application`` (pywin32)."""

    name = "Windows Shell"
    default_date_taken_label = "Date taken"
    default_media_created_label = "Media created"

    SLOT_COUNT = 288

    def __init__(self, reference_dir: Path):
        super().__init__()
        self.reference_dir = Path(reference_dir)
        self._shell = None
        self._pythoncom = None
        # Namespace lookups are expensive; files arrive grouped by folder
        self._folder: Optional[Tuple[str, object]] = None
        self._item: Optional[Tuple[Path, object]] = None

    @property
    def default_slot_count(self) -> int:
        return self.SLOT_COUNT

    def _open(self) -> None:
        try:
            import pythoncom
            import win32com.client
        except ImportError as e:
            raise MetadataUnavailableError(
                "the Windows Shell backend needs pywin32 on Windows"
            ) from e

        try:
            pythoncom.CoInitialize()
        except pythoncom.com_error as e:
            raise MetadataUnavailableError(f"cannot initialize COM: {e}") from e
        try:
            self._shell = win32com.client.Dispatch("Shell.Application")
        except pythoncom.com_error as e:
            pythoncom.CoUninitialize()
            raise MetadataUnavailableError(f"cannot start Shell.Application: {e}") from e
        self._pythoncom = pythoncom

    def _close(self) -> None:
        self._folder = None
        self._item = None
        self._shell = None
        if self._pythoncom is not None:
            self._pythoncom.CoUninitialize()
            self._pythoncom = None

    def _namespace(self, directory: Path):
        key = str(directory)
        if self._folder is None or self._folder[0] != key:
            self._folder = (key, self._shell.Namespace(key))
            self._item = None
        return self._folder[1]

    def property_name(self, index: int) -> str:
        self._require_open()
        folder = self._namespace(self.reference_dir)
        if folder is None:
            raise MetadataUnavailableError(
                f"Shell cannot open reference folder {self.reference_dir}"
            )
        return folder.GetDetailsOf(None, index) or ""

    def property_value(self, path: Path, index: int) -> str:
        self._require_open()
        path = Path(path)
        folder = self._namespace(path.parent)
        if folder is None:
            return ""
        if self._item is None or self._item[0] != path:
            self._item = (path, folder.ParseName(path.name))
        item = self._item[1]
        if item is None:
            return ""
        return folder.GetDetailsOf(item, index) or ""


class ExifToolMetadataHost(MetadataHost):
    """exiftool in ``-stay_open`` mode, one JSON round trip per file."""

    name = "exiftool"
    default_date_taken_label = "DateTimeOriginal"
    default_media_created_label = "MediaCreateDate"

    READY = "{ready}"

    def __init__(
        self,
        tags: Sequence[str],
        executable: str = "exiftool",
        date_format: str = DEFAULT_EXIFTOOL_DATE_FORMAT,
    ):
        super().__init__()
        self.tags: List[str] = list(tags)
        self.executable = executable
        self.date_format = date_format
        self._process: Optional[subprocess.Popen] = None
        self._cache: Optional[Tuple[Path, Dict[str, str]]] = None

    @property
    def default_slot_count(self) -> int:
        return len(self.tags)

    def command(self) -> List[str]:
        """The exiftool command line; arguments after -common_args apply to every file."""
        return [
            self.executable,
            "-stay_open", "True",
            "-@", "-",
            "-common_args",
            "-json",
            "-charset", "filename=utf8",
            "-d", self.date_format,
        ] + [f"-{tag}" for tag in self.tags]

    def _open(self) -> None:
        try:
            self._process = subprocess.Popen(
                self.command(),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise MetadataUnavailableError(
                f"cannot start '{self.executable}': {e}"
            ) from e

    def _close(self) -> None:
        process, self._process = self._process, None
        self._cache = None
        if process is None:
            return
        try:
            process.stdin.write("-stay_open\nFalse\n")
            process.stdin.flush()
            process.stdin.close()
        except (BrokenPipeError, OSError) as e:
            logger.debug(f"exiftool already gone while closing: {e}")
        try:
            process.wait(timeout=10)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        finally:
            if process.stdout is not None:
                process.stdout.close()

    def _execute(self, path: Path) -> str:
        process = self._process
        try:
            process.stdin.write(f"{path}\n-execute\n")
            process.stdin.flush()
        except (BrokenPipeError, OSError) as e:
            raise MetadataUnavailableError(f"exiftool stopped responding: {e}") from e

        lines = []
        while True:
            line = process.stdout.readline()
            if not line:
                raise MetadataUnavailableError("exiftool exited unexpectedly")
            if line.strip() == self.READY:
                return "".join(lines)
            lines.append(line)

    def read_tags(self, path: Path) -> Dict[str, str]:
        """All configured tags of ``path`` as display strings (cached per file)."""
        self._require_open()
        path = Path(path)
        if self._cache is not None and self._cache[0] == path:
            return self._cache[1]

        output = self._execute(path)
        values: Dict[str, str] = {}
        if output.strip():
            try:
                records = json.loads(output)
            except json.JSONDecodeError as e:
                logger.debug(f"Unreadable exiftool output for {path}: {e}")
                records = []
            if records:
                values = {
                    key: str(value)
                    for key, value in records[0].items()
                    if value is not None
                }

        self._cache = (path, values)
        return values

    def property_name(self, index: int) -> str:
        self._require_open()
        if 0 <= index < len(self.tags):
            return self.tags[index]
        return ""

    def property_value(self, path: Path, index: int) -> str:
        tag = self.property_name(index)
        if not tag:
            return ""
        return self.read_tags(path).get(tag, "")


def resolve_backend(settings: SorterSettings) -> str:
    """Map ``auto`` to the platform's backend."""
    if settings.metadata_backend != "auto":
        return settings.metadata_backend
    return "shell" if sys.platform == "win32" else "exiftool"


def create_metadata_host(settings: SorterSettings, reference_dir: Path) -> MetadataHost:
    """Build (but do not open) the configured metadata host.

    Args:
        settings: Sorter settings
        reference_dir: Folder whose Shell namespace names the property slots
            (ignored by exiftool)
    """
    backend = resolve_backend(settings)
    if backend == "shell":
        return ShellMetadataHost(settings.shell_reference_dir or reference_dir)
    return ExifToolMetadataHost(
        settings.exiftool_tags,
        executable=settings.exiftool_path,
        date_format=settings.exiftool_date_format,
    )
