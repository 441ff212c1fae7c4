"""
Media Sorter - move photos and videos into date folders.

Contains the MediaSorter class, which moves every media file found under a
source directory into ``<target>/<pattern>/<filename>``, where the pattern is
rendered from the earliest date in the file's metadata.

Default target structure: <target>/<year>/<year>-<month>/<year>-<month>-<day>/<filename>
- <target>: Destination root (default: "Sorted" inside the source)
- <filename>: Original filename, with _1, _2, ... appended on collisions

Files without any readable date are left where they are.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Set

from .date_parsing import LocaleDateConventions, LocaleDateParser
from .date_resolver import DateResolver
from .file_mover import is_same_file, move_with_rename
from .file_walker import MediaFile, walk_files
from .folder_format import format_folder, validate_pattern
from .metadata_host import MetadataHost, MetadataUnavailableError, create_metadata_host
from .property_catalog import PropertyCatalog, build_catalog
from .settings import SorterSettings

HostFactory = Callable[[SorterSettings, Path], MetadataHost]


class MediaSorter:
    """Sorts media files into date folders using their metadata dates."""

    def __init__(
        self,
        source: Path,
        target: Optional[Path] = None,
        pattern: Optional[str] = None,
        dry_run: bool = False,
        settings: Optional[SorterSettings] = None,
        host_factory: HostFactory = create_metadata_host,
        parser: Optional[LocaleDateParser] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize MediaSorter.

        Args:
            source: Source directory containing photos and videos
            target: Destination root (default: ``<source>/<destination_name>``)
            pattern: strftime folder pattern (default: settings.folder_pattern)
            dry_run: If True, log what would be moved without moving anything
            settings: Sorter settings (defaults loaded from the environment)
            host_factory: Builds the metadata host for this run
            parser: Date parser (default: one for the current locale)
            logger: Logger for progress output
        """
        self.settings = settings or SorterSettings()
        self.source = Path(source).resolve()
        if target is None:
            target = self.source / self.settings.destination_name
        self.target = Path(target).resolve()
        self.pattern = pattern or self.settings.folder_pattern
        self.dry_run = dry_run
        self.host_factory = host_factory
        self.parser = parser
        self.logger = logger or logging.getLogger(__name__)

        self.catalog = PropertyCatalog.empty()
        # Destinations handed out during the current run
        self.claimed: Set[Path] = set()
        self.stats = {
            "processed": 0,
            "moved": 0,
            "unchanged": 0,
            "skipped": 0,
            "errors": 0,
        }

    def _create_parser(self) -> LocaleDateParser:
        conventions = LocaleDateConventions.from_current_locale(
            day_first=self.settings.day_first, year_first=self.settings.year_first
        )
        self.logger.debug(
            f"Date conventions: day_first={conventions.day_first}, "
            f"year_first={conventions.year_first}"
        )
        return LocaleDateParser(conventions)

    def validate(self) -> None:
        """Check source and pattern before touching anything.

        Raises:
            FileNotFoundError: if the source does not exist
            NotADirectoryError: if the source is not a directory
            ValueError: if the folder pattern is unusable
        """
        if not self.source.exists():
            raise FileNotFoundError(f"Source directory '{self.source}' does not exist")
        if not self.source.is_dir():
            raise NotADirectoryError(f"Source '{self.source}' is not a directory")
        validate_pattern(self.pattern)

    def find_files(self) -> List[MediaFile]:
        """All files to sort, with the destination tree excluded."""
        self.logger.info(f"Scanning source directory: {self.source}")
        files = list(
            walk_files(
                self.source,
                exclude=[self.target],
                media_only=self.settings.media_only,
            )
        )
        kind = "media files" if self.settings.media_only else "files"
        self.logger.info(f"Found {len(files)} {kind} to process")
        return files

    def process_file(self, media_file: MediaFile, resolver: DateResolver) -> None:
        """
        Sort a single file. Failures are logged and counted, never raised.

        Args:
            media_file: File to sort
            resolver: Date resolver bound to the open metadata host
        """
        path = media_file.path
        self.stats["processed"] += 1
        try:
            date = resolver.resolve(path)
            if date is None:
                self.logger.warning(f"No date found, skipping: {path}")
                self.stats["skipped"] += 1
                return

            destination = self.target / format_folder(date, self.pattern) / path.name
            result = move_with_rename(
                path, destination, dry_run=self.dry_run, claimed=self.claimed
            )

            rel_target = result.destination.relative_to(self.target)
            if result.moved:
                self.stats["moved"] += 1
                self.logger.info(f"{path.name} -> {rel_target} ({date:%Y-%m-%d %H:%M})")
            elif self.dry_run and not is_same_file(path, result.destination):
                self.stats["moved"] += 1
                self.logger.info(
                    f"Would move {path.name} -> {rel_target} ({date:%Y-%m-%d %H:%M})"
                )
            else:
                self.stats["unchanged"] += 1
                self.logger.info(f"{path.name} already in place ({rel_target})")

        except MetadataUnavailableError as e:
            self.logger.error(f"Metadata unavailable for {path}: {e}")
            self.stats["errors"] += 1
        except Exception as e:
            self.logger.error(f"Error processing {path}: {e}")
            self.stats["errors"] += 1

    def _open_host(self) -> Optional[MetadataHost]:
        host = self.host_factory(self.settings, self.source)
        try:
            return host.open()
        except MetadataUnavailableError as e:
            self.logger.warning(
                f"{host.name} unavailable ({e}); files will be skipped without dates"
            )
            return None

    def run(self) -> dict:
        """Execute the sort and return the statistics."""
        mode = "DRY RUN" if self.dry_run else "LIVE MODE"
        header = [
            "=" * 80,
            f" [MediaSorter] Sort media by metadata date - {mode}",
            "=" * 80,
            f"SOURCE: {self.source}",
            f"TARGET: {self.target}",
            f"PATTERN: {self.pattern}",
            "=" * 80,
        ]
        for line in header:
            self.logger.info(line)

        self.validate()
        self.claimed.clear()
        parser = self.parser or self._create_parser()

        files = self.find_files()
        if not files:
            self.logger.info("No files found to process")
            return self.get_stats()

        host = self._open_host()
        try:
            if host is not None:
                self.catalog = build_catalog(
                    host,
                    slot_count=self.settings.slot_count,
                    date_taken_label=self.settings.date_taken_label,
                    media_created_label=self.settings.media_created_label,
                    date_name_patterns=self.settings.date_name_patterns,
                )
            # An empty catalog never queries the host, so every file is skipped
            resolver = DateResolver(host, self.catalog, parser)

            for i, media_file in enumerate(files, 1):
                self.process_file(media_file, resolver)
                if i % 50 == 0 or i == len(files):
                    self.logger.debug(f"Progress: {i}/{len(files)} files processed")
        finally:
            if host is not None:
                host.close()

        self._log_summary()
        return self.get_stats()

    def _log_summary(self) -> None:
        summary = [
            "=" * 80,
            " SORT COMPLETE",
            "=" * 80,
            f"Total files processed: {self.stats['processed']}",
            f"Files {'to move' if self.dry_run else 'moved'}: {self.stats['moved']}",
            f"Files already in place: {self.stats['unchanged']}",
            f"Files skipped (no date): {self.stats['skipped']}",
            f"Errors encountered: {self.stats['errors']}",
        ]
        if self.dry_run:
            summary.append("")
            summary.append("NOTE: This was a dry run - no files were actually moved")
        summary.append("=" * 80)

        for line in summary:
            self.logger.info(line)

    def get_stats(self) -> dict:
        """
        Get current processing statistics.

        Returns:
            Dictionary with processing statistics
        """
        return self.stats.copy()
