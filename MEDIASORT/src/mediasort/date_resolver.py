"""Resolve the capture/creation date of a file from its metadata."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from common.logging import AUDIT_LEVEL

from .date_parsing import LocaleDateParser
from .metadata_host import MetadataHost
from .property_catalog import PropertyCatalog

logger = logging.getLogger(__name__)


class DateResolver:
    """Picks the earliest parseable date among a file's cataloged properties.

    A file often carries several dates (taken, created, modified, copied...);
    the earliest is the one closest to the original capture and the least
    affected by later edits or copies.
    """

    def __init__(
        self,
        host: MetadataHost,
        catalog: PropertyCatalog,
        parser: Optional[LocaleDateParser] = None,
    ):
        self.host = host
        self.catalog = catalog
        self.parser = parser or LocaleDateParser()

    def candidates(self, path: Path) -> List[datetime]:
        """Every successfully parsed date of ``path``, in consultation order.

        All cataloged slots are read; there is no early exit.
        """
        path = Path(path)
        found: List[datetime] = []
        for slot in self.catalog.slots():
            raw = self.host.property_value(path, slot)
            parsed = self.parser.parse(raw)
            if parsed is not None:
                found.append(parsed)
                logger.log(AUDIT_LEVEL, f"{path.name}: slot {slot} {raw!r} -> {parsed}")
        return found

    def resolve(self, path: Path) -> Optional[datetime]:
        """Earliest candidate date of ``path``, or None if no slot parses."""
        found = self.candidates(path)
        if not found:
            return None
        return min(found)


def resolve_date(
    path: Path,
    catalog: PropertyCatalog,
    host: MetadataHost,
    parser: Optional[LocaleDateParser] = None,
) -> Optional[datetime]:
    """Functional form of ``DateResolver(host, catalog, parser).resolve(path)``."""
    return DateResolver(host, catalog, parser).resolve(path)
