"""
Property catalog - which metadata slots carry dates.

Resolving a property name to a slot index is far more expensive than reading a
value by index, so the catalog is built once per run by enumerating the host's
slot names and is then reused, unchanged, for every file.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from .metadata_host import MetadataHost, MetadataUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_DATE_NAME_PATTERNS = ("date", "created")


@dataclass(frozen=True)
class PropertyCatalog:
    """Slot indices of the date-bearing properties of one metadata host."""

    date_taken_slot: Optional[int] = None
    media_created_slot: Optional[int] = None
    other_date_slots: Tuple[int, ...] = ()

    @classmethod
    def empty(cls) -> "PropertyCatalog":
        return cls()

    @property
    def is_empty(self) -> bool:
        return (
            self.date_taken_slot is None
            and self.media_created_slot is None
            and not self.other_date_slots
        )

    def slots(self) -> Iterator[int]:
        """Slots in consultation order: date taken, media created, then the rest."""
        if self.date_taken_slot is not None:
            yield self.date_taken_slot
        if self.media_created_slot is not None:
            yield self.media_created_slot
        yield from self.other_date_slots


def is_date_like(name: str, patterns: Sequence[str] = DEFAULT_DATE_NAME_PATTERNS) -> bool:
    lowered = name.lower()
    return any(pattern.lower() in lowered for pattern in patterns)


def classify_names(
    names: Sequence[str],
    date_taken_label: str,
    media_created_label: str,
    date_name_patterns: Sequence[str] = DEFAULT_DATE_NAME_PATTERNS,
) -> PropertyCatalog:
    """Build a catalog from slot names, where ``names[i]`` names slot ``i``.

    Priority per slot: exact date-taken label, exact media-created label, then
    any name containing one of ``date_name_patterns`` (case-insensitive).
    The first slot carrying a canonical label wins; later duplicates are
    ignored.
    """
    date_taken: Optional[int] = None
    media_created: Optional[int] = None
    others: List[int] = []

    for index, name in enumerate(names):
        if not name:
            continue
        if date_taken_label and name == date_taken_label:
            if date_taken is None:
                date_taken = index
        elif media_created_label and name == media_created_label:
            if media_created is None:
                media_created = index
        elif is_date_like(name, date_name_patterns):
            others.append(index)

    return PropertyCatalog(date_taken, media_created, tuple(others))


def build_catalog(
    host: MetadataHost,
    slot_count: Optional[int] = None,
    date_taken_label: Optional[str] = None,
    media_created_label: Optional[str] = None,
    date_name_patterns: Sequence[str] = DEFAULT_DATE_NAME_PATTERNS,
) -> PropertyCatalog:
    """Enumerate slots ``0..slot_count-1`` of ``host`` and classify their names.

    ``None`` arguments fall back to the host's own defaults. If the host is
    unavailable the empty catalog is returned; every file then resolves to no
    date instead of aborting the run.

    Raises:
        ValueError: if ``slot_count`` is not positive
    """
    if slot_count is None:
        slot_count = host.default_slot_count
    if slot_count <= 0:
        raise ValueError(f"slot_count must be positive, got {slot_count}")
    if date_taken_label is None:
        date_taken_label = host.default_date_taken_label
    if media_created_label is None:
        media_created_label = host.default_media_created_label

    try:
        names = [host.property_name(index) for index in range(slot_count)]
    except MetadataUnavailableError as e:
        logger.warning(f"Metadata properties unavailable, no dates can be read: {e}")
        return PropertyCatalog.empty()

    catalog = classify_names(
        names, date_taken_label, media_created_label, date_name_patterns
    )

    logger.debug(
        f"Property catalog from {host.name}: date taken={catalog.date_taken_slot}, "
        f"media created={catalog.media_created_slot}, "
        f"other dates={list(catalog.other_date_slots)} ({slot_count} slots scanned)"
    )
    if catalog.is_empty:
        logger.warning(f"{host.name} exposes no date properties")
    return catalog
