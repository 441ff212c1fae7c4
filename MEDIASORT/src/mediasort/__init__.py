"""Sort photos and videos into date folders using their metadata dates."""

from .date_parsing import LocaleDateConventions, LocaleDateParser
from .date_resolver import DateResolver, resolve_date
from .media_sorter import MediaSorter
from .metadata_host import (
    ExifToolMetadataHost,
    MetadataHost,
    MetadataUnavailableError,
    ShellMetadataHost,
)
from .property_catalog import PropertyCatalog, build_catalog

__all__ = [
    'DateResolver',
    'ExifToolMetadataHost',
    'LocaleDateConventions',
    'LocaleDateParser',
    'MediaSorter',
    'MetadataHost',
    'MetadataUnavailableError',
    'PropertyCatalog',
    'ShellMetadataHost',
    'build_catalog',
    'resolve_date',
]
