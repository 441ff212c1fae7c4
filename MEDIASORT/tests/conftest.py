"""Shared fixtures for the media sorter tests."""

import logging

import pytest

from fakes import FakeMetadataHost
from mediasort.date_parsing import LocaleDateConventions, LocaleDateParser
from mediasort.settings import SorterSettings


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs route the package logger to their own handlers; undo that."""
    yield
    package_logger = logging.getLogger("mediasort")
    for handler in list(package_logger.handlers):
        handler.close()
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_host():
    host = FakeMetadataHost()
    with host:
        yield host


@pytest.fixture
def us_parser():
    """Month-first parser, independent of the machine's locale."""
    return LocaleDateParser(LocaleDateConventions(day_first=False))


@pytest.fixture
def eu_parser():
    """Day-first parser, independent of the machine's locale."""
    return LocaleDateParser(LocaleDateConventions(day_first=True))


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Settings isolated from the developer's environment and .env files."""
    monkeypatch.chdir(tmp_path)
    for name in ("MEDIASORT_METADATA_BACKEND", "MEDIASORT_SLOT_COUNT"):
        monkeypatch.delenv(name, raising=False)
    return SorterSettings(log_dir=str(tmp_path / ".log"))
