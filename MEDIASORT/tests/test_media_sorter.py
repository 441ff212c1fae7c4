"""
Tests for MediaSorter - end-to-end sorting with an in-memory metadata host.
"""

import logging

import pytest

from fakes import DATE_MODIFIED, DATE_TAKEN, MEDIA_CREATED, FakeMetadataHost
from mediasort.media_sorter import MediaSorter


@pytest.fixture
def source_dir(tmp_path):
    source = tmp_path / "source"
    files = [
        "IMG_0001.jpg",
        "holiday/IMG_0002.JPG",
        "holiday/clip.mp4",
        "undated.jpg",
        "notes.txt",
    ]
    for name in files:
        path = source / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(name.encode())
    return source


@pytest.fixture
def host():
    return FakeMetadataHost(
        values={
            "IMG_0001.jpg": {DATE_TAKEN: "7/15/2023 2:30 PM"},
            "IMG_0002.JPG": {
                DATE_TAKEN: "7/16/2023 9:00 AM",
                DATE_MODIFIED: "7/14/2023 8:00 AM",
            },
            "clip.mp4": {MEDIA_CREATED: "12/31/2022 11:59 PM"},
            "notes.txt": {DATE_MODIFIED: "1/1/2020 12:00 PM"},
        }
    )


@pytest.fixture
def make_sorter(settings, host, us_parser):
    def _make(source, **kwargs):
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("host_factory", lambda settings, reference_dir: host)
        kwargs.setdefault("parser", us_parser)
        return MediaSorter(source, **kwargs)

    return _make


def _sorted_files(root):
    return sorted(
        p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()
    )


class TestMediaSorter:
    def test_defaults(self, make_sorter, source_dir):
        sorter = make_sorter(source_dir)

        assert sorter.target == source_dir.resolve() / "Sorted"
        assert sorter.pattern == "%Y/%Y-%m/%Y-%m-%d"
        assert sorter.dry_run is False

    def test_run_sorts_by_earliest_date(self, make_sorter, source_dir, host):
        stats = make_sorter(source_dir).run()

        assert _sorted_files(source_dir) == [
            "Sorted/2022/2022-12/2022-12-31/clip.mp4",
            "Sorted/2023/2023-07/2023-07-14/IMG_0002.JPG",
            "Sorted/2023/2023-07/2023-07-15/IMG_0001.jpg",
            "notes.txt",
            "undated.jpg",
        ]
        assert stats == {
            "processed": 4,
            "moved": 3,
            "unchanged": 0,
            "skipped": 1,
            "errors": 0,
        }
        assert host.open_calls == 1
        assert host.close_calls == 1
        assert not host.is_open

    def test_file_content_is_preserved(self, make_sorter, source_dir):
        make_sorter(source_dir).run()

        moved = source_dir / "Sorted/2023/2023-07/2023-07-15/IMG_0001.jpg"
        assert moved.read_bytes() == b"IMG_0001.jpg"

    def test_dry_run(self, make_sorter, source_dir, caplog):
        caplog.set_level(logging.INFO)
        before = _sorted_files(source_dir)

        stats = make_sorter(source_dir, dry_run=True).run()

        assert _sorted_files(source_dir) == before
        assert stats["moved"] == 3
        assert stats["skipped"] == 1
        assert "Would move IMG_0001.jpg" in caplog.text
        assert "dry run" in caplog.text

    def test_second_run_leaves_sorted_files_alone(self, make_sorter, source_dir):
        make_sorter(source_dir).run()

        stats = make_sorter(source_dir).run()

        assert stats["processed"] == 1
        assert stats["skipped"] == 1
        assert stats["moved"] == 0

    def test_target_outside_source(self, make_sorter, source_dir, tmp_path):
        library = tmp_path / "library"

        stats = make_sorter(source_dir, target=library).run()

        assert stats["moved"] == 3
        assert (library / "2022/2022-12/2022-12-31/clip.mp4").exists()
        assert not (source_dir / "Sorted").exists()

    def test_sorting_in_place_is_noop(self, make_sorter, tmp_path, host):
        library = tmp_path / "library"
        placed = library / "2023/2023-07/2023-07-15/IMG_0001.jpg"
        placed.parent.mkdir(parents=True)
        placed.write_bytes(b"photo")

        stats = make_sorter(library, target=library).run()

        assert placed.exists()
        assert stats["unchanged"] == 1
        assert stats["moved"] == 0
        assert not (placed.parent / "IMG_0001_1.jpg").exists()

    def test_name_collision_is_renamed(self, make_sorter, tmp_path, host):
        source = tmp_path / "cards"
        for card in ("card1", "card2"):
            path = source / card / "IMG_0001.jpg"
            path.parent.mkdir(parents=True)
            path.write_bytes(card.encode())

        stats = make_sorter(source).run()

        day = source / "Sorted/2023/2023-07/2023-07-15"
        assert stats["moved"] == 2
        assert (day / "IMG_0001.jpg").read_bytes() == b"card1"
        assert (day / "IMG_0001_1.jpg").read_bytes() == b"card2"

    def test_dry_run_collision_matches_live_run(
        self, make_sorter, tmp_path, host, caplog
    ):
        caplog.set_level(logging.INFO)
        source = tmp_path / "cards"
        for card in ("card1", "card2"):
            path = source / card / "IMG_0001.jpg"
            path.parent.mkdir(parents=True)
            path.write_bytes(card.encode())

        stats = make_sorter(source, dry_run=True).run()

        day = "2023/2023-07/2023-07-15"
        assert stats["moved"] == 2
        assert f"Would move IMG_0001.jpg -> {day}/IMG_0001.jpg " in caplog.text
        assert f"Would move IMG_0001.jpg -> {day}/IMG_0001_1.jpg " in caplog.text
        assert not (source / "Sorted").exists()

    def test_custom_pattern(self, make_sorter, source_dir):
        make_sorter(source_dir, pattern="%Y/%m").run()

        assert (source_dir / "Sorted/2023/07/IMG_0001.jpg").exists()
        assert (source_dir / "Sorted/2022/12/clip.mp4").exists()

    def test_all_files(self, make_sorter, settings, source_dir):
        all_files = settings.model_copy(update={"media_only": False})

        stats = make_sorter(source_dir, settings=all_files).run()

        assert stats["processed"] == 5
        assert (source_dir / "Sorted/2020/2020-01/2020-01-01/notes.txt").exists()

    def test_slot_count_limits_catalog(self, make_sorter, settings, source_dir):
        limited = settings.model_copy(update={"slot_count": DATE_TAKEN})

        stats = make_sorter(source_dir, settings=limited).run()

        # only "Date modified" remains among the scanned slots
        assert stats["moved"] == 1
        assert (source_dir / "Sorted/2023/2023-07/2023-07-14/IMG_0002.JPG").exists()

    def test_unavailable_host_skips_everything(self, make_sorter, source_dir, caplog):
        broken = FakeMetadataHost(fail_open=True)

        stats = make_sorter(
            source_dir, host_factory=lambda settings, reference_dir: broken
        ).run()

        assert stats["skipped"] == 4
        assert stats["moved"] == 0
        assert stats["errors"] == 0
        assert broken.close_calls == 0
        assert "unavailable" in caplog.text

    def test_metadata_failure_for_one_file(self, make_sorter, source_dir, host):
        host.fail_values_for = {"IMG_0001.jpg"}

        stats = make_sorter(source_dir).run()

        assert stats["errors"] == 1
        assert stats["moved"] == 2
        assert (source_dir / "IMG_0001.jpg").exists()

    def test_host_closed_when_processing_raises(
        self, make_sorter, source_dir, host, monkeypatch
    ):
        def explode(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(MediaSorter, "process_file", explode)

        with pytest.raises(RuntimeError):
            make_sorter(source_dir).run()
        assert host.close_calls == 1

    def test_reference_dir_is_source(self, settings, host, us_parser, source_dir):
        seen = []

        def factory(settings, reference_dir):
            seen.append(reference_dir)
            return host

        MediaSorter(
            source_dir, settings=settings, host_factory=factory, parser=us_parser
        ).run()

        assert seen == [source_dir.resolve()]

    def test_no_files_never_opens_host(self, make_sorter, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        calls = []

        stats = make_sorter(
            empty, host_factory=lambda settings, reference_dir: calls.append(1)
        ).run()

        assert stats["processed"] == 0
        assert calls == []

    def test_missing_source(self, make_sorter, tmp_path):
        with pytest.raises(FileNotFoundError):
            make_sorter(tmp_path / "missing").run()

    def test_source_is_a_file(self, make_sorter, source_dir):
        with pytest.raises(NotADirectoryError):
            make_sorter(source_dir / "IMG_0001.jpg").run()

    def test_bad_pattern_fails_before_moving(self, make_sorter, source_dir, host):
        with pytest.raises(ValueError):
            make_sorter(source_dir, pattern="../%Y").run()
        assert host.open_calls == 0
        assert (source_dir / "IMG_0001.jpg").exists()

    def test_get_stats_is_a_copy(self, make_sorter, source_dir):
        sorter = make_sorter(source_dir)
        stats = sorter.get_stats()
        stats["moved"] = 99

        assert sorter.get_stats()["moved"] == 0
