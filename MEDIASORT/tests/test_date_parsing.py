"""Tests for locale-aware date parsing."""

import logging
from datetime import datetime

import pytest

from mediasort import date_parsing
from mediasort.date_parsing import (
    LEFT_TO_RIGHT_MARK,
    RIGHT_TO_LEFT_MARK,
    LocaleDateConventions,
    LocaleDateParser,
    _order_from_sample,
    build_parserinfo,
    strip_directional_marks,
)

FRENCH = LocaleDateConventions(
    day_first=True,
    months=(
        ("janvier", "janv"),
        ("février", "févr"),
        ("mars",),
        ("avril", "avr"),
        ("mai",),
        ("juin",),
        ("juillet", "juil"),
        ("août",),
        ("septembre", "sept"),
        ("octobre", "oct"),
        ("novembre", "nov"),
        ("décembre", "déc"),
    ),
    weekdays=(
        ("lundi", "lun"),
        ("mardi", "mar"),
        ("mercredi", "mer"),
        ("jeudi", "jeu"),
        ("vendredi", "ven"),
        ("samedi", "sam"),
        ("dimanche", "dim"),
    ),
)


class TestStripDirectionalMarks:
    def test_removes_marks(self):
        raw = f"{LEFT_TO_RIGHT_MARK}7/{LEFT_TO_RIGHT_MARK}15/{RIGHT_TO_LEFT_MARK}2023"
        assert strip_directional_marks(raw) == "7/15/2023"

    def test_plain_text_unchanged(self):
        assert strip_directional_marks("15/07/2023 14:30") == "15/07/2023 14:30"


class TestLocaleDateParser:
    def test_day_first_locale(self, eu_parser):
        assert eu_parser.parse("15/07/2023 14:30") == datetime(2023, 7, 15, 14, 30)

    def test_month_first_locale_with_marks(self, us_parser):
        raw = (
            f"{LEFT_TO_RIGHT_MARK}7/{LEFT_TO_RIGHT_MARK}15/"
            f"{LEFT_TO_RIGHT_MARK}2023 {RIGHT_TO_LEFT_MARK}2:30 PM"
        )
        assert us_parser.parse(raw) == datetime(2023, 7, 15, 14, 30)

    def test_ambiguous_date_follows_locale_order(self, us_parser, eu_parser):
        assert us_parser.parse("03/04/2023") == datetime(2023, 3, 4)
        assert eu_parser.parse("03/04/2023") == datetime(2023, 4, 3)

    def test_iso_format(self, us_parser):
        expected = datetime(2023, 7, 15, 14, 30, 5)
        assert us_parser.parse("2023-07-15 14:30:05") == expected

    def test_timezone_is_dropped(self, us_parser):
        parsed = us_parser.parse("2023-07-15T14:30:00+02:00")
        assert parsed == datetime(2023, 7, 15, 14, 30)
        assert parsed.tzinfo is None

    @pytest.mark.parametrize("raw", [None, "", "   ", "\t\n"])
    def test_empty_values(self, us_parser, raw):
        assert us_parser.parse(raw) is None

    @pytest.mark.parametrize("raw", ["N/A", "Not a date", "99/99/99999", "???"])
    def test_garbage(self, us_parser, raw):
        assert us_parser.parse(raw) is None

    @pytest.mark.parametrize("raw", ["2023", "July 2023", "2023-07", "14:30"])
    def test_incomplete_dates_rejected(self, us_parser, raw):
        assert us_parser.parse(raw) is None

    def test_marks_only(self, us_parser):
        assert us_parser.parse(LEFT_TO_RIGHT_MARK + RIGHT_TO_LEFT_MARK) is None

    def test_english_month_names_always_known(self, eu_parser):
        assert eu_parser.parse("15 July 2023") == datetime(2023, 7, 15)

    def test_localized_month_and_weekday_names(self):
        parser = LocaleDateParser(FRENCH)
        assert parser.parse("samedi 15 juillet 2023 14:30") == datetime(
            2023, 7, 15, 14, 30
        )

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("2023:07:15 14:30:00", datetime(2023, 7, 15, 14, 30)),
            ("2023:07:15 14:30:00+02:00", datetime(2023, 7, 15, 14, 30)),
            ("2023:07:05", datetime(2023, 7, 5)),
            ("2023-07-05", datetime(2023, 7, 5)),
        ],
    )
    def test_exif_and_iso_dates_are_year_month_day(self, eu_parser, raw, expected):
        assert eu_parser.parse(raw) == expected

    def test_exif_zero_date_rejected(self, us_parser):
        assert us_parser.parse("0000:00:00 00:00:00") is None

    def test_callable(self, us_parser):
        assert us_parser("7/15/2023") == datetime(2023, 7, 15)


class TestConventions:
    @pytest.mark.parametrize(
        "sample,expected",
        [
            ("11/22/03", (False, False)),
            ("22/11/2003", (True, False)),
            ("22.11.03", (True, False)),
            ("2003/11/22", (False, True)),
            ("2003-11-22", (False, True)),
            ("Saturday", (None, None)),
        ],
    )
    def test_order_from_sample(self, sample, expected):
        assert _order_from_sample(sample) == expected

    def test_overrides(self):
        conventions = LocaleDateConventions.from_current_locale(
            day_first=True, year_first=False
        )
        assert conventions.day_first is True
        assert conventions.year_first is False

    def test_unknown_order_falls_back_to_month_first(self, monkeypatch, caplog):
        monkeypatch.setattr(date_parsing, "_locale_sample", lambda: "22 nov. 2003")
        caplog.set_level(logging.DEBUG, logger="mediasort.date_parsing")

        conventions = LocaleDateConventions.from_current_locale()

        assert conventions.day_first is False
        assert conventions.year_first is False
        assert "Cannot infer date order" in caplog.text
        assert "MEDIASORT_DAY_FIRST" in caplog.text

    def test_unknown_order_with_override(self, monkeypatch):
        monkeypatch.setattr(date_parsing, "_locale_sample", lambda: "22 nov. 2003")
        conventions = LocaleDateConventions.from_current_locale(day_first=True)
        assert conventions.day_first is True

    def test_current_locale_names(self):
        conventions = LocaleDateConventions.from_current_locale()
        assert len(conventions.months) == 12
        assert len(conventions.weekdays) == 7
        assert all(conventions.months)

    def test_weekday_shadowing_month_is_dropped(self):
        info = build_parserinfo(FRENCH)

        # "mar" is already March; the Tuesday abbreviation must not take it
        assert info.month("mar") == 3
        assert info.weekday("mar") is None
        assert info.weekday("mardi") == 1
        assert info.month("juillet") == 7

    def test_parserinfo_ordering(self):
        info = build_parserinfo(LocaleDateConventions(day_first=True, year_first=True))
        assert info.dayfirst is True
        assert info.yearfirst is True
