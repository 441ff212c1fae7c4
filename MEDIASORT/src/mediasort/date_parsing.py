"""
Locale-aware parsing of metadata date strings.

Metadata services render dates for display in the user's locale, e.g.
``"15/07/2023 14:30"`` or ``"7/15/2023 2:30 PM"``, sometimes wrapped in
invisible directional marks. Parsing uses dateutil's flexible parser with the
day/month ordering, month names, weekday names and AM/PM markers of the active
LC_TIME locale.

Ambiguous numeric dates ("03/04/2023") are only as reliable as the locale's
ordering; ``day_first`` / ``year_first`` can be forced through settings.
"""

import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from dateutil import parser as dateparser

logger = logging.getLogger(__name__)

LEFT_TO_RIGHT_MARK = "\u200e"
RIGHT_TO_LEFT_MARK = "\u200f"
_DIRECTIONAL_MARKS = {ord(LEFT_TO_RIGHT_MARK): None, ord(RIGHT_TO_LEFT_MARK): None}

# 22 November 2003: day, month and year digits are all distinct
_SAMPLE_DATE = datetime(2003, 11, 22)

# Year-month-day prefixes, ISO ("2023-07-15") or EXIF ("2023:07:15 14:30:00")
_YMD_DATE = re.compile(r"^(\d{4})[-:](\d{2})[-:](\d{2})(?=\s|T|$)")

# Parsing twice with these defaults exposes fields missing from the string
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def strip_directional_marks(raw: str) -> str:
    """Remove left-to-right and right-to-left marks."""
    return raw.translate(_DIRECTIONAL_MARKS)


def _locale_sample() -> str:
    return _SAMPLE_DATE.strftime("%x")


def _order_from_sample(sample: str) -> Tuple[Optional[bool], Optional[bool]]:
    """Infer (day_first, year_first) from ``_SAMPLE_DATE`` formatted with %x."""
    year_pos = sample.find("2003")
    if year_pos < 0:
        year_pos = sample.find("03")
    day_pos = sample.find("22")
    month_pos = sample.find("11")
    if min(year_pos, day_pos, month_pos) < 0:
        return None, None
    day_first = day_pos < month_pos
    year_first = year_pos < month_pos and year_pos < day_pos
    return day_first, year_first


def _clean_name(name: str) -> str:
    return name.strip().rstrip(".").lower()


@dataclass(frozen=True)
class LocaleDateConventions:
    """How the active locale writes dates.

    Name tuples hold lowercase words; months are January..December and
    weekdays Monday..Sunday, each entry listing the full and abbreviated form.
    """

    day_first: bool = False
    year_first: bool = False
    months: Tuple[Tuple[str, ...], ...] = ()
    weekdays: Tuple[Tuple[str, ...], ...] = ()
    am: Tuple[str, ...] = ()
    pm: Tuple[str, ...] = ()

    @classmethod
    def from_current_locale(
        cls, day_first: Optional[bool] = None, year_first: Optional[bool] = None
    ) -> "LocaleDateConventions":
        """Read conventions from the process's current LC_TIME locale.

        Call ``locale.setlocale(locale.LC_TIME, "")`` first to pick up the
        user's locale; a fresh interpreter runs in the C locale.
        """
        sample = _locale_sample()
        inferred_day_first, inferred_year_first = _order_from_sample(sample)
        if inferred_day_first is None:
            logger.debug(
                f"Cannot infer date order from locale sample {sample!r}; "
                "assuming month first (set MEDIASORT_DAY_FIRST to override)"
            )

        months = tuple(
            _unique(
                _clean_name(datetime(2003, month, 1).strftime("%B")),
                _clean_name(datetime(2003, month, 1).strftime("%b")),
            )
            for month in range(1, 13)
        )
        # 2003-11-17 was a Monday
        weekdays = tuple(
            _unique(
                _clean_name(datetime(2003, 11, 17 + offset).strftime("%A")),
                _clean_name(datetime(2003, 11, 17 + offset).strftime("%a")),
            )
            for offset in range(7)
        )
        am = _unique(_clean_name(datetime(2003, 11, 22, 9).strftime("%p")))
        pm = _unique(_clean_name(datetime(2003, 11, 22, 21).strftime("%p")))

        conventions = cls(
            day_first=bool(inferred_day_first),
            year_first=bool(inferred_year_first),
            months=months,
            weekdays=weekdays,
            am=am,
            pm=pm,
        )
        if day_first is not None:
            conventions = replace(conventions, day_first=day_first)
        if year_first is not None:
            conventions = replace(conventions, year_first=year_first)
        return conventions


def _unique(*names: str) -> Tuple[str, ...]:
    seen: List[str] = []
    for name in names:
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


def build_parserinfo(conventions: LocaleDateConventions) -> dateparser.parserinfo:
    """dateutil parserinfo with the locale's words added to the English ones."""

    month_words = [list(words) for words in dateparser.parserinfo.MONTHS]
    for index, names in enumerate(conventions.months[:12]):
        month_words[index].extend(n for n in names if n not in month_words[index])
    known_months = {word.lower() for words in month_words for word in words}

    weekday_words = [list(words) for words in dateparser.parserinfo.WEEKDAYS]
    for index, names in enumerate(conventions.weekdays[:7]):
        # a weekday abbreviation that is also a month name would shadow the month
        weekday_words[index].extend(
            n for n in names if n not in weekday_words[index] and n not in known_months
        )

    am_words = list(dateparser.parserinfo.AMPM[0])
    am_words.extend(n for n in conventions.am if n not in am_words)
    pm_words = list(dateparser.parserinfo.AMPM[1])
    pm_words.extend(n for n in conventions.pm if n not in pm_words)

    attributes: Dict[str, object] = {
        "MONTHS": [tuple(words) for words in month_words],
        "WEEKDAYS": [tuple(words) for words in weekday_words],
        "AMPM": [tuple(am_words), tuple(pm_words)],
    }
    info_class = type("LocaleParserInfo", (dateparser.parserinfo,), attributes)
    return info_class(dayfirst=conventions.day_first, yearfirst=conventions.year_first)


class LocaleDateParser:
    """Parses display date strings into naive datetimes, or None."""

    def __init__(self, conventions: Optional[LocaleDateConventions] = None):
        if conventions is None:
            conventions = LocaleDateConventions.from_current_locale()
        self.conventions = conventions
        self._parser = dateparser.parser(build_parserinfo(conventions))

    def parse(self, raw: Optional[str]) -> Optional[datetime]:
        """Parse one raw metadata value.

        Returns None for empty, whitespace-only, unparseable or incomplete
        values (anything lacking a year, month or day). Never raises.
        """
        if not raw:
            return None
        text = strip_directional_marks(str(raw)).strip()
        if not text:
            return None
        order = {}
        if _YMD_DATE.match(text):
            text = _YMD_DATE.sub(r"\1-\2-\3", text)
            order = {"dayfirst": False, "yearfirst": True}

        try:
            first = self._parser.parse(
                text, default=_FILL_DEFAULTS[0], ignoretz=True, **order
            )
            second = self._parser.parse(
                text, default=_FILL_DEFAULTS[1], ignoretz=True, **order
            )
        except (ValueError, OverflowError, TypeError) as e:
            logger.debug(f"Unparseable date value {text!r}: {e}")
            return None

        if first.date() != second.date():
            logger.debug(f"Incomplete date value {text!r}")
            return None
        return first

    __call__ = parse
