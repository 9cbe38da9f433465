# app/periods.py
"""
Reporting-period resolution.

A period keyword ("day", "week", "month", "year", "all-time") is mapped to a
concrete [start, end] interval anchored on a caller-supplied reference day.
Both bounds are naive local datetimes: start at 00:00:00.000, end at
23:59:59.999 of the last included day.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time as dtime, timedelta
from typing import Dict, Optional, Union

START_OF_DAY = dtime(0, 0, 0, 0)
END_OF_DAY = dtime(23, 59, 59, 999000)

ALL_TIME_START = date(2000, 1, 1)
ALL_TIME_END = date(2050, 12, 31)

ALL_TIME_ALIASES = {"alltime", "all", "lifetime"}
PERIODS = {"day", "week", "month", "year"} | ALL_TIME_ALIASES


@dataclass(frozen=True)
class DateRange:
    start_date: datetime
    end_date: datetime

    def as_dict(self) -> Dict[str, datetime]:
        return {"startDate": self.start_date, "endDate": self.end_date}


def normalize_period(raw: Optional[str]) -> str:
    """'ALL_TIME', 'all-time' and ' alltime ' all normalize to 'alltime'."""
    if raw is None:
        return ""
    return raw.strip().lower().replace("-", "").replace("_", "").strip()


def _day_span(first: date, last: date) -> DateRange:
    return DateRange(datetime.combine(first, START_OF_DAY), datetime.combine(last, END_OF_DAY))


def resolve_period(period: Optional[str], today: Union[date, datetime]) -> DateRange:
    """
    Resolve a period keyword against the reference day `today`.

    Unrecognized keywords fall back to the all-time interval.
    """
    day = today.date() if isinstance(today, datetime) else today
    key = normalize_period(period)

    if key == "day":
        return _day_span(day, day)

    if key == "week":
        # Sunday-start week; date.weekday() is Monday=0, so shift to Sunday=0
        sunday_index = (day.weekday() + 1) % 7
        first = day - timedelta(days=sunday_index)
        return _day_span(first, first + timedelta(days=6))

    if key == "month":
        last_dom = calendar.monthrange(day.year, day.month)[1]
        return _day_span(day.replace(day=1), day.replace(day=last_dom))

    if key == "year":
        return _day_span(date(day.year, 1, 1), date(day.year, 12, 31))

    return _day_span(ALL_TIME_START, ALL_TIME_END)
