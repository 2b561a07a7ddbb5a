"""Date utilities for hurricaneviewer.

This module provides the half-open time window used to filter Earth Engine
collections, and conversions between calendar strings, Python datetimes and
the millisecond epoch timestamps Earth Engine stores in
``system:time_start``.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Iterable, Union

from hurricaneviewer.exceptions import InvalidDateRangeError
from hurricaneviewer.utils.log import get_logger

LOGGER = get_logger(__name__)

DateLike = Union[str, datetime.date, datetime.datetime]


def to_utc_datetime(value: DateLike) -> datetime.datetime:
    """Coerce a date string, date or datetime into an aware UTC datetime.

    Naive datetimes are taken to be UTC. Strings must be ISO 8601
    (``2017-09-19`` or ``2017-09-19T06:00:00``).

    Raises:
        InvalidDateRangeError: If a string cannot be parsed.
    """
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            parsed = datetime.datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidDateRangeError(f"Cannot parse date {value!r}: {exc}") from exc
    else:
        raise InvalidDateRangeError(f"Unsupported date value {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed.astimezone(datetime.timezone.utc)


def millis_to_datetime(millis: float) -> datetime.datetime:
    """Convert an Earth Engine epoch-millisecond timestamp to UTC."""
    return datetime.datetime.fromtimestamp(millis / 1000.0, tz=datetime.timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """A half-open ``[start, end)`` window of UTC datetimes.

    Matches Earth Engine's ``filterDate`` semantics: the start is included and
    the end is excluded.
    """

    start: datetime.datetime
    end: datetime.datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", to_utc_datetime(self.start))
        object.__setattr__(self, "end", to_utc_datetime(self.end))
        if self.end <= self.start:
            raise InvalidDateRangeError(
                f"Date range end {self.end.isoformat()} must be after start {self.start.isoformat()}"
            )

    @classmethod
    def parse(cls, start: DateLike, end: DateLike) -> "DateRange":
        return cls(to_utc_datetime(start), to_utc_datetime(end))

    @property
    def duration(self) -> datetime.timedelta:
        return self.end - self.start

    def contains(self, value: DateLike) -> bool:
        moment = to_utc_datetime(value)
        return self.start <= moment < self.end

    def as_ee_args(self) -> tuple[str, str]:
        """Return ``(start, end)`` ISO strings suitable for ``filterDate``."""
        return (
            self.start.strftime("%Y-%m-%dT%H:%M:%S"),
            self.end.strftime("%Y-%m-%dT%H:%M:%S"),
        )

    def __str__(self) -> str:
        start, end = self.as_ee_args()
        return f"[{start}, {end})"


def find_out_of_range(timestamps: Iterable[datetime.datetime], date_range: DateRange) -> list[datetime.datetime]:
    """Return every timestamp that falls outside ``date_range``."""
    outside = [ts for ts in timestamps if not date_range.contains(ts)]
    if outside:
        LOGGER.debug("%d timestamps outside %s", len(outside), date_range)
    return outside
