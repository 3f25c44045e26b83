"""Period calendar: maps instants to half-open UTC buckets.

All bucketing happens in UTC so results are deterministic; converting to
local time for display is the presentation layer's job.

Bucket keys:
- DAILY   ``2024-01-15``
- WEEKLY  ``2024-W05`` (ISO week, Monday start, ISO week-year)
- MONTHLY ``2024-01``
- YEARLY  ``2024``
"""

from __future__ import annotations

import re
from calendar import month_name
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Iterable

from fintrax.domain.calendar.granularity import Granularity
from fintrax.domain.shared.exceptions import InvalidPeriodError
from fintrax.domain.shared.time import to_utc

_KEY_PATTERNS = {
    Granularity.DAILY: re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"),
    Granularity.WEEKLY: re.compile(r"^(\d{4})-W(\d{2})$"),
    Granularity.MONTHLY: re.compile(r"^(\d{4})-(\d{2})$"),
    Granularity.YEARLY: re.compile(r"^(\d{4})$"),
}


@dataclass(frozen=True)
class Bucket:
    """Half-open time interval ``[start, end)`` for one calendar period."""

    key: str
    granularity: Granularity
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= to_utc(instant) < self.end

    @property
    def days(self) -> int:
        """Number of calendar days covered by the bucket."""
        return (self.end - self.start).days

    @property
    def label(self) -> str:
        if self.granularity is Granularity.MONTHLY:
            return f"{month_name[self.start.month]} {self.start.year}"
        if self.granularity is Granularity.WEEKLY:
            year, week = self.key.split("-W")
            return f"Week {int(week)}, {year}"
        return self.key

    def __str__(self) -> str:
        return self.key


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _first_of_next_month(year: int, month: int) -> datetime:
    if month == 12:
        return datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    return datetime(year, month + 1, 1, tzinfo=timezone.utc)


class PeriodCalendar:
    """Stateless UTC calendar; every method is a pure function of its inputs."""

    def bucket_for(self, instant: datetime, granularity: Granularity) -> Bucket:
        ts = to_utc(instant)
        try:
            return self._bucket_for_day(ts.date(), granularity)
        except (OverflowError, ValueError) as e:
            msg = f"Instant {instant} is outside the supported calendar range"
            raise InvalidPeriodError(msg, instant) from e

    def bucket_from_key(self, key: str, granularity: Granularity) -> Bucket:
        match = _KEY_PATTERNS[granularity].match(key.strip())
        if not match:
            msg = f"Malformed {granularity.value.lower()} bucket key: {key!r}"
            raise InvalidPeriodError(msg, key)

        parts = [int(p) for p in match.groups()]
        try:
            if granularity is Granularity.DAILY:
                day = date(parts[0], parts[1], parts[2])
            elif granularity is Granularity.WEEKLY:
                day = date.fromisocalendar(parts[0], parts[1], 1)
            elif granularity is Granularity.MONTHLY:
                day = date(parts[0], parts[1], 1)
            else:
                day = date(parts[0], 1, 1)
            return self._bucket_for_day(day, granularity)
        except (OverflowError, ValueError) as e:
            msg = f"Invalid {granularity.value.lower()} bucket key: {key!r}"
            raise InvalidPeriodError(msg, key) from e

    def next_bucket(self, bucket: Bucket) -> Bucket:
        return self.bucket_for(bucket.end, bucket.granularity)

    def previous_bucket(self, bucket: Bucket) -> Bucket:
        return self.bucket_for(
            bucket.start - timedelta(microseconds=1),
            bucket.granularity,
        )

    def previous_buckets(
        self,
        n: int,
        granularity: Granularity,
        anchor: datetime,
    ) -> list[Bucket]:
        """Return the ``n`` buckets ending at ``anchor``'s bucket, oldest first."""
        if n < 0:
            msg = f"Number of periods cannot be negative: {n}"
            raise InvalidPeriodError(msg, n)
        buckets: list[Bucket] = []
        if n == 0:
            return buckets
        current = self.bucket_for(anchor, granularity)
        buckets.append(current)
        for _ in range(n - 1):
            current = self.previous_bucket(current)
            buckets.append(current)
        buckets.reverse()
        return buckets

    def previous_periods(
        self,
        n: int,
        granularity: Granularity,
        anchor: datetime,
    ) -> list[str]:
        """Return the ``n`` most recent bucket keys ending at ``anchor``."""
        return [b.key for b in self.previous_buckets(n, granularity, anchor)]

    def buckets_between(
        self,
        start: datetime,
        end: datetime,
        granularity: Granularity,
    ) -> list[Bucket]:
        """Return every bucket intersecting the half-open range ``[start, end)``."""
        start_utc, end_utc = to_utc(start), to_utc(end)
        if end_utc < start_utc:
            msg = f"Range end {end} is before start {start}"
            raise InvalidPeriodError(msg, f"{start}..{end}")
        buckets: list[Bucket] = []
        if end_utc == start_utc:
            return buckets
        current = self.bucket_for(start_utc, granularity)
        while current.start < end_utc:
            buckets.append(current)
            current = self.next_bucket(current)
        return buckets

    def touched_buckets(
        self,
        instants: Iterable[datetime],
        granularity: Granularity,
    ) -> list[Bucket]:
        """Distinct buckets containing any of ``instants``, ordered by start."""
        unique = {self.bucket_for(ts, granularity) for ts in instants}
        return sorted(unique, key=lambda b: b.start)

    def _bucket_for_day(self, day: date, granularity: Granularity) -> Bucket:
        if granularity is Granularity.DAILY:
            start = _midnight(day)
            return Bucket(
                key=f"{day.year:04d}-{day.month:02d}-{day.day:02d}",
                granularity=granularity,
                start=start,
                end=start + timedelta(days=1),
            )

        if granularity is Granularity.WEEKLY:
            monday = day - timedelta(days=day.weekday())
            iso = monday.isocalendar()
            start = _midnight(monday)
            return Bucket(
                key=f"{iso[0]:04d}-W{iso[1]:02d}",
                granularity=granularity,
                start=start,
                end=start + timedelta(days=7),
            )

        if granularity is Granularity.MONTHLY:
            return Bucket(
                key=f"{day.year:04d}-{day.month:02d}",
                granularity=granularity,
                start=datetime(day.year, day.month, 1, tzinfo=timezone.utc),
                end=_first_of_next_month(day.year, day.month),
            )

        return Bucket(
            key=f"{day.year:04d}",
            granularity=granularity,
            start=datetime(day.year, 1, 1, tzinfo=timezone.utc),
            end=datetime(day.year + 1, 1, 1, tzinfo=timezone.utc),
        )
