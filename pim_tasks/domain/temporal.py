from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo


@dataclass(frozen=True)
class TemporalValue:
    """A calendar date (all-day) or a timezone-aware instant.

    Date-only values carry no zone: their civil date is authoritative and
    survives any zone conversion unchanged.
    """

    value: date | datetime

    def __post_init__(self) -> None:
        if isinstance(self.value, datetime) and self.value.tzinfo is None:
            raise ValueError("timed values must be timezone-aware")

    @property
    def is_date(self) -> bool:
        return not isinstance(self.value, datetime)

    @property
    def civil_date(self) -> date:
        if isinstance(self.value, datetime):
            return self.value.date()
        return self.value

    @property
    def zone(self) -> tzinfo | None:
        if isinstance(self.value, datetime):
            return self.value.tzinfo
        return None

    def as_datetime(self, zone: tzinfo | None = None) -> datetime:
        # date-only values become midnight of their date in ``zone``
        if isinstance(self.value, datetime):
            return self.value
        return datetime.combine(self.value, time(), tzinfo=zone)

    def _pair(self, other: TemporalValue) -> tuple[date | datetime, date | datetime]:
        if self.is_date == other.is_date:
            return self.value, other.value
        if self.is_date:
            return self.as_datetime(other.zone), other.value
        return self.value, other.as_datetime(self.zone)

    def __lt__(self, other: TemporalValue) -> bool:
        mine, theirs = self._pair(other)
        return mine < theirs

    def __le__(self, other: TemporalValue) -> bool:
        mine, theirs = self._pair(other)
        return mine <= theirs

    def __gt__(self, other: TemporalValue) -> bool:
        mine, theirs = self._pair(other)
        return mine > theirs

    def __ge__(self, other: TemporalValue) -> bool:
        mine, theirs = self._pair(other)
        return mine >= theirs

    def __sub__(self, other: TemporalValue) -> timedelta:
        mine, theirs = self._pair(other)
        return mine - theirs

    def shifted(self, delta: timedelta) -> TemporalValue:
        return TemporalValue(self.value + delta)


def to_zoned(civil: date | datetime, include_time: bool, zone: tzinfo) -> TemporalValue:
    if not isinstance(civil, datetime):
        civil = datetime.combine(civil, time())
    if not include_time:
        return TemporalValue(civil.date())
    if civil.tzinfo is None:
        # a reading inside a DST gap is moved onto the instant it actually names
        civil = civil.replace(tzinfo=zone).astimezone(timezone.utc)
    return TemporalValue(civil.astimezone(zone))


def convert(value: TemporalValue, zone: tzinfo) -> TemporalValue:
    if value.is_date:
        return value
    return TemporalValue(value.as_datetime().astimezone(zone))


def now(zone: tzinfo) -> TemporalValue:
    return TemporalValue(datetime.now(zone))


def to_civil(value: TemporalValue, zone: tzinfo) -> datetime:
    """Naive wall-clock reading of ``value`` in ``zone``, as an editor shows it."""
    if value.is_date:
        return value.as_datetime()
    return value.as_datetime().astimezone(zone).replace(tzinfo=None)
