from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timezone, tzinfo
from typing import TYPE_CHECKING, Any

from dateutil.rrule import DAILY, FR, HOURLY, MO, MONTHLY, SA, SU, TH, TU, WE, WEEKLY, YEARLY, rrule

from .enums import Frequency
from .temporal import TemporalValue

if TYPE_CHECKING:
    from .entities import Task

_FREQUENCIES = {
    Frequency.HOURLY: HOURLY,
    Frequency.DAILY: DAILY,
    Frequency.WEEKLY: WEEKLY,
    Frequency.MONTHLY: MONTHLY,
    Frequency.YEARLY: YEARLY,
}

_WEEKDAYS = {"MO": MO, "TU": TU, "WE": WE, "TH": TH, "FR": FR, "SA": SA, "SU": SU}


@dataclass(frozen=True)
class RecurrenceRule:
    frequency: Frequency = Frequency.WEEKLY
    interval: int = 1
    count: int | None = None
    until: date | datetime | None = None
    by_weekday: tuple[str, ...] = ()
    by_month_day: tuple[int, ...] = ()
    by_month: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "frequency", Frequency(self.frequency))
        object.__setattr__(self, "by_weekday", tuple(day.upper() for day in self.by_weekday))
        object.__setattr__(self, "by_month_day", tuple(self.by_month_day))
        object.__setattr__(self, "by_month", tuple(self.by_month))

        if self.interval < 1:
            raise ValueError(f"interval must be >= 1, got {self.interval}")
        if self.count is not None and self.count < 1:
            raise ValueError(f"count must be >= 1, got {self.count}")
        if self.count is not None and self.until is not None:
            raise ValueError("count and until are mutually exclusive")
        unknown = [day for day in self.by_weekday if day not in _WEEKDAYS]
        if unknown:
            raise ValueError(f"unknown weekday codes: {', '.join(unknown)}")

    @classmethod
    def default(cls) -> RecurrenceRule:
        return cls(frequency=Frequency.WEEKLY, interval=1)

    def advanced(self) -> RecurrenceRule:
        """Rule carried by the next occurrence: one fewer remaining when counted."""
        if self.count is None:
            return self
        return replace(self, count=self.count - 1)

    def iterate(self, dtstart: datetime) -> rrule:
        return rrule(
            _FREQUENCIES[self.frequency],
            dtstart=dtstart,
            interval=self.interval,
            byweekday=[_WEEKDAYS[day] for day in self.by_weekday] or None,
            bymonthday=self.by_month_day or None,
            bymonth=self.by_month or None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"freq": self.frequency.value, "interval": self.interval}
        if self.count is not None:
            data["count"] = self.count
        if self.until is not None:
            data["until"] = self.until.isoformat()
        if self.by_weekday:
            data["byday"] = list(self.by_weekday)
        if self.by_month_day:
            data["bymonthday"] = list(self.by_month_day)
        if self.by_month:
            data["bymonth"] = list(self.by_month)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecurrenceRule:
        until = data.get("until")
        if isinstance(until, str):
            until = datetime.fromisoformat(until) if "T" in until else date.fromisoformat(until)
        return cls(
            frequency=Frequency(str(data.get("freq", Frequency.WEEKLY.value)).upper()),
            interval=int(data.get("interval") or 1),
            count=data.get("count"),
            until=until,
            by_weekday=tuple(data.get("byday") or ()),
            by_month_day=tuple(data.get("bymonthday") or ()),
            by_month=tuple(data.get("bymonth") or ()),
        )


def is_recurring(task: Task) -> bool:
    return task.recurrence is not None


def next_occurrence(
    rule: RecurrenceRule,
    completed_start: TemporalValue | None,
    completed_due: TemporalValue | None,
) -> tuple[TemporalValue | None, TemporalValue | None] | None:
    anchor = completed_start or completed_due
    if anchor is None:
        return None
    if rule.count is not None and rule.count <= 1:
        return None

    following = _next_after(rule, anchor)
    if following is None:
        return None
    if rule.until is not None and following >= _as_temporal(rule.until, following.zone):
        return None

    if completed_start is None:
        return None, following
    if completed_due is None:
        return following, None
    return following, following.shifted(completed_due - completed_start)


def _next_after(rule: RecurrenceRule, anchor: TemporalValue) -> TemporalValue | None:
    if anchor.is_date:
        # sub-daily rules must still land on a later calendar date
        start = datetime.combine(anchor.civil_date, time())
        end_of_day = datetime.combine(anchor.civil_date, time.max)
        following = rule.iterate(start).after(end_of_day)
        return TemporalValue(following.date()) if following else None

    start = anchor.as_datetime()
    following = rule.iterate(start).after(start)
    return TemporalValue(following) if following else None


def _as_temporal(value: date | datetime, zone: tzinfo | None) -> TemporalValue:
    if isinstance(value, datetime) and value.tzinfo is None:
        return TemporalValue(value.replace(tzinfo=zone or timezone.utc))
    return TemporalValue(value)
