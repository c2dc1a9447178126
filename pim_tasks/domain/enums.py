from __future__ import annotations

from enum import IntEnum, StrEnum


class TaskStatus(StrEnum):
    NEEDS_ACTION = "NEEDS-ACTION"
    IN_PROCESS = "IN-PROCESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(IntEnum):
    UNDEFINED = 0
    HIGH = 1
    MEDIUM = 5
    LOW = 9

    @classmethod
    def from_ical(cls, value: int | None) -> TaskPriority:
        """Bucket an iCalendar PRIORITY (0-9) into one of the four levels."""
        if value is None:
            return cls.UNDEFINED
        if 1 <= value <= 4:
            return cls.HIGH
        if value == 5:
            return cls.MEDIUM
        if 6 <= value <= 9:
            return cls.LOW
        return cls.UNDEFINED


class Frequency(StrEnum):
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class SaveState(StrEnum):
    EDITING = "editing"
    VALIDATING = "validating"
    REJECTED = "rejected"
    COMMITTING = "committing"
    CASCADING = "cascading"
    DONE = "done"
    FAILED = "failed"
