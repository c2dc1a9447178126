from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .enums import TaskPriority, TaskStatus
from .recurrence import RecurrenceRule
from .temporal import TemporalValue


@dataclass(frozen=True)
class Collection:
    uid: str
    display_name: str


@dataclass(frozen=True)
class Task:
    uid: str | None
    collection_uid: str
    title: str = ""
    description: str = ""
    location: str = ""
    status: TaskStatus = TaskStatus.NEEDS_ACTION
    priority: TaskPriority = TaskPriority.UNDEFINED
    tags: frozenset[str] = field(default_factory=frozenset)
    timezone: str | None = None
    start: Optional[TemporalValue] = None
    due: Optional[TemporalValue] = None
    completed_at: Optional[TemporalValue] = None
    recurrence: Optional[RecurrenceRule] = None
    last_modified: Optional[datetime] = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def is_finished(self) -> bool:
        return self.status in (TaskStatus.COMPLETED, TaskStatus.CANCELLED)


@dataclass(frozen=True)
class TaskChange:
    new: Task
    original: Task | None = None
