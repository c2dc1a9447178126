from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable, Optional

from .enums import TaskPriority, TaskStatus
from .recurrence import RecurrenceRule


def normalize_tags(tags: Iterable[str]) -> frozenset[str]:
    return frozenset(tag.strip() for tag in tags if tag and tag.strip())


@dataclass(frozen=True)
class TaskDraft:
    """Editable state of a task.

    ``start`` and ``due`` are naive wall-clock readings in the process-local
    zone; ``include_time`` decides whether they are saved as instants or as
    calendar dates.
    """

    uid: str
    collection_uid: str
    title: str = ""
    status: TaskStatus = TaskStatus.NEEDS_ACTION
    priority: TaskPriority = TaskPriority.UNDEFINED
    include_time: bool = False
    start: Optional[datetime] = None
    due: Optional[datetime] = None
    timezone: str | None = None
    recurrence: Optional[RecurrenceRule] = None
    location: str = ""
    description: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)

    def with_changes(self, **fields: Any) -> TaskDraft:
        if "uid" in fields and fields["uid"] != self.uid:
            raise ValueError("uid is fixed for the lifetime of a draft")
        if "tags" in fields:
            fields["tags"] = normalize_tags(fields["tags"])
        if "status" in fields:
            fields["status"] = TaskStatus(fields["status"])
        if "priority" in fields:
            fields["priority"] = TaskPriority(fields["priority"])
        return replace(self, **fields)

    def with_time_toggled(self) -> TaskDraft:
        return replace(self, include_time=not self.include_time)

    def with_recurrence_toggled(self) -> TaskDraft:
        rule = None if self.recurrence else RecurrenceRule.default()
        return replace(self, recurrence=rule)
