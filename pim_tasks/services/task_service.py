from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from zoneinfo import ZoneInfo

from pim_tasks.config import SETTINGS
from pim_tasks.domain import temporal
from pim_tasks.domain.draft import TaskDraft
from pim_tasks.domain.entities import Collection, Task, TaskChange
from pim_tasks.domain.enums import TaskPriority, TaskStatus
from pim_tasks.domain.errors import ValidationError
from pim_tasks.domain.ports import TaskStore, ZoneProvider
from pim_tasks.domain.recurrence import next_occurrence
from pim_tasks.domain.temporal import TemporalValue
from pim_tasks.infra.zones import FALLBACK_ZONE, ZoneResolver

logger = logging.getLogger(__name__)

RECURRING_WITHOUT_ANCHOR = "A recurring task must have either a start or a due instant."
DUE_NOT_AFTER_START = "Due instant must be later than start instant."


class TaskService:
    def __init__(self, store: TaskStore, zones: ZoneProvider | None = None) -> None:
        self._store = store
        self._zones = zones or ZoneResolver()

    def list_collections(self) -> list[Collection]:
        return self._store.list_collections()

    def local_zone(self) -> ZoneInfo:
        name = self._zones.current_zone_name()
        zone = self._zones.resolve_zone(name)
        if zone is None:
            logger.warning("Local timezone %r is not recognised, using %s", name, FALLBACK_ZONE)
            return ZoneInfo(FALLBACK_ZONE)
        return zone

    def new_draft(self, default_collection_uid: str | None = None) -> TaskDraft:
        collection_uid = default_collection_uid or SETTINGS.default_collection
        if not collection_uid:
            collections = self.list_collections()
            collection_uid = collections[0].uid if collections else ""
        return TaskDraft(
            uid=str(uuid.uuid4()),
            collection_uid=collection_uid,
            status=TaskStatus.NEEDS_ACTION,
            priority=TaskPriority.UNDEFINED,
            timezone=self._zones.current_zone_name(),
        )

    def draft_from(self, task: Task) -> TaskDraft:
        local = self.local_zone()
        anchor = task.start or task.due
        return TaskDraft(
            uid=task.uid or str(uuid.uuid4()),
            collection_uid=task.collection_uid,
            title=task.title,
            status=task.status,
            priority=task.priority,
            include_time=anchor is not None and not anchor.is_date,
            start=temporal.to_civil(task.start, local) if task.start else None,
            due=temporal.to_civil(task.due, local) if task.due else None,
            timezone=task.timezone or self._zones.current_zone_name(),
            recurrence=task.recurrence,
            location=task.location,
            description=task.description,
            tags=frozenset(task.tags),
        )

    def validate(self, draft: TaskDraft) -> tuple[TemporalValue | None, TemporalValue | None]:
        """Check the draft and return its start and due as saved values.

        Raises ValidationError when a recurring draft has no anchor instant or
        when the due instant does not come after the start instant.
        """
        if draft.recurrence is not None and draft.start is None and draft.due is None:
            raise ValidationError(RECURRING_WITHOUT_ANCHOR)

        local = self.local_zone()
        start = temporal.to_zoned(draft.start, draft.include_time, local) if draft.start else None
        due = temporal.to_zoned(draft.due, draft.include_time, local) if draft.due else None
        if start is not None and due is not None and start >= due:
            raise ValidationError(DUE_NOT_AFTER_START)
        return start, due

    def commit(self, draft: TaskDraft, original: Task | None = None) -> Task:
        start, due = self.validate(draft)
        local = self.local_zone()
        base = original or Task(uid=draft.uid, collection_uid=draft.collection_uid)

        completed_at = None
        if draft.status == TaskStatus.COMPLETED:
            completed_at = base.completed_at or temporal.now(local)

        task = replace(
            base,
            uid=draft.uid,
            collection_uid=draft.collection_uid,
            title=draft.title,
            description=draft.description,
            location=draft.location,
            status=draft.status,
            priority=draft.priority,
            tags=draft.tags,
            timezone=draft.timezone,
            start=start,
            due=due,
            completed_at=completed_at,
            recurrence=draft.recurrence,
        )

        if draft.timezone:
            zone = self._zones.resolve_zone(draft.timezone)
            if zone is None:
                logger.warning("Unknown timezone %r on task %s, keeping local times", draft.timezone, draft.uid)
            else:
                task = replace(
                    task,
                    start=temporal.convert(task.start, zone) if task.start else None,
                    due=temporal.convert(task.due, zone) if task.due else None,
                    completed_at=temporal.convert(task.completed_at, zone) if task.completed_at else None,
                )

        return replace(task, last_modified=temporal.now(local).value)

    def successor(self, task: Task) -> Task | None:
        if task.status != TaskStatus.COMPLETED or task.recurrence is None:
            return None
        following = next_occurrence(task.recurrence, task.start, task.due)
        if following is None:
            return None
        next_start, next_due = following
        return replace(
            task,
            uid=None,
            start=next_start,
            due=next_due,
            status=TaskStatus.NEEDS_ACTION,
            completed_at=None,
            recurrence=task.recurrence.advanced(),
        )

    def save(self, task: Task, original: Task | None = None) -> Task:
        stored = self._store.persist([TaskChange(new=task, original=original)], task.collection_uid)
        return stored[0] if stored else task

    def delete(self, task: Task, collection_uid: str) -> None:
        self._store.delete(task, collection_uid)
