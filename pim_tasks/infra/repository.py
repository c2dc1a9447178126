from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from pim_tasks.domain.entities import Collection, Task, TaskChange
from pim_tasks.domain.enums import TaskPriority, TaskStatus
from pim_tasks.domain.errors import PersistenceError
from pim_tasks.domain.ports import ZoneProvider
from pim_tasks.domain.recurrence import RecurrenceRule
from pim_tasks.domain.temporal import TemporalValue

from .db import SessionLocal
from .models import CollectionModel, TaskModel
from .zones import ZoneResolver

logger = logging.getLogger(__name__)


def _load_temporal(stored: datetime | None, is_date: bool, zone: ZoneInfo | None) -> Optional[TemporalValue]:
    if stored is None:
        return None
    if is_date:
        return TemporalValue(stored.date())
    moment = stored.replace(tzinfo=timezone.utc)
    return TemporalValue(moment.astimezone(zone) if zone else moment)


def _dump_temporal(value: TemporalValue | None) -> tuple[datetime | None, bool]:
    if value is None:
        return None, False
    if value.is_date:
        return value.as_datetime(), True
    return _naive_utc(value.as_datetime()), False


def _naive_utc(moment: datetime | None) -> datetime | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _split_tags(raw: str) -> frozenset[str]:
    return frozenset(tag for tag in raw.split(",") if tag)


def _to_collection(model: CollectionModel) -> Collection:
    return Collection(uid=model.uid, display_name=model.display_name)


class TaskRepository:
    def __init__(self, session_factory=SessionLocal, zones: ZoneProvider | None = None) -> None:
        self._session_factory = session_factory
        self._zones = zones or ZoneResolver()

    def _to_entity(self, model: TaskModel) -> Task:
        zone = self._zones.resolve_zone(model.timezone) if model.timezone else None
        return Task(
            uid=model.uid,
            collection_uid=model.collection_uid,
            title=model.title,
            description=model.description,
            location=model.location,
            status=TaskStatus(model.status),
            priority=TaskPriority(model.priority),
            tags=_split_tags(model.tags),
            timezone=model.timezone,
            start=_load_temporal(model.start_at, model.start_is_date, zone),
            due=_load_temporal(model.due_at, model.due_is_date, zone),
            completed_at=_load_temporal(model.completed_at, False, zone),
            recurrence=RecurrenceRule.from_dict(model.recurrence) if model.recurrence else None,
            last_modified=(
                model.last_modified.replace(tzinfo=timezone.utc) if model.last_modified else None
            ),
        )

    def list_collections(self) -> list[Collection]:
        with self._session_factory() as session:
            stmt = select(CollectionModel).order_by(CollectionModel.created_at.asc(), CollectionModel.uid)
            return [_to_collection(model) for model in session.scalars(stmt)]

    def create_collection(self, uid: str, display_name: str) -> Collection:
        with self._session_factory() as session:
            model = CollectionModel(uid=uid, display_name=display_name)
            session.add(model)
            session.commit()
            session.refresh(model)
            return _to_collection(model)

    def get_task(self, uid: str) -> Optional[Task]:
        with self._session_factory() as session:
            model = session.scalar(select(TaskModel).where(TaskModel.uid == uid))
            return self._to_entity(model) if model else None

    def list_tasks(self, collection_uid: str | None = None) -> list[Task]:
        with self._session_factory() as session:
            stmt = select(TaskModel)
            if collection_uid:
                stmt = stmt.where(TaskModel.collection_uid == collection_uid)
            stmt = stmt.order_by(
                TaskModel.due_at.is_(None),
                TaskModel.due_at.asc(),
                TaskModel.priority.desc(),
                TaskModel.id.asc(),
            )
            return [self._to_entity(model) for model in session.scalars(stmt)]

    def persist(self, changes: Sequence[TaskChange], collection_uid: str) -> list[Task]:
        try:
            with self._session_factory() as session:
                if session.get(CollectionModel, collection_uid) is None:
                    raise PersistenceError(f"Unknown collection {collection_uid!r}")
                stored = [self._store(session, change, collection_uid) for change in changes]
                session.commit()
                tasks = [self._to_entity(model) for model in stored]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not store tasks in {collection_uid!r}") from exc

        for task in tasks:
            logger.debug("Stored task %s in collection %s", task.uid, collection_uid)
        return tasks

    def delete(self, task: Task, collection_uid: str) -> None:
        if not task.uid:
            return
        try:
            with self._session_factory() as session:
                model = session.scalar(
                    select(TaskModel).where(
                        TaskModel.uid == task.uid,
                        TaskModel.collection_uid == collection_uid,
                    )
                )
                if not model:
                    return
                session.delete(model)
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not delete task {task.uid!r}") from exc
        logger.debug("Deleted task %s from collection %s", task.uid, collection_uid)

    @staticmethod
    def _store(session, change: TaskChange, collection_uid: str) -> TaskModel:
        task = change.new
        lookup_uid = change.original.uid if change.original and change.original.uid else task.uid
        model = None
        if lookup_uid:
            model = session.scalar(select(TaskModel).where(TaskModel.uid == lookup_uid))
        if model is None:
            model = TaskModel(uid=task.uid or str(uuid.uuid4()))
            session.add(model)

        model.collection_uid = collection_uid
        model.title = task.title
        model.description = task.description
        model.location = task.location
        model.status = task.status.value
        model.priority = int(task.priority)
        model.tags = ",".join(sorted(task.tags))
        model.timezone = task.timezone
        model.start_at, model.start_is_date = _dump_temporal(task.start)
        model.due_at, model.due_is_date = _dump_temporal(task.due)
        model.completed_at = _naive_utc(task.completed_at.as_datetime()) if task.completed_at else None
        model.recurrence = task.recurrence.to_dict() if task.recurrence else None
        model.last_modified = _naive_utc(task.last_modified)
        session.flush()
        return model
