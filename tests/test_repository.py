from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pim_tasks.domain.entities import Collection, Task, TaskChange
from pim_tasks.domain.enums import Frequency, SaveState, TaskPriority, TaskStatus
from pim_tasks.domain.errors import PersistenceError
from pim_tasks.domain.recurrence import RecurrenceRule
from pim_tasks.domain.temporal import TemporalValue
from pim_tasks.infra.repository import TaskRepository
from pim_tasks.services.edit_session import EditSession
from pim_tasks.services.task_service import TaskService

NEW_YORK = ZoneInfo("America/New_York")


def make_task(**fields) -> Task:
    values = {
        "uid": "task-1",
        "collection_uid": "personal",
        "title": "Call bank",
        "timezone": "America/New_York",
        "priority": TaskPriority.MEDIUM,
        "tags": frozenset({"finance", "phone"}),
        "start": TemporalValue(datetime(2024, 5, 1, 9, 0, tzinfo=NEW_YORK)),
        "due": TemporalValue(datetime(2024, 5, 1, 11, 30, tzinfo=NEW_YORK)),
    }
    values.update(fields)
    return Task(**values)


def test_collections(repo: TaskRepository) -> None:
    repo.create_collection("work", "Work")

    assert repo.list_collections() == [Collection("personal", "Personal"), Collection("work", "Work")]


def test_persist_and_reload_timed_task(repo: TaskRepository) -> None:
    task = make_task(last_modified=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))

    repo.persist([TaskChange(task)], "personal")
    loaded = repo.get_task("task-1")

    assert loaded.start == task.start
    assert loaded.start.zone is NEW_YORK
    assert loaded.start.value.hour == 9
    assert loaded.due == task.due
    assert loaded.tags == frozenset({"finance", "phone"})
    assert loaded.priority == TaskPriority.MEDIUM
    assert loaded.status == TaskStatus.NEEDS_ACTION
    assert loaded.last_modified == datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_date_only_values_keep_their_date(repo: TaskRepository) -> None:
    task = make_task(start=TemporalValue(date(2024, 3, 10)), due=None, timezone="Pacific/Kiritimati")

    repo.persist([TaskChange(task)], "personal")

    assert repo.get_task("task-1").start == TemporalValue(date(2024, 3, 10))


def test_recurrence_round_trips_with_until(repo: TaskRepository) -> None:
    rule = RecurrenceRule(frequency=Frequency.MONTHLY, interval=2, until=date(2024, 12, 31), by_month_day=(15,))

    repo.persist([TaskChange(make_task(recurrence=rule))], "personal")

    assert repo.get_task("task-1").recurrence == rule


def test_missing_uid_is_assigned_on_creation(repo: TaskRepository) -> None:
    (stored,) = repo.persist([TaskChange(make_task(uid=None))], "personal")

    assert uuid.UUID(stored.uid).version == 4
    assert repo.get_task(stored.uid) is not None


def test_change_with_original_updates_in_place(repo: TaskRepository) -> None:
    (original,) = repo.persist([TaskChange(make_task())], "personal")

    repo.persist([TaskChange(replace(original, title="Call bank again"), original)], "personal")

    tasks = repo.list_tasks("personal")
    assert len(tasks) == 1
    assert tasks[0].title == "Call bank again"


def test_unknown_collection_is_refused(repo: TaskRepository) -> None:
    with pytest.raises(PersistenceError):
        repo.persist([TaskChange(make_task(collection_uid="nowhere"))], "nowhere")

    assert repo.list_tasks() == []


def test_database_errors_become_persistence_errors(zones) -> None:
    engine = create_engine("sqlite://")
    broken = TaskRepository(sessionmaker(bind=engine), zones)

    with pytest.raises(PersistenceError):
        broken.persist([TaskChange(make_task())], "personal")
    with pytest.raises(PersistenceError):
        broken.delete(make_task(), "personal")


def test_delete(repo: TaskRepository) -> None:
    (stored,) = repo.persist([TaskChange(make_task())], "personal")

    repo.delete(stored, "personal")
    repo.delete(stored, "personal")

    assert repo.get_task("task-1") is None


def test_completing_recurring_task_end_to_end(repo: TaskRepository, zones) -> None:
    service = TaskService(repo, zones)
    (original,) = repo.persist(
        [
            TaskChange(
                make_task(
                    start=TemporalValue(date(2024, 1, 1)),
                    due=TemporalValue(date(2024, 1, 2)),
                    recurrence=RecurrenceRule(frequency=Frequency.WEEKLY, count=2),
                )
            )
        ],
        "personal",
    )

    session = EditSession(service, original)
    session.update(status=TaskStatus.COMPLETED)

    assert session.submit() == SaveState.DONE
    tasks = {task.uid: task for task in repo.list_tasks("personal")}
    assert len(tasks) == 2
    assert tasks["task-1"].status == TaskStatus.COMPLETED
    assert tasks["task-1"].completed_at is not None
    following = tasks[session.successor.uid]
    assert following.start == TemporalValue(date(2024, 1, 8))
    assert following.due == TemporalValue(date(2024, 1, 9))
    assert following.status == TaskStatus.NEEDS_ACTION
    assert following.recurrence.count == 1
