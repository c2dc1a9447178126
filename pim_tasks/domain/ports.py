"""
Boundary contracts the editing core depends on.

Storage and zone lookup are supplied from outside; the infra package holds
the SQLAlchemy and zoneinfo implementations used by the application.
"""

from __future__ import annotations

from typing import Protocol, Sequence
from zoneinfo import ZoneInfo

from .entities import Collection, Task, TaskChange


class TaskStore(Protocol):
    def list_collections(self) -> list[Collection]: ...

    def persist(self, changes: Sequence[TaskChange], collection_uid: str) -> list[Task]:
        """Store every change in one go; raises PersistenceError on failure."""
        ...

    def delete(self, task: Task, collection_uid: str) -> None: ...


class ZoneProvider(Protocol):
    def resolve_zone(self, name: str) -> ZoneInfo | None: ...

    def current_zone_name(self) -> str: ...
