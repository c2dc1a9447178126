from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CollectionModel(Base):
    __tablename__ = "collections"

    uid = Column(String(64), primary_key=True)
    display_name = Column(String(200), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, default=utcnow)


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    uid = Column(String(64), nullable=False, unique=True, index=True)
    collection_uid = Column(
        String(64), ForeignKey("collections.uid", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    location = Column(String(200), nullable=False, default="")
    status = Column(String(20), nullable=False, default="NEEDS-ACTION", index=True)
    priority = Column(Integer, nullable=False, default=0)
    tags = Column(Text, nullable=False, default="")
    timezone = Column(String(64), nullable=True)
    # timed values are naive UTC; *_is_date rows hold midnight of the civil date
    start_at = Column(DateTime, nullable=True)
    start_is_date = Column(Boolean, nullable=False, default=False)
    due_at = Column(DateTime, nullable=True)
    due_is_date = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)
    recurrence = Column(JSON, nullable=True)
    last_modified = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
