from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.pop("DEFAULT_COLLECTION", None)
os.environ.pop("PIM_TIMEZONE", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pim_tasks.infra.db import init_db
from pim_tasks.infra.repository import TaskRepository
from pim_tasks.infra.zones import ZoneResolver

LOCAL_ZONE = "Europe/Berlin"


@pytest.fixture
def zones() -> ZoneResolver:
    return ZoneResolver(local_zone_name=LOCAL_ZONE)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repo(engine, zones) -> TaskRepository:
    session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    repo = TaskRepository(session_factory, zones)
    repo.create_collection("personal", "Personal")
    return repo
