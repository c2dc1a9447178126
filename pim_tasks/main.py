from __future__ import annotations

import logging
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from pim_tasks.config import SETTINGS
from pim_tasks.infra.db import init_db
from pim_tasks.infra.logging import setup_logging
from pim_tasks.infra.repository import TaskRepository
from pim_tasks.infra.zones import ZoneResolver
from pim_tasks.services.task_service import TaskService

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "Tasks"


def bootstrap(log_dir: str | Path | None = None) -> TaskService:
    setup_logging(log_dir)
    init_db()

    zones = ZoneResolver()
    repo = TaskRepository(zones=zones)
    if SETTINGS.default_collection and not any(
        c.uid == SETTINGS.default_collection for c in repo.list_collections()
    ):
        repo.create_collection(SETTINGS.default_collection, DEFAULT_COLLECTION_NAME)
    return TaskService(repo, zones)


def main() -> None:
    try:
        service = bootstrap()
    except SQLAlchemyError:
        logger.exception("Database initialisation failed")
        sys.exit(1)

    collections = service.list_collections()
    logger.info(
        "Task store ready: %d collection(s), local timezone %s",
        len(collections),
        service.local_zone().key,
    )


if __name__ == "__main__":
    main()
