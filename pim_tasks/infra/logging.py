from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pim_tasks.config import SETTINGS, PROJECT_ROOT

LOG_FILE_NAME = "pim_tasks.log"


class _ThirdPartyFilter(logging.Filter):
    # SQLAlchemy and friends only reach the console at WARNING and above
    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("pim_tasks"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(log_dir: str | Path | None = None, level: str | None = None) -> Path:
    target = Path(log_dir) if log_dir is not None else PROJECT_ROOT / SETTINGS.log_dir
    target.mkdir(parents=True, exist_ok=True)
    log_file = target / LOG_FILE_NAME

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_file, maxBytes=2_000_000, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_ThirdPartyFilter())

    logging.basicConfig(
        level=(level or SETTINGS.log_level).upper(),
        handlers=[file_handler, console_handler],
        force=True,
    )
    return log_file
