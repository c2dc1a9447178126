from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from tzlocal import get_localzone_name

from pim_tasks.config import SETTINGS

logger = logging.getLogger(__name__)

FALLBACK_ZONE = "UTC"


class ZoneResolver:
    def __init__(self, local_zone_name: str | None = None) -> None:
        self._local_zone_name = local_zone_name or SETTINGS.timezone

    def resolve_zone(self, name: str) -> ZoneInfo | None:
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            return None

    def current_zone_name(self) -> str:
        if self._local_zone_name is None:
            try:
                self._local_zone_name = get_localzone_name() or FALLBACK_ZONE
            except ZoneInfoNotFoundError:
                logger.warning("Local timezone could not be detected, using %s", FALLBACK_ZONE)
                self._local_zone_name = FALLBACK_ZONE
        return self._local_zone_name
