"""Availability Gate. Decides once per manager whether the Cloud Store is tried."""

from __future__ import annotations

import logging

from .base import with_timeout
from .cloud import CloudStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class AvailabilityGate:
    """Per-collection cloud flag, written by `init()` and read on every call.

    Fails open: any problem during the check leaves the flag False and the
    Local Store authoritative. Calling `init()` again re-runs the check; it is
    never retried automatically.
    """

    def __init__(self, label: str, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._label = label
        self._timeout = timeout
        self.active = False

    async def init(self, cloud: CloudStore | None, *, eligible: bool = True) -> bool:
        self.active = False
        if cloud is None:
            logger.info("%s: no cloud store configured, using local storage", self._label)
            return False
        if not eligible:
            logger.info("%s: no signed-in identity, using local storage", self._label)
            return False
        try:
            self.active = await with_timeout(cloud.ping(), self._timeout)
        except Exception as e:
            logger.warning("%s: cloud unavailable, using local storage fallback: %s", self._label, e)
            self.active = False
        logger.info("%s: cloud mode %s", self._label, "enabled" if self.active else "disabled")
        return self.active
