"""Cloud Store connectivity probe and periodic status polling.

The probe reads at most one document from the shared parties collection and
is bounded by `with_timeout`, the same race-against-a-timer used by the
Availability Gate.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Literal, Union

from pydantic import BaseModel

from .base import Subscription, deliver, with_timeout
from .cloud import CloudStore

logger = logging.getLogger(__name__)

HEALTH_CHECK_COLLECTION = "shared_parties"
CONNECTION_TIMEOUT = 5.0
DEFAULT_CHECK_INTERVAL = 30.0

HealthStatus = Literal["checking", "connected", "disconnected", "offline"]


class HealthReport(BaseModel):
    status: HealthStatus
    message: str
    timestamp: str
    response_time_ms: int | None = None
    error: str | None = None


OnStatusChange = Callable[[HealthReport], Union[None, Awaitable[None]]]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def check_connectivity(cloud: CloudStore | None, timeout: float = CONNECTION_TIMEOUT) -> HealthReport:
    """Probe the Cloud Store. Never raises."""
    timestamp = _now()
    if cloud is None:
        return HealthReport(
            status="offline",
            message="Using local storage (cloud store not configured)",
            timestamp=timestamp,
        )

    started = time.monotonic()
    try:
        await with_timeout(cloud.sample(HEALTH_CHECK_COLLECTION), timeout)
    except TimeoutError as e:
        logger.warning("Database health check failed: %s", e)
        return HealthReport(
            status="disconnected",
            message="Cannot reach database (network issue)",
            timestamp=timestamp,
            error=str(e),
        )
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        return HealthReport(
            status="disconnected",
            message="Database connection error",
            timestamp=timestamp,
            error=str(e),
        )

    elapsed = int((time.monotonic() - started) * 1000)
    return HealthReport(
        status="connected",
        message=f"Connected ({elapsed}ms)",
        timestamp=timestamp,
        response_time_ms=elapsed,
    )


async def start_periodic_health_check(
    cloud: CloudStore | None,
    on_status_change: OnStatusChange,
    interval: float = DEFAULT_CHECK_INTERVAL,
    timeout: float = CONNECTION_TIMEOUT,
) -> Subscription:
    """Check now and then every `interval` seconds, reporting only status changes.

    `on_status_change` receives the new `HealthReport`. Close the returned
    subscription to stop polling.
    """

    async def _loop() -> None:
        last_status: str | None = None
        while True:
            report = await check_connectivity(cloud, timeout)
            if report.status != last_status:
                last_status = report.status
                try:
                    await deliver(on_status_change, report)
                except Exception:
                    logger.exception("Health status callback failed")
            await asyncio.sleep(interval)

    task = asyncio.create_task(_loop(), name="health-check")

    async def release() -> None:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    return Subscription(release, label="health")
