"""Background task definitions: cron job handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dhr_notifier.engine.client import NotifierEngine

logger = logging.getLogger(__name__)

CHECK_EVENTS_JOB = "check_events"


async def task_check_events(engine: NotifierEngine) -> None:
    """Run one poll tick and log its summary."""
    report = await engine.poller.tick()
    if report.events:
        logger.info(
            "Tick done: %d new events, %d delivered, %d failed",
            len(report.events),
            report.delivered,
            report.failed,
        )
