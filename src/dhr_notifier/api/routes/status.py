"""System status."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from dhr_notifier.api.dependencies import get_engine
from dhr_notifier.api.schemas import StatusResponse
from dhr_notifier.engine.client import NotifierEngine  # noqa: TC001

router = APIRouter(tags=["status"])


@router.get("/status", response_model=StatusResponse)
async def get_status(
    engine: Annotated[NotifierEngine, Depends(get_engine)],
) -> StatusResponse:
    """Polling state and counters."""
    subs = engine.subscriptions
    return StatusResponse(
        running=engine.is_polling,
        interval=engine.config.poller.interval_seconds,
        processedCount=len(engine.ledger),
        notificationsCount=len(subs),
        activeNotifications=subs.active_count,
    )
