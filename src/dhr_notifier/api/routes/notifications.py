"""Notification subscription management.

Subscriptions tell the engine which webhook URL receives which event type
and how the message is worded.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from dhr_notifier.api.dependencies import get_engine
from dhr_notifier.api.schemas import (
    DeleteResponse,
    DeliveryTestResponse,
    SubscriptionCreateRequest,
    SubscriptionResponse,
    SubscriptionUpdateRequest,
)
from dhr_notifier.engine.client import NotifierEngine  # noqa: TC001
from dhr_notifier.errors.definitions import ErrMissingFields, ErrSubscriptionNotFound

router = APIRouter(tags=["notifications"])


@router.get("/notifications", response_model=list[SubscriptionResponse])
async def list_notifications(
    engine: Annotated[NotifierEngine, Depends(get_engine)],
) -> list[SubscriptionResponse]:
    """List all notification subscriptions."""
    return [
        SubscriptionResponse.from_subscription(sub) for sub in engine.subscriptions.get_all()
    ]


@router.post("/notifications", response_model=SubscriptionResponse)
async def create_notification(
    body: SubscriptionCreateRequest,
    engine: Annotated[NotifierEngine, Depends(get_engine)],
) -> SubscriptionResponse:
    """Create a subscription. ``enabled`` defaults to true."""
    if not body.is_complete():
        raise ErrMissingFields
    assert body.event_type is not None
    sub = await engine.subscriptions.create(
        name=body.name or "",
        url=body.url or "",
        title=body.title or "",
        text=body.text or "",
        event_type=body.event_type.value,
        enabled=body.enabled is not False,
    )
    engine.refresh_subscription_metrics()
    return SubscriptionResponse.from_subscription(sub)


@router.put("/notifications/{subscription_id}", response_model=SubscriptionResponse)
async def update_notification(
    subscription_id: str,
    body: SubscriptionUpdateRequest,
    engine: Annotated[NotifierEngine, Depends(get_engine)],
) -> SubscriptionResponse:
    """Update the given fields of a subscription."""
    sub = await engine.subscriptions.update(
        subscription_id,
        name=body.name,
        url=body.url,
        title=body.title,
        text=body.text,
        event_type=body.event_type.value if body.event_type else None,
        enabled=body.enabled,
    )
    if sub is None:
        raise ErrSubscriptionNotFound
    engine.refresh_subscription_metrics()
    return SubscriptionResponse.from_subscription(sub)


@router.delete("/notifications/{subscription_id}", response_model=DeleteResponse)
async def delete_notification(
    subscription_id: str,
    engine: Annotated[NotifierEngine, Depends(get_engine)],
) -> DeleteResponse:
    """Delete a subscription."""
    if not await engine.subscriptions.delete(subscription_id):
        raise ErrSubscriptionNotFound
    engine.refresh_subscription_metrics()
    return DeleteResponse()


@router.post("/test/{subscription_id}", response_model=DeliveryTestResponse)
async def test_notification(
    subscription_id: str,
    engine: Annotated[NotifierEngine, Depends(get_engine)],
) -> DeliveryTestResponse:
    """Send the subscription's message, rendered with sample data, right now."""
    sub = engine.subscriptions.get(subscription_id)
    if sub is None:
        raise ErrSubscriptionNotFound
    outcome = await engine.send_test(sub)
    return DeliveryTestResponse(success=outcome.success, title=outcome.title, text=outcome.text)
