"""Request / response schemas for the administrative API.

Field names follow the JSON the dashboard already speaks (``eventType``,
``processedCount``, ...).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from dhr_notifier.engine.events import EventType
from dhr_notifier.notifications.subscriptions import Subscription


class SubscriptionCreateRequest(BaseModel):
    """Body of ``POST /api/notifications``.

    Required fields are declared optional so that a missing or empty value
    is reported with the API's own 400 error.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    url: str | None = None
    title: str | None = None
    text: str | None = None
    event_type: EventType | None = Field(default=None, alias="eventType")
    enabled: bool | None = None

    def is_complete(self) -> bool:
        """Whether every required field has a non-empty value."""
        return all((self.name, self.url, self.title, self.text, self.event_type))


class SubscriptionUpdateRequest(BaseModel):
    """Body of ``PUT /api/notifications/{id}``; every field is optional."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    url: str | None = None
    title: str | None = None
    text: str | None = None
    event_type: EventType | None = Field(default=None, alias="eventType")
    enabled: bool | None = None


class SubscriptionResponse(BaseModel):
    """A subscription as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    url: str
    title: str
    text: str
    event_type: str = Field(alias="eventType")
    enabled: bool

    @classmethod
    def from_subscription(cls, sub: Subscription) -> SubscriptionResponse:
        """Build from the domain object."""
        return cls.model_validate(sub.to_dict())


class StatusResponse(BaseModel):
    """Body of ``GET /api/status``."""

    running: bool
    interval: float
    processedCount: int  # noqa: N815
    notificationsCount: int  # noqa: N815
    activeNotifications: int  # noqa: N815


class DeliveryTestResponse(BaseModel):
    """Body of ``POST /api/test/{id}``."""

    success: bool
    title: str
    text: str


class DeleteResponse(BaseModel):
    """Body of ``DELETE /api/notifications/{id}``."""

    success: bool = True
