"""Administrative routes mounted under ``/api``."""

from fastapi import APIRouter

from dhr_notifier.api.routes.notifications import router as notifications_router
from dhr_notifier.api.routes.status import router as status_router

api_router = APIRouter(prefix="/api")

api_router.include_router(notifications_router)
api_router.include_router(status_router)

__all__ = ["api_router"]
