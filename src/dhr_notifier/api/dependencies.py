"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from dhr_notifier.engine.client import NotifierEngine  # noqa: TC001
from dhr_notifier.errors.definitions import ErrEngineNotReady


def get_engine(request: Request) -> NotifierEngine:
    """Retrieve the engine from ``app.state``.

    The engine is stored on ``app.state.engine`` during lifespan startup.

    Raises:
        NotifierError: 503 if the engine is not initialized.
    """
    engine: NotifierEngine | None = getattr(request.app.state, "engine", None)
    if engine is None or not engine.is_initialized:
        raise ErrEngineNotReady
    return engine
