"""Pre-defined errors returned by the administrative API."""

from __future__ import annotations

from dhr_notifier.errors.notifier_errors import NotifierError

ErrSubscriptionNotFound = NotifierError(
    "Notificação não encontrada", status_code=404, code="subscription-not-found"
)
ErrMissingFields = NotifierError(
    "Campos obrigatórios faltando", status_code=400, code="missing-fields"
)
ErrEngineNotReady = NotifierError(
    "engine not initialized", status_code=503, code="engine-not-ready"
)
