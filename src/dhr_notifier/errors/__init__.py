"""Error taxonomy for dhr-notifier."""

from __future__ import annotations

from dhr_notifier.errors.notifier_errors import (
    ConfigError,
    DeliveryError,
    FetchError,
    NotifierError,
    PersistenceError,
)

__all__ = [
    "ConfigError",
    "DeliveryError",
    "FetchError",
    "NotifierError",
    "PersistenceError",
]
