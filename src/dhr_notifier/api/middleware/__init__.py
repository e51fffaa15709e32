"""API middleware."""

from __future__ import annotations

from dhr_notifier.api.middleware.cors import setup_cors

__all__ = ["setup_cors"]
