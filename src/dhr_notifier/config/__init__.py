"""Configuration loading."""

from __future__ import annotations

from dhr_notifier.config.settings import AppConfig

__all__ = ["AppConfig"]
