"""Task manager — periodic background jobs.

Provides ``TaskManager``, which drives the event poll loop on a fixed
interval using ``asyncio`` tasks.
"""

from __future__ import annotations

from dhr_notifier.taskmanager.manager import CronJob, TaskManager

__all__ = ["CronJob", "TaskManager"]
