"""Domain probe for application startup and lifecycle events.

Captures which background components a process runs, which is what an
operator needs to confirm that exactly one delivery worker is active.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class StartupProbe(Protocol):
    """Domain probe for application startup operations."""

    def background_task_started(self, name: str) -> None:
        """Record that a background task was started."""
        ...

    def background_task_disabled(self, name: str) -> None:
        """Record that a background task is disabled by configuration."""
        ...

    def shutdown_completed(self) -> None:
        """Record that background tasks and connections were shut down."""
        ...


class DefaultStartupProbe:
    """Default implementation of StartupProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def background_task_started(self, name: str) -> None:
        self._logger.info("background_task_started", task=name)

    def background_task_disabled(self, name: str) -> None:
        self._logger.info("background_task_disabled", task=name)

    def shutdown_completed(self) -> None:
        self._logger.info("shutdown_completed")
