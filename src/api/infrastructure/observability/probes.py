"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.
"""

from __future__ import annotations

from typing import Protocol

import structlog


class ConnectionProbe(Protocol):
    """Domain probe for database engine lifecycle."""

    def engine_created(self, host: str, database: str) -> None:
        """Record that the async engine was created."""
        ...

    def engine_disposed(self) -> None:
        """Record that the async engine and its pool were disposed."""
        ...


class DefaultConnectionProbe:
    """Default implementation of ConnectionProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def engine_created(self, host: str, database: str) -> None:
        self._logger.info("database_engine_created", host=host, database=database)

    def engine_disposed(self) -> None:
        self._logger.info("database_engine_disposed")
