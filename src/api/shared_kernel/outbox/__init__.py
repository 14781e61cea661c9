"""Outbox pattern implementation for reliable event delivery.

This module provides the transactional outbox pattern: events are written
in the same transaction as the business change that caused them and
delivered at-least-once to the downstream consumer by a background worker.
"""

from shared_kernel.outbox.circuit_breaker import CircuitBreaker
from shared_kernel.outbox.ports import IOutboundEventRepository
from shared_kernel.outbox.value_objects import (
    EventStatus,
    EventType,
    OutboundEventEntry,
    OutboxStats,
)

__all__ = [
    "CircuitBreaker",
    "EventStatus",
    "EventType",
    "IOutboundEventRepository",
    "OutboundEventEntry",
    "OutboxStats",
]
