"""Exceptions for the outbox pattern.

Publish-time errors are fatal to the enclosing business transaction.
Delivery errors are recoverable: the worker turns them into retries with
backoff and never surfaces them to an external caller.
"""


class OutboxError(Exception):
    """Base exception for outbox operations."""

    pass


class EventSerializationError(OutboxError):
    """Raised when an event payload cannot be serialized at publish time.

    The caller must let this propagate so the business transaction aborts
    and no half-recorded event is left behind.
    """

    pass


class DeliveryError(OutboxError):
    """Raised when the downstream consumer rejects or fails to receive an event."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DeliveryTimeoutError(DeliveryError):
    """Raised when a delivery attempt exceeds its timeout."""

    pass


class UnknownEventTypeError(DeliveryError):
    """Raised when a record carries an event type with no delivery handler.

    Classified as a regular delivery failure, so the record is retried until
    it exhausts max_retries.
    """

    def __init__(self, event_type: str):
        super().__init__(f"Unknown event type: {event_type}")
        self.event_type = event_type


class OutboundEventNotFoundError(OutboxError):
    """Raised when an administrative action targets a record that does not exist."""

    pass


class IllegalStatusTransitionError(OutboxError):
    """Raised when a record is asked to move between statuses in a way that is not allowed."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Illegal status transition: {current} -> {target}")
        self.current = current
        self.target = target
