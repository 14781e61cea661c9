"""Status state machine for outbound event records."""

from __future__ import annotations

from shared_kernel.outbox.exceptions import IllegalStatusTransitionError
from shared_kernel.outbox.value_objects import EventStatus

# Moves the worker may make. FAILED -> FAILED is a re-backoff.
ALLOWED_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.PENDING: frozenset({EventStatus.DELIVERED, EventStatus.FAILED}),
    EventStatus.FAILED: frozenset(
        {
            EventStatus.DELIVERED,
            EventStatus.FAILED,
            EventStatus.PERMANENTLY_FAILED,
        }
    ),
    EventStatus.DELIVERED: frozenset(),
    EventStatus.PERMANENTLY_FAILED: frozenset(),
}


def ensure_transition(
    current: EventStatus,
    target: EventStatus,
    *,
    administrative: bool = False,
) -> None:
    """Validate a status change.

    Administrative resets may move any record back to PENDING. Every other
    move must be listed in ALLOWED_TRANSITIONS.

    A PENDING record that fails with max_retries of 1 goes straight to
    PERMANENTLY_FAILED, which is the FAILED -> PERMANENTLY_FAILED step taken
    in one go.

    Raises:
        IllegalStatusTransitionError: If the move is not allowed
    """
    if administrative and target == EventStatus.PENDING:
        return

    if (
        current == EventStatus.PENDING
        and target == EventStatus.PERMANENTLY_FAILED
    ):
        return

    if target not in ALLOWED_TRANSITIONS[current]:
        raise IllegalStatusTransitionError(current.value, target.value)
