"""Identity bounded context.

Owns the identity events that leave this service through the outbox and
the operator surface for inspecting and retrying them.
"""
