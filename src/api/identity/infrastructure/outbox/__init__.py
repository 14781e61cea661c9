"""Identity-specific outbox components.

The serializer turns identity events into outbox payloads; the dispatcher
routes stored records to the downstream client.
"""

from identity.infrastructure.outbox.dispatcher import IdentityEventDispatcher
from identity.infrastructure.outbox.serializer import IdentityEventSerializer

__all__ = ["IdentityEventDispatcher", "IdentityEventSerializer"]
