"""Application services for the identity context."""

from identity.application.services.outbox_admin_service import OutboxAdminService
from identity.application.services.user_id_migration_service import (
    UserIdMigrationService,
)

__all__ = ["OutboxAdminService", "UserIdMigrationService"]
