"""Outbox admin HTTP surface."""

from identity.presentation.outbox_admin.routes import router

__all__ = ["router"]
