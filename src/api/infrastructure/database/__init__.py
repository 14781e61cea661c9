"""Database infrastructure - declarative base, engines and sessions."""

from infrastructure.database.models import Base, TimestampMixin

__all__ = ["Base", "TimestampMixin"]
