"""Infrastructure layer for the identity context."""
