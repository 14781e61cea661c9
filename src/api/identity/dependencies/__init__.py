"""FastAPI dependency providers for the identity context."""
