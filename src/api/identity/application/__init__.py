"""Application layer for the identity context."""
