"""HTTP presentation layer for the identity context."""
