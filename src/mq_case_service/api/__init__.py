"""API layer for the case service."""
