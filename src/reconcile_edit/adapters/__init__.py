"""Adapters for storage and remote services."""
