"""Utilities: logging setup and snapshot persistence."""
