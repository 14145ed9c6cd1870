"""Persistence and file-format adapters."""
