"""Shared helpers (map merging, short ids)."""
