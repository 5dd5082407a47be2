"""Shared schema, error and logging definitions."""
