"""Shared path, settings and logging helpers."""
