"""Deferred background tasks."""
