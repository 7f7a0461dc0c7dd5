"""Pydantic models for notes, users and AI results."""
