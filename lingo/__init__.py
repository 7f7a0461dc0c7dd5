"""
Compliance Lingo.

Study aid for learners of compliance-domain English.

- core/: Configuration, logging, exceptions, resilience helpers
- schemas/: Pydantic models for notes, users and AI results
- repositories/: Remote store access (PostgREST over httpx)
- services/: Note sync engine, auth session, speech
- tasks/: Debounced deferred tasks
- ai/: Generation client and AI features (translator, writing, quiz, news)
- cli/: Terminal client (Typer + Rich)
"""

__version__ = "0.1.0"
