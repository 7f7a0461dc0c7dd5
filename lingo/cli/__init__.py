"""
Terminal client.

Typer commands with Rich output. Commands only call services and the
AI layer; they hold no business rules.
"""
