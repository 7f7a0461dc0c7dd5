"""
Translation Schemas.

Structured output of the compliance glossary translator.
"""

from pydantic import BaseModel, Field


class TranslationResult(BaseModel):
    """A term translated in compliance context."""

    term: str = Field(description="Original term, capitalized correctly")
    translation: str = Field(description="Portuguese translation")
    definition: str = Field(description="Brief professional definition")
    examples: list[str] = Field(description="English example sentences, in order")
