"""
News Schemas.

Items of the grounded compliance briefing and the web sources cited
for it.
"""

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


class Impact(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class NewsItem(BaseModel):
    """One story in the briefing."""

    headline: str
    summary: str
    category: str = Field(description="Short topic tag, e.g. AML or GDPR")
    impact: Impact
    date: str = Field(default="", description="Relative date text, e.g. '2 days ago'")

    @field_validator("impact", mode="before")
    @classmethod
    def _normalize_impact(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class NewsSource(BaseModel):
    """A web page cited by the grounded response."""

    title: str
    uri: str


class NewsBriefing(BaseModel):
    """Parsed briefing with its deduplicated citations."""

    content: str
    items: list[NewsItem] = Field(default_factory=list)
    sources: list[NewsSource] = Field(default_factory=list)
