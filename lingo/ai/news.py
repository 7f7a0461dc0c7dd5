"""
Compliance News Briefing.

Uses grounded search to summarise the past week's regulatory news
(compliance, GDPR/LGPD, AML, AI regulation, financial risk). The search
mode cannot enforce a response schema, so the model is asked for a JSON
array and the reply is parsed leniently; replies that are
not JSON are kept as prose.

Usage:
    from lingo.ai.news import fetch_news
    briefing = await fetch_news()
"""

import json
import re
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from lingo.ai.client import GenerationClient, get_generation_client
from lingo.core.logging import get_logger
from lingo.schemas.news import NewsBriefing, NewsItem

logger = get_logger(__name__)

NO_NEWS = "No recent news found."

PROMPT = (
    "Find the significant news stories or regulatory updates regarding Corporate "
    "Compliance, GDPR/LGPD, Anti-Money Laundering (AML), AI Regulation, and Financial "
    "Risk from the last 7 days.\n"
    "Keep the language suitable for an English learner (professional but accessible).\n"
    "Reply with a JSON array only. Each element has the keys: headline, summary, "
    'category (a short topic tag), impact ("High", "Medium" or "Low"), and date '
    '(relative, e.g. "2 days ago").'
)


def parse_json_lenient(text: str) -> Any:
    """
    Parse JSON from a model reply.

    Falls back to the outermost [...] block when the reply wraps the
    JSON in prose or code fences. Returns None if nothing parses.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    match = re.search(r"\[[\s\S]*\]", text)
    if match is None:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def parse_news_items(text: str) -> list[NewsItem] | None:
    """
    Turn a briefing reply into news items.

    Entries that do not validate are skipped.

    Returns:
        The valid items, or None if the reply holds no JSON array or
        none of its entries validate
    """
    data = parse_json_lenient(text)
    if not isinstance(data, list):
        return None

    items = []
    for entry in data:
        try:
            items.append(NewsItem.model_validate(entry))
        except PydanticValidationError as e:
            logger.debug("Skipping malformed news item", extra={"error": str(e)})
    if data and not items:
        return None
    return items


async def fetch_news(client: GenerationClient | None = None) -> NewsBriefing:
    """
    Fetch the grounded news briefing.

    A reply that is not a JSON array is kept as prose: the briefing then
    carries the text and its sources but no items.

    Raises:
        GenerationError: If the search fails
    """
    client = client or get_generation_client()
    grounded = await client.search(PROMPT)

    if not grounded.text.strip():
        return NewsBriefing(content=NO_NEWS, sources=grounded.sources)

    items = parse_news_items(grounded.text)
    if items == []:
        return NewsBriefing(content=NO_NEWS, sources=grounded.sources)
    if items is None:
        logger.info("News briefing returned as prose", extra={"sources": len(grounded.sources)})
        items = []
    else:
        logger.info("News briefing fetched", extra={"items": len(items), "sources": len(grounded.sources)})
    return NewsBriefing(content=grounded.text, items=items, sources=grounded.sources)
