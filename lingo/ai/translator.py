"""
Glossary Translator.

Translates a term within the context of corporate compliance, data
protection (GDPR/LGPD) and risk assessment.

Usage:
    from lingo.ai.translator import translate_term
    result = await translate_term("due diligence")
"""

from lingo.ai.client import GenerationClient, get_generation_client
from lingo.core.exceptions import ValidationError
from lingo.core.logging import get_logger
from lingo.schemas.translation import TranslationResult

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an expert English-Portuguese translator specializing in "
    "Corporate Compliance, Data Protection (GDPR/LGPD), and Risk Assessment."
)


def build_prompt(term: str) -> str:
    return (
        f'Translate the term: "{term}".\n'
        "Return the original term capitalized correctly, its Portuguese translation, "
        "a brief professional definition in Portuguese context, and three English "
        "example sentences."
    )


async def translate_term(
    term: str,
    client: GenerationClient | None = None,
) -> TranslationResult:
    """
    Look up a compliance term.

    Raises:
        ValidationError: If the term is blank
        GenerationError: If the AI returns nothing usable
    """
    term = term.strip()
    if not term:
        raise ValidationError("Term is required")

    client = client or get_generation_client()
    logger.info("Translating term", extra={"term": term})
    return await client.generate_structured(
        build_prompt(term),
        TranslationResult,
        instructions=SYSTEM_PROMPT,
    )
