"""
Writing Assistant.

Rewrites note content: fix grammar, simplify for non-native speakers,
or expand with compliance insights. When the AI returns nothing the
original text comes back unchanged.
"""

from enum import StrEnum

from lingo.ai.client import GenerationClient, get_generation_client


class ImproveInstruction(StrEnum):
    FIX_GRAMMAR = "fix_grammar"
    SIMPLIFY = "simplify"
    EXPAND = "expand"


INSTRUCTIONS = {
    ImproveInstruction.FIX_GRAMMAR: (
        "You are an English teacher. Correct the grammar and spelling of the following "
        "text while maintaining the original meaning. Return only the corrected text."
    ),
    ImproveInstruction.SIMPLIFY: (
        "Simplify the following text for a non-native English speaker. Use simpler "
        "vocabulary but keep the compliance context. Return only the simplified text."
    ),
    ImproveInstruction.EXPAND: (
        "Expand on the following notes with relevant insights related to Compliance and "
        "Risk Assessment. Add bullet points with extra info. Return the expanded text."
    ),
}


async def improve_text(
    content: str,
    instruction: ImproveInstruction | str,
    client: GenerationClient | None = None,
) -> str:
    """
    Transform text according to instruction.

    Returns:
        The transformed text, or content itself if it is blank or the AI
        returned nothing

    Raises:
        GenerationError: If the AI service fails
    """
    if not content.strip():
        return content

    client = client or get_generation_client()
    text = await client.generate_text(
        content,
        instructions=INSTRUCTIONS[ImproveInstruction(instruction)],
    )
    return text or content
