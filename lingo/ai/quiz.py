"""
Quiz Generator.

Builds multiple-choice questions from the user's notes at a chosen
difficulty. Ids are assigned locally; whatever id the model invents
is ignored.

Usage:
    from lingo.ai.quiz import generate_quiz
    questions = await generate_quiz(notes, Difficulty.HARD)
"""

from collections.abc import Sequence
from uuid import uuid4

from lingo.ai.client import GenerationClient, get_generation_client
from lingo.core.config import get_app_config
from lingo.core.exceptions import GenerationError
from lingo.core.logging import get_logger
from lingo.schemas.note import Note
from lingo.schemas.quiz import Difficulty, QuizDraft, QuizQuestion

logger = get_logger(__name__)

DIFFICULTY_INSTRUCTIONS = {
    Difficulty.EASY: (
        "Focus on basic vocabulary definitions and direct concept matching. Simple English."
    ),
    Difficulty.MEDIUM: (
        "Include some scenario-based questions and standard industry terminology."
    ),
    Difficulty.HARD: (
        "Focus on complex scenarios, nuance between similar compliance terms, "
        "and advanced risk application."
    ),
}


def build_context(notes: Sequence[Note], max_chars: int) -> str:
    """Concatenate title/content pairs, cutting the tail at max_chars."""
    joined = "\n---\n".join(f"Title: {n.title}\nContent: {n.content}" for n in notes)
    return joined[:max_chars]


def build_prompt(context: str, difficulty: Difficulty, count: int) -> str:
    return (
        "Based strictly on the following study notes about Compliance and English, "
        f"generate {count} multiple-choice questions to test the student's understanding.\n"
        "Each question has exactly four options, the zero-based index of the correct "
        "option, and a short explanation.\n\n"
        f"DIFFICULTY LEVEL: {difficulty.value}\n"
        f"INSTRUCTION: {DIFFICULTY_INSTRUCTIONS[difficulty]}\n\n"
        f"NOTES:\n{context}"
    )


async def generate_quiz(
    notes: Sequence[Note],
    difficulty: Difficulty | str = Difficulty.MEDIUM,
    client: GenerationClient | None = None,
    question_count: int | None = None,
    context_chars: int | None = None,
) -> list[QuizQuestion]:
    """
    Generate quiz questions from notes.

    No notes means no quiz: an empty list is returned without calling the AI.

    Raises:
        GenerationError: If the AI returns no valid questions
    """
    if not notes:
        return []

    difficulty = Difficulty(difficulty)
    if question_count is None or context_chars is None:
        ai_config = get_app_config().ai
        question_count = question_count or ai_config.quiz_question_count
        context_chars = context_chars or ai_config.quiz_context_chars

    client = client or get_generation_client()
    context = build_context(notes, context_chars)
    logger.info(
        "Generating quiz",
        extra={"difficulty": difficulty.value, "notes": len(notes), "context_chars": len(context)},
    )

    draft = await client.generate_structured(
        build_prompt(context, difficulty, question_count),
        QuizDraft,
    )
    if not draft.questions:
        raise GenerationError("Failed to generate quiz")

    batch = uuid4().hex[:12]
    return [
        QuizQuestion(id=f"q-{batch}-{index}", **question.model_dump())
        for index, question in enumerate(draft.questions[:question_count])
    ]
