"""
Unit Tests for the Quiz Generator.
"""

import pytest

from lingo.ai.quiz import DIFFICULTY_INSTRUCTIONS, build_context, generate_quiz
from lingo.core.exceptions import GenerationError
from lingo.schemas.quiz import Difficulty, QuizDraft, QuizQuestionDraft


def _draft(count: int) -> QuizDraft:
    return QuizDraft(questions=[
        QuizQuestionDraft(
            question=f"Question {i}?",
            options=["a", "b", "c", "d"],
            correct_answer_index=i % 4,
            explanation="Because.",
        )
        for i in range(count)
    ])


class TestBuildContext:
    def test_joins_title_and_content(self, sample_notes):
        context = build_context(sample_notes[:2], 10_000)
        assert context == (
            "Title: Know Your Customer\nContent: KYC checks verify client identity."
            "\n---\n"
            "Title: GDPR basics\nContent: Personal data must be processed lawfully."
        )

    def test_truncates_tail(self, sample_notes):
        context = build_context(sample_notes, 20)
        assert context == "Title: Know Your Cus"


class TestGenerateQuiz:
    @pytest.mark.asyncio
    async def test_no_notes_no_request(self, mock_generation_client):
        assert await generate_quiz([], client=mock_generation_client) == []
        mock_generation_client.generate_structured.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_assigns_unique_local_ids(self, mock_generation_client, sample_notes):
        mock_generation_client.generate_structured.return_value = _draft(5)

        questions = await generate_quiz(
            sample_notes, Difficulty.EASY, client=mock_generation_client,
            question_count=5, context_chars=1000,
        )

        assert len(questions) == 5
        assert len({q.id for q in questions}) == 5
        assert [q.question for q in questions] == [f"Question {i}?" for i in range(5)]

    @pytest.mark.asyncio
    async def test_ids_differ_between_quizzes(self, mock_generation_client, sample_notes):
        mock_generation_client.generate_structured.return_value = _draft(2)

        first = await generate_quiz(sample_notes, client=mock_generation_client, question_count=2, context_chars=100)
        second = await generate_quiz(sample_notes, client=mock_generation_client, question_count=2, context_chars=100)

        assert {q.id for q in first}.isdisjoint(q.id for q in second)

    @pytest.mark.asyncio
    async def test_extra_questions_dropped(self, mock_generation_client, sample_notes):
        mock_generation_client.generate_structured.return_value = _draft(7)
        questions = await generate_quiz(sample_notes, client=mock_generation_client, question_count=5, context_chars=100)
        assert len(questions) == 5

    @pytest.mark.asyncio
    async def test_prompt_carries_difficulty_and_context(self, mock_generation_client, sample_notes):
        mock_generation_client.generate_structured.return_value = _draft(1)

        await generate_quiz(sample_notes, "Hard", client=mock_generation_client, question_count=1, context_chars=30)

        prompt, output_type = mock_generation_client.generate_structured.await_args.args
        assert output_type is QuizDraft
        assert "DIFFICULTY LEVEL: Hard" in prompt
        assert DIFFICULTY_INSTRUCTIONS[Difficulty.HARD] in prompt
        assert prompt.endswith("NOTES:\n" + build_context(sample_notes, 30))

    @pytest.mark.asyncio
    async def test_defaults_from_config(self, mock_generation_client, sample_notes):
        mock_generation_client.generate_structured.return_value = _draft(10)
        questions = await generate_quiz(sample_notes, client=mock_generation_client)
        assert len(questions) == 5

    @pytest.mark.asyncio
    async def test_no_questions_raises(self, mock_generation_client, sample_notes):
        mock_generation_client.generate_structured.return_value = QuizDraft(questions=[])
        with pytest.raises(GenerationError, match="Failed to generate quiz"):
            await generate_quiz(sample_notes, client=mock_generation_client, question_count=5, context_chars=100)
