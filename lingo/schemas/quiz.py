"""
Quiz Schemas.

Questions generated from the user's notes and the in-memory session
that runs them. Sessions are never persisted.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

from lingo.core.exceptions import ValidationError

UNANSWERED = -1
PASS_PERCENTAGE = 70


class Difficulty(StrEnum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class QuizQuestionDraft(BaseModel):
    """A question as returned by the model, before a local id is assigned."""

    question: str
    options: list[str] = Field(min_length=4, max_length=4)
    correct_answer_index: int
    explanation: str

    @model_validator(mode="after")
    def _index_in_range(self) -> "QuizQuestionDraft":
        if not 0 <= self.correct_answer_index < len(self.options):
            raise ValueError(
                f"correct_answer_index {self.correct_answer_index} is out of range"
            )
        return self


class QuizDraft(BaseModel):
    """Structured output envelope for a batch of questions."""

    questions: list[QuizQuestionDraft]


class QuizQuestion(QuizQuestionDraft):
    """A question with a locally assigned, unique id."""

    id: str


class QuizPhase(StrEnum):
    IDLE = "idle"
    ACTIVE = "active"
    RESULTS = "results"


@dataclass
class QuizSession:
    """
    State of one quiz run.

    Answers hold the selected option index per question, or UNANSWERED.
    The score is only computed when the session finishes.
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    questions: list[QuizQuestion] = field(default_factory=list)
    answers: list[int] = field(default_factory=list)
    current_index: int = 0
    score: int = 0
    phase: QuizPhase = QuizPhase.IDLE

    def start(self, questions: list[QuizQuestion]) -> None:
        self.questions = list(questions)
        self.answers = [UNANSWERED] * len(self.questions)
        self.current_index = 0
        self.score = 0
        self.phase = QuizPhase.ACTIVE if self.questions else QuizPhase.IDLE

    @property
    def current_question(self) -> QuizQuestion | None:
        if self.phase is not QuizPhase.ACTIVE:
            return None
        return self.questions[self.current_index]

    def answer(self, option_index: int) -> None:
        """Record (or change) the answer for the current question."""
        question = self.current_question
        if question is None:
            raise ValidationError("No active question to answer")
        if not 0 <= option_index < len(question.options):
            raise ValidationError(
                "Option out of range",
                details={"option_index": option_index},
            )
        self.answers[self.current_index] = option_index

    def next_question(self) -> None:
        """Advance, or finish when the last question has been shown."""
        if self.phase is not QuizPhase.ACTIVE:
            return
        if self.current_index < len(self.questions) - 1:
            self.current_index += 1
        else:
            self.finish()

    def finish(self) -> int:
        self.score = sum(
            1
            for question, answer in zip(self.questions, self.answers)
            if answer == question.correct_answer_index
        )
        self.phase = QuizPhase.RESULTS
        return self.score

    @property
    def percentage(self) -> int:
        if not self.questions:
            return 0
        return round(self.score / len(self.questions) * 100)

    @property
    def passed(self) -> bool:
        return self.percentage >= PASS_PERCENTAGE

    @property
    def summary(self) -> str:
        """Result line for the results screen, e.g. "4/5 (80%) on Hard"."""
        return f"{self.score}/{len(self.questions)} ({self.percentage}%) on {self.difficulty.value}"

    def reset(self) -> None:
        self.questions = []
        self.answers = []
        self.current_index = 0
        self.score = 0
        self.phase = QuizPhase.IDLE
