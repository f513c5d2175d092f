"""Practice questions built around a question the learner missed."""
from datetime import date
from typing import Optional, Protocol

from exam_planner.generator import QuestionGenerator
from exam_planner.models import DailyQuiz, QuizQuestion

PRACTICE_TOPIC = "Practice Questions"


class ReinforcementService(Protocol):
    def similar_questions(self, question: QuizQuestion) -> list[QuizQuestion]:
        ...


class LocalReinforcement:
    """Generates variants from the missed question's own text and answer."""

    def __init__(self, generator: QuestionGenerator, count: int = 5):
        self.generator = generator
        self.count = count

    def similar_questions(self, question: QuizQuestion) -> list[QuizQuestion]:
        notes = [(question.topic, f"{question.question} {question.correct_answer}.")]
        return self.generator.generate_questions(
            question.question, notes, count=self.count, existing=[question],
        )


def build_practice_quiz(questions: list[QuizQuestion], today: Optional[date] = None) -> DailyQuiz:
    """Wrap reinforcement questions in a standalone quiz outside any timeline."""
    return DailyQuiz(
        date=today or date.today(),
        exam_timeline_id="",
        day_number=0,
        topic=PRACTICE_TOPIC,
        questions=list(questions),
    )
