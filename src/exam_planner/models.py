"""Data classes for the exam planner domain model."""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional
from uuid import uuid4

MULTIPLE_CHOICE = "multiple_choice"
FREE_TEXT = "free_text"

# Fraction of the expected answer's words a free-text answer must contain.
FREE_TEXT_MATCH_RATIO = 0.4


def new_id() -> str:
    return uuid4().hex


@dataclass
class CourseNote:
    title: str
    content: str
    id: str = field(default_factory=new_id)
    date_added: datetime = field(default_factory=datetime.now)


@dataclass
class QuizQuestion:
    question: str
    options: list[str]
    correct_answer_index: int
    topic: str = "General"
    difficulty: int = 1
    type: str = MULTIPLE_CHOICE
    id: str = field(default_factory=new_id)
    selected_answer_index: Optional[int] = None
    times_answered_incorrectly: int = 0
    user_answer: Optional[str] = None

    @property
    def is_answered(self) -> bool:
        if self.type == FREE_TEXT:
            return bool(self.user_answer and self.user_answer.strip())
        return self.selected_answer_index is not None

    @property
    def is_answered_correctly(self) -> bool:
        if self.type == FREE_TEXT:
            return self._free_text_matches()
        if self.selected_answer_index is None:
            return False
        return self.selected_answer_index == self.correct_answer_index

    @property
    def correct_answer(self) -> str:
        if 0 <= self.correct_answer_index < len(self.options):
            return self.options[self.correct_answer_index]
        return "No answer available"

    def _free_text_matches(self) -> bool:
        answer = (self.user_answer or "").strip().lower()
        if not answer:
            return False
        expected = self.correct_answer.strip().lower()
        if answer == expected:
            return True
        expected_words = set(expected.split())
        if not expected_words:
            return False
        overlap = expected_words & set(answer.split())
        return len(overlap) / len(expected_words) >= FREE_TEXT_MATCH_RATIO


@dataclass
class DailyQuiz:
    date: date
    exam_timeline_id: str
    day_number: int
    topic: str = "General"
    id: str = field(default_factory=new_id)
    questions: list[QuizQuestion] = field(default_factory=list)
    is_completed: bool = False
    score: Optional[float] = None
    completed_date: Optional[datetime] = None

    @property
    def correct_answer_count(self) -> int:
        return sum(1 for q in self.questions if q.is_answered_correctly)

    @property
    def incorrect_answer_count(self) -> int:
        return len(self.questions) - self.correct_answer_count


@dataclass
class ExamTimeline:
    exam_name: str
    exam_brief: str
    exam_date: date
    notes: list[CourseNote] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_date: datetime = field(default_factory=datetime.now)
    daily_quizzes: list[DailyQuiz] = field(default_factory=list)
    is_active: bool = True

    @property
    def total_quiz_count(self) -> int:
        return len(self.daily_quizzes)

    @property
    def completed_quiz_count(self) -> int:
        return sum(1 for q in self.daily_quizzes if q.is_completed)

    @property
    def progress_percentage(self) -> float:
        if self.total_quiz_count == 0:
            return 0.0
        return self.completed_quiz_count / self.total_quiz_count

    @property
    def corpus_notes(self) -> list[tuple[str, str]]:
        return [(n.title, n.content) for n in self.notes]

    @property
    def all_questions(self) -> list[QuizQuestion]:
        return [q for quiz in self.daily_quizzes for q in quiz.questions]

    def days_until_exam(self, today: Optional[date] = None) -> int:
        """Days remaining until the exam, counting today."""
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()
        return max(0, (self.exam_date - today).days + 1)
