"""Sequential unlocking of a timeline's quizzes."""
from datetime import date
from enum import Enum
from itertools import groupby
from typing import Iterable

from exam_planner.models import DailyQuiz
from exam_planner.schedule import as_date


class QuizState(Enum):
    LOCKED = "locked"
    AVAILABLE = "available"
    COMPLETED = "completed"


def sorted_quizzes(quizzes: Iterable[DailyQuiz]) -> list[DailyQuiz]:
    return sorted(quizzes, key=lambda q: (as_date(q.date), q.topic))


def quizzes_by_day(quizzes: Iterable[DailyQuiz]) -> list[tuple[date, list[DailyQuiz]]]:
    """Group quizzes by calendar day, days ascending, each day sorted by topic."""
    ordered = sorted_quizzes(quizzes)
    return [(day, list(group)) for day, group in groupby(ordered, key=lambda q: as_date(q.date))]


def is_quiz_available(quiz: DailyQuiz, quizzes: Iterable[DailyQuiz], today=None) -> bool:
    """Whether a not-yet-completed quiz can be started now.

    A quiz unlocks once its date has arrived and the quiz before it is
    completed: the previous quiz on the same day, or for the first quiz
    of a day, the last quiz of the most recent earlier day.
    """
    today = as_date(today) or date.today()
    quiz_day = as_date(quiz.date)
    if quiz_day is None or quiz_day > today:
        return False

    days = quizzes_by_day(quizzes)
    same_day = next((group for day, group in days if day == quiz_day), [])
    index = next((i for i, q in enumerate(same_day) if q.id == quiz.id), None)
    if index is None:
        return False
    if index > 0:
        return same_day[index - 1].is_completed

    earlier = [group for day, group in days if day < quiz_day]
    if not earlier:
        return True
    return earlier[-1][-1].is_completed


def quiz_state(quiz: DailyQuiz, quizzes: Iterable[DailyQuiz], today=None) -> QuizState:
    if quiz.is_completed:
        return QuizState.COMPLETED
    if is_quiz_available(quiz, quizzes, today):
        return QuizState.AVAILABLE
    return QuizState.LOCKED


def quiz_states(quizzes: Iterable[DailyQuiz], today=None) -> dict[str, QuizState]:
    quizzes = list(quizzes)
    return {q.id: quiz_state(q, quizzes, today) for q in quizzes}
