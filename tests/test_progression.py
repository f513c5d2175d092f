# tests/test_progression.py
from datetime import date, datetime, timedelta

from exam_planner.models import DailyQuiz
from exam_planner.progression import (
    QuizState, is_quiz_available, quiz_state, quiz_states, quizzes_by_day, sorted_quizzes,
)

DAY1 = date(2030, 6, 1)
DAY2 = DAY1 + timedelta(days=1)


def make_quiz(day, topic, completed=False):
    return DailyQuiz(date=day, exam_timeline_id="t1", day_number=1, topic=topic, is_completed=completed)


def two_by_two():
    return [
        make_quiz(DAY2, "Beta"),
        make_quiz(DAY1, "Beta"),
        make_quiz(DAY2, "Alpha"),
        make_quiz(DAY1, "Alpha"),
    ]


def test_sorted_by_date_then_topic():
    ordered = sorted_quizzes(two_by_two())
    assert [(q.date, q.topic) for q in ordered] == [
        (DAY1, "Alpha"), (DAY1, "Beta"), (DAY2, "Alpha"), (DAY2, "Beta"),
    ]


def test_grouped_by_day():
    days = quizzes_by_day(two_by_two())
    assert [d for d, _ in days] == [DAY1, DAY2]
    assert [q.topic for q in days[1][1]] == ["Alpha", "Beta"]


def test_first_quiz_is_available():
    quizzes = two_by_two()
    a1, b1, a2, b2 = sorted_quizzes(quizzes)
    assert is_quiz_available(a1, quizzes, today=DAY2)
    assert not is_quiz_available(b1, quizzes, today=DAY2)
    assert not is_quiz_available(a2, quizzes, today=DAY2)


def test_completing_unlocks_in_order():
    quizzes = two_by_two()
    a1, b1, a2, b2 = sorted_quizzes(quizzes)
    a1.is_completed = True
    assert is_quiz_available(b1, quizzes, today=DAY2)
    assert not is_quiz_available(a2, quizzes, today=DAY2)

    b1.is_completed = True
    assert is_quiz_available(a2, quizzes, today=DAY2)
    assert not is_quiz_available(b2, quizzes, today=DAY2)


def test_future_quiz_is_locked_even_when_previous_done():
    quizzes = two_by_two()
    a1, b1, a2, _ = sorted_quizzes(quizzes)
    a1.is_completed = b1.is_completed = True
    assert not is_quiz_available(a2, quizzes, today=DAY1)


def test_gap_days_use_most_recent_prior_day():
    day5 = DAY1 + timedelta(days=4)
    quizzes = [make_quiz(DAY1, "Alpha", completed=True), make_quiz(DAY2, "Alpha"), make_quiz(day5, "Alpha")]
    assert not is_quiz_available(quizzes[2], quizzes, today=day5)
    quizzes[1].is_completed = True
    assert is_quiz_available(quizzes[2], quizzes, today=day5)


def test_unknown_quiz_is_not_available():
    stranger = make_quiz(DAY1, "Alpha")
    assert not is_quiz_available(stranger, two_by_two(), today=DAY2)


def test_states():
    quizzes = two_by_two()
    a1, b1, a2, b2 = sorted_quizzes(quizzes)
    a1.is_completed = True
    assert quiz_state(a1, quizzes, today=DAY2) is QuizState.COMPLETED
    states = quiz_states(quizzes, today=DAY2)
    assert states[a1.id] is QuizState.COMPLETED
    assert states[b1.id] is QuizState.AVAILABLE
    assert states[a2.id] is QuizState.LOCKED
    assert states[b2.id] is QuizState.LOCKED


def test_datetime_today_is_compared_by_day():
    quizzes = two_by_two()
    a1, b1, a2, _ = sorted_quizzes(quizzes)
    evening = datetime(2030, 6, 1, 21, 30)
    assert is_quiz_available(a1, quizzes, today=evening)
    assert not is_quiz_available(a2, quizzes, today=evening)
    a1.is_completed = b1.is_completed = True
    assert is_quiz_available(a2, quizzes, today=datetime(2030, 6, 2, 0, 5))
    assert quiz_states(quizzes, today=evening)[a2.id] is QuizState.LOCKED
