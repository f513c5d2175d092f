# tests/test_app.py
from datetime import date, timedelta

import pytest
from unittest.mock import patch

from exam_planner.app import (
    SessionExitRequested, cmd_review, cmd_settings, cmd_widget, configure_logging, run_quiz_session,
    session_int_prompt, session_prompt,
)
from exam_planner.db import init_db
from exam_planner.models import DailyQuiz, QuizQuestion
from exam_planner.quiz import complete_quiz, submit_answer
from exam_planner.store import (
    create_timeline, get_difficulty, get_widget_timeline, load_timeline, save_quiz,
)


def make_questions():
    return [
        QuizQuestion(question="What is ATP?", options=["energy", "water", "salt", "air"], correct_answer_index=0),
        QuizQuestion(question="Where is DNA?", options=["roots", "nucleus", "wall", "air"], correct_answer_index=1),
    ]


def test_session_exit_requested_is_exception():
    with pytest.raises(SessionExitRequested):
        raise SessionExitRequested()


def test_session_prompt_raises_on_q():
    with patch("exam_planner.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_raises_on_menu():
    with patch("exam_planner.app.Prompt.ask", return_value="menu"):
        with pytest.raises(SessionExitRequested):
            session_prompt("test prompt")


def test_session_prompt_returns_normal_input():
    with patch("exam_planner.app.Prompt.ask", return_value="hello"):
        result = session_prompt("test prompt")
        assert result == "hello"


def test_session_int_prompt_raises_on_q():
    with patch("exam_planner.app.Prompt.ask", return_value="q"):
        with pytest.raises(SessionExitRequested):
            session_int_prompt("answer", choices=["1", "2", "3", "4"])


def test_session_int_prompt_returns_normal_input():
    with patch("exam_planner.app.Prompt.ask", return_value="3"):
        result = session_int_prompt("answer", choices=["1", "2", "3", "4"])
        assert result == 3


def test_run_quiz_session_scores(tmp_db):
    quiz = DailyQuiz(date=date.today(), exam_timeline_id="", day_number=0, questions=make_questions())
    with patch("exam_planner.app.Prompt.ask", side_effect=["1", "3"]):
        correct, total = run_quiz_session(tmp_db, quiz, persist=False)
    assert (correct, total) == (1, 2)
    assert quiz.is_completed
    assert quiz.score == 0.5
    assert quiz.questions[1].times_answered_incorrectly == 1


def test_run_quiz_session_exits_on_q_and_saves_progress(tmp_db):
    """Learner answers the first question then types 'q'; the answer is stored."""
    init_db(tmp_db)
    today = date.today()
    timeline = create_timeline(tmp_db, "Biology", "Cells", today + timedelta(days=2), today=today)
    quiz = timeline.daily_quizzes[0]
    quiz.questions = make_questions()

    with patch("exam_planner.app.Prompt.ask", side_effect=["1", "q"]):
        with pytest.raises(SessionExitRequested):
            run_quiz_session(tmp_db, quiz)

    stored = next(q for q in load_timeline(tmp_db, timeline.id).daily_quizzes if q.id == quiz.id)
    assert not stored.is_completed
    assert stored.questions[0].selected_answer_index == 0
    assert stored.questions[1].selected_answer_index is None


def test_run_quiz_session_resumes_unanswered(tmp_db):
    quiz = DailyQuiz(date=date.today(), exam_timeline_id="", day_number=0, questions=make_questions())
    quiz.questions[0].selected_answer_index = 0
    # Only the second question is asked.
    with patch("exam_planner.app.Prompt.ask", side_effect=["2"]):
        correct, total = run_quiz_session(tmp_db, quiz, persist=False)
    assert (correct, total) == (2, 2)


def test_run_quiz_session_without_questions(tmp_db):
    quiz = DailyQuiz(date=date.today(), exam_timeline_id="", day_number=0)
    assert run_quiz_session(tmp_db, quiz, persist=False) == (0, 0)
    assert not quiz.is_completed


def test_cmd_settings_sets_difficulty(tmp_db):
    init_db(tmp_db)
    with patch("exam_planner.app.Prompt.ask", return_value="Easy"):
        cmd_settings(tmp_db)
    assert get_difficulty(tmp_db) == "Easy"


def test_cmd_widget_without_timelines(tmp_db):
    init_db(tmp_db)
    cmd_widget(tmp_db)


def test_cmd_review_shows_answers(tmp_db, capsys):
    init_db(tmp_db)
    today = date.today()
    timeline = create_timeline(tmp_db, "Biology", "Cells", today + timedelta(days=2), today=today)
    quiz = timeline.daily_quizzes[0]
    quiz.questions = make_questions()
    submit_answer(quiz.questions[0], selected_index=1)
    submit_answer(quiz.questions[1], selected_index=1)
    complete_quiz(quiz)
    save_quiz(tmp_db, quiz)

    with patch("exam_planner.app.IntPrompt.ask", return_value=1):
        cmd_review(tmp_db)

    out = capsys.readouterr().out
    assert "What is ATP?" in out
    assert "water" in out
    assert "energy" in out
    assert "nucleus" in out


def test_cmd_review_without_completed_quizzes(tmp_db, capsys):
    init_db(tmp_db)
    today = date.today()
    create_timeline(tmp_db, "Biology", "Cells", today + timedelta(days=2), today=today)
    with patch("exam_planner.app.IntPrompt.ask") as ask:
        cmd_review(tmp_db)
    ask.assert_not_called()
    assert "No completed quizzes" in capsys.readouterr().out


def test_cmd_widget_follows_chosen_timeline(tmp_db, capsys):
    init_db(tmp_db)
    today = date.today()
    create_timeline(tmp_db, "Sooner", "", today + timedelta(days=3), today=today)
    later = create_timeline(tmp_db, "Later", "", today + timedelta(days=30), today=today)
    with patch("exam_planner.app.IntPrompt.ask", return_value=2):
        cmd_widget(tmp_db)
    assert get_widget_timeline(tmp_db) == later.id
    assert "days until Later" in capsys.readouterr().out


def test_configure_logging_ignores_unknown_level():
    configure_logging("loud")
