"""Timeline persistence and user settings."""
import json
import logging
import sqlite3
from datetime import date, datetime

from exam_planner.config import DEFAULT_DIFFICULTY, DEFAULT_TOPIC_POOL, DIFFICULTY_LEVELS
from exam_planner.db import get_connection
from exam_planner.models import CourseNote, DailyQuiz, ExamTimeline, QuizQuestion
from exam_planner.schedule import day_difference, generate_schedule

logger = logging.getLogger(__name__)


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_difficulty(db_path: str) -> str:
    level = get_setting(db_path, "difficulty_level", DEFAULT_DIFFICULTY)
    return level if level in DIFFICULTY_LEVELS else DEFAULT_DIFFICULTY


def set_difficulty(db_path: str, level: str) -> None:
    if level not in DIFFICULTY_LEVELS:
        raise ValueError(f"Unknown difficulty level: {level}")
    set_setting(db_path, "difficulty_level", level)


def get_widget_timeline(db_path: str) -> str | None:
    """Id of the timeline the widget follows; None means the soonest exam."""
    return get_setting(db_path, "widget_timeline_id") or None


def set_widget_timeline(db_path: str, timeline_id: str | None) -> None:
    set_setting(db_path, "widget_timeline_id", timeline_id or "")


def create_timeline(
    db_path: str,
    exam_name: str,
    exam_brief: str,
    exam_date: date,
    notes: list[CourseNote] = None,
    today: date = None,
    topic_pool: list[str] = DEFAULT_TOPIC_POOL,
) -> ExamTimeline:
    """Create, schedule and save a new timeline. The exam must be after today."""
    today = today or date.today()
    days = day_difference(today, exam_date)
    if not exam_name.strip():
        raise ValueError("Exam name is required.")
    if days is None or days <= 0:
        raise ValueError("Exam date must be in the future.")
    timeline = ExamTimeline(
        exam_name=exam_name.strip(),
        exam_brief=exam_brief,
        exam_date=exam_date,
        notes=list(notes or []),
    )
    generate_schedule(timeline, today=today, topic_pool=topic_pool)
    save_timeline(db_path, timeline)
    return timeline


def _insert_quiz(conn: sqlite3.Connection, quiz: DailyQuiz) -> None:
    conn.execute(
        """INSERT INTO daily_quizzes
        (id, timeline_id, quiz_date, day_number, topic, is_completed, score, completed_date)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            quiz.id, quiz.exam_timeline_id, quiz.date.isoformat(), quiz.day_number, quiz.topic,
            int(quiz.is_completed), quiz.score,
            quiz.completed_date.isoformat() if quiz.completed_date else None,
        ),
    )
    for position, q in enumerate(quiz.questions):
        conn.execute(
            """INSERT INTO quiz_questions
            (id, quiz_id, position, question, options, correct_answer_index, selected_answer_index,
             topic, difficulty, times_answered_incorrectly, type, user_answer)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                q.id, quiz.id, position, q.question, json.dumps(q.options), q.correct_answer_index,
                q.selected_answer_index, q.topic, q.difficulty, q.times_answered_incorrectly,
                q.type, q.user_answer,
            ),
        )


def save_timeline(db_path: str, timeline: ExamTimeline) -> None:
    """Write the timeline with its notes, quizzes and questions, replacing any stored copy."""
    conn = get_connection(db_path)
    conn.execute(
        """INSERT INTO exam_timelines (id, exam_name, exam_brief, exam_date, created_date, is_active)
        VALUES (?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET exam_name=excluded.exam_name, exam_brief=excluded.exam_brief,
            exam_date=excluded.exam_date, is_active=excluded.is_active""",
        (
            timeline.id, timeline.exam_name, timeline.exam_brief, timeline.exam_date.isoformat(),
            timeline.created_date.isoformat(), int(timeline.is_active),
        ),
    )
    conn.execute("DELETE FROM course_notes WHERE timeline_id = ?", (timeline.id,))
    conn.execute("DELETE FROM daily_quizzes WHERE timeline_id = ?", (timeline.id,))
    for position, note in enumerate(timeline.notes):
        conn.execute(
            "INSERT INTO course_notes (id, timeline_id, position, title, content, date_added) VALUES (?, ?, ?, ?, ?, ?)",
            (note.id, timeline.id, position, note.title, note.content, note.date_added.isoformat()),
        )
    for quiz in timeline.daily_quizzes:
        _insert_quiz(conn, quiz)
    conn.commit()
    conn.close()
    logger.debug("Saved timeline %s with %d quizzes", timeline.id, timeline.total_quiz_count)


def save_quiz(db_path: str, quiz: DailyQuiz) -> None:
    """Write one quiz and its questions after it was filled or answered."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM daily_quizzes WHERE id = ?", (quiz.id,))
    _insert_quiz(conn, quiz)
    conn.commit()
    conn.close()


def _row_to_question(row: sqlite3.Row) -> QuizQuestion:
    return QuizQuestion(
        id=row["id"],
        question=row["question"],
        options=json.loads(row["options"]),
        correct_answer_index=row["correct_answer_index"],
        selected_answer_index=row["selected_answer_index"],
        topic=row["topic"],
        difficulty=row["difficulty"],
        times_answered_incorrectly=row["times_answered_incorrectly"],
        type=row["type"],
        user_answer=row["user_answer"],
    )


def _load_quizzes(conn: sqlite3.Connection, timeline_id: str) -> list[DailyQuiz]:
    rows = conn.execute(
        "SELECT * FROM daily_quizzes WHERE timeline_id = ? ORDER BY quiz_date, day_number, rowid",
        (timeline_id,),
    ).fetchall()
    quizzes = []
    for r in rows:
        questions = conn.execute(
            "SELECT * FROM quiz_questions WHERE quiz_id = ? ORDER BY position", (r["id"],)
        ).fetchall()
        quizzes.append(DailyQuiz(
            id=r["id"],
            date=date.fromisoformat(r["quiz_date"]),
            exam_timeline_id=r["timeline_id"],
            day_number=r["day_number"],
            topic=r["topic"],
            questions=[_row_to_question(q) for q in questions],
            is_completed=bool(r["is_completed"]),
            score=r["score"],
            completed_date=datetime.fromisoformat(r["completed_date"]) if r["completed_date"] else None,
        ))
    return quizzes


def _row_to_timeline(conn: sqlite3.Connection, row: sqlite3.Row) -> ExamTimeline:
    notes = conn.execute(
        "SELECT * FROM course_notes WHERE timeline_id = ? ORDER BY position", (row["id"],)
    ).fetchall()
    return ExamTimeline(
        id=row["id"],
        exam_name=row["exam_name"],
        exam_brief=row["exam_brief"] or "",
        exam_date=date.fromisoformat(row["exam_date"]),
        created_date=datetime.fromisoformat(row["created_date"]),
        is_active=bool(row["is_active"]),
        notes=[
            CourseNote(
                id=n["id"], title=n["title"], content=n["content"] or "",
                date_added=datetime.fromisoformat(n["date_added"]),
            )
            for n in notes
        ],
        daily_quizzes=_load_quizzes(conn, row["id"]),
    )


def load_timeline(db_path: str, timeline_id: str) -> ExamTimeline | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM exam_timelines WHERE id = ?", (timeline_id,)).fetchone()
    timeline = _row_to_timeline(conn, row) if row else None
    conn.close()
    return timeline


def list_timelines(db_path: str, active_only: bool = False) -> list[ExamTimeline]:
    """Timelines ordered by exam date, soonest first."""
    conn = get_connection(db_path)
    query = "SELECT * FROM exam_timelines"
    if active_only:
        query += " WHERE is_active = 1"
    rows = conn.execute(query + " ORDER BY exam_date").fetchall()
    timelines = [_row_to_timeline(conn, r) for r in rows]
    conn.close()
    return timelines


def set_timeline_active(db_path: str, timeline_id: str, is_active: bool) -> None:
    conn = get_connection(db_path)
    conn.execute("UPDATE exam_timelines SET is_active = ? WHERE id = ?", (int(is_active), timeline_id))
    conn.commit()
    conn.close()


def delete_timeline(db_path: str, timeline_id: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM exam_timelines WHERE id = ?", (timeline_id,))
    conn.commit()
    conn.close()
    logger.debug("Deleted timeline %s", timeline_id)
