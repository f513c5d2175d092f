"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from exam_planner.config import DEFAULT_DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS exam_timelines (
    id TEXT PRIMARY KEY,
    exam_name TEXT NOT NULL,
    exam_brief TEXT,
    exam_date TEXT NOT NULL,
    created_date TEXT NOT NULL,
    is_active INTEGER DEFAULT 1
);

CREATE TABLE IF NOT EXISTS course_notes (
    id TEXT PRIMARY KEY,
    timeline_id TEXT NOT NULL REFERENCES exam_timelines(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    content TEXT,
    date_added TEXT
);

CREATE TABLE IF NOT EXISTS daily_quizzes (
    id TEXT PRIMARY KEY,
    timeline_id TEXT NOT NULL REFERENCES exam_timelines(id) ON DELETE CASCADE,
    quiz_date TEXT NOT NULL,
    day_number INTEGER NOT NULL,
    topic TEXT,
    is_completed INTEGER DEFAULT 0,
    score REAL,
    completed_date TEXT
);

CREATE TABLE IF NOT EXISTS quiz_questions (
    id TEXT PRIMARY KEY,
    quiz_id TEXT NOT NULL REFERENCES daily_quizzes(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    question TEXT NOT NULL,
    options TEXT NOT NULL,
    correct_answer_index INTEGER NOT NULL,
    selected_answer_index INTEGER,
    topic TEXT,
    difficulty INTEGER DEFAULT 1,
    times_answered_incorrectly INTEGER DEFAULT 0,
    type TEXT DEFAULT 'multiple_choice',
    user_answer TEXT
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
