"""Configuration defaults, overridable from the environment."""
import os
from pathlib import Path

DEFAULT_DB_PATH = os.getenv(
    "EXAM_PLANNER_DB", str(Path.home() / ".exam_planner" / "planner.db")
)
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "WARNING"


def resolve_log_level(value: str | None) -> str:
    """Upper-cased level name, or DEFAULT_LOG_LEVEL when it is not one logging knows."""
    level = (value or "").strip().upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


LOG_LEVEL = resolve_log_level(os.getenv("EXAM_PLANNER_LOG_LEVEL", DEFAULT_LOG_LEVEL))

# Schedule
MAX_QUIZZES_PER_DAY = 3
DEFAULT_TOPIC_POOL = [
    "Core Concepts",
    "Key Principles",
    "Practical Applications",
    "Advanced Topics",
    "Review Questions",
]

# Generation
MAX_TOPICS = 15
TOPIC_QUIZ_LIMIT = 5
QUESTIONS_PER_QUIZ = 10
ATTEMPTS_PER_QUESTION = 3
DIFFICULTY_LEVELS = {"Easy": 1, "Medium": 2, "Hard": 3}
DEFAULT_DIFFICULTY = "Medium"
# Share of sentence-mined questions asked as free text.
FREE_TEXT_RATIO = 0.3

# Mistake rotation (seconds)
ROTATION_INTERVAL = 30
EMPTY_REFRESH_INTERVAL = 300
WIDE_DISPLAY_COUNT = 4
