import random
from datetime import date

import pytest

from exam_planner.models import CourseNote, ExamTimeline

BRIEF = (
    "The biology final covers photosynthesis and cellular respiration. "
    "Photosynthesis converts light energy into chemical energy inside chloroplasts. "
    "Cellular respiration releases energy stored in glucose molecules. "
    "Mitochondria produce most of the energy used by eukaryotic cells."
)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def timeline():
    return ExamTimeline(
        exam_name="Biology Final",
        exam_brief=BRIEF,
        exam_date=date(2030, 6, 10),
        notes=[CourseNote(title="Chloroplasts", content="Chloroplasts contain chlorophyll pigments that absorb light.")],
    )
