"""Build the dated quiz slots that lead up to an exam."""
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from exam_planner.config import DEFAULT_TOPIC_POOL, MAX_QUIZZES_PER_DAY
from exam_planner.models import DailyQuiz, ExamTimeline

logger = logging.getLogger(__name__)


def as_date(value) -> Optional[date]:
    """Interpret a date, datetime or ISO string as a calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def day_difference(start, end) -> Optional[int]:
    """Whole days from ``start`` to ``end``, or None if either is not a date."""
    start_day, end_day = as_date(start), as_date(end)
    if start_day is None or end_day is None:
        return None
    return (end_day - start_day).days


def build_schedule(
    timeline_id: str,
    start,
    exam_date,
    topic_pool: Sequence[str] = DEFAULT_TOPIC_POOL,
) -> list[DailyQuiz]:
    """Emit quiz slots for every day from ``start`` through ``exam_date``.

    Each day gets min(3, len(topic_pool)) slots, with topics assigned
    round-robin across the whole schedule. Returns an empty list when the
    day range cannot be computed, is negative, or the pool is empty.
    """
    days = day_difference(start, exam_date)
    if days is None or days < 0 or not topic_pool:
        logger.debug("No schedule for start=%r exam_date=%r", start, exam_date)
        return []

    start_day = as_date(start)
    pool_size = len(topic_pool)
    per_day = min(MAX_QUIZZES_PER_DAY, pool_size)
    slots = []
    for day_offset in range(days + 1):
        quiz_date = start_day + timedelta(days=day_offset)
        for i in range(per_day):
            topic = topic_pool[(day_offset * per_day + i) % pool_size]
            slots.append(DailyQuiz(
                date=quiz_date,
                exam_timeline_id=timeline_id,
                day_number=day_offset + 1,
                topic=topic,
            ))
    return slots


def generate_schedule(
    timeline: ExamTimeline,
    today=None,
    topic_pool: Sequence[str] = DEFAULT_TOPIC_POOL,
) -> list[DailyQuiz]:
    """Replace the timeline's quiz slots with a freshly built schedule."""
    start = today if today is not None else date.today()
    slots = build_schedule(timeline.id, start, timeline.exam_date, topic_pool)
    timeline.daily_quizzes = slots
    logger.debug("Scheduled %d quizzes for timeline %s", len(slots), timeline.id)
    return slots
