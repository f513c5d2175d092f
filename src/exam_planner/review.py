"""Mistake collection and the rotating review snapshot.

A passive display can only refresh periodically and show a handful of
items. ``build_rotation`` turns one snapshot into a series of timed
entries, each carrying a rotation index that selects which mistakes are
on screen.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Iterable, Optional

from exam_planner.config import EMPTY_REFRESH_INTERVAL, ROTATION_INTERVAL, WIDE_DISPLAY_COUNT
from exam_planner.dashboard import QuizSnapshot, TimelineSnapshot, snapshot_quiz, snapshot_timeline
from exam_planner.models import DailyQuiz, ExamTimeline
from exam_planner.schedule import as_date


@dataclass
class Mistake:
    id: str
    question: str
    correct_answer: str
    times_incorrect: int


@dataclass
class WidgetEntry:
    date: datetime
    primary_timeline: Optional[TimelineSnapshot] = None
    today_quizzes: list[QuizSnapshot] = field(default_factory=list)
    top_mistakes: list[Mistake] = field(default_factory=list)
    mistake_rotation_index: int = 0

    @property
    def pending_quiz_count(self) -> int:
        return sum(1 for q in self.today_quizzes if not q.is_completed)


@dataclass
class Rotation:
    entries: list[WidgetEntry]
    next_refresh: datetime


def collect_mistakes(quizzes: Iterable[DailyQuiz]) -> list[Mistake]:
    """Answered-but-wrong questions from completed quizzes, in quiz order."""
    mistakes = []
    for quiz in quizzes:
        if not quiz.is_completed:
            continue
        for q in quiz.questions:
            if q.is_answered and not q.is_answered_correctly and q.times_answered_incorrectly > 0:
                mistakes.append(Mistake(
                    id=q.id,
                    question=q.question,
                    correct_answer=q.correct_answer,
                    times_incorrect=q.times_answered_incorrectly,
                ))
    return mistakes


def rank_mistakes(mistakes: Iterable[Mistake]) -> list[Mistake]:
    """Most frequently missed first."""
    return sorted(mistakes, key=lambda m: m.times_incorrect, reverse=True)


def primary_timeline(timelines: Iterable[ExamTimeline]) -> Optional[ExamTimeline]:
    """The active timeline whose exam comes soonest."""
    active = sorted((t for t in timelines if t.is_active), key=lambda t: t.exam_date)
    return active[0] if active else None


def followed_timeline(timelines: Iterable[ExamTimeline], timeline_id: Optional[str] = None) -> Optional[ExamTimeline]:
    """The timeline chosen for the display, or the primary one when none is chosen or it is gone."""
    timelines = list(timelines)
    if timeline_id:
        chosen = next((t for t in timelines if t.id == timeline_id), None)
        if chosen is not None:
            return chosen
    return primary_timeline(timelines)


def build_snapshot(
    timelines: Iterable[ExamTimeline],
    rotation_index: int = 0,
    today=None,
    now: Optional[datetime] = None,
    timeline_id: Optional[str] = None,
) -> WidgetEntry:
    now = now or datetime.now()
    today = as_date(today) or now.date()
    timeline = followed_timeline(timelines, timeline_id)
    if timeline is None:
        return WidgetEntry(date=now, mistake_rotation_index=rotation_index)
    return WidgetEntry(
        date=now,
        primary_timeline=snapshot_timeline(timeline, today),
        today_quizzes=[snapshot_quiz(q) for q in timeline.daily_quizzes if as_date(q.date) == today],
        top_mistakes=rank_mistakes(collect_mistakes(timeline.daily_quizzes)),
        mistake_rotation_index=rotation_index,
    )


def build_rotation(base: WidgetEntry, now: Optional[datetime] = None) -> Rotation:
    """Spread a snapshot into one entry per mistake, ROTATION_INTERVAL seconds apart."""
    now = now or datetime.now()
    count = len(base.top_mistakes)
    if count == 0:
        return Rotation(
            entries=[replace(base, date=now)],
            next_refresh=now + timedelta(seconds=EMPTY_REFRESH_INTERVAL),
        )
    entries = [
        replace(base, date=now + timedelta(seconds=i * ROTATION_INTERVAL), mistake_rotation_index=i)
        for i in range(count)
    ]
    return Rotation(entries=entries, next_refresh=now + timedelta(seconds=count * ROTATION_INTERVAL))


def rotation_positions(total: int, rotation_index: int, max_display: int = WIDE_DISPLAY_COUNT) -> list[int]:
    if total <= 0:
        return []
    start = rotation_index % total
    return [(start + i) % total for i in range(min(max_display, total))]


def wide_selection(mistakes: list[Mistake], rotation_index: int, max_display: int = WIDE_DISPLAY_COUNT) -> list[Mistake]:
    return [mistakes[i] for i in rotation_positions(len(mistakes), rotation_index, max_display)]


def current_mistake(mistakes: list[Mistake], rotation_index: int) -> Optional[Mistake]:
    if not mistakes:
        return None
    return mistakes[rotation_index % len(mistakes)]


def compress_runs(nums: list[int]) -> str:
    """Render integers as ranges, e.g. [1, 2, 3, 5] -> "1-3,5"."""
    if not nums:
        return ""
    parts = []
    run_start = prev = nums[0]
    for n in nums[1:]:
        if n == prev + 1:
            prev = n
            continue
        parts.append(_format_run(run_start, prev))
        run_start = prev = n
    parts.append(_format_run(run_start, prev))
    return ",".join(parts)


def _format_run(start: int, end: int) -> str:
    return str(start) if start == end else f"{start}-{end}"


def rotating_indices_text(total: int, rotation_index: int, max_display: int = WIDE_DISPLAY_COUNT) -> str:
    """1-based positions currently on screen, compressed into ranges."""
    return compress_runs([i + 1 for i in rotation_positions(total, rotation_index, max_display)])
