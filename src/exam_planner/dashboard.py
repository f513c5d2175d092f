"""Progress summaries for timelines and quizzes."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

from exam_planner.models import DailyQuiz, ExamTimeline


@dataclass
class TimelineSnapshot:
    id: str
    exam_name: str
    exam_date: date
    days_until_exam: int
    completed_quizzes: int
    total_quizzes: int
    progress_percentage: float


@dataclass
class QuizSnapshot:
    id: str
    topic: str
    is_completed: bool
    score: Optional[float]


def snapshot_timeline(timeline: ExamTimeline, today: Optional[date] = None) -> TimelineSnapshot:
    return TimelineSnapshot(
        id=timeline.id,
        exam_name=timeline.exam_name,
        exam_date=timeline.exam_date,
        days_until_exam=timeline.days_until_exam(today),
        completed_quizzes=timeline.completed_quiz_count,
        total_quizzes=timeline.total_quiz_count,
        progress_percentage=timeline.progress_percentage,
    )


def snapshot_quiz(quiz: DailyQuiz) -> QuizSnapshot:
    return QuizSnapshot(
        id=quiz.id,
        topic=quiz.topic or "Daily Quiz",
        is_completed=quiz.is_completed,
        score=quiz.score,
    )


def score_percentage(quiz: DailyQuiz) -> int:
    if not quiz.questions:
        return 0
    return int(quiz.correct_answer_count / len(quiz.questions) * 100)


def get_score_label(percentage: float) -> str:
    if percentage >= 80:
        return "Excellent Work!"
    elif percentage >= 60:
        return "Good Effort!"
    return "Keep Practicing!"


def get_score_color(percentage: float) -> str:
    if percentage >= 80:
        return "green"
    elif percentage >= 60:
        return "dark_orange"
    return "red"


def get_timeline_stats(timeline: ExamTimeline, today: Optional[date] = None) -> dict:
    """Aggregate counts for the timeline overview."""
    completed = [q for q in timeline.daily_quizzes if q.is_completed]
    scores = [q.score for q in completed if q.score is not None]
    questions = [q for quiz in completed for q in quiz.questions]
    return {
        "days_until_exam": timeline.days_until_exam(today),
        "quizzes_completed": len(completed),
        "quizzes_total": timeline.total_quiz_count,
        "progress": round(timeline.progress_percentage * 100, 1),
        "avg_score": round(sum(scores) / len(scores) * 100, 1) if scores else 0.0,
        "questions_answered": sum(1 for q in questions if q.is_answered),
        "questions_missed": sum(1 for q in questions if q.is_answered and not q.is_answered_correctly),
    }
