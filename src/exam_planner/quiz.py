"""Quiz lifecycle: filling slots with questions, answering, scoring, retakes."""
import logging
import threading
from datetime import date, datetime
from typing import Optional

from exam_planner.config import QUESTIONS_PER_QUIZ
from exam_planner.generator import QuestionGenerator
from exam_planner.models import FREE_TEXT, DailyQuiz, ExamTimeline, QuizQuestion
from exam_planner.progression import sorted_quizzes
from exam_planner.schedule import as_date

logger = logging.getLogger(__name__)


def todays_quizzes(timeline: ExamTimeline, today: Optional[date] = None) -> list[DailyQuiz]:
    today = as_date(today) or date.today()
    return [q for q in sorted_quizzes(timeline.daily_quizzes) if as_date(q.date) == today]


def fill_quiz(
    timeline: ExamTimeline,
    quiz: DailyQuiz,
    generator: QuestionGenerator,
    count: int = QUESTIONS_PER_QUIZ,
    cancel: Optional[threading.Event] = None,
) -> list[QuizQuestion]:
    """Replace a quiz's questions with freshly generated ones.

    Every question already stored on the timeline seeds the ledger, so the
    new questions never repeat one the learner has seen.
    """
    questions = generator.generate_questions(
        timeline.exam_brief,
        timeline.corpus_notes,
        count=count,
        existing=timeline.all_questions,
        cancel=cancel,
    )
    quiz.questions = questions
    logger.debug("Filled quiz %s (day %d) with %d questions", quiz.id, quiz.day_number, len(questions))
    return questions


def fill_quizzes_for_day(
    timeline: ExamTimeline,
    generator: QuestionGenerator,
    day: Optional[date] = None,
    count: int = QUESTIONS_PER_QUIZ,
    cancel: Optional[threading.Event] = None,
) -> list[DailyQuiz]:
    """Generate questions for the day's quizzes that have none yet."""
    filled = []
    for quiz in todays_quizzes(timeline, day):
        if quiz.questions:
            continue
        fill_quiz(timeline, quiz, generator, count=count, cancel=cancel)
        filled.append(quiz)
    return filled


def fill_quizzes_by_topic(
    timeline: ExamTimeline,
    generator: QuestionGenerator,
    day: Optional[date] = None,
    count: int = QUESTIONS_PER_QUIZ,
    cancel: Optional[threading.Event] = None,
) -> list[DailyQuiz]:
    """Give each of the day's empty quizzes one extracted topic and its questions.

    The quiz takes the topic's name. Quizzes left over once the topics run
    out are filled from the whole corpus instead.
    """
    empty = [q for q in todays_quizzes(timeline, day) if not q.questions]
    if not empty:
        return []
    topic_map = generator.generate_topic_quizzes(
        timeline.exam_brief,
        timeline.corpus_notes,
        questions_per_topic=count,
        existing=timeline.all_questions,
        cancel=cancel,
    )
    topics = list(topic_map.items())
    for quiz, (topic, questions) in zip(empty, topics):
        quiz.topic = topic
        quiz.questions = questions
    for quiz in empty[len(topics):]:
        fill_quiz(timeline, quiz, generator, count=count, cancel=cancel)
    logger.debug("Filled %d quizzes from %d topics", len(empty), len(topics))
    return empty


def submit_answer(
    question: QuizQuestion,
    selected_index: Optional[int] = None,
    text_answer: Optional[str] = None,
) -> bool:
    """Record the learner's answer and return whether it was correct."""
    if question.type == FREE_TEXT:
        question.user_answer = text_answer
    else:
        question.selected_answer_index = selected_index
    is_correct = question.is_answered_correctly
    if question.is_answered and not is_correct:
        question.times_answered_incorrectly += 1
    return is_correct


def answer_text(question: QuizQuestion) -> str:
    """What the learner answered, as shown when reviewing a quiz."""
    if question.type == FREE_TEXT:
        return (question.user_answer or "").strip() or "No answer"
    index = question.selected_answer_index
    if index is None or not 0 <= index < len(question.options):
        return "No answer"
    return question.options[index]


def quiz_score(quiz: DailyQuiz) -> float:
    if not quiz.questions:
        return 0.0
    return quiz.correct_answer_count / len(quiz.questions)


def complete_quiz(quiz: DailyQuiz, now: Optional[datetime] = None) -> float:
    quiz.score = quiz_score(quiz)
    quiz.is_completed = True
    quiz.completed_date = now or datetime.now()
    return quiz.score


def reset_quiz(quiz: DailyQuiz) -> None:
    """Clear answers and completion so the quiz can be retaken.

    Miss counts are kept; they feed the mistake review.
    """
    for question in quiz.questions:
        question.selected_answer_index = None
        question.user_answer = None
    quiz.is_completed = False
    quiz.score = None
    quiz.completed_date = None
