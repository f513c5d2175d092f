"""Question synthesis from exam briefs and notes.

Questions are mined from sentences of the source text that mention a
topic. When no sentence mentions the topic, a canned template question is
used instead. Roughly a third of sentence-mined questions are asked as
free text, graded against the mined answer phrase. Every accepted
question passes through a DedupLedger so a batch never repeats a prompt
that was generated earlier or is already stored.
"""
import asyncio
import logging
import random
import re
import threading
from concurrent.futures import Executor, Future
from typing import Iterable, Optional

from exam_planner.config import (
    ATTEMPTS_PER_QUESTION, DEFAULT_DIFFICULTY, DIFFICULTY_LEVELS, FREE_TEXT_RATIO,
    QUESTIONS_PER_QUIZ, TOPIC_QUIZ_LIMIT,
)
from exam_planner.ledger import DedupLedger
from exam_planner.models import FREE_TEXT, MULTIPLE_CHOICE, QuizQuestion
from exam_planner.topics import build_corpus, extract_topics

logger = logging.getLogger(__name__)

SENTENCE_SPLIT = re.compile(r"[.!?]")
MIN_SENTENCE_LENGTH = 20
ANSWER_WINDOW = 5
WRONG_ANSWER_COUNT = 3

PROMPT_TEMPLATES = [
    "What is {topic}?",
    "How does {topic} work?",
    "Which statement best describes {topic}?",
    "What role does {topic} play in this subject?",
    "Why is {topic} important?",
]

WRONG_ANSWER_TEMPLATES = [
    "{topic} is unrelated to the exam material",
    "{topic} only applies in purely theoretical settings",
    "{topic} has been fully replaced by newer methods",
    "{topic} is a minor detail with no practical use",
    "{topic} works in exactly the opposite way",
    "{topic} is only relevant in historical contexts",
    "{topic} cannot be observed or measured",
]

# (prompt, correct answer, wrong answers)
FALLBACK_TEMPLATES = [
    (
        "Which of the following best describes {topic}?",
        "A key concept covered in the exam material",
        [
            "An unrelated concept from another subject",
            "A term that is never assessed",
            "A purely historical footnote",
        ],
    ),
    (
        "When studying {topic}, what should you focus on first?",
        "Its core definition and main principles",
        [
            "Memorizing unrelated trivia",
            "Skipping it until after the exam",
            "Only the most obscure edge cases",
        ],
    ),
    (
        "Why is {topic} likely to appear on the exam?",
        "It is central to understanding the subject",
        [
            "It is never tested",
            "It only appears in optional reading",
            "It was removed from the syllabus",
        ],
    ),
]


class GenerationCancelled(Exception):
    """Raised when a generation batch is cancelled between attempts."""


def matching_sentences(corpus: str, topic: str) -> list[str]:
    needle = topic.lower()
    sentences = (s.strip() for s in SENTENCE_SPLIT.split(corpus or ""))
    return [s for s in sentences if len(s) > MIN_SENTENCE_LENGTH and needle in s.lower()]


def answer_window(sentence: str) -> str:
    """Pick a short phrase from the sentence to serve as the correct answer."""
    words = sentence.split()
    if len(words) <= ANSWER_WINDOW:
        return sentence
    start = min(len(words) - ANSWER_WINDOW, 2)
    end = min(start + ANSWER_WINDOW, len(words))
    return " ".join(words[start:end])


def difficulty_value(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return DIFFICULTY_LEVELS.get(level, DIFFICULTY_LEVELS[DEFAULT_DIFFICULTY])


class QuestionGenerator:
    """Builds multiple-choice questions for topics found in the source text."""

    def __init__(
        self,
        ledger: Optional[DedupLedger] = None,
        rng: Optional[random.Random] = None,
        difficulty: str | int = DEFAULT_DIFFICULTY,
        free_text_ratio: float = FREE_TEXT_RATIO,
    ):
        self.ledger = ledger if ledger is not None else DedupLedger()
        self.rng = rng if rng is not None else random.Random()
        self.difficulty = difficulty_value(difficulty)
        self.free_text_ratio = free_text_ratio

    def synthesize(self, topic: str, corpus: str) -> Optional[QuizQuestion]:
        """Produce one question for ``topic``, or None if it cannot be assembled."""
        sentences = matching_sentences(corpus, topic)
        if not sentences:
            return self._from_template(topic)

        sentence = self.rng.choice(sentences)
        prompt = self.rng.choice(PROMPT_TEMPLATES).format(topic=topic)
        correct = answer_window(sentence)
        if self.rng.random() < self.free_text_ratio:
            return self._free_text(prompt, correct, topic)
        wrong = [
            template.format(topic=topic)
            for template in self.rng.sample(WRONG_ANSWER_TEMPLATES, WRONG_ANSWER_COUNT)
        ]
        return self._build(prompt, correct, wrong, topic)

    def _free_text(self, prompt: str, expected: str, topic: str) -> QuizQuestion:
        # Blank slots keep the four-option shape; only index 0 is graded.
        return QuizQuestion(
            question=prompt,
            options=[expected, "", "", ""],
            correct_answer_index=0,
            topic=topic,
            difficulty=self.difficulty,
            type=FREE_TEXT,
        )

    def _from_template(self, topic: str) -> Optional[QuizQuestion]:
        prompt, correct, wrong = self.rng.choice(FALLBACK_TEMPLATES)
        return self._build(prompt.format(topic=topic), correct, list(wrong), topic)

    def _build(self, prompt: str, correct: str, wrong: list[str], topic: str) -> Optional[QuizQuestion]:
        options = [correct] + wrong
        self.rng.shuffle(options)
        try:
            correct_index = options.index(correct)
        except ValueError:
            return None
        return QuizQuestion(
            question=prompt,
            options=options,
            correct_answer_index=correct_index,
            topic=topic,
            difficulty=self.difficulty,
            type=MULTIPLE_CHOICE,
        )

    def _accept(self, question: Optional[QuizQuestion]) -> bool:
        return question is not None and self.ledger.claim(question.question)

    def generate_questions(
        self,
        exam_brief: str,
        notes: Iterable[tuple[str, str]] = (),
        count: int = QUESTIONS_PER_QUIZ,
        existing: Iterable[QuizQuestion] = (),
        cancel: Optional[threading.Event] = None,
    ) -> list[QuizQuestion]:
        """Generate up to ``count`` questions not already in the ledger.

        The result can be shorter than ``count`` when the attempt budget
        runs out; that is not an error.
        """
        corpus = build_corpus(exam_brief, notes)
        topics = extract_topics(corpus)
        self.ledger.seed(existing)

        accepted: list[QuizQuestion] = []
        budget = ATTEMPTS_PER_QUESTION * max(count, 0)
        attempts = 0
        while len(accepted) < count and attempts < budget:
            _check_cancelled(cancel)
            attempts += 1
            question = self.synthesize(self.rng.choice(topics), corpus)
            if self._accept(question):
                accepted.append(question)

        if len(accepted) < count:
            logger.info("Generated %d of %d questions in %d attempts", len(accepted), count, attempts)
        else:
            logger.debug("Generated %d questions in %d attempts", count, attempts)
        return accepted

    def generate_topic_quizzes(
        self,
        exam_brief: str,
        notes: Iterable[tuple[str, str]] = (),
        questions_per_topic: int = QUESTIONS_PER_QUIZ,
        existing: Iterable[QuizQuestion] = (),
        cancel: Optional[threading.Event] = None,
    ) -> dict[str, list[QuizQuestion]]:
        """Generate questions grouped by the leading extracted topics."""
        corpus = build_corpus(exam_brief, notes)
        topics = extract_topics(corpus)[:TOPIC_QUIZ_LIMIT]
        self.ledger.seed(existing)

        result: dict[str, list[QuizQuestion]] = {}
        for topic in topics:
            accepted: list[QuizQuestion] = []
            budget = ATTEMPTS_PER_QUESTION * max(questions_per_topic, 0)
            for _ in range(budget):
                if len(accepted) >= questions_per_topic:
                    break
                _check_cancelled(cancel)
                question = self.synthesize(topic, corpus)
                if self._accept(question):
                    accepted.append(question)
            if accepted:
                result[topic] = accepted
            else:
                logger.debug("No new questions for topic %r", topic)
        return result


def _check_cancelled(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise GenerationCancelled("question generation cancelled")


def submit_questions(executor: Executor, generator: QuestionGenerator, *args, **kwargs) -> Future:
    """Run ``generate_questions`` on ``executor`` and return its future."""
    return executor.submit(generator.generate_questions, *args, **kwargs)


async def generate_questions_async(generator: QuestionGenerator, *args, **kwargs) -> list[QuizQuestion]:
    """Awaitable ``generate_questions`` that runs on a worker thread."""
    return await asyncio.to_thread(generator.generate_questions, *args, **kwargs)
