# tests/test_generator.py
import asyncio
import random
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import BRIEF
from exam_planner.generator import (
    FALLBACK_TEMPLATES, GenerationCancelled, QuestionGenerator, answer_window,
    generate_questions_async, matching_sentences, submit_questions,
)
from exam_planner.ledger import DedupLedger, fingerprint
from exam_planner.models import FREE_TEXT, MULTIPLE_CHOICE
from exam_planner.topics import build_corpus, extract_topics

# Ten words, every sentence too short to mine.
SHORT_BRIEF = "Atoms bond. Energy flows. Waves move. Light bends. Force acts."

FALLBACK_ANSWERS = {correct for _, correct, _ in FALLBACK_TEMPLATES}


def test_matching_sentences_filters_short_and_unrelated():
    corpus = "Photosynthesis here. Photosynthesis converts light into chemical energy! Mitochondria are organelles?"
    found = matching_sentences(corpus, "PHOTOSYNTHESIS")
    assert found == ["Photosynthesis converts light into chemical energy"]


def test_answer_window():
    assert answer_window("one two three") == "one two three"
    assert answer_window("one two three four five") == "one two three four five"
    assert answer_window("one two three four five six") == "two three four five six"
    assert answer_window("one two three four five six seven eight") == "three four five six seven"


def test_synthesize_from_sentence(rng):
    gen = QuestionGenerator(rng=rng, free_text_ratio=0)
    q = gen.synthesize("photosynthesis", BRIEF)
    assert q is not None
    assert "photosynthesis" in q.question
    assert len(q.options) == 4
    assert len(set(q.options)) == 4
    assert 0 <= q.correct_answer_index < 4
    sentences = matching_sentences(BRIEF, "photosynthesis")
    assert any(q.correct_answer in s for s in sentences)


def test_synthesize_free_text(rng):
    gen = QuestionGenerator(rng=rng, free_text_ratio=1)
    q = gen.synthesize("photosynthesis", BRIEF)
    assert q.type == FREE_TEXT
    assert q.correct_answer_index == 0
    assert q.options[1:] == ["", "", ""]
    sentences = matching_sentences(BRIEF, "photosynthesis")
    assert any(q.correct_answer in s for s in sentences)


def test_template_questions_stay_multiple_choice(rng):
    gen = QuestionGenerator(rng=rng, free_text_ratio=1)
    assert gen.synthesize("thermodynamics", BRIEF).type == MULTIPLE_CHOICE


def test_seeded_batch_mixes_question_kinds():
    gen = QuestionGenerator(rng=random.Random(99))
    questions = gen.generate_questions(BRIEF, [], count=30)
    assert {q.type for q in questions} == {FREE_TEXT, MULTIPLE_CHOICE}


def test_synthesize_falls_back_to_template(rng):
    gen = QuestionGenerator(rng=rng)
    q = gen.synthesize("thermodynamics", BRIEF)
    assert q is not None
    assert "thermodynamics" in q.question
    assert q.correct_answer in FALLBACK_ANSWERS
    assert len(q.options) == 4


def test_correct_index_tracks_shuffle():
    for seed in range(20):
        gen = QuestionGenerator(rng=random.Random(seed))
        q = gen.synthesize("energy", BRIEF)
        assert q.options[q.correct_answer_index] == q.correct_answer


def test_difficulty_is_stamped(rng):
    gen = QuestionGenerator(rng=rng, difficulty="Hard")
    assert gen.synthesize("energy", BRIEF).difficulty == 3
    assert QuestionGenerator(difficulty="Unknown").difficulty == 2


def test_generate_questions_has_no_duplicates(rng):
    gen = QuestionGenerator(rng=rng)
    questions = gen.generate_questions(BRIEF, [], count=20)
    assert len(questions) <= 20
    prints = [fingerprint(q.question) for q in questions]
    assert len(prints) == len(set(prints))
    assert len(gen.ledger) >= len(questions)


def test_generate_questions_shortfall_never_raises(rng):
    gen = QuestionGenerator(rng=rng)
    questions = gen.generate_questions(SHORT_BRIEF, [], count=100)
    assert 0 <= len(questions) <= 100
    assert all(q.correct_answer in FALLBACK_ANSWERS for q in questions)


def test_generate_questions_zero_count(rng):
    assert QuestionGenerator(rng=rng).generate_questions(BRIEF, [], count=0) == []


def test_shared_ledger_unique_across_calls(rng):
    ledger = DedupLedger()
    first = QuestionGenerator(ledger=ledger, rng=rng).generate_questions(BRIEF, [], count=10)
    second = QuestionGenerator(ledger=ledger, rng=rng).generate_questions(BRIEF, [], count=10)
    prints = [fingerprint(q.question) for q in first + second]
    assert len(prints) == len(set(prints))


def test_existing_questions_are_not_regenerated(rng):
    topics = extract_topics(SHORT_BRIEF)
    seed_gen = QuestionGenerator(rng=random.Random(0))
    existing = [
        seed_gen._build(prompt.format(topic=t), correct, list(wrong), t)
        for t in topics for prompt, correct, wrong in FALLBACK_TEMPLATES
    ]
    gen = QuestionGenerator(rng=rng)
    assert gen.generate_questions(SHORT_BRIEF, [], count=10, existing=existing) == []


def test_cancelled_generation_raises(rng):
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(GenerationCancelled):
        QuestionGenerator(rng=rng).generate_questions(BRIEF, [], count=5, cancel=cancel)


def test_generate_topic_quizzes(rng):
    gen = QuestionGenerator(rng=rng)
    notes = [("Extra", "Chlorophyll absorbs light energy.")]
    result = gen.generate_topic_quizzes(BRIEF, notes, questions_per_topic=3)
    topics = extract_topics(build_corpus(BRIEF, notes))[:5]
    assert result
    assert set(result) <= set(topics)
    for topic, questions in result.items():
        assert 0 < len(questions) <= 3
        assert all(q.topic == topic for q in questions)
    prints = [fingerprint(q.question) for qs in result.values() for q in qs]
    assert len(prints) == len(set(prints))


def test_generate_topic_quizzes_omits_exhausted_topics(rng):
    gen = QuestionGenerator(rng=rng)
    gen.generate_topic_quizzes(SHORT_BRIEF, questions_per_topic=10)
    # Every template prompt is now in the ledger.
    assert gen.generate_topic_quizzes(SHORT_BRIEF, questions_per_topic=10) == {}


def test_same_seed_same_questions():
    a = QuestionGenerator(rng=random.Random(7)).generate_questions(BRIEF, [], count=5)
    b = QuestionGenerator(rng=random.Random(7)).generate_questions(BRIEF, [], count=5)
    assert [q.question for q in a] == [q.question for q in b]
    assert [q.options for q in a] == [q.options for q in b]


def test_submit_questions_runs_on_executor(rng):
    gen = QuestionGenerator(rng=rng)
    with ThreadPoolExecutor(max_workers=2) as executor:
        future = submit_questions(executor, gen, BRIEF, [], count=5)
        questions = future.result(timeout=10)
    assert len(questions) <= 5


def test_generate_questions_async(rng):
    gen = QuestionGenerator(rng=rng)
    questions = asyncio.run(generate_questions_async(gen, BRIEF, [], count=5))
    assert len(questions) <= 5
    assert all(len(q.options) == 4 for q in questions)
