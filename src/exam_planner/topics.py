"""Frequency-based topic extraction from exam briefs and notes.

Words are tagged with nltk's part-of-speech tagger and only nouns and
verbs are counted, so repeated adverbs and adjectives never outrank the
subject terms of a brief.
"""
import logging
import re
import threading
from collections import Counter
from typing import Iterable

import nltk

from exam_planner.config import MAX_TOPICS

logger = logging.getLogger(__name__)

DEFAULT_TOPICS = ["Core Concepts", "Key Principles", "Practice Questions"]

MIN_TOPIC_LENGTH = 5

STOP_WORDS = set("""
about above after again against among around because before being below between
could didn't doesn't during every first following further having here's itself
might other ought ourselves should since their theirs there these those through
under until using where which while would yourself yourselves without within
shall still thing things great often always never something another however
therefore also example examples include includes including based between
""".split())

WORD_PATTERN = re.compile(r"[A-Za-z][A-Za-z'\-]*")
SENTENCE_BOUNDARY = re.compile(r"[.!?\n]+")

# Penn Treebank tag prefixes for nouns (NN, NNS, NNP, NNPS) and verbs (VB*).
TOPIC_TAG_PREFIXES = ("NN", "VB")

TAGGER_RESOURCE = "averaged_perceptron_tagger_eng"

_tagger_lock = threading.Lock()
_tagger_ready = False


def ensure_tagger() -> None:
    """Download the nltk tagger model the first time it is needed."""
    global _tagger_ready
    with _tagger_lock:
        if _tagger_ready:
            return
        try:
            nltk.data.find(f"taggers/{TAGGER_RESOURCE}")
        except LookupError:
            logger.info("Downloading nltk resource %s", TAGGER_RESOURCE)
            nltk.download(TAGGER_RESOURCE, quiet=True)
        _tagger_ready = True


def build_corpus(exam_brief: str, notes: Iterable[tuple[str, str]] = ()) -> str:
    """Join the exam brief with every note's title and content."""
    parts = [exam_brief or ""]
    for title, content in notes:
        parts.append(title or "")
        parts.append(content or "")
    return "\n".join(p for p in parts if p)


def tokenize(text: str) -> list[str]:
    return WORD_PATTERN.findall(text or "")


def tag_words(corpus: str) -> list[tuple[str, str]]:
    """(word, tag) pairs for the corpus, tagged one sentence at a time."""
    sentences = [tokenize(s) for s in SENTENCE_BOUNDARY.split(corpus or "")]
    sentences = [s for s in sentences if s]
    if not sentences:
        return []
    ensure_tagger()
    return [pair for sentence in sentences for pair in nltk.pos_tag(sentence)]


def is_topic_word(word: str, tag: str) -> bool:
    lowered = word.lower()
    return (
        tag.startswith(TOPIC_TAG_PREFIXES)
        and len(lowered) >= MIN_TOPIC_LENGTH
        and lowered not in STOP_WORDS
    )


def extract_topics(corpus: str, limit: int = MAX_TOPICS) -> list[str]:
    """Rank candidate topics by frequency, most frequent first.

    Only nouns and verbs of five or more letters count. Ties keep
    first-appearance order, so the result is deterministic for a given
    corpus. Falls back to DEFAULT_TOPICS when nothing qualifies.
    """
    counts = Counter()
    for word, tag in tag_words(corpus):
        if is_topic_word(word, tag):
            counts[word.lower()] += 1
    topics = [word for word, _ in counts.most_common(limit)]
    return topics or list(DEFAULT_TOPICS)
