"""Fingerprint ledger guarding against duplicate generated questions."""
import threading
from typing import Iterable

from exam_planner.models import QuizQuestion


def fingerprint(text: str) -> str:
    """Normalized form of a question prompt used for duplicate detection."""
    return (text or "").strip().lower()


class DedupLedger:
    """Set of question fingerprints shared by every generation call on it.

    All access goes through a single lock so concurrent generation calls
    cannot both accept the same fingerprint. The set only grows.
    """

    def __init__(self):
        self._fingerprints: set[str] = set()
        self._lock = threading.Lock()

    def seed(self, questions: Iterable[QuizQuestion]) -> int:
        """Add fingerprints of already-stored questions. Returns how many were new."""
        prints = {fingerprint(q.question) for q in questions}
        with self._lock:
            before = len(self._fingerprints)
            self._fingerprints |= prints
            return len(self._fingerprints) - before

    def claim(self, text: str) -> bool:
        """Record the fingerprint of ``text``; False if it was already present."""
        key = fingerprint(text)
        with self._lock:
            if key in self._fingerprints:
                return False
            self._fingerprints.add(key)
            return True

    def __contains__(self, text: str) -> bool:
        with self._lock:
            return fingerprint(text) in self._fingerprints

    def __len__(self) -> int:
        with self._lock:
            return len(self._fingerprints)
