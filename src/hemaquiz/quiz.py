import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from .models import QuizQuestion
from .pool import normalize_pool
from .question_bank import QuestionBank

MAX_SESSION_SIZE = 10


class SessionSampler:
    """Picks a bounded random subset of a pool.

    ``rng`` is any ``random.Random``; pass a seeded one for repeatable
    samples.
    """

    def __init__(
        self, rng: Optional[random.Random] = None, size: int = MAX_SESSION_SIZE
    ):
        self.rng = rng or random.Random()
        self.size = min(size, MAX_SESSION_SIZE)

    def sample(self, pool: Sequence[QuizQuestion]) -> List[QuizQuestion]:
        shuffled = list(pool)
        self.rng.shuffle(shuffled)
        return shuffled[: self.size]


# --- Strategy Pattern: Quiz Generators ---
class QuizGenerator(ABC):
    """Abstract Base Class for session question selection strategies."""

    @abstractmethod
    def generate(
        self, subject_id: str, chapter: Optional[str], question_type: str
    ) -> List[QuizQuestion]:
        pass


class RandomQuizGenerator(QuizGenerator):
    """Normalizes the subject's pool and samples a random session from it."""

    def __init__(self, bank: QuestionBank, sampler: Optional[SessionSampler] = None):
        self.bank = bank
        self.sampler = sampler or SessionSampler()

    def generate(
        self, subject_id: str, chapter: Optional[str], question_type: str = "all"
    ) -> List[QuizQuestion]:
        groups = self.bank.get_question_groups(subject_id)
        pool = normalize_pool(groups, chapter, question_type)
        if not pool:
            return []
        return self.sampler.sample(pool)
