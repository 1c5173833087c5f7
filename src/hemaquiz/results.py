import math
from typing import Sequence

from .models import QuizResult, QuizSummary


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def summarize(results: Sequence[QuizResult]) -> QuizSummary:
    total = len(results)
    correct_count = sum(1 for r in results if r.correct)
    if not total:
        return QuizSummary(
            correct_count=0, total_results=0, average_score=0, accuracy_rate=0
        )
    return QuizSummary(
        correct_count=correct_count,
        total_results=total,
        average_score=round_half_up(sum(r.score for r in results) / total),
        accuracy_rate=round_half_up(correct_count / total * 100),
    )
