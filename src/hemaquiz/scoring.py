"""
Answer evaluation.

Multiple-choice and true/false answers are checked locally by exact match.
Free-text answers go to a remote scoring service first; when that call
fails for any reason the answer is scored by a local word-overlap
heuristic instead. Nothing in here raises on bad learner input.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

import httpx

from .models import QuestionType, QuizQuestion, QuizResult
from .results import round_half_up

logger = logging.getLogger(__name__)

PASS_SCORE = 80
DEFAULT_REMOTE_FEEDBACK = "Unable to generate feedback"
FEEDBACK_EXCELLENT = "Excellent! Your answer matches the expected response."
FEEDBACK_GOOD_ATTEMPT = "Good attempt! Review the answer for complete understanding."
FEEDBACK_NEEDS_IMPROVEMENT = "Your answer needs improvement. Study the correct answer."


@dataclass
class TextScore:
    score: int
    feedback: str


class RemoteScorer:
    """HTTP client for the free-text scoring service.

    Makes exactly one attempt per answer. ``score`` returns None on any
    failure so the caller can fall back to local scoring.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds)
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def score(self, user_answer: str, correct_answer: str) -> Optional[TextScore]:
        try:
            response = await self.client.post(
                self.url,
                json={"userAnswer": user_answer, "correctAnswer": correct_answer},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Scoring request failed: {e!r}")
            return None

        if not response.is_success:
            logger.warning(f"Scoring service returned {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("Scoring service returned a non-JSON body")
            return None
        if not isinstance(data, dict):
            logger.warning("Scoring service returned an unexpected body")
            return None

        raw_score = data.get("score") or 0
        score = None
        if not isinstance(raw_score, bool) and isinstance(raw_score, (int, float)):
            try:
                score = float(raw_score)
            except OverflowError:
                pass
        if score is None or not math.isfinite(score):
            logger.warning(f"Scoring service returned an unusable score: {raw_score!r:.40}")
            return None

        feedback = data.get("feedback")
        if not isinstance(feedback, str) or not feedback:
            feedback = DEFAULT_REMOTE_FEEDBACK
        return TextScore(score=min(100, max(0, round_half_up(score))), feedback=feedback)


def fallback_score(user_answer: str, correct_answer: str) -> TextScore:
    """Scores a free-text answer by the share of canonical words it contains.

    Each user word found anywhere in the canonical answer counts once per
    occurrence in the user answer; the total is divided by the canonical
    word count and capped at 100.
    """
    user_words = user_answer.lower().split()
    correct_words = correct_answer.lower().split()
    if not correct_words:
        score = 0
    else:
        correct_set = set(correct_words)
        match_count = sum(1 for word in user_words if word in correct_set)
        score = round_half_up(min(100.0, match_count / len(correct_words) * 100))

    if score >= PASS_SCORE:
        feedback = FEEDBACK_EXCELLENT
    elif score >= 50:
        feedback = FEEDBACK_GOOD_ATTEMPT
    else:
        feedback = FEEDBACK_NEEDS_IMPROVEMENT
    return TextScore(score=score, feedback=feedback)


def structured_feedback(is_correct: bool, explanation: Optional[str]) -> str:
    explanation = (explanation or "").strip()
    if explanation:
        return f"{'Correct.' if is_correct else 'Not quite.'} {explanation}"
    return "Correct answer." if is_correct else "Incorrect answer."


def parse_option_index(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


# --- Strategy Pattern: Answer Checkers ---
class AnswerChecker(ABC):
    """Abstract Base Class for per-question-type answer checking."""

    @abstractmethod
    async def check(self, question: QuizQuestion, raw: Optional[str]) -> QuizResult:
        pass


class MultipleChoiceChecker(AnswerChecker):
    async def check(self, question: QuizQuestion, raw: Optional[str]) -> QuizResult:
        selected = parse_option_index(raw)
        options = question.options or []
        if selected is not None and 0 <= selected < len(options):
            user_answer = options[selected]
        else:
            user_answer = ""
        is_correct = (
            selected is not None
            and question.correct_option_index is not None
            and selected == question.correct_option_index
        )
        return QuizResult(
            question_id=question.id,
            user_answer=user_answer,
            correct=is_correct,
            score=100 if is_correct else 0,
            feedback=structured_feedback(is_correct, question.explanation),
        )


class TrueFalseChecker(AnswerChecker):
    async def check(self, question: QuizQuestion, raw: Optional[str]) -> QuizResult:
        normalized = (raw or "").strip().lower()
        if normalized in ("true", "false"):
            selected: Optional[bool] = normalized == "true"
        else:
            selected = None
        is_correct = (
            selected is not None
            and question.correct_boolean is not None
            and selected == question.correct_boolean
        )
        return QuizResult(
            question_id=question.id,
            user_answer="" if selected is None else str(selected),
            correct=is_correct,
            score=100 if is_correct else 0,
            feedback=structured_feedback(is_correct, question.explanation),
        )


class TextChecker(AnswerChecker):
    def __init__(self, scorer: Optional[RemoteScorer] = None):
        self.scorer = scorer

    async def check(self, question: QuizQuestion, raw: Optional[str]) -> QuizResult:
        user_answer = raw or ""
        result = None
        if self.scorer is not None:
            try:
                result = await self.scorer.score(user_answer, question.answer_text)
            except Exception:
                logger.exception(f"Remote scoring of {question.id} failed unexpectedly")
        if result is None:
            result = fallback_score(user_answer, question.answer_text)
        return QuizResult(
            question_id=question.id,
            user_answer=user_answer,
            correct=result.score >= PASS_SCORE,
            score=result.score,
            feedback=result.feedback,
        )


class AnswerEvaluator:
    """Scores a whole session, one question at a time, in session order."""

    def __init__(self, scorer: Optional[RemoteScorer] = None):
        self.scorer = scorer
        self.checkers: Dict[QuestionType, AnswerChecker] = {
            QuestionType.TEXT: TextChecker(scorer),
            QuestionType.MULTIPLE_CHOICE: MultipleChoiceChecker(),
            QuestionType.TRUE_FALSE: TrueFalseChecker(),
        }

    async def evaluate(self, question: QuizQuestion, raw: Optional[str]) -> QuizResult:
        return await self.checkers[question.type].check(question, raw)

    async def evaluate_session(
        self, questions: Sequence[QuizQuestion], answers: Mapping[str, str]
    ) -> List[QuizResult]:
        results = []
        for question in questions:
            results.append(await self.evaluate(question, answers.get(question.id)))
        return results

    async def close(self) -> None:
        if self.scorer is not None:
            await self.scorer.close()
