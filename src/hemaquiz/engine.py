import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from .models import QuizSummary, SessionData, SessionStatus
from .question_bank import QuestionBank
from .quiz import QuizGenerator
from .results import summarize
from .scoring import AnswerEvaluator
from .store import SessionStore

logger = logging.getLogger(__name__)


class QuizEngine:
    """Drives quiz sessions kept in a SessionStore.

    Every sample gets a generation number that grows across restarts and
    resets of the same session id. An evaluation pass that finishes after
    its session was replaced is discarded.
    """

    def __init__(
        self,
        bank: QuestionBank,
        generator: QuizGenerator,
        store: SessionStore,
        evaluator: AnswerEvaluator,
        timeout_minutes: Optional[int] = None,
    ):
        self.bank = bank
        self.generator = generator
        self.store = store
        self.evaluator = evaluator
        self.timeout_minutes = timeout_minutes

    def start(
        self,
        subject_id: str,
        chapter: Optional[str] = None,
        question_type: str = "all",
        session_id: Optional[str] = None,
    ) -> SessionData:
        generation = 1
        if session_id:
            previous = self.store.get(session_id)
            if previous:
                generation = previous.generation + 1
        else:
            session_id = str(uuid.uuid4())

        chapter_name = self.bank.resolve_chapter(subject_id, chapter)
        questions = self.generator.generate(subject_id, chapter_name, question_type)
        session = SessionData(
            session_id=session_id,
            generation=generation,
            subject_id=subject_id,
            chapter=chapter_name,
            question_type=question_type,
            questions=questions,
            status=SessionStatus.IN_PROGRESS if questions else SessionStatus.EMPTY,
        )
        self.store.save(session)

        if questions:
            logger.info(
                f"New session: {session_id} gen {generation} "
                f"[Subject: {subject_id}, Chapter: {chapter_name or 'all'}, "
                f"Type: {question_type}, Questions: {len(questions)}]"
            )
        else:
            logger.warning(
                f"No questions available for session {session_id} "
                f"[Subject: {subject_id}, Chapter: {chapter_name or 'all'}, "
                f"Type: {question_type}]"
            )
        return session

    def get(self, session_id: Optional[str]) -> Optional[SessionData]:
        if not session_id:
            return None
        session = self.store.get(session_id)
        if not session:
            return None
        if self.timeout_minutes and datetime.now() - session.created_at > timedelta(
            minutes=self.timeout_minutes
        ):
            self.store.delete(session_id)
            return None
        return session

    def reset(self, session_id: str) -> Optional[SessionData]:
        session = self.get(session_id)
        if not session:
            return None
        logger.info(f"Reset session: {session_id}")
        return self.start(
            session.subject_id,
            session.chapter,
            session.question_type,
            session_id=session_id,
        )

    def discard(self, session_id: str) -> None:
        self.store.delete(session_id)

    def summary(self, session_id: str) -> Optional[QuizSummary]:
        session = self.get(session_id)
        if not session or session.status != SessionStatus.COMPLETE:
            return None
        return summarize(session.results)

    def capture_answer(
        self, session_id: str, question_id: str, value: str
    ) -> Optional[SessionData]:
        session = self.get(session_id)
        if session and session.capture_answer(question_id, value):
            self.store.save(session)
        return session

    def reveal(self, session_id: str) -> Optional[SessionData]:
        session = self.get(session_id)
        if session and session.reveal():
            self.store.save(session)
        return session

    async def advance(self, session_id: str) -> Optional[SessionData]:
        session = self.get(session_id)
        if not session or not session.advance():
            return session
        self.store.save(session)
        if session.status != SessionStatus.EVALUATING:
            return session

        generation = session.generation
        results = await self.evaluator.evaluate_session(
            session.questions, session.answers
        )

        live = self.get(session_id)
        if (
            live is None
            or live.generation != generation
            or live.status != SessionStatus.EVALUATING
        ):
            logger.info(
                f"Discarding stale evaluation for session {session_id} gen {generation}"
            )
            return live

        live.complete(results)
        self.store.save(live)
        summary = summarize(results)
        logger.info(
            f"Session {session_id} complete: {summary.correct_count}/"
            f"{summary.total_results} correct, average {summary.average_score}"
        )
        return live
