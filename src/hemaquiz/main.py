import logging
import os
import random
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Cookie, Depends, FastAPI, Form, Response
from fastapi.responses import JSONResponse

from .config import settings
from .engine import QuizEngine
from .keepalive import KeepAlive
from .models import (
    QUESTION_TYPE_FILTERS,
    QUESTION_TYPE_LABELS,
    SessionData,
    SessionStatus,
)
from .question_bank import QuestionBank
from .quiz import RandomQuizGenerator, SessionSampler
from .results import summarize
from .scoring import AnswerEvaluator, RemoteScorer
from .store import create_store

# --- Logging Setup ---
logger = logging.getLogger(__name__)
package_logger = logging.getLogger("hemaquiz")
package_logger.setLevel(logging.INFO)

if settings.LOG_TO_FILE:
    if not os.path.exists(settings.LOG_DIR):
        os.makedirs(settings.LOG_DIR)
    log_path = os.path.join(settings.LOG_DIR, settings.LOG_FILE)
    log_handler: logging.Handler = RotatingFileHandler(
        log_path, maxBytes=5_000_000, backupCount=3
    )
else:
    log_handler = logging.StreamHandler()
log_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
package_logger.addHandler(log_handler)


# --- Services ---
def build_engine() -> QuizEngine:
    bank = QuestionBank(settings.QUESTION_BANK_DIR)
    scorer = None
    if settings.SCORER_URL:
        scorer = RemoteScorer(settings.SCORER_URL, settings.SCORER_TIMEOUT_SECONDS)
    else:
        logger.warning("No scorer URL configured. Free-text answers use local scoring.")
    return QuizEngine(
        bank=bank,
        generator=RandomQuizGenerator(
            bank, SessionSampler(random.Random(), settings.TEST_SIZE)
        ),
        store=create_store(),
        evaluator=AnswerEvaluator(scorer),
        timeout_minutes=settings.SESSION_TIMEOUT_MINUTES,
    )


engine = build_engine()


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    engine.bank.load_all()
    keep_alive = None
    if settings.KEEP_ALIVE_URL:
        keep_alive = KeepAlive(
            settings.KEEP_ALIVE_URL, settings.KEEP_ALIVE_INTERVAL_SECONDS
        )
        keep_alive.start()
    yield
    if keep_alive is not None:
        await keep_alive.stop()
    await engine.evaluator.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)


# --- Dependencies ---
def get_engine() -> QuizEngine:
    return engine


def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME),
) -> Optional[str]:
    return session_id


def get_active_session(
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
) -> Optional[SessionData]:
    return quiz_engine.get(session_id)


# --- Views ---
def session_state_view(session: SessionData) -> Dict[str, Any]:
    return {
        "status": session.status.value,
        "generation": session.generation,
        "subject": session.subject_id,
        "chapter": session.chapter,
        "question_type": session.question_type,
        "current_index": session.current_index,
        "total_questions": session.total_questions,
        "revealed": session.revealed,
        "can_advance": session.can_advance(),
        "is_last_question": session.is_last_question,
    }


def question_view(session: SessionData) -> Dict[str, Any]:
    question = session.current_question
    view = {
        **session_state_view(session),
        "question": {
            "id": question.id,
            "type": question.type.value,
            "type_label": QUESTION_TYPE_LABELS[question.type],
            "chapter": question.chapter,
            "category": question.category,
            "difficulty": question.difficulty,
            "question": question.question,
            "options": question.options,
        },
        "answer": session.answers.get(question.id),
    }
    if session.revealed:
        view["question"]["answer_text"] = question.answer_text
        view["question"]["explanation"] = question.explanation
    return view


def result_view(session: SessionData) -> Dict[str, Any]:
    summary = summarize(session.results)
    details = []
    for question, result in zip(session.questions, session.results):
        details.append(
            {
                "question_id": question.id,
                "question": question.question,
                "type": question.type.value,
                "user_answer": result.user_answer,
                "answer_text": question.answer_text,
                "explanation": question.explanation,
                "correct": result.correct,
                "score": result.score,
                "feedback": result.feedback,
            }
        )
    return {**summary.model_dump(), "results": details}


def session_response(session: Optional[SessionData]):
    if not session:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    if session.status == SessionStatus.EMPTY:
        return JSONResponse(
            {**session_state_view(session), "error": "No questions available"},
            status_code=404,
        )
    if session.status == SessionStatus.COMPLETE:
        return {**session_state_view(session), "result": result_view(session)}
    return question_view(session)


# --- Routes ---
@app.get("/api/subjects")
def get_subjects(quiz_engine: QuizEngine = Depends(get_engine)):
    return quiz_engine.bank.get_subjects()


@app.get("/api/subjects/{subject_id}/chapters")
def get_chapters(subject_id: str, quiz_engine: QuizEngine = Depends(get_engine)):
    if not quiz_engine.bank.get_subject(subject_id):
        return JSONResponse({"error": "Unknown subject"}, status_code=404)
    return [c.model_dump() for c in quiz_engine.bank.get_chapters(subject_id)]


@app.post("/api/start")
def start_quiz_session(
    response: Response,
    subject: str = Form(settings.DEFAULT_SUBJECT),
    chapter: Optional[str] = Form(None),
    question_type: str = Form("all"),
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
):
    if question_type not in QUESTION_TYPE_FILTERS:
        return JSONResponse({"error": "Invalid question type"}, status_code=400)

    session = quiz_engine.start(subject, chapter, question_type, session_id=session_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.session_id,
        httponly=True,
        samesite="Lax",
    )
    if session.status == SessionStatus.EMPTY:
        response.status_code = 404
        return {**session_state_view(session), "error": "No questions available"}
    return question_view(session)


@app.get("/api/quiz")
def get_question_data(session_data: SessionData = Depends(get_active_session)):
    return session_response(session_data)


@app.post("/api/answer")
def submit_answer(
    question_id: str = Form(...),
    value: str = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
):
    return session_response(quiz_engine.capture_answer(session_id, question_id, value))


@app.post("/api/reveal")
def reveal_answer(
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
):
    return session_response(quiz_engine.reveal(session_id))


@app.post("/api/next")
async def next_question(
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
):
    return session_response(await quiz_engine.advance(session_id))


@app.get("/api/result")
def get_result_data(session_data: SessionData = Depends(get_active_session)):
    if not session_data:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    if session_data.status != SessionStatus.COMPLETE:
        return JSONResponse({"error": "Quiz not complete"}, status_code=409)
    return result_view(session_data)


@app.post("/api/reset")
def reset_session(
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
):
    return session_response(quiz_engine.reset(session_id))


@app.delete("/api/session")
def end_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    quiz_engine: QuizEngine = Depends(get_engine),
):
    if session_id:
        quiz_engine.discard(session_id)
        logger.info(f"Ended session: {session_id}")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


if __name__ == "__main__":
    uvicorn.run("hemaquiz.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
