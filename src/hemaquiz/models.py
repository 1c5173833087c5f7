from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class QuestionType(str, Enum):
    TEXT = "text"
    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"


class SessionStatus(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "in_progress"
    EVALUATING = "evaluating"
    COMPLETE = "complete"


QUESTION_TYPE_FILTERS = ["all"] + [t.value for t in QuestionType]

QUESTION_TYPE_LABELS = {
    QuestionType.TEXT: "Free Response",
    QuestionType.MULTIPLE_CHOICE: "Multiple Choice",
    QuestionType.TRUE_FALSE: "True / False",
}


# --- Question bank source shapes ---
class Chapter(BaseModel):
    id: str
    name: str
    order: int = 0


class Subject(BaseModel):
    id: str
    name: str
    description: str = ""
    chapters: List[Chapter] = []


class TextItem(BaseModel):
    id: str
    chapter: str
    question: str
    answer: str
    category: Optional[str] = None
    difficulty: Optional[str] = None


class MultipleChoiceItem(BaseModel):
    id: str
    chapter: str
    question: str
    options: List[str]
    correct_answer: int
    explanation: Optional[str] = None

    @field_validator("options", mode="before")
    @classmethod
    def split_options(cls, value):
        # CSV rows carry options as a single "a|b|c" cell
        if isinstance(value, str):
            return [option.strip() for option in value.split("|")]
        return value


class TrueFalseItem(BaseModel):
    id: str
    chapter: str
    question: str
    correct_answer: bool
    explanation: Optional[str] = None


class QuestionGroups(BaseModel):
    text: List[TextItem] = []
    multiple_choice: List[MultipleChoiceItem] = []
    true_false: List[TrueFalseItem] = []


# --- Session models ---
class QuizQuestion(BaseModel):
    id: str
    chapter: str
    question: str
    type: QuestionType
    category: Optional[str] = None
    difficulty: Optional[str] = None
    answer_text: str
    options: Optional[List[str]] = None
    correct_option_index: Optional[int] = None
    correct_boolean: Optional[bool] = None
    explanation: Optional[str] = None


class QuizResult(BaseModel):
    model_config = {"frozen": True}

    question_id: str
    user_answer: str
    correct: bool
    score: int
    feedback: str


class QuizSummary(BaseModel):
    correct_count: int
    total_results: int
    average_score: int
    accuracy_rate: int


class SessionData(BaseModel):
    """One sampled quiz attempt and its answer/reveal/advance state.

    The transition methods never raise; a call that is not allowed in the
    current state returns False and leaves the state untouched.
    """

    session_id: str
    generation: int = 1
    subject_id: str
    chapter: Optional[str] = None
    question_type: str = "all"
    questions: List[QuizQuestion]
    current_index: int = 0
    revealed: bool = False
    status: SessionStatus = SessionStatus.IN_PROGRESS
    answers: Dict[str, str] = {}
    results: List[QuizResult] = []
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if self.status == SessionStatus.EMPTY:
            return None
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.total_questions - 1

    def capture_answer(self, question_id: str, value: str) -> bool:
        current = self.current_question
        if (
            self.status != SessionStatus.IN_PROGRESS
            or self.revealed
            or current is None
            or current.id != question_id
        ):
            return False
        self.answers[question_id] = value
        return True

    def reveal(self) -> bool:
        if self.status != SessionStatus.IN_PROGRESS:
            return False
        self.revealed = True
        return True

    def can_advance(self) -> bool:
        if self.status != SessionStatus.IN_PROGRESS:
            return False
        return self.revealed or bool(self.answers.get(self.current_question.id))

    def advance(self) -> bool:
        """Moves to the next question, or to EVALUATING past the last one."""
        if not self.can_advance():
            return False
        if self.is_last_question:
            self.status = SessionStatus.EVALUATING
        else:
            self.current_index += 1
            self.revealed = False
        return True

    def complete(self, results: List[QuizResult]) -> None:
        self.results = list(results)
        self.status = SessionStatus.COMPLETE
