from typing import List, Optional, Sequence, TypeVar

from .models import (
    MultipleChoiceItem,
    QuestionGroups,
    QuestionType,
    QuizQuestion,
    TextItem,
    TrueFalseItem,
)

T = TypeVar("T", TextItem, MultipleChoiceItem, TrueFalseItem)


def filter_by_chapter(items: Sequence[T], chapter: Optional[str]) -> List[T]:
    if not chapter:
        return list(items)
    return [item for item in items if item.chapter == chapter]


def option_text(options: Sequence[str], index: int) -> str:
    """Returns the option at index, or "" when the index is out of range."""
    if 0 <= index < len(options):
        return options[index]
    return ""


def normalize_text(item: TextItem) -> QuizQuestion:
    return QuizQuestion(
        id=item.id,
        chapter=item.chapter,
        question=item.question,
        type=QuestionType.TEXT,
        category=item.category,
        difficulty=item.difficulty,
        answer_text=item.answer,
    )


def normalize_multiple_choice(item: MultipleChoiceItem) -> QuizQuestion:
    return QuizQuestion(
        id=item.id,
        chapter=item.chapter,
        question=item.question,
        type=QuestionType.MULTIPLE_CHOICE,
        answer_text=option_text(item.options, item.correct_answer),
        options=item.options,
        correct_option_index=item.correct_answer,
        explanation=item.explanation,
    )


def normalize_true_false(item: TrueFalseItem) -> QuizQuestion:
    return QuizQuestion(
        id=item.id,
        chapter=item.chapter,
        question=item.question,
        type=QuestionType.TRUE_FALSE,
        answer_text="True" if item.correct_answer else "False",
        correct_boolean=item.correct_answer,
        explanation=item.explanation,
    )


def normalize_pool(
    groups: QuestionGroups,
    chapter: Optional[str] = None,
    question_type: str = "all",
) -> List[QuizQuestion]:
    """Unifies the three question shapes into one ordered pool.

    Text questions come first, then multiple-choice, then true/false; order
    within each group is kept. ``chapter`` is an exact, case-sensitive match
    on the chapter name.
    """
    pool: List[QuizQuestion] = []
    if question_type in ("all", QuestionType.TEXT.value):
        pool.extend(normalize_text(q) for q in filter_by_chapter(groups.text, chapter))
    if question_type in ("all", QuestionType.MULTIPLE_CHOICE.value):
        pool.extend(
            normalize_multiple_choice(q)
            for q in filter_by_chapter(groups.multiple_choice, chapter)
        )
    if question_type in ("all", QuestionType.TRUE_FALSE.value):
        pool.extend(
            normalize_true_false(q)
            for q in filter_by_chapter(groups.true_false, chapter)
        )
    return pool
