"""
Pytest configuration and shared fixtures.
"""
import random

import pytest

from hemaquiz.engine import QuizEngine
from hemaquiz.models import (
    Chapter,
    MultipleChoiceItem,
    QuestionGroups,
    Subject,
    TextItem,
    TrueFalseItem,
)
from hemaquiz.question_bank import QuestionBank
from hemaquiz.quiz import RandomQuizGenerator, SessionSampler
from hemaquiz.scoring import AnswerEvaluator
from hemaquiz.store import MemorySessionStore


@pytest.fixture
def sample_groups():
    """Raw question groups spread over two chapters."""
    return QuestionGroups(
        text=[
            TextItem(
                id="t1",
                chapter="Anemia",
                question="What is the most common cause of microcytic anemia?",
                answer="iron deficiency causes microcytic anemia",
                category="Pathophysiology",
                difficulty="easy",
            ),
            TextItem(
                id="t2",
                chapter="Basics",
                question="Which protein stores iron?",
                answer="ferritin",
            ),
        ],
        multiple_choice=[
            MultipleChoiceItem(
                id="m1",
                chapter="Basics",
                question="Which cell carries oxygen?",
                options=["Neutrophil", "Erythrocyte", "Platelet"],
                correct_answer=1,
                explanation="Erythrocytes carry hemoglobin.",
            ),
            MultipleChoiceItem(
                id="m2",
                chapter="Anemia",
                question="Which value is low in iron deficiency?",
                options=["Ferritin", "MCV"],
                correct_answer=0,
            ),
        ],
        true_false=[
            TrueFalseItem(
                id="f1",
                chapter="Basics",
                question="Mature red cells have a nucleus.",
                correct_answer=False,
                explanation="They are anucleate.",
            ),
        ],
    )


@pytest.fixture
def bank(tmp_path, sample_groups):
    """A question bank holding one test subject."""
    bank = QuestionBank(str(tmp_path / "missing"))
    bank.subjects = {}
    bank.questions = {}
    bank.add_subject(
        Subject(
            id="hematology",
            name="Hematology",
            chapters=[
                Chapter(id="ch1", name="Basics", order=1),
                Chapter(id="ch2", name="Anemia", order=2),
            ],
        ),
        sample_groups,
    )
    return bank


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def make_engine(bank, store):
    """Builds an engine over the test bank with a seeded sampler."""

    def _make(evaluator=None, seed=7, size=10):
        return QuizEngine(
            bank=bank,
            generator=RandomQuizGenerator(
                bank, SessionSampler(random.Random(seed), size)
            ),
            store=store,
            evaluator=evaluator or AnswerEvaluator(),
        )

    return _make
