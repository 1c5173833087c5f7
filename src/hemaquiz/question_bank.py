import logging
import os
from typing import Any, Dict, List, Optional, Type

import pandas as pd
from pydantic import BaseModel, ValidationError

from .models import (
    Chapter,
    MultipleChoiceItem,
    QuestionGroups,
    Subject,
    TextItem,
    TrueFalseItem,
)

logger = logging.getLogger(__name__)

QUESTION_FILES = {
    "text": ("text.csv", TextItem),
    "multiple_choice": ("multiple_choice.csv", MultipleChoiceItem),
    "true_false": ("true_false.csv", TrueFalseItem),
}

SAMPLE_CHAPTERS = [
    Chapter(id="ch1", name="Introduction to Hematology I", order=1),
    Chapter(id="ch2", name="Microcytic Hypochromic Anemia", order=2),
]

SAMPLE_QUESTIONS = QuestionGroups(
    text=[
        TextItem(
            id="hem-text-1",
            chapter="Microcytic Hypochromic Anemia",
            question="What is the most common cause of microcytic anemia?",
            answer="iron deficiency causes microcytic anemia",
            category="Pathophysiology",
            difficulty="easy",
        ),
    ],
    multiple_choice=[
        MultipleChoiceItem(
            id="hem-mc-1",
            chapter="Introduction to Hematology I",
            question="Which cell carries oxygen in the blood?",
            options=["Neutrophil", "Erythrocyte", "Platelet", "Lymphocyte"],
            correct_answer=1,
            explanation="Erythrocytes carry oxygen bound to hemoglobin.",
        ),
    ],
    true_false=[
        TrueFalseItem(
            id="hem-tf-1",
            chapter="Introduction to Hematology I",
            question="Mature red blood cells have a nucleus.",
            correct_answer=False,
            explanation="Mature erythrocytes are anucleate.",
        ),
    ],
)


def read_records(file_path: str) -> List[Dict[str, Any]]:
    """Reads a CSV into row dicts with blank cells as None."""
    df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict("records")


# --- Service Layer: Question Bank ---
class QuestionBank:
    """Loads subjects and their question pools from a directory of CSV files."""

    def __init__(self, directory: str):
        self.directory = directory
        self.subjects: Dict[str, Subject] = {}
        self.questions: Dict[str, QuestionGroups] = {}
        self.load_all()

    def load_all(self):
        self.subjects = {}
        self.questions = {}
        if not os.path.isdir(self.directory):
            logger.warning(f"Question bank directory {self.directory} not found.")
        else:
            for entry in sorted(os.listdir(self.directory)):
                subject_dir = os.path.join(self.directory, entry)
                if os.path.isdir(subject_dir):
                    self._load_subject(entry, subject_dir)

        if not self.subjects:
            logger.warning("No subjects loaded. Using built-in sample subject.")
            self.add_subject(
                Subject(id="hematology", name="Hematology", chapters=SAMPLE_CHAPTERS),
                SAMPLE_QUESTIONS,
            )

    def add_subject(self, subject: Subject, groups: QuestionGroups):
        self.subjects[subject.id] = subject
        self.questions[subject.id] = groups

    def _load_subject(self, subject_id: str, subject_dir: str):
        chapters = self._load_items(os.path.join(subject_dir, "chapters.csv"), Chapter)
        loaded = {}
        for key, (file_name, model) in QUESTION_FILES.items():
            loaded[key] = self._load_items(os.path.join(subject_dir, file_name), model)

        groups = QuestionGroups(**loaded)
        count = len(groups.text) + len(groups.multiple_choice) + len(groups.true_false)
        if not chapters and not count:
            logger.error(f"Skipping {subject_id}: no chapters or questions.")
            return

        name = subject_id.replace("_", " ").title()
        self.add_subject(Subject(id=subject_id, name=name, chapters=chapters), groups)
        logger.info(f"Loaded {count} questions for {subject_id}")

    def _load_rows(self, file_path: str) -> List[Dict[str, Any]]:
        if not os.path.exists(file_path):
            return []
        try:
            return read_records(file_path)
        except Exception as e:
            logger.error(f"Failed to load {file_path}: {e}")
            return []

    def _load_items(self, file_path: str, model: Type[BaseModel]) -> List[BaseModel]:
        items = []
        for row in self._load_rows(file_path):
            try:
                items.append(
                    model(**{k: v for k, v in row.items() if v is not None})
                )
            except ValidationError as e:
                logger.error(
                    f"Skipping row {row.get('id')!r} in {file_path}: "
                    f"{e.error_count()} validation error(s)"
                )
        return items

    def get_subject(self, subject_id: str) -> Optional[Subject]:
        return self.subjects.get(subject_id)

    def get_subjects(self) -> List[Dict[str, Any]]:
        subjects = []
        for subject in self.subjects.values():
            groups = self.questions[subject.id]
            count = len(groups.text) + len(groups.multiple_choice) + len(groups.true_false)
            subjects.append({"id": subject.id, "name": subject.name, "count": count})
        subjects.sort(key=lambda x: x["name"])
        return subjects

    def get_chapters(self, subject_id: str) -> List[Chapter]:
        subject = self.subjects.get(subject_id)
        if not subject:
            return []
        return sorted(subject.chapters, key=lambda c: c.order)

    def get_question_groups(self, subject_id: str) -> QuestionGroups:
        return self.questions.get(subject_id, QuestionGroups())

    def resolve_chapter(self, subject_id: str, value: Optional[str]) -> Optional[str]:
        """Maps a chapter id or name to the chapter name used by questions.

        "all" or an empty value means no filter. Unknown values are kept as
        given so that the filter matches nothing.
        """
        if not value or value == "all":
            return None
        for chapter in self.get_chapters(subject_id):
            if value in (chapter.id, chapter.name):
                return chapter.name
        return value
