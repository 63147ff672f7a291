"""
Question selection for an exam.

Each subject rule of an exam is resolved on its own: the catalog is
filtered by subject and difficulty ("mixed" admits every difficulty) and,
when more questions match than the rule asks for, a uniformly random
subset of the requested size is drawn without replacement. Results are
concatenated in rule order.

Selection is deliberately not reproducible: resolving the same exam twice
may yield different questions. A short catalog is not an error; the
missing count is reported on the returned QuestionSet.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Sequence

import numpy as np

logger = logging.getLogger(__name__)

MIXED = "mixed"


class QuestionCatalog(Protocol):
    def find_questions(self, subject_id: int, difficulty: str) -> Sequence:
        ...


@dataclass
class SubjectSelection:
    subject_id: int
    difficulty: str
    requested: int
    selected: int

    @property
    def shortfall(self) -> int:
        return max(self.requested - self.selected, 0)


@dataclass
class QuestionSet:
    questions: List = field(default_factory=list)
    selections: List[SubjectSelection] = field(default_factory=list)

    @property
    def requested(self) -> int:
        return sum(s.requested for s in self.selections)

    @property
    def shortfall(self) -> int:
        return sum(s.shortfall for s in self.selections)

    @property
    def question_ids(self) -> List[int]:
        return [q.id for q in self.questions]

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self):
        return iter(self.questions)


class InMemoryQuestionCatalog:
    """Catalog over an already loaded list of questions."""

    def __init__(self, questions: Iterable):
        self._questions = list(questions)

    def find_questions(self, subject_id: int, difficulty: str) -> List:
        return [q for q in self._questions if matches_rule(q, subject_id, difficulty)]

    def get_questions(self, question_ids: List[int]) -> List:
        by_id = {q.id: q for q in self._questions}
        return [by_id[i] for i in dict.fromkeys(question_ids) if i in by_id]


def matches_rule(question, subject_id: int, difficulty: str) -> bool:
    if question.subject_id != subject_id:
        return False
    return difficulty == MIXED or question.difficulty == difficulty


def resolve_exam_questions(
    exam_subjects: Iterable,
    catalog: QuestionCatalog,
    rng: Optional[np.random.Generator] = None,
) -> QuestionSet:
    """
    Build the question set for an exam from its subject rules.

    ``exam_subjects`` are objects exposing ``subject_id``, ``question_count``
    and ``difficulty`` (ORM rows or pydantic models alike).
    """
    rng = rng if rng is not None else np.random.default_rng()
    result = QuestionSet()

    for rule in exam_subjects:
        # Re-filter so a catalog that over-returns cannot leak other subjects
        pool = [
            q
            for q in catalog.find_questions(rule.subject_id, rule.difficulty)
            if matches_rule(q, rule.subject_id, rule.difficulty)
        ]

        if len(pool) > rule.question_count:
            picked = rng.choice(len(pool), size=rule.question_count, replace=False)
            chosen = [pool[i] for i in picked]
        else:
            chosen = pool

        selection = SubjectSelection(
            subject_id=rule.subject_id,
            difficulty=rule.difficulty,
            requested=rule.question_count,
            selected=len(chosen),
        )
        if selection.shortfall:
            logger.warning(
                f"Subject {rule.subject_id} ({rule.difficulty}) has only {len(pool)} "
                f"matching questions, {rule.question_count} requested"
            )

        result.questions.extend(chosen)
        result.selections.append(selection)

    logger.debug(f"Resolved {len(result)} questions ({result.shortfall} short)")
    return result
