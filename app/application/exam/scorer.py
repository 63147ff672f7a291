from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True)
class ScoreResult:
    score: float
    passed: bool
    correct_count: int
    total_questions: int


def _field(answer, name):
    if isinstance(answer, dict):
        return answer.get(name)
    return getattr(answer, name, None)


def score(answers: Iterable, questions: Sequence, passing_percentage: float) -> ScoreResult:
    """
    Grade submitted answers against the resolved question set.

    The denominator is the number of questions in the set, so unanswered
    questions count against the taker. Answers naming an unknown question
    or option are simply incorrect. A question with several correct
    options accepts any of them; one with none can never be answered
    correctly.
    """
    correct_options = {
        q.id: {o.id for o in q.options if o.is_correct} for q in questions
    }

    correct_count = 0
    graded = set()
    for answer in answers:
        question_id = _field(answer, "question_id")
        # Only the first answer per question counts
        if question_id in graded:
            continue
        graded.add(question_id)
        if _field(answer, "selected_option_id") in correct_options.get(question_id, ()):
            correct_count += 1

    total = len(correct_options)
    value = (correct_count / total) * 100 if total > 0 else 0.0
    return ScoreResult(
        score=value,
        passed=value >= passing_percentage,
        correct_count=correct_count,
        total_questions=total,
    )
