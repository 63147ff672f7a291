import pytest

from app.application.admin.bulk_upload_usecase import process_bulk_upload
from app.application.exceptions import ValidationError
from app.infrastructure.db.models import MCQModel
from app.presentation.schemas.bulk_mcq_schema import MCQBulkUploadMeta

CSV = b"""text,option1,option2,option3,option4,correct_answer,difficulty
What is 2 + 2?,3,4,5,6,2,easy
Capital of France?,London,Paris,Berlin,,Paris,
Broken row,a,b,c,d,7,hard
Bad level,a,b,,,1,extreme
"""


def test_csv_rows_become_questions(db, make_subject, notifier):
    subject = make_subject()

    result = process_bulk_upload(
        db, CSV, "questions.csv", MCQBulkUploadMeta(subject_id=subject.id, difficulty="medium"), 2, notifier=notifier
    )

    assert result["total_rows"] == 4
    assert result["inserted"] == 2
    assert result["failed"] == 2
    assert result["errors"][0].startswith("Row 4:")

    questions = {q.text: q for q in db.query(MCQModel).all()}
    arithmetic = questions["What is 2 + 2?"]
    assert arithmetic.difficulty == "easy"
    assert [o.text for o in arithmetic.options if o.is_correct] == ["4"]

    capital = questions["Capital of France?"]
    assert capital.difficulty == "medium"
    assert len(capital.options) == 3
    assert [o.text for o in capital.options if o.is_correct] == ["Paris"]


def test_missing_columns_are_rejected(db, make_subject):
    subject = make_subject()

    with pytest.raises(ValidationError):
        process_bulk_upload(db, b"text,option1\nq,a\n", "q.csv", MCQBulkUploadMeta(subject_id=subject.id), 2)


def test_unsupported_format(db, make_subject):
    subject = make_subject()

    with pytest.raises(ValidationError):
        process_bulk_upload(db, b"{}", "q.json", MCQBulkUploadMeta(subject_id=subject.id), 2)


def test_numeric_answer_matching_an_option_text_wins_over_position(db, make_subject):
    subject = make_subject()
    csv = b"""text,option1,option2,option3,option4,correct_answer
Which is 2 + 2?,3,4,5,6,4
Pick the last letter,a,b,c,d,4
"""

    result = process_bulk_upload(db, csv, "q.csv", MCQBulkUploadMeta(subject_id=subject.id), 2)

    assert result["inserted"] == 2
    questions = {q.text: q for q in db.query(MCQModel).all()}
    assert [o.text for o in questions["Which is 2 + 2?"].options if o.is_correct] == ["4"]
    assert [o.text for o in questions["Pick the last letter"].options if o.is_correct] == ["d"]
