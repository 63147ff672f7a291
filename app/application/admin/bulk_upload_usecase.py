import pandas as pd
from app.infrastructure.repositories.mcq_repo_impl import create_mcq
from app.application.exceptions import ValidationError
from app.application.notifications import Notifier, default_notifier, FAILED
from app.presentation.schemas.mcq_schema import MCQCreate, OptionCreate
from app.presentation.schemas.bulk_mcq_schema import MCQBulkUploadMeta
from sqlalchemy.orm import Session
import logging
import io

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["text", "option1", "option2", "correct_answer"]
OPTION_COLUMNS = ["option1", "option2", "option3", "option4", "option5", "option6"]
DIFFICULTIES = ("easy", "medium", "hard")


def _read_frame(file_content: bytes, filename: str) -> pd.DataFrame:
    if filename.endswith('.csv'):
        return pd.read_csv(io.BytesIO(file_content))
    if filename.endswith(('.xlsx', '.xls')):
        return pd.read_excel(io.BytesIO(file_content))
    raise ValidationError("Unsupported file format. Please upload CSV or XLSX.")


def _row_options(row, columns) -> list:
    options = []
    for col in OPTION_COLUMNS:
        if col in columns and not pd.isna(row[col]) and str(row[col]).strip():
            options.append(OptionCreate(text=str(row[col]).strip(), is_correct=False))
    return options


def _mark_correct(options: list, correct_val: str) -> None:
    # correct_answer is the option text itself or, failing an exact text
    # match, a 1-based option number
    correct_idx = next((i for i, opt in enumerate(options) if opt.text == correct_val), -1)
    if correct_idx < 0:
        try:
            number = float(correct_val)
            if number.is_integer():
                correct_idx = int(number) - 1
        except ValueError:
            pass

    if correct_idx < 0 or correct_idx >= len(options):
        raise ValidationError(
            f"Correct answer '{correct_val}' not valid (must be 1-{len(options)} or match an option text)"
        )
    options[correct_idx].is_correct = True


def process_bulk_upload(
    db: Session,
    file_content: bytes,
    filename: str,
    meta: MCQBulkUploadMeta,
    user_id: int,
    notifier: Notifier = default_notifier,
):
    logger.info(f"Processing bulk upload: {filename} for subject {meta.subject_id}")
    df = _read_frame(file_content, filename)

    # Clean column names
    df.columns = [str(c).strip().lower() for c in df.columns]
    for col in REQUIRED_COLUMNS:
        if col not in df.columns:
            raise ValidationError(f"Missing required column: {col}")

    inserted = 0
    failed = 0
    errors = []

    for index, row in df.iterrows():
        try:
            options = _row_options(row, df.columns)
            _mark_correct(options, str(row['correct_answer']).strip())

            difficulty = meta.difficulty
            if 'difficulty' in df.columns and not pd.isna(row['difficulty']):
                difficulty = str(row['difficulty']).strip().lower()
                if difficulty not in DIFFICULTIES:
                    raise ValidationError(f"Unknown difficulty '{difficulty}'")

            mcq_data = MCQCreate(
                text=str(row['text']),
                difficulty=difficulty,
                subject_id=meta.subject_id,
                options=options,
            )
            create_mcq(db, mcq_data, user_id, notifier=notifier)
            inserted += 1
        except Exception as e:
            failed += 1
            errors.append(f"Row {index + 2}: {str(e)}")

    logger.info(f"Bulk upload finished. Inserted: {inserted}, Failed: {failed}")
    if failed:
        notifier.notify(FAILED, "question", f"{failed} rows of {filename} could not be imported.")
    return {
        "total_rows": len(df),
        "inserted": inserted,
        "failed": failed,
        "errors": errors,
    }
