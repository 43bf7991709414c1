# Batch import: validates candidates one by one and commits the valid subset in one transaction
# quizforge/services/batch_import.py
from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from quizforge import store
from quizforge.models.question import BatchImportResult, Question
from quizforge.services.validator import CandidateLike, find_violations, validate
from quizforge.utils.errors import StorageError
from quizforge.utils.logger import get_logger

logger = get_logger("import")


def _rejection_message(position: int, violations) -> str:
    return f"Question {position}: " + "; ".join(str(v) for v in violations)


async def import_questions(
    session: AsyncSession,
    candidates: Iterable[CandidateLike],
) -> BatchImportResult:
    """
    Imports a batch of candidates.

    Every candidate is validated independently; rejected ones are reported in
    `errors` by their 1-based position and never abort the batch. The accepted
    ones are written in a single transaction: either all of them are committed
    or, on a storage failure, none are and the result reports success=False.
    Never raises for validation or storage failures.
    """
    valid: List[Question] = []
    errors: List[str] = []

    for position, candidate in enumerate(candidates, start=1):
        violations = find_violations(candidate)
        if violations:
            message = _rejection_message(position, violations)
            logger.info(f"Rejected {message}")
            errors.append(message)
            continue
        valid.append(validate(candidate))

    if not valid:
        logger.info(f"Batch import finished: nothing to store, {len(errors)} rejected.")
        return BatchImportResult(success=True, imported_count=0, errors=errors)

    try:
        question_ids = await store.insert_questions(session, valid)
    except StorageError as e:
        logger.error(f"Batch import failed, {len(valid)} validated questions discarded: {e}")
        return BatchImportResult(success=False, imported_count=0, errors=[str(e)])

    logger.info(f"Batch import finished: {len(question_ids)} imported, {len(errors)} rejected.")
    return BatchImportResult(
        success=True,
        imported_count=len(question_ids),
        errors=errors,
        question_ids=question_ids,
    )
