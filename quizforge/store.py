# Storage boundary: the only module that reads or writes question and attempt rows
# quizforge/store.py
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from quizforge.models.attempt import QuestionAttempt
from quizforge.models.enums import QuestionType
from quizforge.models.orm import (
    Base,
    QuestionRecord,
    QuestionOptionRecord,
    AnalysisStepRecord,
    QuestionTagRecord,
    MediaRefRecord,
    AttemptRecord,
)
from quizforge.models.question import Question, QuestionOption
from quizforge.utils.errors import StorageError
from quizforge.utils.logger import get_logger

logger = get_logger("store")


async def init_db(engine: AsyncEngine) -> None:
    """Creates all tables if they don't exist. Safe to call repeatedly."""
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except SQLAlchemyError as e:
        logger.exception(f"Failed to initialize the question store: {e}")
        raise StorageError(f"Failed to initialize the question store: {e}") from e
    logger.info(f"Question store initialized ({engine.url.render_as_string(hide_password=True)}).")


# --- Row <-> model conversion ---

def _to_record(question: Question) -> QuestionRecord:
    record = QuestionRecord(
        question_type=question.question_type.value,
        stem=question.stem,
        reference_answer=question.reference_answer,
        difficulty=question.difficulty,
    )
    record.options = [
        QuestionOptionRecord(position=i, label=opt.label, content=opt.content)
        for i, opt in enumerate(question.options or [])
    ]
    record.analysis_steps = [
        AnalysisStepRecord(position=i, content=step)
        for i, step in enumerate(question.detailed_analysis)
    ]
    record.tags = [QuestionTagRecord(position=i, tag=tag) for i, tag in enumerate(question.knowledge_tags)]
    record.media_refs = [MediaRefRecord(position=i, ref=ref) for i, ref in enumerate(question.media_refs)]
    return record


def _to_question(record: QuestionRecord) -> Question:
    question_type = QuestionType(record.question_type)
    options = None
    if question_type is QuestionType.MULTIPLE_CHOICE:
        options = [QuestionOption(label=o.label, content=o.content) for o in record.options]
    return Question(
        id=record.id,
        question_type=question_type,
        stem=record.stem,
        options=options,
        reference_answer=record.reference_answer,
        detailed_analysis=[step.content for step in record.analysis_steps],
        media_refs=[m.ref for m in record.media_refs],
        knowledge_tags=[t.tag for t in record.tags],
        difficulty=record.difficulty,
        created_at=record.created_at,
    )


def _to_attempt(record: AttemptRecord) -> QuestionAttempt:
    return QuestionAttempt(
        id=record.id,
        question_id=record.question_id,
        user_answer=record.user_answer,
        is_correct=record.is_correct,
        confidence_score=record.confidence_score,
        time_spent_seconds=record.time_spent_seconds,
        created_at=record.created_at,
    )


# --- Writes ---

async def insert_questions(session: AsyncSession, questions: List[Question]) -> List[int]:
    """
    Inserts validated questions in a single transaction and returns their new ids
    in input order. On any database error the transaction is rolled back and
    StorageError is raised; nothing from the batch is kept.
    """
    records = [_to_record(q) for q in questions]
    try:
        session.add_all(records)
        await session.flush()
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Rolled back import of {len(records)} questions: {e}")
        raise StorageError(f"Storage transaction failed, no questions were imported: {e}") from e
    return [record.id for record in records]


async def insert_attempt(session: AsyncSession, attempt: QuestionAttempt) -> QuestionAttempt:
    """Persists one attempt and returns it with the store-assigned id and created_at."""
    record = AttemptRecord(
        question_id=attempt.question_id,
        user_answer=attempt.user_answer,
        is_correct=attempt.is_correct,
        confidence_score=attempt.confidence_score,
        time_spent_seconds=attempt.time_spent_seconds,
    )
    try:
        session.add(record)
        await session.flush()
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to save attempt for question {attempt.question_id}: {e}")
        raise StorageError(f"Failed to save attempt: {e}") from e
    return _to_attempt(record)


# --- Reads ---

async def get_question(session: AsyncSession, question_id: int) -> Optional[Question]:
    result = await session.execute(select(QuestionRecord).where(QuestionRecord.id == question_id))
    record = result.scalars().first()
    return _to_question(record) if record else None


async def query_questions(
    session: AsyncSession,
    tag: Optional[str] = None,
    question_type: Optional[QuestionType] = None,
    difficulty: Optional[int] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Question]:
    """
    Returns persisted questions, newest first, optionally filtered. `search` is a
    substring match on the stem (case-insensitive for ASCII under SQLite LIKE).
    """
    stmt = select(QuestionRecord)
    if search:
        stmt = stmt.where(QuestionRecord.stem.contains(search, autoescape=True))
    if tag is not None:
        stmt = stmt.where(QuestionRecord.tags.any(QuestionTagRecord.tag == tag))
    if question_type is not None:
        stmt = stmt.where(QuestionRecord.question_type == question_type.value)
    if difficulty is not None:
        stmt = stmt.where(QuestionRecord.difficulty == difficulty)
    stmt = stmt.order_by(QuestionRecord.created_at.desc(), QuestionRecord.id.desc())
    if limit is not None:
        stmt = stmt.limit(limit)

    result = await session.execute(stmt)
    return [_to_question(record) for record in result.scalars().all()]


async def query_attempts_by_question(session: AsyncSession, question_id: int) -> List[QuestionAttempt]:
    result = await session.execute(
        select(AttemptRecord)
        .where(AttemptRecord.question_id == question_id)
        .order_by(AttemptRecord.created_at, AttemptRecord.id)
    )
    return [_to_attempt(record) for record in result.scalars().all()]


async def query_mistake_counts(session: AsyncSession, tag: Optional[str] = None) -> List[Tuple[Question, int]]:
    """
    Joins questions with their incorrect attempts and counts them per question.
    Questions without a single incorrect attempt are not returned. `tag` is an
    exact, case-sensitive match against the question's knowledge tags.
    """
    mistake_count = func.count(AttemptRecord.id).label("mistake_count")
    stmt = (
        select(QuestionRecord, mistake_count)
        .join(AttemptRecord, AttemptRecord.question_id == QuestionRecord.id)
        .where(AttemptRecord.is_correct.is_(False))
        .group_by(QuestionRecord.id)
        .order_by(mistake_count.desc(), QuestionRecord.id)
    )
    if tag is not None:
        stmt = stmt.where(QuestionRecord.tags.any(QuestionTagRecord.tag == tag))

    result = await session.execute(stmt)
    return [(_to_question(record), count) for record, count in result.all()]
