# Endpoints for importing, extracting, generating and browsing questions
# quizforge/endpoints/questions.py
from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, List, Optional

from quizforge import store
from quizforge.models.attempt import QuestionAttempt
from quizforge.models.enums import GenerationSource, QuestionType
from quizforge.models.question import BatchImportResult, Question, QuestionCandidate
from quizforge.services.batch_import import import_questions
from quizforge.services.generation_pipeline import GenerationConfig, QuestionGenerationPipeline
from quizforge.services.markdown_extractor import DocumentReport, extract, inspect_document
from quizforge.services.practice_service import practice_service
from quizforge.utils.config import settings
from quizforge.utils.db import get_db
from quizforge.utils.errors import GenerationUnavailableError, QuestionNotFoundError
from quizforge.utils.logger import logger

router = APIRouter()

class MarkdownDocument(BaseModel):
    document: str

class ExtractionResponse(BaseModel):
    report: DocumentReport
    candidates: List[QuestionCandidate]

class GenerateRequest(BaseModel):
    text: str
    import_results: bool = False

class GenerateResponse(BaseModel):
    source: GenerationSource
    fallback_reason: Optional[str] = None
    dropped: List[str]
    candidates: List[QuestionCandidate]
    import_result: Optional[BatchImportResult] = None

@router.post("/import", response_model=BatchImportResult)
async def import_batch(candidates: List[Any] = Body(...), db: AsyncSession = Depends(get_db)):
    """
    Validates and stores a batch; per-item rejections come back in `errors`.
    Items are taken as raw JSON; the validator judges their shape.
    """
    logger.info(f"Batch import requested with {len(candidates)} candidates")
    return await import_questions(db, candidates)

@router.post("/import-markdown", response_model=BatchImportResult)
async def import_markdown(request: MarkdownDocument, db: AsyncSession = Depends(get_db)):
    return await import_questions(db, extract(request.document))

@router.post("/extract", response_model=ExtractionResponse)
async def extract_preview(request: MarkdownDocument):
    """Parses a document without storing anything."""
    return ExtractionResponse(
        report=inspect_document(request.document),
        candidates=list(extract(request.document)),
    )

@router.post("/generate", response_model=GenerateResponse)
async def generate_questions(request: GenerateRequest, db: AsyncSession = Depends(get_db)):
    pipeline = QuestionGenerationPipeline(GenerationConfig.from_settings(settings))
    try:
        result = await pipeline.generate(request.text)
    except GenerationUnavailableError as e:
        logger.error(f"Question generation unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))

    import_result = None
    if request.import_results:
        import_result = await import_questions(db, result.candidates)

    return GenerateResponse(
        source=result.source,
        fallback_reason=result.fallback_reason,
        dropped=result.dropped,
        candidates=result.candidates,
        import_result=import_result,
    )

@router.get("/", response_model=List[Question])
async def list_questions(
    tag: Optional[str] = None,
    question_type: Optional[QuestionType] = None,
    difficulty: Optional[int] = None,
    search: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    return await store.query_questions(
        db, tag=tag, question_type=question_type, difficulty=difficulty, search=search, limit=limit,
    )

@router.get("/{question_id}", response_model=Question)
async def get_question(question_id: int, db: AsyncSession = Depends(get_db)):
    question = await store.get_question(db, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question

@router.get("/{question_id}/attempts", response_model=List[QuestionAttempt])
async def get_question_attempts(question_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await practice_service.list_attempts(db, question_id)
    except QuestionNotFoundError:
        raise HTTPException(status_code=404, detail="Question not found")
