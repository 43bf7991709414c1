# quizforge/endpoints/attempts.py
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from quizforge.models.attempt import QuestionAttempt
from quizforge.services.practice_service import practice_service
from quizforge.utils.db import get_db
from quizforge.utils.errors import QuestionNotFoundError, StorageError
from quizforge.utils.logger import logger

router = APIRouter()

class AttemptRequest(BaseModel):
    question_id: int
    user_answer: str
    time_spent_seconds: int = Field(default=0, ge=0)

@router.post("/", response_model=QuestionAttempt)
async def submit_attempt(request: AttemptRequest, db: AsyncSession = Depends(get_db)):
    try:
        return await practice_service.record_attempt(
            db,
            question_id=request.question_id,
            user_answer=request.user_answer,
            time_spent_seconds=request.time_spent_seconds,
        )
    except QuestionNotFoundError:
        raise HTTPException(status_code=404, detail="Question not found")
    except StorageError as e:
        logger.exception(f"Could not save attempt for question {request.question_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error saving attempt")
