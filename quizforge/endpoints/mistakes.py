# quizforge/endpoints/mistakes.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from quizforge.models.attempt import MistakeEntry
from quizforge.services.practice_service import practice_service
from quizforge.utils.db import get_db

router = APIRouter()

@router.get("/", response_model=List[MistakeEntry])
async def get_mistakes(tag: Optional[str] = None, db: AsyncSession = Depends(get_db)):
    """Questions answered incorrectly at least once, optionally limited to one knowledge tag."""
    return await practice_service.get_mistakes_by_tag(db, tag)
