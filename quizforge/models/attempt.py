# Data model for learner attempts against persisted questions
# quizforge/models/attempt.py
from datetime import datetime
from pydantic import BaseModel, Field

from quizforge.models.question import Question

class QuestionAttempt(BaseModel):
    id: int | None = None
    question_id: int
    user_answer: str
    is_correct: bool  # computed once at submission time
    confidence_score: float | None = None  # reserved for graded essays
    time_spent_seconds: int = Field(ge=0)
    created_at: datetime | None = None

class MistakeEntry(BaseModel):
    question: Question
    mistake_count: int
