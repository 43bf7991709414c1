# Data models for questions: the canonical record, unvalidated candidates, and the remote batch schema
# quizforge/models/question.py
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field

from quizforge.models.enums import QuestionType


class QuestionOption(BaseModel):
    label: str
    content: str


class Question(BaseModel):
    """A validated question. `id` and `created_at` are only ever set by the store."""
    id: Optional[int] = None
    question_type: QuestionType
    stem: str  # Markdown, may contain LaTeX
    options: Optional[List[QuestionOption]] = None  # multiple_choice only
    reference_answer: str
    detailed_analysis: List[str]
    media_refs: List[str] = Field(default_factory=list)
    knowledge_tags: List[str] = Field(default_factory=list)
    difficulty: Optional[int] = None
    created_at: Optional[datetime] = None


class QuestionCandidate(BaseModel):
    """
    An unvalidated question as produced by the Markdown extractor, the generation
    pipeline, or an API client. Shapes are loose; the validator
    normalizes them and decides acceptance.
    """
    number: Optional[int] = None  # extraction-local ordinal
    question_type: Any = None
    stem: Optional[str] = None
    options: Union[str, List[Union[QuestionOption, str]], None] = None  # raw lines or {label, content}
    reference_answer: Optional[str] = None
    detailed_analysis: Union[str, List[str], None] = None  # free-form block or list of steps
    media_refs: Union[str, List[str], None] = None
    knowledge_tags: Union[str, List[str], None] = None
    difficulty: Any = None


# --- Remote generation payload (Question-batch schema) ---

class GeneratedQuestion(BaseModel):
    question_type: QuestionType
    stem: str = Field(description="Question stem in Markdown format, may contain LaTeX formulas")
    options: Optional[List[Union[QuestionOption, str]]] = Field(
        default=None, description="Options for multiple choice questions"
    )
    reference_answer: str = Field(description="Reference answer; the option label for multiple choice")
    detailed_analysis: List[str] = Field(description="Detailed analysis steps, each step is a string")
    media_refs: Optional[List[str]] = None
    knowledge_tags: Optional[List[str]] = Field(default=None, description="Knowledge tags for categorization")
    difficulty: Optional[int] = Field(default=None, ge=1, le=5, description="Difficulty level from 1 to 5")

    def to_candidate(self) -> QuestionCandidate:
        return QuestionCandidate(**self.model_dump())


class GeneratedQuestionBatch(BaseModel):
    questions: List[GeneratedQuestion]


class BatchImportResult(BaseModel):
    success: bool
    imported_count: int
    errors: List[str] = Field(default_factory=list)
    question_ids: List[int] = Field(default_factory=list)
