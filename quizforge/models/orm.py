# quizforge/models/orm.py
from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    DateTime,
    ForeignKey,
    Text,
    Boolean,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timezone


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuestionRecord(Base):
    __tablename__ = "questions"
    __table_args__ = (
        CheckConstraint(
            "question_type IN ('multiple_choice', 'fill_in_the_blank', 'essay')",
            name="ck_questions_type",
        ),
        CheckConstraint("difficulty BETWEEN 1 AND 5", name="ck_questions_difficulty"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    question_type = Column(String(32), nullable=False, index=True)
    stem = Column(Text, nullable=False)
    reference_answer = Column(Text, nullable=False)
    difficulty = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Typed child collections, always loaded together with the question
    options = relationship(
        "QuestionOptionRecord", order_by="QuestionOptionRecord.position",
        cascade="all, delete-orphan", lazy="selectin",
    )
    analysis_steps = relationship(
        "AnalysisStepRecord", order_by="AnalysisStepRecord.position",
        cascade="all, delete-orphan", lazy="selectin",
    )
    tags = relationship(
        "QuestionTagRecord", order_by="QuestionTagRecord.position",
        cascade="all, delete-orphan", lazy="selectin",
    )
    media_refs = relationship(
        "MediaRefRecord", order_by="MediaRefRecord.position",
        cascade="all, delete-orphan", lazy="selectin",
    )


class QuestionOptionRecord(Base):
    __tablename__ = "question_options"
    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    label = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)


class AnalysisStepRecord(Base):
    __tablename__ = "question_analysis_steps"
    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    content = Column(Text, nullable=False)


class QuestionTagRecord(Base):
    __tablename__ = "question_tags"
    __table_args__ = (UniqueConstraint("question_id", "tag", name="uq_question_tag"),)
    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    tag = Column(String(255), nullable=False, index=True)


class MediaRefRecord(Base):
    __tablename__ = "question_media_refs"
    id = Column(Integer, primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    ref = Column(Text, nullable=False)


class AttemptRecord(Base):
    __tablename__ = "question_attempts"
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    user_answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False, index=True)
    confidence_score = Column(Float, nullable=True)
    time_spent_seconds = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
