# quizforge/services/practice_service.py
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from quizforge import store
from quizforge.models.attempt import MistakeEntry, QuestionAttempt
from quizforge.models.enums import QuestionType
from quizforge.models.question import Question
from quizforge.utils.errors import QuestionNotFoundError
from quizforge.utils.logger import get_logger

logger = get_logger("practice")


class PracticeService:
    """Records learner attempts and answers "what did I get wrong" queries."""

    def check_answer(self, question: Question, user_answer: str) -> bool:
        """Checks if the user's answer is correct based on the question type."""
        if question.question_type is QuestionType.MULTIPLE_CHOICE:
            # Labels are compared exactly, "b" is not "B"
            return user_answer == question.reference_answer
        elif question.question_type is QuestionType.FILL_IN_THE_BLANK:
            return user_answer.strip().casefold() == question.reference_answer.strip().casefold()
        elif question.question_type is QuestionType.ESSAY:
            # Essays wait for manual or AI grading; until then they count as incorrect.
            return False
        raise ValueError(f"Unhandled question type: {question.question_type!r}")

    async def record_attempt(
        self,
        session: AsyncSession,
        question_id: int,
        user_answer: str,
        time_spent_seconds: int,
    ) -> QuestionAttempt:
        """
        Grades and stores one attempt. Raises QuestionNotFoundError (and writes
        nothing) when the question does not exist.
        """
        if time_spent_seconds < 0:
            raise ValueError("time_spent_seconds cannot be negative")

        question = await store.get_question(session, question_id)
        if question is None:
            logger.warning(f"Attempt rejected: question {question_id} does not exist")
            raise QuestionNotFoundError(question_id)

        is_correct = self.check_answer(question, user_answer)
        attempt = await store.insert_attempt(session, QuestionAttempt(
            question_id=question_id,
            user_answer=user_answer,
            is_correct=is_correct,
            confidence_score=None,
            time_spent_seconds=time_spent_seconds,
        ))
        logger.debug(f"Recorded attempt {attempt.id} on question {question_id}: correct={is_correct}")
        return attempt

    async def list_attempts(self, session: AsyncSession, question_id: int) -> List[QuestionAttempt]:
        if await store.get_question(session, question_id) is None:
            raise QuestionNotFoundError(question_id)
        return await store.query_attempts_by_question(session, question_id)

    async def get_mistakes_by_tag(self, session: AsyncSession, tag: Optional[str] = None) -> List[MistakeEntry]:
        """
        Questions with at least one incorrect attempt, each with its number of
        incorrect attempts. `tag` filters by exact, case-sensitive tag membership.
        """
        rows = await store.query_mistake_counts(session, tag)
        logger.debug(f"Found {len(rows)} mistaken questions for tag={tag!r}")
        return [MistakeEntry(question=question, mistake_count=count) for question, count in rows]


# Instantiate the service globally or manage via dependency injection
practice_service = PracticeService()
