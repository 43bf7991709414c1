# quizforge/utils/errors.py
"""Typed errors raised by the ingestion and practice services.

Validation errors are per-candidate and recoverable; the batch importer turns
them into messages. Everything else is surfaced to the caller, except
RemoteGenerationError, which the generation pipeline converts into a fallback.
"""


class QuizForgeError(Exception):
    """Base class for all errors raised by quizforge services."""


# --- Validation ---

class QuestionValidationError(QuizForgeError):
    code = "validation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class InvalidType(QuestionValidationError):
    code = "invalid_type"


class EmptyStem(QuestionValidationError):
    code = "empty_stem"


class EmptyAnswer(QuestionValidationError):
    code = "empty_answer"


class InvalidOptions(QuestionValidationError):
    code = "invalid_options"


class AnswerNotInOptions(QuestionValidationError):
    code = "answer_not_in_options"


class EmptyAnalysis(QuestionValidationError):
    code = "empty_analysis"


class DifficultyOutOfRange(QuestionValidationError):
    code = "difficulty_out_of_range"


# --- Lookup / storage ---

class QuestionNotFoundError(QuizForgeError):
    def __init__(self, question_id: int):
        super().__init__(f"Question {question_id} not found")
        self.question_id = question_id


class StorageError(QuizForgeError):
    """A storage transaction failed and was rolled back."""


# --- Generation ---

class RemoteGenerationError(QuizForgeError):
    """The remote generator failed (network, non-2xx, malformed JSON, schema mismatch)."""


class GenerationUnavailableError(QuizForgeError):
    """Neither the remote generator nor the offline catalog could produce questions."""
