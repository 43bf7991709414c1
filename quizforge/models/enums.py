# quizforge/models/enums.py
from enum import Enum

class QuestionType(str, Enum):
    """Closed set of question shapes the store accepts."""
    MULTIPLE_CHOICE = "multiple_choice"
    FILL_IN_THE_BLANK = "fill_in_the_blank"
    ESSAY = "essay"

class GenerationSource(str, Enum):
    """Which path of the generation pipeline produced a result."""
    REMOTE = "remote"      # remote model answered and at least one candidate survived
    OFFLINE = "offline"    # no credentials configured, offline catalog used directly
    FALLBACK = "fallback"  # remote stage failed, offline catalog used instead
