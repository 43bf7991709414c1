# Question validation: normalizes heterogeneous candidate shapes and enforces per-type rules
# quizforge/services/validator.py
import re
import string
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from quizforge.models.enums import QuestionType
from quizforge.models.question import Question, QuestionOption
from quizforge.utils.errors import (
    QuestionValidationError,
    InvalidType,
    EmptyStem,
    EmptyAnswer,
    InvalidOptions,
    AnswerNotInOptions,
    EmptyAnalysis,
    DifficultyOutOfRange,
)

# "A. text", "B) text", "(C) text", "D、text", "E：text", optionally as a list item ("- A. text")
OPTION_LINE_PATTERN = re.compile(
    r"^\s*(?:[-*+]\s+)?[(（]?([A-Za-z])(?:[)）]|[.．、:：])\s*(.*)$"
)
TAG_SEPARATORS = re.compile(r"[,，;；、\n]")
MEDIA_SEPARATORS = re.compile(r"[,\n]")

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

CandidateLike = Union[BaseModel, Mapping[str, Any]]


# --- Normalization helpers ---

def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _split_text(value: Any, separators: re.Pattern) -> List[str]:
    """Turns a free-form string or a sequence into a list of trimmed, non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = separators.split(value)
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        parts = [value]
    return [cleaned for cleaned in (_clean(p) for p in parts) if cleaned]


def _dedupe(items: List[str], key=lambda item: item) -> List[str]:
    seen = set()
    result = []
    for item in items:
        k = key(item)
        if k not in seen:
            seen.add(k)
            result.append(item)
    return result


def normalize_tags(value: Any) -> List[str]:
    """Trims tags, drops empties, collapses duplicates case-insensitively (first spelling wins)."""
    return _dedupe(_split_text(value, TAG_SEPARATORS), key=str.casefold)


def normalize_media_refs(value: Any) -> List[str]:
    return _dedupe(_split_text(value, MEDIA_SEPARATORS))


def normalize_analysis(value: Any) -> List[str]:
    """A free-form explanation block becomes one step per non-empty line."""
    return _split_text(value, re.compile(r"\n"))


def parse_option_line(line: str) -> Optional[Tuple[str, str]]:
    """Splits "B) text" into ("B", "text"); returns None when the line has no enumerator."""
    match = OPTION_LINE_PATTERN.match(line)
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def normalize_options(value: Any) -> List[QuestionOption]:
    """
    Accepts raw option lines, a newline-separated block, {label, content} objects,
    or a mix. Unlabeled entries get the letter of their position.
    """
    if value is None:
        return []
    if isinstance(value, str):
        raw_items = value.splitlines()
    elif isinstance(value, (list, tuple)):
        raw_items = list(value)
    else:
        raw_items = [value]

    options: List[QuestionOption] = []
    for item in raw_items:
        if isinstance(item, QuestionOption):
            label, content = item.label, item.content
        elif isinstance(item, Mapping):
            label, content = item.get("label"), item.get("content")
        else:
            text = _clean(item)
            if not text:
                continue
            parsed = parse_option_line(text)
            if parsed:
                label, content = parsed
            else:
                position = len(options)
                label = string.ascii_uppercase[position] if position < 26 else str(position + 1)
                content = text
        options.append(QuestionOption(label=_clean(label), content=_clean(content)))
    return options


def normalize_type(value: Any) -> Optional[QuestionType]:
    if isinstance(value, QuestionType):
        return value
    if not isinstance(value, str):
        return None
    try:
        return QuestionType(value.strip().lower())
    except ValueError:
        return None


def _normalize_difficulty(value: Any) -> Tuple[Optional[int], bool]:
    """Returns (difficulty, ok). Integral floats and digit strings are accepted as integers."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None, True
    if isinstance(value, bool):
        return None, False
    if isinstance(value, int):
        number = value
    elif isinstance(value, float) and value.is_integer():
        number = int(value)
    elif isinstance(value, str) and value.strip().lstrip("+-").isdigit():
        number = int(value.strip())
    else:
        return None, False
    return number, MIN_DIFFICULTY <= number <= MAX_DIFFICULTY


def _as_dict(candidate: CandidateLike) -> Dict[str, Any]:
    if isinstance(candidate, BaseModel):
        return candidate.model_dump()
    if isinstance(candidate, Mapping):
        return dict(candidate)
    # Anything that is not an object has no fields; every rule then reports it.
    return {}


# --- Validation ---

def _check(data: Dict[str, Any]) -> Tuple[List[QuestionValidationError], Dict[str, Any]]:
    """Runs every rule in order and returns (violations, normalized fields)."""
    violations: List[QuestionValidationError] = []

    raw_type = data.get("question_type")
    question_type = normalize_type(raw_type)
    if question_type is None:
        violations.append(InvalidType(
            f"question_type must be one of {[t.value for t in QuestionType]}, got {raw_type!r}"
        ))

    stem = _clean(data.get("stem"))
    if not stem:
        violations.append(EmptyStem("stem is empty"))

    reference_answer = _clean(data.get("reference_answer"))
    if not reference_answer:
        violations.append(EmptyAnswer("reference_answer is empty"))

    options = normalize_options(data.get("options"))
    if question_type is QuestionType.MULTIPLE_CHOICE:
        if len(options) < 2:
            violations.append(InvalidOptions(f"multiple_choice needs at least 2 options, got {len(options)}"))
        elif any(not opt.label or not opt.content for opt in options):
            violations.append(InvalidOptions("every option needs a non-empty label and content"))
        elif reference_answer and reference_answer not in {opt.label for opt in options}:
            violations.append(AnswerNotInOptions(
                f"reference_answer {reference_answer!r} does not match any option label "
                f"{[opt.label for opt in options]}"
            ))
    elif question_type in (QuestionType.FILL_IN_THE_BLANK, QuestionType.ESSAY):
        if options:
            violations.append(InvalidOptions(f"{question_type.value} questions cannot have options"))

    detailed_analysis = normalize_analysis(data.get("detailed_analysis"))
    if not detailed_analysis:
        violations.append(EmptyAnalysis("detailed_analysis needs at least one step"))

    difficulty, difficulty_ok = _normalize_difficulty(data.get("difficulty"))
    if not difficulty_ok:
        violations.append(DifficultyOutOfRange(
            f"difficulty must be an integer between {MIN_DIFFICULTY} and {MAX_DIFFICULTY}, "
            f"got {data.get('difficulty')!r}"
        ))

    normalized = {
        "question_type": question_type,
        "stem": stem,
        "options": options if question_type is QuestionType.MULTIPLE_CHOICE else None,
        "reference_answer": reference_answer,
        "detailed_analysis": detailed_analysis,
        "media_refs": normalize_media_refs(data.get("media_refs")),
        "knowledge_tags": normalize_tags(data.get("knowledge_tags")),
        "difficulty": difficulty,
    }
    return violations, normalized


def find_violations(candidate: CandidateLike) -> List[QuestionValidationError]:
    """Returns every rule violation of the candidate, in check order. Empty means valid."""
    violations, _ = _check(_as_dict(candidate))
    return violations


def validate(candidate: CandidateLike) -> Question:
    """
    Validates and normalizes a candidate into a Question.
    Raises the first QuestionValidationError found. Never touches storage;
    any `id`/`created_at` on the input is ignored.
    """
    violations, normalized = _check(_as_dict(candidate))
    if violations:
        raise violations[0]
    return Question(**normalized)
