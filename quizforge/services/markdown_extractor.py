# Markdown extraction: splits a question document into unvalidated question candidates
# quizforge/services/markdown_extractor.py
"""
Turns a hand-authored Markdown document into QuestionCandidate objects.

A document looks like:

    # Algorithms quiz

    ## 1. What is the worst case of QuickSort?
    A. O(n log n)
    B. O(n^2)
    **Answer:** B
    **Explanation:** Bad pivots split the array unevenly.
    Each level then only removes one element.
    Difficulty: 3
    Tags: algorithms, sorting

Questions start at `##`..`######` headings, or, in documents without such
headings, at top-level numbered lines (`1.`, `2)`, `（3）`). After the answer, a
numbered line only starts a question when it carries the next question number
and does not continue a numbered list of the explanation. Free text after the
answer line is read as explanation. Fenced code and `$$` display math are
opaque: their lines are never read as options or markers.

Extraction is permissive: it never raises on text input and never judges
validity, which is the validator's job.
"""
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from pydantic import BaseModel

from quizforge.models.enums import QuestionType
from quizforge.models.question import QuestionCandidate
from quizforge.services.validator import OPTION_LINE_PATTERN
from quizforge.utils.logger import get_logger

logger = get_logger("extractor")

TITLE_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$")
QUESTION_HEADING_PATTERN = re.compile(r"^#{2,6}\s+(.*?)\s*#*\s*$")
NUMBERED_LINE_PATTERN = re.compile(
    r"^(?:(?P<number>\d+)\s*[.．)）、](?!\d)|[(（](?P<paren_number>\d+)[)）])\s*(?P<text>.*)$"
)
LEADING_NUMBER_PATTERN = re.compile(
    r"^(?:(?:question|q)\s*\d+\s*[.:：)]?|第\s*\d+\s*题|\d+(?:\.\d+)*(?:\s*[.．)）、:：]|\s+)|[(（]\d+[)）])\s*",
    re.IGNORECASE,
)
FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")
MATH_BLOCK_PATTERN = re.compile(r"^\s*\$\$")

# "**Answer:** B", "Answer: B", "答案：B", "> Answer: B", "- Tags: a, b"
MARKER_PATTERN = re.compile(
    r"^\s*(?:>\s*)?(?:[-*+]\s+)?(?P<open>\*\*|__)?\s*"
    r"(?P<field>answer|correct answer|reference answer|答案|参考答案"
    r"|explanation|analysis|solution|解析|分析"
    r"|difficulty|难度"
    r"|tags|knowledge|knowledge tags|知识点|标签"
    r"|type|question type|题型)"
    r"\s*(?P<close>\*\*|__)?\s*[:：]\s*(?P<value>.*)$",
    re.IGNORECASE,
)
MARKER_FIELDS = {
    "answer": "answer", "correct answer": "answer", "reference answer": "answer",
    "答案": "answer", "参考答案": "answer",
    "explanation": "explanation", "analysis": "explanation", "solution": "explanation",
    "解析": "explanation", "分析": "explanation",
    "difficulty": "difficulty", "难度": "difficulty",
    "tags": "tags", "knowledge": "tags", "knowledge tags": "tags", "知识点": "tags", "标签": "tags",
    "type": "type", "question type": "type", "题型": "type",
}
TYPE_ALIASES = {
    "multiple_choice": QuestionType.MULTIPLE_CHOICE,
    "multiple choice": QuestionType.MULTIPLE_CHOICE,
    "choice": QuestionType.MULTIPLE_CHOICE,
    "mcq": QuestionType.MULTIPLE_CHOICE,
    "选择题": QuestionType.MULTIPLE_CHOICE,
    "fill_in_the_blank": QuestionType.FILL_IN_THE_BLANK,
    "fill in the blank": QuestionType.FILL_IN_THE_BLANK,
    "fill-in-the-blank": QuestionType.FILL_IN_THE_BLANK,
    "blank": QuestionType.FILL_IN_THE_BLANK,
    "填空题": QuestionType.FILL_IN_THE_BLANK,
    "essay": QuestionType.ESSAY,
    "short answer": QuestionType.ESSAY,
    "简答题": QuestionType.ESSAY,
    "论述题": QuestionType.ESSAY,
}
BLANK_PATTERN = re.compile(r"_{3,}|[(（]\s*[)）]")
HASHTAG_PATTERN = re.compile(r"#([^\s#,，]+)")
STARS_PATTERN = re.compile(r"^[★⭐*]+$")
IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\(\s*([^)\s]+)")
INLINE_LATEX_PATTERN = re.compile(r"(?<!\$)\$([^$\n]+?)\$(?!\$)")
BLOCK_LATEX_PATTERN = re.compile(r"\$\$(.+?)\$\$", re.DOTALL)


# --- Block accumulation ---

@dataclass
class _Block:
    """Raw lines of one question, sorted into buckets while scanning."""
    stem_lines: List[str] = field(default_factory=list)
    option_lines: List[str] = field(default_factory=list)
    answer: Optional[str] = None
    explanation_steps: List[str] = field(default_factory=list)
    difficulty: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    type_marker: Optional[str] = None
    in_explanation: bool = False
    continuing_opaque_step: bool = False  # last explanation step is an open code/math block

    def is_empty(self) -> bool:
        return not (
            any(line.strip() for line in self.stem_lines)
            or self.option_lines or self.answer or self.explanation_steps
        )

    @property
    def reads_as_explanation(self) -> bool:
        """Once the answer or an explanation marker is seen, free lines belong to the explanation."""
        return self.in_explanation or self.answer is not None

    def add_explanation(self, line: str, opaque: bool) -> None:
        if opaque and self.continuing_opaque_step:
            self.explanation_steps[-1] += "\n" + line
        elif opaque or line.strip():
            self.explanation_steps.append(line if opaque else line.strip())
        self.continuing_opaque_step = opaque


def _strip_leading_number(text: str) -> str:
    return LEADING_NUMBER_PATTERN.sub("", text, count=1).strip()


def _line_number(numbered: re.Match) -> int:
    return int(numbered.group("number") or numbered.group("paren_number"))


def _split_tag_tokens(value: str) -> List[str]:
    hashtags = HASHTAG_PATTERN.findall(value)
    if hashtags:
        return hashtags
    return [token.strip() for token in re.split(r"[,，;；、]", value) if token.strip()]


def _parse_difficulty(value: str):
    """Returns an int for "3", "3/5" or "★★★"; otherwise the raw text, for the validator to reject."""
    text = value.strip()
    number = re.match(r"^(\d+)\s*(?:/\s*\d+)?$", text)
    if number:
        return int(number.group(1))
    if STARS_PATTERN.match(text):
        return len(text)
    return text or None


def _guess_type(block: _Block, stem: str) -> str:
    if block.type_marker:
        explicit = TYPE_ALIASES.get(block.type_marker.strip().lower())
        # An unrecognized explicit type is passed through so the validator reports it.
        return explicit.value if explicit else block.type_marker.strip()
    if len(block.option_lines) >= 2:
        return QuestionType.MULTIPLE_CHOICE.value
    if BLANK_PATTERN.search(stem):
        return QuestionType.FILL_IN_THE_BLANK.value
    return QuestionType.ESSAY.value


def _to_candidate(block: _Block, number: int) -> QuestionCandidate:
    stem = "\n".join(block.stem_lines).strip()
    media = IMAGE_PATTERN.findall(stem + "\n" + "\n".join(block.explanation_steps))
    return QuestionCandidate(
        number=number,
        question_type=_guess_type(block, stem),
        stem=stem,
        options=list(block.option_lines) or None,
        reference_answer=block.answer,
        detailed_analysis=list(block.explanation_steps) or None,
        media_refs=media or None,
        knowledge_tags=list(block.tags) or None,
        difficulty=_parse_difficulty(block.difficulty) if block.difficulty else None,
    )


def _apply_marker(block: _Block, name: str, value: str) -> None:
    field_name = MARKER_FIELDS[name.lower()]
    block.in_explanation = False
    block.continuing_opaque_step = False
    if field_name == "answer":
        block.answer = value
    elif field_name == "explanation":
        block.add_explanation(value, opaque=False)
        block.in_explanation = True
    elif field_name == "difficulty":
        block.difficulty = value
    elif field_name == "tags":
        block.tags.extend(_split_tag_tokens(value))
    elif field_name == "type":
        block.type_marker = value


def _marker_value(marker: re.Match) -> str:
    """
    Removes the bold markup of a marker line and keeps the value verbatim:
    "**Answer:** B", "**Answer: B**" and "Answer: **B**" all give "B", while
    "Answer: *p" or "Answer: __init__" are left as written.
    """
    value = marker.group("value").strip()
    bold = marker.group("open")
    if bold and not marker.group("close"):
        # Bold opened before the field name closes right after the colon or at the end
        if value.startswith(bold):
            return value[len(bold):].strip()
        if value.endswith(bold):
            return value[:-len(bold)].strip()
        return value
    if len(value) > 4 and value.startswith("**") and value.endswith("**"):
        return value[2:-2].strip()
    return value


def _add_line(block: _Block, line: str, opaque: bool) -> None:
    """Sorts one line of a question block into the right bucket."""
    reads_as_explanation = block.reads_as_explanation

    if opaque:
        if reads_as_explanation:
            block.add_explanation(line, opaque=True)
        else:
            block.stem_lines.append(line)
        return

    marker = MARKER_PATTERN.match(line)
    if marker:
        _apply_marker(block, marker.group("field"), _marker_value(marker))
        return

    if reads_as_explanation:
        block.add_explanation(line, opaque=False)
        return

    if OPTION_LINE_PATTERN.match(line):
        block.option_lines.append(line.strip())
        return

    if line.strip() or block.stem_lines:
        block.stem_lines.append(line.rstrip())


def _uses_headings(lines: List[str]) -> bool:
    in_fence = False
    for line in lines:
        if FENCE_PATTERN.match(line):
            in_fence = not in_fence
        elif not in_fence and QUESTION_HEADING_PATTERN.match(line):
            return True
    return False


def _iter_blocks(text: str) -> Iterator[_Block]:
    lines = text.splitlines()
    by_heading = _uses_headings(lines)
    block: Optional[_Block] = None
    in_fence = False
    in_math = False
    question_number = 0
    list_number: Optional[int] = None  # last item of a numbered list inside the current explanation

    for line in lines:
        delimiter = False
        if not in_math and FENCE_PATTERN.match(line):
            in_fence = not in_fence
            delimiter = True
        elif not in_fence and MATH_BLOCK_PATTERN.match(line):
            # A one-line "$$ x $$" opens and closes on the same line.
            if line.count("$$") % 2 == 1:
                in_math = not in_math
            delimiter = True
        opaque = in_fence or in_math or delimiter

        if not opaque:
            if TITLE_PATTERN.match(line):
                continue
            if not line.strip():
                list_number = None
            heading = QUESTION_HEADING_PATTERN.match(line) if by_heading else None
            numbered = None if by_heading else NUMBERED_LINE_PATTERN.match(line)
            if numbered and block is not None and block.reads_as_explanation:
                number = _line_number(numbered)
                continues_list = list_number is not None and number == list_number + 1
                if continues_list or number != question_number + 1:
                    # A numbered step of the explanation, not the next question
                    list_number = number
                    numbered = None
            if heading or numbered:
                if block is not None and not block.is_empty():
                    yield block
                block = _Block()
                list_number = None
                if heading:
                    first_line = _strip_leading_number(heading.group(1))
                else:
                    question_number = _line_number(numbered)
                    first_line = numbered.group("text").strip()
                if first_line:
                    block.stem_lines.append(first_line)
                continue

        if block is None:
            # Preamble before the first question (intro text, front matter).
            continue
        _add_line(block, line, opaque)

    if block is not None and not block.is_empty():
        yield block


# --- Public API ---

class ExtractedDocument:
    """
    Lazy, restartable view over the candidates of a document. Each iteration
    re-parses the text; nothing is cached between iterations.
    """

    def __init__(self, text: str):
        self.text = text or ""

    @property
    def title(self) -> str:
        for line in self.text.splitlines():
            match = TITLE_PATTERN.match(line)
            if match:
                return match.group(1).strip()
        return ""

    def __iter__(self) -> Iterator[QuestionCandidate]:
        for number, block in enumerate(_iter_blocks(self.text), start=1):
            yield _to_candidate(block, number)


def extract(document_text: str) -> ExtractedDocument:
    return ExtractedDocument(document_text)


class LatexFormula(BaseModel):
    formula: str
    is_block: bool
    position: int


def extract_latex(content: str) -> List[LatexFormula]:
    """Returns display ($$..$$) and inline ($..$) formulas in document order."""
    formulas = [
        LatexFormula(formula=m.group(1).strip(), is_block=True, position=m.start(1))
        for m in BLOCK_LATEX_PATTERN.finditer(content)
    ]
    # Blank out display math so its dollars are not read again as inline delimiters.
    masked = BLOCK_LATEX_PATTERN.sub(lambda m: " " * len(m.group(0)), content)
    formulas.extend(
        LatexFormula(formula=m.group(1).strip(), is_block=False, position=m.start(1))
        for m in INLINE_LATEX_PATTERN.finditer(masked)
    )
    return sorted(formulas, key=lambda f: f.position)


class DocumentReport(BaseModel):
    title: str
    has_heading: bool
    has_latex: bool
    latex_formula_count: int
    estimated_question_count: int
    issues: List[str]


def inspect_document(document_text: str) -> DocumentReport:
    """Summarizes a document before import; issues are advisory, not validation errors."""
    document = extract(document_text)
    candidates = list(document)
    formulas = extract_latex(document.text)
    issues = []
    if not document.text.strip():
        issues.append("Document is empty")
    elif not candidates:
        issues.append("No question boundaries found (use '## ' headings or numbered lines)")
    for candidate in candidates:
        if not candidate.reference_answer:
            issues.append(f"Question {candidate.number}: no answer line found")

    logger.debug(f"Inspected document '{document.title}': {len(candidates)} candidates, {len(formulas)} formulas")
    return DocumentReport(
        title=document.title,
        has_heading=any(
            TITLE_PATTERN.match(line) or QUESTION_HEADING_PATTERN.match(line)
            for line in document.text.splitlines()
        ),
        has_latex=bool(formulas),
        latex_formula_count=len(formulas),
        estimated_question_count=len(candidates),
        issues=issues,
    )
