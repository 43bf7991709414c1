# tests/test_validator.py
import pytest

from conftest import essay_candidate, fib_candidate, mc_candidate
from quizforge.models.enums import QuestionType
from quizforge.models.question import Question, QuestionCandidate, QuestionOption
from quizforge.services.validator import (
    find_violations,
    normalize_options,
    normalize_tags,
    parse_option_line,
    validate,
)
from quizforge.utils.errors import (
    AnswerNotInOptions,
    DifficultyOutOfRange,
    EmptyAnalysis,
    EmptyAnswer,
    EmptyStem,
    InvalidOptions,
    InvalidType,
)


class TestValidate:
    def test_valid_multiple_choice(self):
        question = validate(mc_candidate())
        assert isinstance(question, Question)
        assert question.question_type is QuestionType.MULTIPLE_CHOICE
        assert [opt.label for opt in question.options] == ["A", "B"]
        assert question.id is None
        assert question.created_at is None

    def test_accepts_candidate_models(self):
        question = validate(QuestionCandidate(**fib_candidate()))
        assert question.question_type is QuestionType.FILL_IN_THE_BLANK
        assert question.options is None

    def test_revalidation_is_idempotent(self):
        first = validate(mc_candidate(stem="  padded stem  ", knowledge_tags="Sorting, sorting, algorithms"))
        second = validate(first)
        assert second == first
        assert first.stem == "padded stem"
        assert first.knowledge_tags == ["Sorting", "algorithms"]

    def test_type_is_trimmed_and_case_folded(self):
        assert validate(essay_candidate(question_type=" Essay ")).question_type is QuestionType.ESSAY

    @pytest.mark.parametrize("question_type", ["true_false", "", None, 3])
    def test_invalid_type(self, question_type):
        with pytest.raises(InvalidType):
            validate(essay_candidate(question_type=question_type))

    def test_blank_stem(self):
        with pytest.raises(EmptyStem):
            validate(essay_candidate(stem="   \n "))

    def test_blank_answer(self):
        with pytest.raises(EmptyAnswer):
            validate(fib_candidate(reference_answer="  "))

    def test_answer_not_in_options(self):
        with pytest.raises(AnswerNotInOptions):
            validate(mc_candidate(reference_answer="C"))

    def test_answer_label_is_case_sensitive(self):
        with pytest.raises(AnswerNotInOptions):
            validate(mc_candidate(reference_answer="b"))

    def test_multiple_choice_needs_two_options(self):
        with pytest.raises(InvalidOptions):
            validate(mc_candidate(options=[{"label": "A", "content": "only"}], reference_answer="A"))

    def test_multiple_choice_option_needs_content(self):
        with pytest.raises(InvalidOptions):
            validate(mc_candidate(options=[{"label": "A", "content": "x"}, {"label": "B", "content": " "}]))

    def test_options_rejected_for_other_types(self):
        with pytest.raises(InvalidOptions):
            validate(fib_candidate(options=["A. n", "B. log n"]))

    def test_analysis_required(self):
        with pytest.raises(EmptyAnalysis):
            validate(essay_candidate(detailed_analysis=["", "   "]))

    @pytest.mark.parametrize("difficulty", [0, 6, -1, "hard", 2.5, True])
    def test_difficulty_out_of_range(self, difficulty):
        with pytest.raises(DifficultyOutOfRange):
            validate(mc_candidate(difficulty=difficulty))

    @pytest.mark.parametrize("difficulty, expected", [("4", 4), (5.0, 5), (1, 1), (None, None), ("", None)])
    def test_difficulty_accepted(self, difficulty, expected):
        assert validate(mc_candidate(difficulty=difficulty)).difficulty == expected

    def test_free_form_sequences_are_normalized(self):
        question = validate(essay_candidate(
            detailed_analysis="Step one.\n\n  Step two.  \n",
            media_refs="img/a.png, img/b.png, img/a.png,",
            knowledge_tags=" Physics ; physics, relativity ,, ",
        ))
        assert question.detailed_analysis == ["Step one.", "Step two."]
        assert question.media_refs == ["img/a.png", "img/b.png"]
        assert question.knowledge_tags == ["Physics", "relativity"]


class TestFindViolations:
    def test_valid_candidate_has_none(self):
        assert find_violations(mc_candidate()) == []

    def test_collects_every_violation_in_order(self):
        violations = find_violations({"question_type": "quiz", "stem": "", "difficulty": 9})
        assert [v.code for v in violations] == [
            "invalid_type",
            "empty_stem",
            "empty_answer",
            "empty_analysis",
            "difficulty_out_of_range",
        ]

    @pytest.mark.parametrize("candidate", ["text", 42, None, ["a", "list"]])
    def test_non_object_candidate_is_reported_not_raised(self, candidate):
        assert [v.code for v in find_violations(candidate)] == [
            "invalid_type",
            "empty_stem",
            "empty_answer",
            "empty_analysis",
        ]

    def test_option_object_without_content(self):
        [violation] = find_violations(mc_candidate(options=[{"label": "A", "content": "x"}, {"label": "B"}]))
        assert violation.code == "invalid_options"

    def test_scalar_fields_are_coerced(self):
        question = validate(fib_candidate(stem=42, knowledge_tags=7, detailed_analysis=3.5))
        assert question.stem == "42"
        assert question.knowledge_tags == ["7"]
        assert question.detailed_analysis == ["3.5"]

    def test_scalar_options_count_as_one(self):
        with pytest.raises(InvalidOptions):
            validate(mc_candidate(options=5))

    def test_violation_message_carries_code(self):
        [violation] = find_violations(mc_candidate(reference_answer="Z"))
        assert str(violation).startswith("answer_not_in_options: ")


class TestOptionParsing:
    @pytest.mark.parametrize("line, expected", [
        ("A. first", ("A", "first")),
        ("B) second", ("B", "second")),
        ("(C) third", ("C", "third")),
        ("D、第四", ("D", "第四")),
        ("E：fifth", ("E", "fifth")),
        ("- F. listed", ("F", "listed")),
    ])
    def test_enumerator_patterns(self, line, expected):
        assert parse_option_line(line) == expected

    def test_plain_text_is_not_an_option(self):
        assert parse_option_line("A shallow copy") is None

    def test_unlabeled_options_get_positional_letters(self):
        options = normalize_options(["yes", "no"])
        assert options == [QuestionOption(label="A", content="yes"), QuestionOption(label="B", content="no")]

    def test_newline_block_and_objects(self):
        assert [o.label for o in normalize_options("A. one\n\nB. two")] == ["A", "B"]
        assert normalize_options([{"label": " A ", "content": " one "}])[0] == QuestionOption(label="A", content="one")


def test_tags_first_spelling_wins():
    assert normalize_tags(["Algorithms", "algorithms", "ALGORITHMS", "Graphs"]) == ["Algorithms", "Graphs"]
