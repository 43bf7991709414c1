# tests/test_store.py
import pytest

from conftest import essay_candidate, fib_candidate, mc_candidate
from quizforge import store
from quizforge.models.attempt import QuestionAttempt
from quizforge.models.enums import QuestionType
from quizforge.services.validator import validate
from quizforge.utils.errors import StorageError


async def test_init_db_is_repeatable(engine):
    await store.init_db(engine)
    await store.init_db(engine)


async def test_collections_round_trip_in_order(session):
    question = validate(essay_candidate(
        detailed_analysis=["third", "first", "second"],
        knowledge_tags=["zeta", "Alpha", "mu"],
        media_refs=["b.png", "a.png"],
    ))
    [question_id] = await store.insert_questions(session, [question])

    stored = await store.get_question(session, question_id)
    assert stored.id == question_id
    assert stored.created_at is not None
    assert stored.detailed_analysis == ["third", "first", "second"]
    assert stored.knowledge_tags == ["zeta", "Alpha", "mu"]
    assert stored.media_refs == ["b.png", "a.png"]
    assert stored.options is None


async def test_insert_returns_ids_in_input_order(session):
    ids = await store.insert_questions(session, [validate(mc_candidate()), validate(fib_candidate())])
    assert ids == sorted(ids)
    assert (await store.get_question(session, ids[0])).question_type is QuestionType.MULTIPLE_CHOICE
    assert [o.label for o in (await store.get_question(session, ids[0])).options] == ["A", "B"]


async def test_get_missing_question(session):
    assert await store.get_question(session, 12345) is None


async def test_query_filters(session):
    await store.insert_questions(session, [
        validate(mc_candidate(difficulty=3)),
        validate(fib_candidate(difficulty=2)),
        validate(essay_candidate(difficulty=None)),
    ])

    assert len(await store.query_questions(session)) == 3
    assert {q.question_type for q in await store.query_questions(session, tag="algorithms")} == {
        QuestionType.MULTIPLE_CHOICE, QuestionType.FILL_IN_THE_BLANK,
    }
    assert await store.query_questions(session, tag="Algorithms") == []
    [essay] = await store.query_questions(session, question_type=QuestionType.ESSAY)
    assert essay.knowledge_tags == ["physics"]
    [hard] = await store.query_questions(session, difficulty=3)
    assert hard.question_type is QuestionType.MULTIPLE_CHOICE


async def test_newest_first(session):
    first, second = await store.insert_questions(session, [validate(mc_candidate()), validate(fib_candidate())])
    assert [q.id for q in await store.query_questions(session)] == [second, first]


async def test_query_search_and_limit(session):
    mc_id, fib_id, essay_id = await store.insert_questions(session, [
        validate(mc_candidate()),
        validate(fib_candidate()),
        validate(essay_candidate()),
    ])

    assert [q.id for q in await store.query_questions(session, search="quicksort")] == [mc_id]
    assert [q.id for q in await store.query_questions(session, search="MERGESORT")] == [fib_id]
    # LIKE wildcards in the search text are matched literally
    assert [q.id for q in await store.query_questions(session, search="_")] == [fib_id]
    assert await store.query_questions(session, search="100%") == []

    assert [q.id for q in await store.query_questions(session, limit=1)] == [essay_id]
    assert [q.id for q in await store.query_questions(session, limit=2)] == [essay_id, fib_id]
    assert [q.id for q in await store.query_questions(session, tag="algorithms", search="sort", limit=1)] == [fib_id]


async def test_attempt_needs_existing_question(session):
    attempt = QuestionAttempt(question_id=999, user_answer="x", is_correct=False, time_spent_seconds=1)
    # foreign_keys=ON turns the dangling reference into an integrity error
    with pytest.raises(StorageError):
        await store.insert_attempt(session, attempt)
    assert await store.query_attempts_by_question(session, 999) == []
