# tests/conftest.py
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
import os
import logging
from unittest.mock import patch

from sqlalchemy.pool import NullPool

# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from quizforge.utils.config import settings
from quizforge.utils.db import get_db, make_engine, make_session_factory
from quizforge.store import init_db


# --- Sample candidates shared by the service and API tests ---

def mc_candidate(**overrides):
    data = {
        "question_type": "multiple_choice",
        "stem": "What is the worst case of QuickSort?",
        "options": [{"label": "A", "content": "O(n log n)"}, {"label": "B", "content": "O(n^2)"}],
        "reference_answer": "B",
        "detailed_analysis": ["A bad pivot leaves one side empty at every level."],
        "knowledge_tags": ["algorithms", "sorting"],
        "difficulty": 3,
    }
    data.update(overrides)
    return data


def fib_candidate(**overrides):
    data = {
        "question_type": "fill_in_the_blank",
        "stem": "MergeSort needs O(___) extra space.",
        "reference_answer": "n",
        "detailed_analysis": ["The merge step copies into a buffer as large as the input."],
        "knowledge_tags": ["algorithms"],
        "difficulty": 2,
    }
    data.update(overrides)
    return data


def essay_candidate(**overrides):
    data = {
        "question_type": "essay",
        "stem": "Explain the significance of E = mc^2.",
        "reference_answer": "Mass and energy are interchangeable.",
        "detailed_analysis": ["Relate mass to rest energy.", "Mention fission and fusion."],
        "knowledge_tags": ["physics"],
    }
    data.update(overrides)
    return data


# --- Database fixtures ---

@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'quizforge_test.db'}"


@pytest_asyncio.fixture
async def engine(db_url):
    # NullPool: no connection outlives the event loop of the test that opened it
    test_engine = make_engine(db_url, poolclass=NullPool)
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async with make_session_factory(engine)() as db_session:
        yield db_session


# --- TestClient Fixture ---

@pytest.fixture
def client(db_url, monkeypatch):
    """
    TestClient backed by a fresh SQLite file. Remote credentials are removed so
    /questions/generate always takes the offline path.
    """
    from quizforge.main import app

    monkeypatch.setattr(settings, "openai_api_key", None)
    test_engine = make_engine(db_url, poolclass=NullPool)
    session_factory = make_session_factory(test_engine)

    async def override_get_db():
        async with session_factory() as db_session:
            yield db_session

    app.dependency_overrides[get_db] = override_get_db
    logger.info(f"Creating TestClient against {db_url}")
    with patch("quizforge.main.engine", test_engine):
        # App startup (table creation) runs here against the test engine
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()
