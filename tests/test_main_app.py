# tests/test_main_app.py
from fastapi.testclient import TestClient
from quizforge.utils.logger import logger

def test_read_root(client: TestClient):
    """Test if the root endpoint returns the welcome message."""
    logger.info("Testing root endpoint...")
    response = client.get("/")
    assert response.status_code == 200
    json_response = response.json()
    assert "message" in json_response
    assert "Welcome to the QuizForge API" in json_response["message"]

def test_store_init_is_idempotent(client: TestClient):
    """Initializing an already initialized store keeps its data."""
    client.post("/questions/import", json=[{
        "question_type": "essay",
        "stem": "Why is the sky blue?",
        "reference_answer": "Rayleigh scattering.",
        "detailed_analysis": ["Shorter wavelengths scatter more."],
    }])
    for _ in range(2):
        response = client.post("/store/init")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
    assert len(client.get("/questions/").json()) == 1

def test_module_entry_point_starts_uvicorn():
    """`python -m quizforge.main` serves the app with the configured host and port."""
    import runpy
    from unittest.mock import patch
    from quizforge.utils.config import settings

    with patch("uvicorn.run") as run:
        runpy.run_module("quizforge.main", run_name="__main__")
    run.assert_called_once_with(
        "quizforge.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
