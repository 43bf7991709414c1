# FastAPI entry point; wires the question store, importers and practice tracking into one API
# quizforge/main.py
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import os
import sys

# Add project root to sys.path to allow for absolute imports
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from quizforge.endpoints import (
    questions as questions_router,
    attempts as attempts_router,
    mistakes as mistakes_router,
)
from quizforge.store import init_db
from quizforge.utils.config import settings
from quizforge.utils.db import engine
from quizforge.utils.errors import StorageError
from quizforge.utils.logger import logger

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manages application startup and shutdown events.
    """
    logger.info("QuizForge API starting up...")
    await init_db(engine)
    logger.info("Startup complete.")
    yield
    logger.info("QuizForge API shutting down...")
    await engine.dispose()

# --- FastAPI App Initialization ---
app = FastAPI(
    title="QuizForge API",
    description="Question bank with Markdown import, AI question generation and mistake tracking.",
    version="0.1.0",
    lifespan=lifespan
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this to your frontend's domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- API Routers ---
app.include_router(questions_router.router, prefix="/questions", tags=["Questions"])
app.include_router(attempts_router.router, prefix="/attempts", tags=["Attempts"])
app.include_router(mistakes_router.router, prefix="/mistakes", tags=["Mistakes"])

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {"message": "Welcome to the QuizForge API"}

@app.post("/store/init")
async def initialize_store():
    """Creates any missing tables. Calling it on an initialized store changes nothing."""
    try:
        await init_db(engine)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "ok"}

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "quizforge.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
