# quizforge/utils/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env file before defining settings
load_dotenv()

class Settings(BaseSettings):
    # Storage Settings
    database_url: str = "sqlite+aiosqlite:///./quizforge.db"
    sql_echo: bool = False  # Set to True to see SQL queries
    log_level: str = "INFO"

    # Server Settings (python -m quizforge.main)
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_reload: bool = False

    # --- Remote Generation Configuration (OpenAI-compatible endpoint) ---
    # Leaving the API key unset switches the generation pipeline to the offline catalog.
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_model_name: str = os.getenv("OPENAI_MODEL_NAME", "gpt-4o")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    # Generation pipeline behaviour
    generation_temperature: float = 0.2
    generation_timeout_seconds: float = 60.0
    generation_max_retries: int = 1
    generation_offline_fallback: bool = True  # Use the offline catalog when the remote stage fails

    class Config:
        # If you want Pydantic to explicitly load from .env (alternative to python-dotenv)
        # env_file = '.env'
        # env_file_encoding = 'utf-8'
        pass

settings = Settings()

# --- Sanity checks on values that would otherwise fail deep inside a request ---
if settings.generation_timeout_seconds <= 0:
    raise ValueError("GENERATION_TIMEOUT_SECONDS must be positive")
if settings.generation_max_retries < 0:
    raise ValueError("GENERATION_MAX_RETRIES cannot be negative")
