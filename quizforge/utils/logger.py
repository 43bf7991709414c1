# quizforge/utils/logger.py
import logging
import sys
from quizforge.utils.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Root logger for the whole package; components log through children of it
# (e.g. "quizforge.import", "quizforge.generation") so their output can be filtered.
logger = logging.getLogger("quizforge")


def configure_logging(level_name: str) -> None:
    """(Re)applies the level and the single stdout handler to the package logger."""
    # Unknown level names fall back to INFO.
    logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    # Clear any existing handlers to prevent duplicate logs during hot-reloads.
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    # Keep records away from the root logger to avoid double printing under uvicorn.
    logger.propagate = False


def get_logger(component: str) -> logging.Logger:
    return logger.getChild(component)


configure_logging(settings.log_level)
