# Three-stage question generation (Generator -> Verifier -> Formatter) with an explicit offline fallback
# quizforge/services/generation_pipeline.py
import json
from typing import List, Optional, Tuple

from langchain_core.output_parsers import StrOutputParser
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, Field, ValidationError

from quizforge.models.enums import GenerationSource, QuestionType
from quizforge.models.question import GeneratedQuestionBatch, QuestionCandidate
from quizforge.services.offline_generator import generate_offline
from quizforge.services.prompt_library import GENERATOR_PROMPT
from quizforge.services.validator import normalize_options, normalize_type
from quizforge.utils.errors import GenerationUnavailableError, RemoteGenerationError
from quizforge.utils.logger import get_logger

logger = get_logger("generation")

MIN_STEM_LENGTH = 10

# Schema-constrained decoding: the model is asked to emit a GeneratedQuestionBatch.
RESPONSE_FORMAT = {
    "type": "json_schema",
    "json_schema": {
        "name": "question_batch",
        "schema": GeneratedQuestionBatch.model_json_schema(),
    },
}


class GenerationConfig(BaseModel):
    """Everything the remote stage needs, passed explicitly into the pipeline."""
    api_key: Optional[str] = None
    model_name: str = "gpt-4o"
    base_url: str = "https://api.openai.com/v1"
    temperature: float = 0.2
    timeout_seconds: float = 60.0
    max_retries: int = 1
    offline_fallback: bool = True

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_settings(cls, settings) -> "GenerationConfig":
        return cls(
            api_key=settings.openai_api_key,
            model_name=settings.openai_model_name,
            base_url=settings.openai_base_url,
            temperature=settings.generation_temperature,
            timeout_seconds=settings.generation_timeout_seconds,
            max_retries=settings.generation_max_retries,
            offline_fallback=settings.generation_offline_fallback,
        )


class GenerationResult(BaseModel):
    candidates: List[QuestionCandidate]
    source: GenerationSource
    fallback_reason: Optional[str] = None
    dropped: List[str] = Field(default_factory=list)  # verifier drop reasons, informational only


# --- Stage 1: Generator (remote) ---

def build_chat_model(config: GenerationConfig) -> Runnable:
    llm = ChatOpenAI(
        api_key=config.api_key,
        model=config.model_name,
        base_url=config.base_url,
        temperature=config.temperature,
        timeout=config.timeout_seconds,
        max_retries=config.max_retries,
    )
    return llm.bind(response_format=RESPONSE_FORMAT)


class RemoteQuestionGenerator:
    """Calls an OpenAI-compatible model and parses its reply against the question batch schema."""

    def __init__(self, config: GenerationConfig, chat_model: Optional[Runnable] = None):
        self.config = config
        self._chat_model = chat_model  # built lazily on first use

    def _get_chain(self) -> Runnable:
        if self._chat_model is None:
            logger.info(f"Initializing chat model '{self.config.model_name}' at {self.config.base_url}")
            self._chat_model = build_chat_model(self.config)
        return GENERATOR_PROMPT | self._chat_model | StrOutputParser()

    async def generate(self, source_text: str) -> List[QuestionCandidate]:
        """Raises RemoteGenerationError for every failure mode of the remote call."""
        try:
            raw = await self._get_chain().ainvoke({"source_text": source_text})
        except Exception as e:
            # Connection errors, timeouts and non-2xx responses all surface here.
            raise RemoteGenerationError(f"Remote model call failed: {type(e).__name__}: {e}") from e

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise RemoteGenerationError(f"Remote model returned malformed JSON: {e}") from e

        try:
            batch = GeneratedQuestionBatch.model_validate(payload)
        except ValidationError as e:
            raise RemoteGenerationError(
                f"Remote payload does not match the question batch schema ({e.error_count()} errors)"
            ) from e

        logger.debug(f"Remote model returned {len(batch.questions)} questions")
        return [question.to_candidate() for question in batch.questions]


# --- Stage 2: Verifier ---

def _verification_failure(candidate: QuestionCandidate) -> Optional[str]:
    if len((candidate.stem or "").strip()) < MIN_STEM_LENGTH:
        return f"stem shorter than {MIN_STEM_LENGTH} characters"
    if not (candidate.reference_answer or "").strip():
        return "missing reference answer"
    if (normalize_type(candidate.question_type) is QuestionType.MULTIPLE_CHOICE
            and len(normalize_options(candidate.options)) < 2):
        return "multiple choice question with fewer than 2 options"
    return None


def verify_candidates(candidates: List[QuestionCandidate]) -> Tuple[List[QuestionCandidate], List[str]]:
    """Cheap structural checks. Returns (kept, drop reasons); dropped candidates are not errors."""
    kept, dropped = [], []
    for index, candidate in enumerate(candidates, start=1):
        reason = _verification_failure(candidate)
        if reason:
            dropped.append(f"Candidate {index}: {reason}")
        else:
            kept.append(candidate)
    return kept, dropped


# --- Stage 3: Formatter ---

def format_candidates(candidates: List[QuestionCandidate]) -> List[QuestionCandidate]:
    formatted = []
    for candidate in candidates:
        steps = candidate.detailed_analysis
        if isinstance(steps, list):
            steps = [step.strip() for step in steps]
        elif isinstance(steps, str):
            steps = steps.strip()
        formatted.append(candidate.model_copy(update={
            "stem": (candidate.stem or "").strip(),
            "reference_answer": (candidate.reference_answer or "").strip(),
            "detailed_analysis": steps,
        }))
    return formatted


# --- Pipeline ---

class QuestionGenerationPipeline:
    """
    Runs Generator -> Verifier -> Formatter over free text.

    Without credentials the deterministic offline generator replaces the remote
    stage (source=offline). When the remote stage fails in any way the pipeline
    logs the failure and switches to the offline generator (source=fallback),
    unless `offline_fallback` is disabled, in which case GenerationUnavailableError
    is raised.
    """

    def __init__(self, config: GenerationConfig, remote: Optional[RemoteQuestionGenerator] = None):
        self.config = config
        if remote is None and config.has_credentials:
            remote = RemoteQuestionGenerator(config)
        self.remote = remote

    async def generate(self, source_text: str) -> GenerationResult:
        if not source_text or not source_text.strip():
            raise GenerationUnavailableError("No source text to generate questions from")

        if self.remote is None:
            logger.info("No remote credentials configured, using the offline generator.")
            return self._run_offline(source_text, GenerationSource.OFFLINE)

        try:
            return await self._run_remote(source_text)
        except RemoteGenerationError as e:
            if not self.config.offline_fallback:
                logger.error(f"Remote generation failed and offline fallback is disabled: {e}")
                raise GenerationUnavailableError(f"Remote generation failed: {e}") from e
            logger.warning(f"Remote generation failed, falling back to the offline generator: {e}")
            return self._run_offline(source_text, GenerationSource.FALLBACK, fallback_reason=str(e))

    async def _run_remote(self, source_text: str) -> GenerationResult:
        generated = await self.remote.generate(source_text)
        kept, dropped = verify_candidates(generated)
        for reason in dropped:
            logger.info(f"Verifier dropped {reason}")
        if not kept:
            raise RemoteGenerationError(
                f"Remote model produced no usable questions ({len(generated)} generated, {len(dropped)} dropped)"
            )
        logger.info(f"Generated {len(kept)} questions remotely ({len(dropped)} dropped by the verifier).")
        return GenerationResult(
            candidates=format_candidates(kept),
            source=GenerationSource.REMOTE,
            dropped=dropped,
        )

    def _run_offline(self, source_text: str, source: GenerationSource,
                     fallback_reason: Optional[str] = None) -> GenerationResult:
        kept, dropped = verify_candidates(generate_offline(source_text))
        return GenerationResult(
            candidates=format_candidates(kept),
            source=source,
            fallback_reason=fallback_reason,
            dropped=dropped,
        )
