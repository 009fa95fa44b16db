import json
from typing import Any, Protocol

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from app.models.exercise import ExerciseRecord, ExtractionResult
from app.settings import settings
from app.utils.log import logger
from app.utils.prompts import SYSTEM_PROMPT, build_extraction_prompt
from app.utils.taxonomy import normalise_exercise_name

AUDIO_FILENAME = "audio.m4a"
AUDIO_CONTENT_TYPE = "audio/mp4"


class AIServiceError(Exception):
    """Raised when the transcription or extraction model call fails."""

    pass


class Transcriber(Protocol):
    def transcribe_audio(self, audio: bytes) -> str: ...


class ExerciseExtractor(Protocol):
    def extract_exercises(self, transcription: str) -> ExtractionResult: ...


def get_openai_client() -> OpenAI:
    if not settings.OPENAI_API_KEY:
        logger.error("OPENAI_API_KEY is not configured")
        raise AIServiceError("Missing OPENAI_API_KEY")
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


def parse_extraction(raw: str) -> ExtractionResult:
    """
    Turn the model's JSON reply into an ExtractionResult.

    Entries that are not valid exercises are dropped, as are repeats of an
    exercise already seen (compared by normalised name).
    """
    try:
        data: Any = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as e:
        logger.error(f"Extraction reply is not JSON: {raw[:200]}")
        raise AIServiceError("Model returned invalid JSON") from e

    if not isinstance(data, dict):
        raise AIServiceError("Model returned unexpected JSON")

    if data.get("not_gym_related") is True:
        return ExtractionResult(not_gym_related=True)

    exercises: list[ExerciseRecord] = []
    seen: set[str] = set()

    for entry in data.get("exercises") or []:
        if not isinstance(entry, dict):
            continue
        try:
            record = ExerciseRecord.model_validate(entry)
        except ValidationError as e:
            logger.warning(f"Skipping invalid exercise {entry!r}: {e.error_count()} errors")
            continue

        key = normalise_exercise_name(record.name)
        if key in seen:
            logger.debug(f"Skipping duplicate exercise '{record.name}'")
            continue
        seen.add(key)
        exercises.append(record)

    return ExtractionResult(exercises=exercises)


class OpenAIWorkoutModel:
    """Whisper transcription plus chat-completion extraction."""

    def __init__(self, client: OpenAI | None = None):
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def transcribe_audio(self, audio: bytes) -> str:
        # language is left for the model to detect (English, Arabic or mixed)
        logger.debug(f"Transcribing {len(audio)} bytes with {settings.TRANSCRIPTION_MODEL}")

        try:
            result = self.client.audio.transcriptions.create(
                model=settings.TRANSCRIPTION_MODEL,
                file=(AUDIO_FILENAME, audio, AUDIO_CONTENT_TYPE),
            )
        except OpenAIError as e:
            logger.error(f"Transcription failed: {e}")
            raise AIServiceError(f"Transcription failed: {e}") from e

        text = result.text or ""
        logger.debug(f"Transcription: {text}")
        return text

    def extract_exercises(self, transcription: str) -> ExtractionResult:
        logger.debug(f"Extracting exercises with {settings.EXTRACTION_MODEL}")

        try:
            response = self.client.chat.completions.create(
                model=settings.EXTRACTION_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_extraction_prompt(transcription)},
                ],
                temperature=settings.EXTRACTION_TEMPERATURE,
                max_tokens=settings.EXTRACTION_MAX_TOKENS,
            )
        except OpenAIError as e:
            logger.error(f"Extraction failed: {e}")
            raise AIServiceError(f"Extraction failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise AIServiceError("Model returned no content")

        logger.debug(f"Extraction reply: {content}")
        return parse_extraction(content)
