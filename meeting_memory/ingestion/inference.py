"""
OpenAI inference calls that are not chat completions.

Speech-to-text, embeddings and image generation go straight through the
OpenAI SDK. Chat-style calls (summary, action items) are pydantic_ai agents,
see `meeting_memory.ingestion.agents`.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import openai
from openai import AsyncOpenAI
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from meeting_memory.config import Settings, settings as default_settings
from meeting_memory.exceptions import MalformedOutputError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Network-level failures worth another attempt; everything else surfaces at once
TRANSIENT_ERRORS = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)


@dataclass(frozen=True)
class SpeakerSegment:
    speaker: str
    text: str


@dataclass(frozen=True)
class TranscriptionResult:
    """Plain transcript text plus optional speaker-labelled segments."""

    text: str
    segments: list[SpeakerSegment] = field(default_factory=list)

    def labelled_text(self) -> str:
        """'S<n>: text' lines in segment order, or the plain text verbatim."""
        if not self.segments:
            return self.text
        return "\n".join(
            f"{speaker_tag(s.speaker)}: {s.text.strip()}" for s in self.segments
        )


def speaker_tag(speaker: Any) -> str:
    label = str(speaker).strip()
    return f"S{label}" if label.isdigit() else label


class InferenceClient:
    """Async OpenAI client for transcription, embeddings and illustrations."""

    def __init__(
        self,
        config: Settings | None = None,
        client: AsyncOpenAI | None = None,
        retry_wait_seconds: float = 1.0,
    ):
        self.config = config or default_settings
        self._client = client
        self._retry_wait_seconds = retry_wait_seconds

    @property
    def client(self) -> AsyncOpenAI:
        """Lazily create the SDK client so the app can start without a key."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.config.openai_api_key or None,
                # Retries are handled here so attempts are logged uniformly
                max_retries=0,
            )
        return self._client

    async def _with_retry(
        self, operation: str, call: Callable[[], Awaitable[T]]
    ) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.inference_max_attempts),
            wait=wait_exponential(multiplier=self._retry_wait_seconds, max=10),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        "Retrying inference call",
                        operation=operation,
                        attempt=attempt.retry_state.attempt_number,
                    )
                return await call()
        raise AssertionError("unreachable")  # pragma: no cover

    async def transcribe(self, audio_path: Path) -> TranscriptionResult:
        """Speech-to-text, with speaker segments when diarization is enabled."""
        params: dict[str, Any] = {"model": self.config.transcription_model}
        if self.config.transcription_diarize:
            params["response_format"] = "diarized_json"
            params["chunking_strategy"] = "auto"

        response = await self._with_retry(
            "transcribe",
            lambda: self.client.audio.transcriptions.create(
                file=Path(audio_path), **params
            ),
        )

        text = getattr(response, "text", None)
        if text is None:
            raise MalformedOutputError("Transcription response has no text")

        segments = [
            SpeakerSegment(speaker=seg.speaker, text=seg.text)
            for seg in getattr(response, "segments", None) or []
            if getattr(seg, "speaker", None) is not None
        ]
        logger.info(
            "Audio transcribed",
            model=self.config.transcription_model,
            chars=len(text),
            speaker_segments=len(segments),
        )
        return TranscriptionResult(text=text, segments=segments)

    async def embed(self, text: str) -> list[float]:
        response = await self._with_retry(
            "embed",
            lambda: self.client.embeddings.create(
                model=self.config.embedding_model, input=text
            ),
        )
        if not response.data:
            raise MalformedOutputError("Embedding response has no vectors")
        return list(response.data[0].embedding)

    async def generate_image(self, prompt: str) -> str:
        """Generate one illustration and return its URL."""
        response = await self._with_retry(
            "generate_image",
            lambda: self.client.images.generate(
                model=self.config.image_model,
                prompt=prompt,
                n=1,
                size=self.config.image_size,
            ),
        )
        url = response.data[0].url if response.data else None
        if not url:
            raise MalformedOutputError("Image response has no URL")
        logger.info("Illustration generated", model=self.config.image_model)
        return url
