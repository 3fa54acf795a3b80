"""
Ingestion pipeline: one uploaded recording in, one persisted Meeting out.

Stages run strictly in order. Each stage is declared fatal or recoverable
when the driver runs it: a fatal failure aborts the run with an
IngestionError, a recoverable one is logged and replaced by its fallback.
Temp files are registered on an ExitStack as soon as their paths exist and
are removed on every exit path.
"""

import asyncio
from collections.abc import AsyncIterable, Awaitable, Callable, Iterator
from contextlib import ExitStack, contextmanager
import os
from pathlib import Path
import tempfile
import time
from typing import Any, Protocol, TypeVar
import uuid

from pydantic import ValidationError
from pydantic_ai.exceptions import UnexpectedModelBehavior
import structlog

from meeting_memory.exceptions import IngestionError, MalformedOutputError, Stage
from meeting_memory.ingestion.agents import (
    NO_SUMMARY,
    action_items_agent,
    summary_agent,
)
from meeting_memory.ingestion.calendar import create_event_links
from meeting_memory.ingestion.chunking import CHUNK_WORDS, split_into_windows
from meeting_memory.ingestion.inference import TranscriptionResult
from meeting_memory.store import ActionItem, Chunk, Meeting, MeetingStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")

TITLE_CHARS = 60
IMAGE_TITLE_CHARS = 40
IMAGE_MAX_ACTIONS = 4

_FATAL = object()

ILLUSTRATION_PROMPT = """Professional slide.
Title: "{title}".
Subtitle: key actions - {bullets}.
Style: flat illustration, soft gradients, corporate blue and teal accents.
Include small action-item icons (checkmark, calendar, chat bubble)."""


class Inference(Protocol):
    async def transcribe(self, audio_path: Path) -> TranscriptionResult: ...

    async def embed(self, text: str) -> list[float]: ...

    async def generate_image(self, prompt: str) -> str: ...


class AudioTranscoder(Protocol):
    async def to_wav(self, input_path: Path, output_path: Path) -> Path: ...


def is_video(content_type: str | None) -> bool:
    return bool(content_type) and content_type.strip().lower().startswith("video/")


@contextmanager
def scoped_temp_path(suffix: str) -> Iterator[Path]:
    """Reserve a temp file path and delete the file when the scope exits."""
    fd, name = tempfile.mkstemp(prefix="meeting-", suffix=suffix)
    path = Path(name)
    try:
        os.close(fd)
        yield path
    finally:
        path.unlink(missing_ok=True)


def build_illustration_prompt(summary: str, actions: list[ActionItem]) -> str:
    bullets = " • ".join(a.title for a in actions[:IMAGE_MAX_ACTIONS])
    return ILLUSTRATION_PROMPT.format(
        title=summary[:IMAGE_TITLE_CHARS], bullets=bullets
    )


class IngestionPipeline:
    """Turns a raw audio/video upload into a Meeting appended to the store."""

    def __init__(
        self,
        store: MeetingStore,
        inference: Inference,
        transcoder: AudioTranscoder,
    ):
        self._store = store
        self._inference = inference
        self._transcoder = transcoder

    async def ingest(
        self,
        stream: AsyncIterable[bytes] | bytes,
        content_type: str | None,
    ) -> Meeting:
        """
        Run every stage for one recording.

        Raises:
            IngestionError: On the first fatal stage failure; nothing is persisted
        """
        run_id = uuid.uuid4().hex[:12]
        log = logger.bind(run_id=run_id)
        video = is_video(content_type)
        start_time = time.time()
        log.info("Ingestion started", content_type=content_type, video=video)

        with ExitStack() as cleanup:
            upload_path = cleanup.enter_context(
                scoped_temp_path(".mp4" if video else ".mp3")
            )
            size = await self._run_stage(
                log, Stage.RECEIVE, lambda: _write_upload(stream, upload_path)
            )
            log.info("Upload received", size_bytes=size)

            audio_path = upload_path
            if video:
                wav_path = cleanup.enter_context(scoped_temp_path(".wav"))
                audio_path = await self._run_stage(
                    log,
                    Stage.NORMALIZE,
                    lambda: self._transcoder.to_wav(upload_path, wav_path),
                )

            transcript = await self._run_stage(
                log, Stage.TRANSCRIBE, lambda: self._transcribe(audio_path, log)
            )
            summary = await self._run_stage(
                log,
                Stage.SUMMARIZE,
                lambda: self._summarize(transcript, log),
                fallback=NO_SUMMARY,
            )
            actions = await self._run_stage(
                log, Stage.EXTRACT_ACTIONS, lambda: self._extract_actions(transcript)
            )
            calendar_links = create_event_links(actions)
            image_url = await self._run_stage(
                log,
                Stage.ILLUSTRATE,
                lambda: self._inference.generate_image(
                    build_illustration_prompt(summary, actions)
                ),
            )
            chunks = await self._run_stage(
                log, Stage.EMBED_CHUNKS, lambda: self._embed_chunks(transcript)
            )

            meeting = Meeting(
                id=str(uuid.uuid4()),
                title=summary[:TITLE_CHARS],
                transcript=transcript,
                summary=summary,
                actions=actions,
                calendar_links=calendar_links,
                image_url=image_url,
                chunks=chunks,
            )
            await self._run_stage(
                log, Stage.PERSIST, lambda: self._store.append(meeting)
            )

        log.info(
            "Ingestion completed",
            meeting_id=meeting.id,
            actions=len(actions),
            chunks=len(chunks),
            total_time_ms=int((time.time() - start_time) * 1000),
        )
        return meeting

    async def _run_stage(
        self,
        log: Any,
        stage: Stage,
        step: Callable[[], Awaitable[T]],
        fallback: Any = _FATAL,
    ) -> T:
        """Run one stage; raise IngestionError if fatal, else substitute fallback."""
        stage_start = time.time()
        try:
            result = await step()
        except Exception as e:
            stage_time = int((time.time() - stage_start) * 1000)
            if fallback is _FATAL:
                log.error(
                    "Ingestion stage failed",
                    stage=stage.value,
                    error=str(e),
                    error_type=type(e).__name__,
                    stage_time_ms=stage_time,
                )
                raise IngestionError(stage, str(e) or type(e).__name__) from e
            log.warning(
                "Ingestion stage degraded, using fallback",
                stage=stage.value,
                error=str(e),
                error_type=type(e).__name__,
                stage_time_ms=stage_time,
            )
            return fallback

        log.debug(
            "Ingestion stage completed",
            stage=stage.value,
            stage_time_ms=int((time.time() - stage_start) * 1000),
        )
        return result

    async def _transcribe(self, audio_path: Path, log: Any) -> str:
        result = await self._inference.transcribe(audio_path)
        labelled = result.labelled_text()
        if not labelled.strip():
            log.warning("Transcription returned no text")
        return labelled

    async def _summarize(self, transcript: str, log: Any) -> str:
        run = await summary_agent.run(transcript)
        summary = (run.output or "").strip()
        if not summary:
            log.warning("Summary empty, using placeholder")
            return NO_SUMMARY
        return summary

    async def _extract_actions(self, transcript: str) -> list[ActionItem]:
        try:
            run = await action_items_agent.run(transcript)
        except (UnexpectedModelBehavior, ValidationError) as e:
            raise MalformedOutputError(f"Malformed action item output: {e}") from e
        return list(run.output.items)

    async def _embed_chunks(self, transcript: str) -> list[Chunk]:
        # One call per window, in order; a single failure aborts the run
        chunks = []
        for text in split_into_windows(transcript, CHUNK_WORDS):
            embedding = await self._inference.embed(text)
            chunks.append(Chunk(text=text, embedding=embedding))
        return chunks


async def _write_upload(stream: AsyncIterable[bytes] | bytes, path: Path) -> int:
    """Spool the upload to `path` in a worker thread and return its size."""
    if isinstance(stream, (bytes, bytearray)):
        await asyncio.to_thread(path.write_bytes, stream)
        return len(stream)

    size = 0
    f = await asyncio.to_thread(path.open, "wb")
    try:
        async for block in stream:
            await asyncio.to_thread(f.write, block)
            size += len(block)
    finally:
        await asyncio.to_thread(f.close)
    return size
