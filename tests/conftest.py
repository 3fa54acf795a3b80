"""Shared test configuration and fixtures for all tests."""

from collections.abc import Generator
import os
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

# Mock environment variables before the app modules read settings
os.environ["OPENAI_API_KEY"] = "test-key-123"
os.environ.setdefault("DATA_PATH", "data/test-db.json")

from pydantic_ai import models  # noqa: E402

from meeting_memory.ingestion.inference import TranscriptionResult  # noqa: E402
from meeting_memory.store import ActionItem, Chunk, Meeting, MeetingStore  # noqa: E402

# Block real model requests during testing
models.ALLOW_MODEL_REQUESTS = False


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "db.json"


@pytest.fixture
def store(store_path: Path) -> MeetingStore:
    """Loaded, empty store backed by a temp file."""
    meeting_store = MeetingStore(store_path)
    meeting_store.load()
    return meeting_store


@pytest.fixture
def mock_inference() -> Mock:
    """Inference stub: 'hello world' transcript, constant 3-d embeddings."""
    inference = Mock()
    inference.transcribe = AsyncMock(
        return_value=TranscriptionResult(text="hello world")
    )
    inference.embed = AsyncMock(return_value=[0.1, 0.1, 0.1])
    inference.generate_image = AsyncMock(return_value="https://images.example/slide.png")
    return inference


@pytest.fixture
def mock_transcoder() -> Mock:
    """Transcoder stub that 'converts' by returning the output path."""
    transcoder = Mock()

    async def to_wav(input_path: Path, output_path: Path) -> Path:
        return output_path

    transcoder.to_wav = AsyncMock(side_effect=to_wav)
    return transcoder


def make_meeting(
    meeting_id: str,
    embeddings: list[list[float]] | None = None,
    texts: list[str] | None = None,
) -> Meeting:
    """Meeting with one chunk per embedding and a single action item."""
    embeddings = embeddings or [[1.0, 0.0]]
    texts = texts or [f"{meeting_id} chunk {i}" for i in range(len(embeddings))]
    return Meeting(
        id=meeting_id,
        title=f"Meeting {meeting_id}",
        transcript=" ".join(texts),
        summary=f"Summary of {meeting_id}.",
        actions=[ActionItem(title="Follow up", owner="Ana")],
        calendar_links=["https://calendar.google.com/calendar/r/eventedit?text=x"],
        image_url="https://images.example/slide.png",
        chunks=[Chunk(text=t, embedding=e) for t, e in zip(texts, embeddings)],
    )


@pytest.fixture
def meeting_factory():
    return make_meeting


@pytest.fixture
def sample_transcript() -> Generator[str, None, None]:
    """130-word two-speaker transcript."""
    first = " ".join(f"alpha{i}" for i in range(70))
    second = " ".join(f"beta{i}" for i in range(58))
    yield f"S0: {first}\nS1: {second}"
