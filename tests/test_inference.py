"""Tests for the OpenAI inference client."""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from meeting_memory.config import Settings
from meeting_memory.exceptions import MalformedOutputError
from meeting_memory.ingestion.inference import (
    InferenceClient,
    SpeakerSegment,
    TranscriptionResult,
    speaker_tag,
)


def connection_error() -> openai.APIConnectionError:
    return openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/embeddings")
    )


@pytest.fixture
def fake_openai():
    """AsyncOpenAI stand-in with the three endpoints used by the client."""
    client = Mock()
    client.audio.transcriptions.create = AsyncMock(
        return_value=SimpleNamespace(text="hello world")
    )
    client.embeddings.create = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2, 0.3])])
    )
    client.images.generate = AsyncMock(
        return_value=SimpleNamespace(data=[SimpleNamespace(url="https://img.example/1.png")])
    )
    return client


def make_client(fake_openai, **overrides) -> InferenceClient:
    config = Settings(openai_api_key="test-key", inference_max_attempts=3, **overrides)
    return InferenceClient(config, client=fake_openai, retry_wait_seconds=0)


class TestTranscriptionResult:
    def test_plain_text_without_segments(self):
        assert TranscriptionResult(text="just text").labelled_text() == "just text"

    def test_segments_become_speaker_lines(self):
        result = TranscriptionResult(
            text="ignored",
            segments=[
                SpeakerSegment(speaker="0", text=" Let's start. "),
                SpeakerSegment(speaker="1", text="Sounds good."),
            ],
        )

        assert result.labelled_text() == "S0: Let's start.\nS1: Sounds good."

    @pytest.mark.parametrize(
        "speaker,expected", [("0", "S0"), (3, "S3"), ("A", "A"), (" B ", "B")]
    )
    def test_speaker_tag(self, speaker, expected):
        assert speaker_tag(speaker) == expected


class TestTranscribe:
    @pytest.mark.asyncio
    async def test_plain_transcription(self, fake_openai, tmp_path):
        audio = tmp_path / "a.mp3"
        result = await make_client(fake_openai).transcribe(audio)

        assert result == TranscriptionResult(text="hello world")
        kwargs = fake_openai.audio.transcriptions.create.call_args.kwargs
        assert kwargs["model"] == "whisper-1"
        assert kwargs["file"] == Path(audio)
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_diarized_transcription(self, fake_openai, tmp_path):
        fake_openai.audio.transcriptions.create.return_value = SimpleNamespace(
            text="hi there bye",
            segments=[
                SimpleNamespace(speaker="A", text="hi there"),
                SimpleNamespace(speaker="B", text="bye"),
            ],
        )
        client = make_client(
            fake_openai,
            transcription_model="gpt-4o-transcribe-diarize",
            transcription_diarize=True,
        )

        result = await client.transcribe(tmp_path / "a.mp3")

        assert result.labelled_text() == "A: hi there\nB: bye"
        kwargs = fake_openai.audio.transcriptions.create.call_args.kwargs
        assert kwargs["response_format"] == "diarized_json"
        assert kwargs["chunking_strategy"] == "auto"

    @pytest.mark.asyncio
    async def test_segments_without_speakers_ignored(self, fake_openai, tmp_path):
        fake_openai.audio.transcriptions.create.return_value = SimpleNamespace(
            text="hello world", segments=[SimpleNamespace(text="hello world")]
        )

        result = await make_client(fake_openai).transcribe(tmp_path / "a.mp3")

        assert result.segments == []
        assert result.labelled_text() == "hello world"

    @pytest.mark.asyncio
    async def test_missing_text_is_malformed(self, fake_openai, tmp_path):
        fake_openai.audio.transcriptions.create.return_value = SimpleNamespace()

        with pytest.raises(MalformedOutputError):
            await make_client(fake_openai).transcribe(tmp_path / "a.mp3")


class TestEmbed:
    @pytest.mark.asyncio
    async def test_returns_first_vector(self, fake_openai):
        vector = await make_client(fake_openai).embed("hello")

        assert vector == [0.1, 0.2, 0.3]
        fake_openai.embeddings.create.assert_awaited_once_with(
            model="text-embedding-3-small", input="hello"
        )

    @pytest.mark.asyncio
    async def test_empty_data_is_malformed(self, fake_openai):
        fake_openai.embeddings.create.return_value = SimpleNamespace(data=[])

        with pytest.raises(MalformedOutputError):
            await make_client(fake_openai).embed("hello")


class TestRetry:
    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, fake_openai):
        ok = SimpleNamespace(data=[SimpleNamespace(embedding=[1.0])])
        fake_openai.embeddings.create.side_effect = [connection_error(), ok]

        vector = await make_client(fake_openai).embed("hello")

        assert vector == [1.0]
        assert fake_openai.embeddings.create.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, fake_openai):
        fake_openai.embeddings.create.side_effect = connection_error()

        with pytest.raises(openai.APIConnectionError):
            await make_client(fake_openai).embed("hello")
        assert fake_openai.embeddings.create.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_error_not_retried(self, fake_openai):
        fake_openai.embeddings.create.side_effect = ValueError("bad input")

        with pytest.raises(ValueError):
            await make_client(fake_openai).embed("hello")
        assert fake_openai.embeddings.create.await_count == 1


class TestGenerateImage:
    @pytest.mark.asyncio
    async def test_returns_url(self, fake_openai):
        url = await make_client(fake_openai).generate_image("a slide")

        assert url == "https://img.example/1.png"
        fake_openai.images.generate.assert_awaited_once_with(
            model="dall-e-3", prompt="a slide", n=1, size="1024x1024"
        )

    @pytest.mark.asyncio
    async def test_missing_url_is_malformed(self, fake_openai):
        fake_openai.images.generate.return_value = SimpleNamespace(
            data=[SimpleNamespace(url=None)]
        )

        with pytest.raises(MalformedOutputError):
            await make_client(fake_openai).generate_image("a slide")
