"""Tests for the ffmpeg transcoder."""

from pathlib import Path
import shutil

import pytest

from meeting_memory.exceptions import TranscodeError
from meeting_memory.ingestion import Transcoder


class TestTranscoder:
    def test_command_requests_mono_16khz(self):
        cmd = Transcoder("ffmpeg").build_command(Path("in.mp4"), Path("out.wav"))

        assert cmd == [
            "ffmpeg", "-y", "-i", "in.mp4", "-ac", "1", "-ar", "16000", "out.wav"
        ]

    @pytest.mark.asyncio
    async def test_missing_binary_raises(self, tmp_path):
        transcoder = Transcoder(str(tmp_path / "no-such-ffmpeg"))

        with pytest.raises(TranscodeError, match="could not be started"):
            await transcoder.to_wav(tmp_path / "in.mp4", tmp_path / "out.wav")

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("false") is None, reason="needs `false`")
    async def test_nonzero_exit_raises_with_returncode(self, tmp_path):
        transcoder = Transcoder(shutil.which("false"))

        with pytest.raises(TranscodeError) as exc_info:
            await transcoder.to_wav(tmp_path / "in.mp4", tmp_path / "out.wav")

        assert exc_info.value.returncode == 1

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("true") is None, reason="needs `true`")
    async def test_zero_exit_returns_output_path(self, tmp_path):
        transcoder = Transcoder(shutil.which("true"))
        output_path = tmp_path / "out.wav"

        assert await transcoder.to_wav(tmp_path / "in.mp4", output_path) == output_path
