"""ffmpeg wrapper that turns uploaded video into mono 16 kHz WAV audio."""

import asyncio
from pathlib import Path

import structlog

from meeting_memory.exceptions import TranscodeError

logger = structlog.get_logger(__name__)

SAMPLE_RATE_HZ = 16000
CHANNELS = 1


class Transcoder:
    """Runs ffmpeg as a subprocess without blocking the event loop."""

    def __init__(self, ffmpeg_path: str = "ffmpeg"):
        self.ffmpeg_path = ffmpeg_path

    def build_command(self, input_path: Path, output_path: Path) -> list[str]:
        return [
            self.ffmpeg_path,
            "-y",
            "-i",
            str(input_path),
            "-ac",
            str(CHANNELS),
            "-ar",
            str(SAMPLE_RATE_HZ),
            str(output_path),
        ]

    async def to_wav(self, input_path: Path, output_path: Path) -> Path:
        """
        Extract the audio track of `input_path` into `output_path`.

        Raises:
            TranscodeError: If ffmpeg cannot be started or exits non-zero
        """
        cmd = self.build_command(input_path, output_path)
        logger.debug("Starting ffmpeg", input_path=str(input_path))

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise TranscodeError(f"ffmpeg could not be started: {e}") from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-500:]
            logger.error(
                "ffmpeg failed", returncode=process.returncode, stderr_tail=tail
            )
            raise TranscodeError(
                f"ffmpeg failed with exit code {process.returncode}",
                returncode=process.returncode,
            )

        logger.info("Audio extracted", output_path=str(output_path))
        return output_path
