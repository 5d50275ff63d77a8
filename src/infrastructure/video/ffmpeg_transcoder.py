"""FFmpeg implementation of HLS transcoding."""

import asyncio
import re
import shutil
import subprocess
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import (
    TranscodeException,
    TranscoderNotAvailableException,
    TranscodeTimeoutException,
)
from src.infrastructure.video.base import HLSProfile, TranscoderBase

# ffmpeg reports the input as "  Duration: 00:01:02.50, start: 0.000000, ..."
DURATION_PATTERN = re.compile(r"Duration:\s*(\d+):(\d{1,2}):(\d{1,2}(?:\.\d+)?)")

# Lines of stderr kept in error messages
STDERR_TAIL_LINES = 15


def parse_duration(ffmpeg_output: str) -> float:
    """Extract the input duration in seconds from ffmpeg's log output.

    Returns 0.0 when the duration is unknown ("Duration: N/A") or missing.
    """
    match = DURATION_PATTERN.search(ffmpeg_output)
    if not match:
        return 0.0
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def _stderr_tail(stderr: bytes | None) -> str:
    if not stderr:
        return "no output"
    lines = stderr.decode("utf-8", errors="ignore").strip().splitlines()
    return "\n".join(lines[-STDERR_TAIL_LINES:]) or "no output"


class FFmpegHLSTranscoder(TranscoderBase):
    """FFmpeg-based HLS transcoder.

    Each call runs one ffmpeg process on the transcoder's own thread pool,
    so the event loop keeps serving other requests while a long transcode
    runs. Runs beyond ``max_workers`` wait for a free worker.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        profile: HLSProfile | None = None,
        timeout_seconds: float | None = None,
        max_workers: int = 2,
    ) -> None:
        """Initialize the transcoder.

        Args:
            ffmpeg_path: Name or path of the ffmpeg executable.
            profile: Encoding parameters. Defaults to HLSProfile().
            timeout_seconds: Kill ffmpeg after this many seconds. None waits
                indefinitely.
            max_workers: ffmpeg processes allowed to run at once.
        """
        self._ffmpeg = ffmpeg_path
        self._profile = profile or HLSProfile()
        self._timeout = timeout_seconds
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="ffmpeg"
        )
        self._logger = get_logger(__name__)

    def is_available(self) -> bool:
        """Whether the configured ffmpeg binary resolves to an executable."""
        return shutil.which(self._ffmpeg) is not None

    def close(self) -> None:
        """Stop accepting transcodes; running ones finish in the background."""
        self._executor.shutdown(wait=False)

    def build_command(
        self,
        executable: str,
        input_path: Path,
        output_path: Path,
    ) -> list[str]:
        """Build the ffmpeg argument list for an HLS run."""
        profile = self._profile
        return [
            executable,
            "-hide_banner",
            "-nostdin",
            "-y",
            "-i",
            str(input_path),
            "-c:v",
            profile.video_codec,
            "-profile:v",
            profile.profile,
            "-level",
            profile.level,
            "-c:a",
            profile.audio_codec,
            "-start_number",
            str(profile.start_number),
            "-hls_time",
            str(profile.segment_seconds),
            "-hls_list_size",
            str(profile.list_size),
            *profile.extra_args,
            "-f",
            "hls",
            str(output_path),
        ]

    @timed
    async def transcode(self, input_path: Path, output_manifest_path: Path) -> float:
        """Transcode a video to HLS and return its duration in seconds."""
        executable = shutil.which(self._ffmpeg)
        if executable is None:
            raise TranscoderNotAvailableException(str(input_path), self._ffmpeg)

        cmd = self.build_command(executable, input_path, output_manifest_path)
        self._logger.info(
            "Starting HLS transcode",
            extra={
                "input_path": str(input_path),
                "output_path": str(output_manifest_path),
                "command": " ".join(cmd),
            },
        )

        loop = asyncio.get_event_loop()
        try:
            # subprocess.run kills the child before raising TimeoutExpired
            result = await loop.run_in_executor(
                self._executor,
                lambda: subprocess.run(cmd, capture_output=True, timeout=self._timeout),
            )
        except subprocess.TimeoutExpired as e:
            self._logger.error(
                "ffmpeg timed out and was killed",
                extra={"input_path": str(input_path), "timeout_seconds": self._timeout},
            )
            raise TranscodeTimeoutException(str(input_path), e.timeout) from e
        except OSError as e:
            raise TranscodeException(str(input_path), str(e)) from e

        if result.returncode != 0:
            tail = _stderr_tail(result.stderr)
            self._logger.error(
                "ffmpeg exited with an error",
                extra={
                    "input_path": str(input_path),
                    "returncode": result.returncode,
                    "stderr": tail,
                },
            )
            raise TranscodeException(
                str(input_path),
                f"ffmpeg exited with code {result.returncode}: {tail}",
            )

        if not output_manifest_path.exists():
            raise TranscodeException(
                str(input_path),
                f"ffmpeg finished but {output_manifest_path.name} was not written",
            )

        output = result.stderr.decode("utf-8", errors="ignore") if result.stderr else ""
        duration = parse_duration(output)
        if duration <= 0:
            self._logger.warning(
                "ffmpeg did not report a duration",
                extra={"input_path": str(input_path)},
            )

        self._logger.info(
            "Transcoding finished successfully",
            extra={"input_path": str(input_path), "duration_seconds": duration},
        )
        return duration
