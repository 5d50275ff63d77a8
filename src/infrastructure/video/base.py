"""Abstract base classes for video processing services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class HLSProfile:
    """Encoding parameters for a single-rendition HLS output.

    The defaults target broad player compatibility (H.264 baseline, level
    3.0) and on-demand playback: every segment stays in the manifest.
    """

    video_codec: str = "libx264"
    audio_codec: str = "aac"
    profile: str = "baseline"
    level: str = "3.0"
    segment_seconds: int = 10
    start_number: int = 0
    list_size: int = 0
    extra_args: tuple[str, ...] = field(default_factory=tuple)


class TranscoderBase(ABC):
    """Abstract base class for transcoding to a segmented streaming format.

    Implementations should handle:
    - FFmpeg (subprocess)
    """

    @abstractmethod
    async def transcode(self, input_path: Path, output_manifest_path: Path) -> float:
        """Transcode ``input_path`` into a manifest plus segments.

        Segments are written next to ``output_manifest_path``; the directory
        must already exist.

        Args:
            input_path: Source video file.
            output_manifest_path: Where to write the manifest.

        Returns:
            Input duration in seconds, fraction retained.

        Raises:
            TranscoderNotAvailableException: If the binary cannot be found.
            TranscodeTimeoutException: If the configured deadline elapsed.
            TranscodeException: If the run failed or was interrupted.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the external tool can be executed."""

    def close(self) -> None:
        """Release worker resources. The default holds none."""
