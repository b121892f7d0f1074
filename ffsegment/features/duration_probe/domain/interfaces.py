from abc import ABC, abstractmethod
from typing import Optional
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile


class ProbeError(RuntimeError):
    """Raised when the playable duration of a file cannot be determined."""


class IDurationProber(ABC):
    """
    Contract for measuring how long a media file plays.
    Abstracts away the underlying tool (ffprobe) from the segmentation loop.
    """

    @abstractmethod
    def probe(self, media_file: TemporaryMediaFile, timeout: Optional[float] = None) -> float:
        """
        Measures the duration of the given file.

        Args:
            media_file: The file to measure.
            timeout: Seconds to wait for the measurement before giving up.

        Returns:
            Duration in seconds (never negative).

        Raises:
            ProbeError: If the tool fails or its output cannot be parsed.
            ToolTimeoutError: If the tool did not finish within 'timeout'.
        """
        pass
