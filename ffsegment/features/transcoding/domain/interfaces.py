from abc import ABC, abstractmethod
from typing import Optional
from ffsegment.features.scratch_storage.domain.interfaces import IScratchWorkspace
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile
from .models import TranscodeRequest


class TranscodeError(RuntimeError):
    """Raised when the transcoder rejects the input or its parameters."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


class ITranscoder(ABC):
    """
    Contract for the conversion engine.
    Abstracts away the underlying tool (FFmpeg) from the segmentation loop.
    """

    @abstractmethod
    def transcode(self, request: TranscodeRequest, workspace: IScratchWorkspace) -> TemporaryMediaFile:
        """
        Produces one output file covering as much of the remaining input as
        the size cap allows.

        Args:
            request: Source, start offset, target format and optional size cap.
            workspace: Scratch area where the output file is allocated.

        Returns:
            The new output file. The caller owns it from here on.

        Raises:
            TranscodeError: If the underlying process fails.
            ToolTimeoutError: If the process did not finish in time.
        """
        pass
