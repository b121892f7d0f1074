"""Failures of a segmentation run. Every one of them aborts the whole request."""

from typing import Optional


class SegmentationError(Exception):
    """Base class for segmentation failures."""


class ProbeFailed(SegmentationError):
    """
    Raised when a duration could not be measured.
    'index' is None for the initial probe of the source file.
    """

    def __init__(self, index: Optional[int] = None):
        self.index = index
        target = "source file" if index is None else f"segment {index}"
        super().__init__(f"Duration probe failed for {target}")


class TranscodeFailed(SegmentationError):
    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Transcoding failed for segment {index}")


class NoProgress(SegmentationError):
    """Raised when a produced segment does not advance the offset."""

    def __init__(self, index: int, offset_seconds: float):
        self.index = index
        self.offset_seconds = offset_seconds
        super().__init__(f"Segment {index} at offset {offset_seconds}s has no measurable duration")


class SegmentationTimeout(SegmentationError):
    def __init__(self, timeout_seconds: Optional[float]):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Segmentation did not finish within {timeout_seconds}s")
