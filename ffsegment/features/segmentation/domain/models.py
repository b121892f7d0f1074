from dataclasses import dataclass
from typing import Optional
from ffsegment.core.shared_types import is_format_token, normalize_format
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile


@dataclass(frozen=True)
class MediaBlob:
    """
    Value Object holding the uploaded bytes and their declared format.
    """
    data: bytes
    source_format: str

    def __post_init__(self):
        object.__setattr__(self, "source_format", normalize_format(self.source_format))
        if not self.source_format:
            raise ValueError("Source format cannot be empty.")
        if not is_format_token(self.source_format):
            raise ValueError(f"Source format is not a plain token: {self.source_format!r}")

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class SegmentationRequest:
    source: MediaBlob
    target_format: str
    max_segment_bytes: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "target_format", normalize_format(self.target_format))
        if not self.target_format:
            raise ValueError("Target format cannot be empty.")
        if not is_format_token(self.target_format):
            raise ValueError(f"Target format is not a plain token: {self.target_format!r}")
        if self.max_segment_bytes is not None and self.max_segment_bytes <= 0:
            raise ValueError(f"Maximum segment size must be positive: {self.max_segment_bytes}")


@dataclass(frozen=True)
class Segment:
    """
    One re-encoded chunk of the source with its measured duration.
    """
    index: int
    file: TemporaryMediaFile
    duration_seconds: float

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Segment index cannot be negative: {self.index}")
        if self.duration_seconds < 0:
            raise ValueError(f"Segment duration cannot be negative: {self.duration_seconds}")

    @property
    def archive_name(self) -> str:
        # Zero padding keeps lexical and playback order identical
        return f"{self.index:08d}_.{self.file.format}"
