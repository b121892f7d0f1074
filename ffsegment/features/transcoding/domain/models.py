from dataclasses import dataclass
from typing import Optional
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile


@dataclass(frozen=True)
class TranscodeRequest:
    """
    One ffmpeg invocation: convert 'source' from 'start_offset_seconds'
    onwards, stopping early once the output reaches 'max_output_bytes'.
    """
    source: TemporaryMediaFile
    start_offset_seconds: float
    target_format: str
    max_output_bytes: Optional[int] = None
    index: int = 0
    timeout_seconds: Optional[float] = None

    def __post_init__(self):
        if self.start_offset_seconds < 0:
            raise ValueError(f"Start offset cannot be negative: {self.start_offset_seconds}")
        if not self.target_format:
            raise ValueError("Target format cannot be empty.")
        if self.max_output_bytes is not None and self.max_output_bytes <= 0:
            raise ValueError(f"Output size cap must be positive: {self.max_output_bytes}")
        if self.index < 0:
            raise ValueError(f"Segment index cannot be negative: {self.index}")

    @property
    def output_prefix(self) -> str:
        return f"{self.index:08d}_"
