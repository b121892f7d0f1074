from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TemporaryMediaFile:
    """
    Entity representing a scratch media file owned by a single request.
    The format is the file's extension without the leading dot.
    """
    path: Path
    format: str

    def __post_init__(self):
        if str(self.path).strip() in ("", "."):
            raise ValueError("File path cannot be empty.")
        if not self.format:
            raise ValueError(f"Media format cannot be empty for {self.path}")

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        return self.path.exists()

    def size_bytes(self) -> int:
        return self.path.stat().st_size
