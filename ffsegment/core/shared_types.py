import re
import time
from dataclasses import dataclass
from typing import Optional

# Used as a file suffix, an ffmpeg muxer name and a tar entry suffix
FORMAT_TOKEN = re.compile(r"[a-z0-9_]+")


def normalize_format(token: str) -> str:
    """Turns '.MP4 ' into 'mp4'. Returns an empty string for blank input."""
    return (token or "").strip().lstrip(".").lower()


def is_format_token(token: str) -> bool:
    return FORMAT_TOKEN.fullmatch(token) is not None


@dataclass(frozen=True)
class Deadline:
    """
    Value Object representing a point on the monotonic clock after which
    work for a request must stop. A deadline without expiry never expires.
    """
    expires_at: Optional[float] = None

    @classmethod
    def after(cls, seconds: Optional[float]) -> "Deadline":
        if seconds is None:
            return cls()
        if seconds <= 0:
            raise ValueError(f"Timeout must be positive: {seconds}")
        return cls(time.monotonic() + seconds)

    @property
    def expired(self) -> bool:
        return self.expires_at is not None and time.monotonic() >= self.expires_at

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when there is no deadline."""
        if self.expires_at is None:
            return None
        return max(self.expires_at - time.monotonic(), 0.0)
