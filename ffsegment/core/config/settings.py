# File: ffsegment/core/config/settings.py

import os
import shutil
from pathlib import Path
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    value = float(raw)
    return value if value > 0 else None


class Settings:
    # --- Paths ---
    # ffsegment/core/config/settings.py -> ffsegment/core/config -> ffsegment/core -> ffsegment -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent

    # Unset means the system temp directory is used for per-request scratch space
    SCRATCH_DIR: Optional[Path] = Path(os.environ["SCRATCH_DIR"]) if os.getenv("SCRATCH_DIR") else None

    # --- External Tools ---
    # Auto-detect ffmpeg/ffprobe or use env var
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    # --- Request Limits ---
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024 * 1024)))  # 2 GiB
    UPLOAD_CHUNK_BYTES: int = int(os.getenv("UPLOAD_CHUNK_BYTES", str(1024 * 1024)))

    # No timeout unless explicitly configured
    REQUEST_TIMEOUT_SECONDS: Optional[float] = _optional_float("REQUEST_TIMEOUT_SECONDS")

    # --- Archive ---
    ARCHIVE_COMPRESSION_LEVEL: int = int(os.getenv("ARCHIVE_COMPRESSION_LEVEL", "6"))

    # --- Server ---
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "DEBUG").upper()

    def ensure_dirs(self):
        """Creates the scratch directory if one is configured."""
        if self.SCRATCH_DIR is not None:
            self.SCRATCH_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
