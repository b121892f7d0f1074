import subprocess
import logging
from typing import Optional
from ffsegment.core.config.settings import settings
from ffsegment.core.exceptions import ToolTimeoutError
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile
from ..domain.interfaces import IDurationProber, ProbeError

logger = logging.getLogger(__name__)


def parse_duration(raw_output: bytes) -> float:
    """
    Parses ffprobe's 'format=duration' output.
    Only the integer-seconds part before the first '.' is kept.
    """
    try:
        text = raw_output.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ProbeError(f"Invalid UTF-8 output from ffprobe: {e}") from e

    seconds_text = text.split(".", 1)[0].strip()
    try:
        duration = float(seconds_text)
    except ValueError as e:
        raise ProbeError(f"Failed to convert duration to float: {text.strip()!r}") from e

    if duration < 0:
        raise ProbeError(f"ffprobe reported a negative duration: {duration}")
    return duration


class FFprobeDurationAdapter(IDurationProber):
    """
    Concrete implementation of IDurationProber using ffprobe.
    Reads the container-level duration only (no stream decoding).
    """

    def probe(self, media_file: TemporaryMediaFile, timeout: Optional[float] = None) -> float:
        # -show_entries format=duration: Only ask for the container duration
        # -v quiet: Nothing on stderr
        # -of default=noprint_wrappers=1:nokey=1: Print the bare value
        cmd = [
            settings.FFPROBE_BINARY,
            "-i", str(media_file.path),
            "-show_entries", "format=duration",
            "-v", "quiet",
            "-of", "default=noprint_wrappers=1:nokey=1",
        ]

        logger.debug(f"Executing FFprobe: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                timeout=timeout
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"FFprobe timed out after {timeout}s on {media_file.name}")
            raise ToolTimeoutError(cmd, timeout) from e
        except OSError as e:
            logger.error(f"Failed to execute ffprobe: {e}")
            raise ProbeError(f"Failed to execute ffprobe: {e}") from e

        if result.returncode != 0:
            logger.error(f"FFprobe failed (code {result.returncode}) on {media_file.name}")
            raise ProbeError(f"ffprobe exited with status {result.returncode} for {media_file.path}")

        duration = parse_duration(result.stdout)
        logger.debug(f"FFprobe measured {duration}s for {media_file.name}")
        return duration
