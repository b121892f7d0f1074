import subprocess
import logging
from typing import List
from ffsegment.core.config.settings import settings
from ffsegment.core.exceptions import ToolTimeoutError
from ffsegment.features.scratch_storage.domain.interfaces import IScratchWorkspace
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile
from ..domain.interfaces import ITranscoder, TranscodeError
from ..domain.models import TranscodeRequest

logger = logging.getLogger(__name__)

# Keep log lines readable when ffmpeg dumps a long stderr
STDERR_TAIL_CHARS = 2000


class FFmpegTranscodeAdapter(ITranscoder):
    """
    Concrete implementation of ITranscoder using FFmpeg.
    The output container is chosen explicitly with -f, not guessed from the extension.
    """

    def build_command(self, request: TranscodeRequest, output: TemporaryMediaFile) -> List[str]:
        # -y: Overwrite the (pre-allocated, empty) output file
        # -i: Input file
        # -ss: Start offset, applied after the input (accurate decode-and-discard seek)
        # -fs: Stop writing once the output reaches this many bytes
        # -f: Output container format
        cmd = [
            settings.FFMPEG_BINARY,
            "-y",
            "-i", str(request.source.path),
            "-ss", str(request.start_offset_seconds),
        ]
        if request.max_output_bytes is not None:
            cmd += ["-fs", str(request.max_output_bytes)]
        cmd += [
            "-f", request.target_format,
            str(output.path)
        ]
        return cmd

    def transcode(self, request: TranscodeRequest, workspace: IScratchWorkspace) -> TemporaryMediaFile:
        # 1. Allocate the output next to the other scratch files of this request
        output = workspace.allocate(request.target_format, prefix=request.output_prefix)
        cmd = self.build_command(request, output)

        logger.info(f"Executing FFmpeg Transcode: {' '.join(cmd)}")

        # 2. Execute
        try:
            subprocess.run(
                cmd,
                check=True,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=request.timeout_seconds
            )
        except subprocess.TimeoutExpired as e:
            workspace.discard(output)
            logger.error(f"FFmpeg timed out after {request.timeout_seconds}s on segment {request.index}")
            raise ToolTimeoutError(cmd, request.timeout_seconds) from e
        except subprocess.CalledProcessError as e:
            workspace.discard(output)
            error_message = (e.stderr or "Unknown FFmpeg error")[-STDERR_TAIL_CHARS:]
            logger.error(f"FFmpeg Transcode Failed (code {e.returncode}). STDERR: {error_message}")
            raise TranscodeError(f"FFmpeg conversion failed: {error_message}", returncode=e.returncode) from e
        except OSError as e:
            workspace.discard(output)
            logger.error(f"Failed to execute ffmpeg: {e}")
            raise TranscodeError(f"Failed to execute ffmpeg: {e}") from e

        logger.debug(f"FFmpeg wrote {output.name} ({output.size_bytes()} bytes)")
        return output
