import logging
from typing import List, Optional

from ffsegment.core.exceptions import ToolTimeoutError
from ffsegment.core.shared_types import Deadline
from ffsegment.features.duration_probe.domain.interfaces import IDurationProber, ProbeError
from ffsegment.features.scratch_storage.domain.interfaces import IScratchWorkspace
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile
from ffsegment.features.transcoding.domain.interfaces import ITranscoder, TranscodeError
from ffsegment.features.transcoding.domain.models import TranscodeRequest

from ..domain.errors import NoProgress, ProbeFailed, SegmentationError, SegmentationTimeout, TranscodeFailed
from ..domain.models import Segment, SegmentationRequest

logger = logging.getLogger(__name__)


class SegmentationEngine:
    """
    Splits a source of unknown length into consecutive chunks.

    Each chunk starts where the previous one ended. Because a size cap
    interacts with variable bitrate encoding, the real length of a chunk is
    only known after it is written, so every output is probed again and the
    offset advances by the measured duration.
    """

    def __init__(self, prober: IDurationProber, transcoder: ITranscoder, timeout_seconds: Optional[float] = None):
        self.prober = prober
        self.transcoder = transcoder
        self.timeout_seconds = timeout_seconds

    def segment(self, request: SegmentationRequest, workspace: IScratchWorkspace) -> List[Segment]:
        """
        Runs the probe/transcode loop for one request.

        Returns:
            Segments ordered by index, starting at 0 without gaps.

        Raises:
            SegmentationError: On any failure. Files produced so far are discarded first.
        """
        deadline = Deadline.after(self.timeout_seconds)
        segments: List[Segment] = []

        # 1. Put the upload on disk so the external tools can read it
        source = workspace.materialize(request.source.data, request.source.source_format)
        logger.info(
            f"Segmenting {request.source.size_bytes} bytes of '{source.format}' into '{request.target_format}' "
            f"(max segment size: {request.max_segment_bytes or 'unbounded'})"
        )

        try:
            # 2. Measure the whole input once
            total_duration = self._probe(source, deadline, index=None)

            # 3. Produce segments until the measured durations cover the input
            offset = 0.0
            index = 0
            while offset < total_duration:
                output = self._transcode(request, source, workspace, offset, index, deadline)
                try:
                    duration = self._probe(output, deadline, index=index)
                    if duration <= 0:
                        raise NoProgress(index, offset)
                except SegmentationError:
                    workspace.discard(output)
                    raise

                segments.append(Segment(index=index, file=output, duration_seconds=duration))
                offset += duration
                index += 1

            logger.info(
                f"Segmentation finished: {len(segments)} segment(s), "
                f"{offset}s covered of {total_duration}s probed"
            )
            return segments

        except SegmentationError as e:
            # Nothing partial leaves the engine
            logger.error(f"Segmentation aborted after {len(segments)} segment(s): {e}")
            for produced in segments:
                workspace.discard(produced.file)
            raise

        finally:
            workspace.discard(source)

    def _probe(self, media_file: TemporaryMediaFile, deadline: Deadline, index: Optional[int]) -> float:
        self._check_deadline(deadline)
        logger.debug(f"Probing duration of {media_file.name}")
        try:
            duration = self.prober.probe(media_file, timeout=deadline.remaining())
        except ToolTimeoutError as e:
            raise SegmentationTimeout(self.timeout_seconds) from e
        except ProbeError as e:
            logger.error(f"Probe failed for {media_file.name}: {e}")
            raise ProbeFailed(index) from e

        logger.debug(f"Probed {media_file.name}: {duration}s")
        return duration

    def _transcode(
        self,
        request: SegmentationRequest,
        source: TemporaryMediaFile,
        workspace: IScratchWorkspace,
        offset: float,
        index: int,
        deadline: Deadline,
    ) -> TemporaryMediaFile:
        self._check_deadline(deadline)
        transcode_request = TranscodeRequest(
            source=source,
            start_offset_seconds=offset,
            target_format=request.target_format,
            max_output_bytes=request.max_segment_bytes,
            index=index,
            timeout_seconds=deadline.remaining(),
        )

        logger.debug(f"Transcoding segment {index} from offset {offset}s")
        try:
            output = self.transcoder.transcode(transcode_request, workspace)
        except ToolTimeoutError as e:
            raise SegmentationTimeout(self.timeout_seconds) from e
        except TranscodeError as e:
            logger.error(f"Transcode failed for segment {index}: {e}")
            raise TranscodeFailed(index) from e

        logger.debug(f"Transcoded segment {index} into {output.name}")
        return output

    def _check_deadline(self, deadline: Deadline) -> None:
        if deadline.expired:
            raise SegmentationTimeout(self.timeout_seconds)
