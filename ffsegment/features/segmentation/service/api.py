from typing import Optional

from ffsegment.core.config.settings import settings
from ffsegment.features.archive_packaging.data.tar_gzip_packer import TarGzipPacker
from ffsegment.features.archive_packaging.domain.interfaces import IArchivePacker
from ffsegment.features.duration_probe.data.ffprobe_adapter import FFprobeDurationAdapter
from ffsegment.features.scratch_storage.data.tempdir_store import TempDirScratchStore
from ffsegment.features.scratch_storage.domain.interfaces import IScratchStore
from ffsegment.features.transcoding.data.ffmpeg_adapter import FFmpegTranscodeAdapter

from ..domain.models import SegmentationRequest
from .engine import SegmentationEngine


class SegmentArchiveService:
    """
    Facade for the whole pipeline.
    Orchestrates scratch space, the segmentation loop and archive packaging.
    """

    def __init__(self, scratch_store: IScratchStore, engine: SegmentationEngine, packer: IArchivePacker):
        self.scratch_store = scratch_store
        self.engine = engine
        self.packer = packer

    def convert(self, request: SegmentationRequest) -> bytes:
        """
        Converts an uploaded file into a compressed archive of segments.
        - Opens a private scratch workspace.
        - Runs the probe/transcode loop.
        - Packs the segments in index order.
        The workspace is gone by the time this returns or raises.

        Returns:
            The archive bytes.
        """
        with self.scratch_store.open_workspace() as workspace:
            segments = self.engine.segment(request, workspace)
            return self.packer.pack(segments)


def build_segment_archive_service(timeout_seconds: Optional[float] = None) -> SegmentArchiveService:
    """Wires the default ffmpeg/ffprobe-backed pipeline from settings."""
    engine = SegmentationEngine(
        prober=FFprobeDurationAdapter(),
        transcoder=FFmpegTranscodeAdapter(),
        timeout_seconds=timeout_seconds if timeout_seconds is not None else settings.REQUEST_TIMEOUT_SECONDS,
    )
    return SegmentArchiveService(
        scratch_store=TempDirScratchStore(),
        engine=engine,
        packer=TarGzipPacker(),
    )
