import gzip
import io
import logging
import shutil
import tarfile
import tempfile
from typing import Optional, Sequence

from ffsegment.core.config.settings import settings
from ffsegment.features.segmentation.domain.models import Segment
from ..domain.interfaces import IArchivePacker, PackError

logger = logging.getLogger(__name__)

COPY_CHUNK_BYTES = 64 * 1024


class TarGzipPacker(IArchivePacker):
    """
    Builds a plain tar of the segments on disk, then gzips the whole tar in one pass.
    Entry metadata is fixed so identical segments always give identical bytes.
    """

    def __init__(self, compression_level: Optional[int] = None):
        self.compression_level = (
            compression_level if compression_level is not None else settings.ARCHIVE_COMPRESSION_LEVEL
        )

    def pack(self, segments: Sequence[Segment]) -> bytes:
        ordered = sorted(segments, key=lambda s: s.index)
        indices = [s.index for s in ordered]
        if len(set(indices)) != len(indices):
            raise PackError(f"Duplicate segment indices: {indices}")

        try:
            # 1. Uncompressed container, spilled to an anonymous scratch file
            with tempfile.TemporaryFile(dir=settings.SCRATCH_DIR) as tarball:
                with tarfile.open(fileobj=tarball, mode="w", format=tarfile.GNU_FORMAT) as tar:
                    for segment in ordered:
                        self._add_segment(tar, segment)

                tar_size = tarball.tell()
                tarball.seek(0)

                # 2. Single compression pass over the finished container
                buffer = io.BytesIO()
                with gzip.GzipFile(
                    fileobj=buffer,
                    mode="wb",
                    compresslevel=self.compression_level,
                    mtime=0
                ) as encoder:
                    shutil.copyfileobj(tarball, encoder, COPY_CHUNK_BYTES)

        except (OSError, tarfile.TarError) as e:
            logger.error(f"Packaging {len(ordered)} segment(s) failed: {e}")
            raise PackError(f"Failed to build archive: {e}") from e

        archive = buffer.getvalue()
        logger.info(f"Packed {len(ordered)} segment(s): {tar_size} bytes tar -> {len(archive)} bytes gzip")
        return archive

    @staticmethod
    def _add_segment(tar: tarfile.TarFile, segment: Segment) -> None:
        info = tarfile.TarInfo(name=segment.archive_name)
        info.size = segment.file.size_bytes()
        info.mode = 0o644
        info.mtime = 0
        info.uid = info.gid = 0
        info.uname = info.gname = ""

        with open(segment.file.path, "rb") as f:
            tar.addfile(info, f)
