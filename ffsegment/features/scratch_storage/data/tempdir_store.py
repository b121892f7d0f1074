import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ffsegment.core.config.settings import settings
from ffsegment.core.shared_types import normalize_format
from ..domain.interfaces import IScratchStore, IScratchWorkspace
from ..domain.models import TemporaryMediaFile

logger = logging.getLogger(__name__)


class TempDirWorkspace(IScratchWorkspace):
    """
    Scratch workspace living inside one temporary directory.
    Filenames come from mkstemp, so concurrent allocations never collide.
    """

    def __init__(self, root: Path):
        self.root = root
        self._files: Dict[Path, TemporaryMediaFile] = {}

    def allocate(self, media_format: str, prefix: str = "") -> TemporaryMediaFile:
        media_format = normalize_format(media_format)
        fd, raw_path = tempfile.mkstemp(prefix=prefix, suffix=f".{media_format}", dir=self.root)
        os.close(fd)

        media_file = TemporaryMediaFile(path=Path(raw_path), format=media_format)
        self._files[media_file.path] = media_file
        return media_file

    def materialize(self, data: bytes, media_format: str) -> TemporaryMediaFile:
        media_file = self.allocate(media_format)
        try:
            media_file.path.write_bytes(data)
        except OSError:
            self.discard(media_file)
            raise
        return media_file

    def discard(self, media_file: TemporaryMediaFile) -> None:
        self._files.pop(media_file.path, None)
        media_file.path.unlink(missing_ok=True)

    def files(self) -> List[TemporaryMediaFile]:
        return [f for f in self._files.values() if f.exists()]


class TempDirScratchStore(IScratchStore):
    """
    Hands out one TemporaryDirectory per request.
    Leaving the 'with' block removes the directory tree, whatever the outcome.
    """

    def __init__(self, parent_dir: Optional[Path] = None):
        self.parent_dir = parent_dir if parent_dir is not None else settings.SCRATCH_DIR

    @contextmanager
    def open_workspace(self) -> Iterator[TempDirWorkspace]:
        if self.parent_dir is not None:
            self.parent_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix="ffsegment-", dir=self.parent_dir) as tmp_dir:
            logger.debug(f"Opened scratch workspace {tmp_dir}")
            try:
                yield TempDirWorkspace(Path(tmp_dir))
            finally:
                logger.debug(f"Releasing scratch workspace {tmp_dir}")
