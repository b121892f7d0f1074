from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List
from .models import TemporaryMediaFile


class IScratchWorkspace(ABC):
    """
    Contract for a request-scoped area holding scratch media files.
    Everything allocated here is reclaimed when the owning scope closes.
    """

    @abstractmethod
    def allocate(self, media_format: str, prefix: str = "") -> TemporaryMediaFile:
        """
        Creates a new, empty, uniquely named file ending in '.<media_format>'.

        Args:
            media_format: Extension token without the dot (e.g. 'mp4').
            prefix: Optional filename prefix.
        """
        pass

    @abstractmethod
    def materialize(self, data: bytes, media_format: str) -> TemporaryMediaFile:
        """Allocates a file and writes the given bytes into it."""
        pass

    @abstractmethod
    def discard(self, media_file: TemporaryMediaFile) -> None:
        """Deletes a file before the scope closes. Missing files are ignored."""
        pass

    @abstractmethod
    def files(self) -> List[TemporaryMediaFile]:
        """Lists the scratch files that currently exist in this workspace."""
        pass


class IScratchStore(ABC):
    @abstractmethod
    def open_workspace(self) -> AbstractContextManager:
        """
        Returns a context manager yielding an IScratchWorkspace.
        The workspace and all its files are removed on every exit path.
        """
        pass
