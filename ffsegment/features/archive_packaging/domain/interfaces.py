from abc import ABC, abstractmethod
from typing import Sequence
from ffsegment.features.segmentation.domain.models import Segment


class PackError(RuntimeError):
    """Raised when segments cannot be read or the archive cannot be written."""


class IArchivePacker(ABC):
    """
    Contract for turning an ordered segment sequence into a single archive.
    The packer only reads segment files; it never deletes or moves them.
    """

    @abstractmethod
    def pack(self, segments: Sequence[Segment]) -> bytes:
        """
        Serializes the segments in index order.

        Returns:
            The complete archive as bytes.

        Raises:
            PackError: On any read/write failure or an inconsistent sequence.
        """
        pass
