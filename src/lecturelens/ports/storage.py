"""Storage port - interface for exporting results."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.models import LectureRecord


class StoragePort(ABC):
    """Interface for exported record storage."""

    @abstractmethod
    def export(self, record: "LectureRecord") -> Path:
        """Write the record as a JSON file.

        Returns path to the written file.
        """
        pass
