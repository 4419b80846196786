"""Storage adapter using local filesystem."""

import logging
import re
from pathlib import Path

from ...domain.models import LectureRecord
from ...ports.storage import StoragePort
from ...presentation import serialize_record

logger = logging.getLogger(__name__)


def sanitize_filename(name: str, max_length: int = 180) -> str:
    """Remove/replace characters invalid in filenames."""
    # Remove null bytes
    name = name.replace("\x00", "")
    # Replace path traversal attempts
    name = name.replace("..", "_")
    # Replace problematic characters
    name = re.sub(r'[<>:"/\\|?*]', "_", name)
    # Collapse multiple spaces/underscores
    name = re.sub(r"[_\s]+", " ", name)
    # Remove leading/trailing dots and spaces
    name = name.strip(". ")
    # Limit length (leave room for date suffix + extension)
    if len(name) > max_length:
        name = name[:max_length].rsplit(" ", 1)[0]
    return name or "Untitled"


def unique_path(dest: Path) -> Path:
    """`name (1).ext`, `name (2).ext`... until the path is free."""
    counter = 1
    candidate = dest
    while candidate.exists():
        candidate = dest.with_name(f"{dest.stem} ({counter}){dest.suffix}")
        counter += 1
    return candidate


class FilesystemExporter(StoragePort):
    """Exports records as UTF-8 JSON files, never overwriting."""

    def __init__(
        self,
        directory: Path,
        filename: str = "lecture_notes.json",
        name_from_title: bool = False,
    ) -> None:
        self.directory = directory
        self.filename = filename
        self.name_from_title = name_from_title

    def export(self, record: LectureRecord) -> Path:
        """Write the record as pretty-printed JSON."""
        self.directory.mkdir(parents=True, exist_ok=True)

        if self.name_from_title:
            title = sanitize_filename(record.display_title)
            date_str = sanitize_filename(record.display_date)
            filename = f"{title} - {date_str}.json"
        else:
            filename = self.filename

        dest = unique_path(self.directory / filename)
        dest.write_text(serialize_record(record) + "\n", encoding="utf-8")
        logger.info(f"Exported: {dest}")

        return dest
