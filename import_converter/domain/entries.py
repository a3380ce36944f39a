"""
Data records describing an import run.

A run turns discovered files into `FileEntry` plans, executes them, and produces
new `FileEntry` records carrying the outcome. The records are immutable: the
single planned -> attempted transition is `FileEntry.with_outcome()`.
"""
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict

from ..config.common import ACTION_COPY, ACTION_REENCODE


@dataclass(frozen=True)
class MaskEntry:
    """
    A discovery mask paired with the action for matching files.

    Attributes:
        extension: A glob pattern for file names, e.g. "*.jpg".
        reencode: True if matching files go through the transcoder, False if they are copied.
    """

    extension: str
    reencode: bool

    @classmethod
    def from_setting(cls, value: str, reencode: bool) -> "MaskEntry":
        """
        Builds a mask from a settings entry.

        Entries may be written as glob patterns ("*.jpg", "IMG_*.JPG") or as bare
        extensions ("jpg", ".jpg"); the latter are turned into "*.<ext>".
        """
        value = value.strip()
        if not any(ch in value for ch in "*?["):
            value = f"*.{value.lstrip('.')}"
        return cls(extension=value, reencode=reencode)

    @property
    def action(self) -> str:
        return ACTION_REENCODE if self.reencode else ACTION_COPY


class TimestampSource(Enum):
    """Where a file's creation date was taken from, in resolution priority order."""

    EXIF = "EXIF"
    CONTAINER_METADATA = "MP4 Metadata"
    FILESYSTEM_ATTRIBUTE = "File Attribute"
    LOCAL_CLOCK_FALLBACK = "Local Time"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FileEntry:
    """
    One discovered file, its resolved creation date, its planned destination
    and, once processed, the outcome of its action.

    Attributes:
        source_path: The file as discovered.
        destination_path: Where the file is copied or encoded to. Computed once when
                          the entry is planned.
        creation_date: Naive local creation timestamp.
        creation_date_source: Which resolver tier produced `creation_date`.
        size: Size of the source file in bytes.
        reencode: True if the file is re-encoded, False if it is copied.
        success: False until an action has fully succeeded.
        size_after_action: Size of the written destination file; 0 unless `success`.
    """

    source_path: Path
    destination_path: Path
    creation_date: datetime
    creation_date_source: TimestampSource
    size: int
    reencode: bool
    success: bool = False
    size_after_action: int = 0

    def __post_init__(self):
        if not isinstance(self.creation_date_source, TimestampSource):
            raise TypeError(f"creation_date_source must be a TimestampSource, got {self.creation_date_source!r}")
        if not self.success and self.size_after_action:
            raise ValueError("size_after_action must be 0 for an entry that did not succeed")

    @property
    def action(self) -> str:
        return ACTION_REENCODE if self.reencode else ACTION_COPY

    def with_outcome(self, success: bool, size_after_action: int = 0) -> "FileEntry":
        """
        Returns the processed version of this planned entry.

        A failed outcome always carries a size of 0, whatever was passed in.
        """
        if self.success:
            raise ValueError(f"{self.source_path} has already been processed successfully")
        return replace(self, success=success, size_after_action=size_after_action if success else 0)

    def as_dict(self) -> Dict[str, Any]:
        """A plain representation for the YAML run report."""
        return {
            "source_path": str(self.source_path),
            "destination_path": str(self.destination_path),
            "creation_date": self.creation_date.isoformat(sep=" "),
            "creation_date_source": str(self.creation_date_source),
            "action": self.action,
            "success": self.success,
            "size": self.size,
            "size_after_action": self.size_after_action,
        }
