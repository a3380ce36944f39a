"""
Provides the discovery phase of an import run.

The services here find all files below the source directory that match the
configured masks and turn each of them into a planned `FileEntry`: the creation
date is resolved, the destination is computed, and the action (copy or
re-encode) is taken from the mask that matched.
"""

from pathlib import Path
from typing import List, Set, Tuple

from loguru import logger

from ..domain.entries import FileEntry, MaskEntry
from ..domain.exceptions import UnreadableSourceException
from .destination_service import DestinationPathBuilder
from .timestamp_resolver import TimestampResolver


def discover_files(source_dir: Path, mask: MaskEntry) -> List[Path]:
    """
    Returns all regular files below `source_dir` matching `mask`, sorted.

    Matching follows `Path.glob("**/<mask>")`, so the source directory itself is
    included and the match is case-sensitive where the filesystem is.
    """
    return sorted(p for p in source_dir.glob(f"**/{mask.extension}") if p.is_file())


class FileDiscovery:
    """
    Discovers the files of a run and plans an entry for each of them.

    Attributes:
        source_dir: The root directory that is scanned.
        masks: The masks in the order they are applied.
        resolver: Resolves creation dates.
        destination_builder: Plans destination paths.
        entries: The planned entries, in discovery order (filled by `run()`).
        skipped: Files that were found but could not be read.
    """

    def __init__(
        self,
        source_dir: Path,
        masks: Tuple[MaskEntry, ...],
        resolver: TimestampResolver,
        destination_builder: DestinationPathBuilder,
    ):
        self.source_dir = source_dir
        self.masks = masks
        self.resolver = resolver
        self.destination_builder = destination_builder
        self.entries: List[FileEntry] = []
        self.skipped: List[Path] = []

    def build_file_entry(self, path: Path, mask: MaskEntry) -> FileEntry:
        """
        Plans one file.

        Raises:
            UnreadableSourceException: If the file cannot be opened or stat'ed.
        """
        creation_date, source = self.resolver.resolve(path)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise UnreadableSourceException(f"failed to read file metadata of {path}: {e}") from e
        return FileEntry(
            source_path=path,
            destination_path=self.destination_builder.build(creation_date, path.name, mask.reencode),
            creation_date=creation_date,
            creation_date_source=source,
            size=size,
            reencode=mask.reencode,
        )

    def run(self) -> List[FileEntry]:
        """
        Scans the source directory for every mask and plans all files found.

        A file matched by several masks is planned once, with the first mask.
        Files that cannot be read are logged, remembered in `skipped`, and left out.

        Returns:
            The planned entries.
        """
        self.entries = []
        self.skipped = []
        if not self.source_dir.is_dir():
            logger.error(f"Source directory does not exist: {self.source_dir}")
            return self.entries

        logger.info("collecting files...")
        seen: Set[Path] = set()
        for mask in self.masks:
            found = discover_files(self.source_dir, mask)
            logger.debug(f"{mask.extension}: {len(found)} file(s)")
            for path in found:
                key = path.resolve()
                if key in seen:
                    logger.debug(f"{path} already matched by an earlier mask, skipping for {mask.extension}")
                    continue
                seen.add(key)
                try:
                    self.entries.append(self.build_file_entry(path, mask))
                except UnreadableSourceException as e:
                    logger.error(f"Skipping {path}: {e}")
                    self.skipped.append(path)
        return self.entries

