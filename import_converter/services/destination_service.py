"""
Computes where an imported file is written.

The destination is derived only from the creation date, the original file
name and the configured templates, so the same inputs always produce the same
path. Two files that render to the same path collide; nothing here resolves
that, the later action simply overwrites the earlier file.
"""
from datetime import datetime
from pathlib import Path
from typing import Optional


def render_template(timestamp: datetime, template: str) -> str:
    """Renders a strftime template against `timestamp` ("%Y/%m" -> "2023/07")."""
    return timestamp.strftime(template)


def build_destination_path(
    timestamp: datetime,
    source_file_name: str,
    destination_root: Path,
    subpath_format: str,
    filename_prefix_format: str,
    new_extension: Optional[str] = None,
) -> Path:
    """
    Builds `destination_root / <rendered subpath> / <rendered prefix><file name>`.

    Args:
        timestamp: The file's creation date.
        source_file_name: The original file name (without directories).
        destination_root: Root of the organised tree.
        subpath_format: strftime template for the subdirectories, e.g. "%Y/%m".
        filename_prefix_format: strftime template for the name prefix, e.g. "%Y%m%d_".
        new_extension: If given, the extension of the resulting file name is
                       replaced with it (used for re-encoded files).

    Returns:
        The destination path. No filesystem access takes place.
    """
    # A rendered subpath starting with a separator would otherwise replace the root.
    subpath = render_template(timestamp, subpath_format).lstrip("/\\")
    prefix = render_template(timestamp, filename_prefix_format)

    destination = destination_root / subpath if subpath else destination_root
    destination = destination / f"{prefix}{Path(source_file_name).name}"

    if new_extension is not None:
        destination = destination.with_suffix(f".{new_extension.lstrip('.')}")
    return destination


class DestinationPathBuilder:
    """
    Holds the destination settings of a run and plans destinations for files.

    Attributes:
        destination_root: Root of the organised tree.
        subpath_format: strftime template for subdirectories.
        filename_prefix_format: strftime template for the file name prefix.
        reencode_extension: Extension given to files that are re-encoded.
    """

    def __init__(
        self,
        destination_root: Path,
        subpath_format: str,
        filename_prefix_format: str,
        reencode_extension: str,
    ):
        self.destination_root = destination_root
        self.subpath_format = subpath_format
        self.filename_prefix_format = filename_prefix_format
        self.reencode_extension = reencode_extension.lstrip(".")

    @classmethod
    def from_settings(cls, settings) -> "DestinationPathBuilder":
        return cls(
            destination_root=settings.destination_dir,
            subpath_format=settings.path_format,
            filename_prefix_format=settings.filename_prefix,
            reencode_extension=settings.new_file_extension,
        )

    def build(self, timestamp: datetime, source_file_name: str, reencode: bool = False) -> Path:
        return build_destination_path(
            timestamp,
            source_file_name,
            self.destination_root,
            self.subpath_format,
            self.filename_prefix_format,
            new_extension=self.reencode_extension if reencode else None,
        )
