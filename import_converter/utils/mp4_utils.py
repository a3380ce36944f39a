"""
Reads the creation time stored in the movie header of MP4 / MOV files.

ISO base media files (MP4, MOV, M4V, 3GP, HEIF) are a sequence of boxes. Each
box starts with a 32-bit big-endian size and a four character type; a size of 1
means a 64-bit size follows, a size of 0 means the box runs to the end of the
file. The `moov` box contains the `mvhd` (movie header) box whose body starts
with a version byte, three flag bytes and the creation time: 32 bits for
version 0, 64 bits for version 1. The value counts seconds since 1904-01-01,
although some producers write Unix seconds instead.
"""
import struct
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple

from loguru import logger

_BOX_HEADER = struct.Struct(">I4s")
_LARGE_SIZE = struct.Struct(">Q")


class Mp4ParseError(ValueError):
    """Raised when a file is not a well-formed ISO base media file."""


def _iter_boxes(f: BinaryIO, start: int, end: Optional[int]) -> Iterator[Tuple[bytes, int, int]]:
    """
    Yields `(box_type, body_start, box_end)` for the boxes between `start` and `end`.

    `end=None` means "until end of file" (top level).
    """
    offset = start
    while end is None or offset + _BOX_HEADER.size <= end:
        f.seek(offset)
        header = f.read(_BOX_HEADER.size)
        if not header:
            return
        if len(header) < _BOX_HEADER.size:
            raise Mp4ParseError(f"truncated box header at offset {offset}")
        size, box_type = _BOX_HEADER.unpack(header)
        body_start = offset + _BOX_HEADER.size
        if size == 1:
            large = f.read(_LARGE_SIZE.size)
            if len(large) < _LARGE_SIZE.size:
                raise Mp4ParseError(f"truncated 64-bit box size at offset {offset}")
            size = _LARGE_SIZE.unpack(large)[0]
            body_start += _LARGE_SIZE.size
        elif size == 0:
            f.seek(0, 2)
            size = (end if end is not None else f.tell()) - offset
        if size < body_start - offset:
            raise Mp4ParseError(f"invalid size {size} for box {box_type!r} at offset {offset}")
        box_end = offset + size
        if end is not None and box_end > end:
            raise Mp4ParseError(f"box {box_type!r} at offset {offset} overruns its parent")
        yield box_type, body_start, box_end
        offset = box_end


def read_mvhd_creation_time(f: BinaryIO) -> Optional[int]:
    """
    Returns the raw `mvhd` creation time of an open ISO base media file.

    Returns:
        The creation time as stored (seconds, usually since 1904-01-01), or None
        if the file has a valid `ftyp` box but no movie header.

    Raises:
        Mp4ParseError: If the file does not start with an `ftyp` box or its box
                       structure is broken.
    """
    boxes = _iter_boxes(f, 0, None)
    first = next(boxes, None)
    if first is None or first[0] != b"ftyp":
        raise Mp4ParseError("file does not start with an ftyp box")

    for box_type, body_start, box_end in boxes:
        if box_type != b"moov":
            continue
        for child_type, child_start, child_end in _iter_boxes(f, body_start, box_end):
            if child_type != b"mvhd":
                continue
            f.seek(child_start)
            version_and_flags = f.read(4)
            if len(version_and_flags) < 4:
                raise Mp4ParseError("truncated mvhd box")
            version = version_and_flags[0]
            if version == 1:
                field = f.read(8)
                if len(field) < 8 or child_start + 12 > child_end:
                    raise Mp4ParseError("truncated mvhd v1 creation time")
                return struct.unpack(">Q", field)[0]
            if version == 0:
                field = f.read(4)
                if len(field) < 4 or child_start + 8 > child_end:
                    raise Mp4ParseError("truncated mvhd v0 creation time")
                return struct.unpack(">I", field)[0]
            raise Mp4ParseError(f"unsupported mvhd version {version}")
        logger.debug("moov box without mvhd")
        return None
    return None


def mvhd_creation_time(path: Path) -> Optional[int]:
    """Opens `path` and returns its raw movie header creation time (see `read_mvhd_creation_time`)."""
    with path.open("rb") as f:
        return read_mvhd_creation_time(f)
