"""
Determines when a media file was created.

The resolver tries a fixed sequence of sources and returns the first usable
date together with the `TimestampSource` it came from:

1. the Exif `DateTimeOriginal` tag (photos),
2. the container creation time (MP4/MOV movie header, or ffprobe for other
   containers),
3. the file's modification time,
4. the current local time.

Problems reading metadata never abort the chain; they are logged at DEBUG level
and the next source is tried. The only hard failure is a file that cannot be
opened at all.
"""
import struct
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

import ffmpeg
import pillow_heif
from loguru import logger
from PIL import ExifTags, Image

from ..config.common import EXIF_DATETIME_FORMATS, MP4_EPOCH_OFFSET
from ..domain.entries import TimestampSource
from ..domain.exceptions import UnreadableSourceException
from ..utils.format_utils import find_key_in_dictionary
from ..utils.mp4_utils import Mp4ParseError, mvhd_creation_time

# HEIC/HEIF photos (iPhone) carry Exif too; Pillow needs the plugin to open them.
pillow_heif.register_heif_opener()

Strategy = Callable[[Path], Optional[datetime]]


def parse_exif_datetime(value: str) -> Optional[datetime]:
    """
    Parses an Exif date string ("2023:07:04 10:15:00" or "2023-07-04 10:15:00").

    Returns:
        A naive datetime, or None if the string matches none of the accepted formats.
    """
    cleaned = value.strip("\x00 \t\r\n")
    for fmt in EXIF_DATETIME_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt)
        except ValueError:
            continue
    return None


def mp4_time_to_unix(creation_time: int) -> int:
    """
    Converts a movie header creation time to Unix seconds.

    Values at or above the 1904 -> 1970 offset are MP4-epoch based and are
    shifted; smaller values are assumed to be Unix based already.
    """
    if creation_time >= MP4_EPOCH_OFFSET:
        return creation_time - MP4_EPOCH_OFFSET
    return creation_time


def unix_to_local_naive(timestamp: float) -> Optional[datetime]:
    """Converts Unix seconds to a naive local datetime, or None if it is out of range."""
    try:
        return datetime.fromtimestamp(timestamp)
    except (OverflowError, OSError, ValueError) as e:
        logger.debug(f"Timestamp {timestamp} cannot be represented as local time: {e}")
        return None


def read_exif_date(path: Path) -> Optional[datetime]:
    """
    Returns the Exif `DateTimeOriginal` of an image, or None.

    The tag is looked up in the Exif sub-IFD first and in IFD0 second.
    """
    try:
        with Image.open(path) as img:
            exif = img.getexif()
            value = exif.get_ifd(ExifTags.IFD.Exif).get(ExifTags.Base.DateTimeOriginal)
            if value is None:
                value = exif.get(ExifTags.Base.DateTimeOriginal)
    except (OSError, SyntaxError, ValueError, struct.error, Image.DecompressionBombError) as e:
        # Not an image Pillow understands (videos, text, broken files).
        logger.trace(f"EXIF reader: {path.name}: {e}")
        return None

    if value is None:
        logger.debug(f"{path.name}: EXIF creation tag is missing")
        return None
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="replace")

    parsed = parse_exif_datetime(str(value))
    if parsed is None:
        logger.warning(f"{path.name}: EXIF DateTimeOriginal '{value}' is malformed, trying next source")
    return parsed


def read_mp4_date(path: Path) -> Optional[datetime]:
    """Returns the movie header creation time of an MP4/MOV file as naive local time, or None."""
    try:
        creation_time = mvhd_creation_time(path)
    except Mp4ParseError as e:
        logger.trace(f"MP4 reader: {path.name}: {e}")
        return None
    if creation_time is None:
        logger.debug(f"{path.name}: MP4 file has no movie header")
        return None
    return unix_to_local_naive(mp4_time_to_unix(creation_time))


def read_ffprobe_date(path: Path, ffprobe_cmd: str = "ffprobe") -> Optional[datetime]:
    """
    Returns the container `creation_time` tag reported by ffprobe as naive local time.

    ffprobe reports the tag as ISO-8601 in UTC (e.g. "2023-07-04T08:15:00.000000Z").
    """
    try:
        probe = ffmpeg.probe(str(path), cmd=ffprobe_cmd)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
        logger.trace(f"ffprobe failed for {path.name}: {stderr}")
        return None
    except OSError as e:
        logger.debug(f"ffprobe could not be executed ('{ffprobe_cmd}'): {e}")
        return None

    value = find_key_in_dictionary(probe.get("format", {}), "creation_time")
    if not value:
        for stream in probe.get("streams", []):
            value = find_key_in_dictionary(stream, "creation_time")
            if value:
                break
    if not value:
        return None

    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"{path.name}: container creation_time '{value}' is not ISO-8601")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return unix_to_local_naive(parsed.timestamp())


def read_filesystem_date(path: Path) -> Optional[datetime]:
    """
    Returns the file's modification time as naive local time.

    Raises:
        OSError: If the file's metadata cannot be read at all.
    """
    modified = path.stat().st_mtime
    result = unix_to_local_naive(modified)
    if result is None:
        logger.warning(f"{path.name}: filesystem metadata 'modified' not supported")
    return result


class TimestampResolver:
    """
    Resolves a file's creation date from an ordered chain of sources.

    The chain is a sequence of `(TimestampSource, strategy)` pairs. A strategy
    takes a path and returns a naive datetime or None to pass the file on to the
    next strategy. The local clock is always appended as the final source, so
    resolution succeeds for every file that can be opened.

    Attributes:
        strategies: The ordered metadata strategies tried before the local clock.
        clock: Callable returning the current naive local time.
    """

    def __init__(
        self,
        use_ffprobe: bool = True,
        ffprobe_cmd: str = "ffprobe",
        strategies: Optional[Sequence[Tuple[TimestampSource, Strategy]]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            use_ffprobe: Also ask ffprobe for a creation time when a file is not MP4/MOV.
            ffprobe_cmd: The ffprobe executable.
            strategies: Replaces the default chain (mainly for tests).
            clock: Source of the fallback time.
        """
        if strategies is None:
            strategies = self.default_strategies(use_ffprobe, ffprobe_cmd)
        self.strategies: Tuple[Tuple[TimestampSource, Strategy], ...] = tuple(strategies)
        self.clock = clock

    @staticmethod
    def default_strategies(use_ffprobe: bool = True, ffprobe_cmd: str = "ffprobe"):
        def container_date(path: Path) -> Optional[datetime]:
            result = read_mp4_date(path)
            if result is None and use_ffprobe:
                result = read_ffprobe_date(path, ffprobe_cmd)
            return result

        return (
            (TimestampSource.EXIF, read_exif_date),
            (TimestampSource.CONTAINER_METADATA, container_date),
            (TimestampSource.FILESYSTEM_ATTRIBUTE, read_filesystem_date),
        )

    def resolve(self, path: Path) -> Tuple[datetime, TimestampSource]:
        """
        Determines the creation date of `path`.

        Args:
            path: The file to inspect.

        Returns:
            A `(creation_date, source)` tuple with a naive local datetime.

        Raises:
            UnreadableSourceException: If the file cannot be opened or its
                                       filesystem metadata cannot be read.
        """
        try:
            with path.open("rb"):
                pass
        except OSError as e:
            raise UnreadableSourceException(f"Cannot open {path}: {e}") from e

        for source, strategy in self.strategies:
            try:
                result = strategy(path)
            except OSError as e:
                # The file was readable a moment ago; losing it now is not a metadata problem.
                raise UnreadableSourceException(f"Cannot read {path} while probing {source}: {e}") from e
            if result is not None:
                logger.debug(f"{path.name}: creation date {result} from {source}")
                return result, source

        return self.clock(), TimestampSource.LOCAL_CLOCK_FALLBACK
