"""
Executes the planned action for every entry of an import run.

Each entry is handled on its own and in order: its destination directory is
created, then the file is either copied or re-encoded through the external
transcoder. A failure only marks that entry as failed; the batch always goes on
with the next one. There are no retries.
"""
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from loguru import logger

from ..config.common import ERROR_LOG_DIR_NAME
from ..domain.entries import FileEntry
from ..domain.exceptions import (
    ActionException,
    CopyException,
    DestinationDirectoryException,
    EncodingException,
)
from ..utils.command_utils import run_cmd
from ..utils.format_utils import formatted_size
from .logging_service import ErrorLog, SuccessLog


class BatchProcessor:
    """
    Copies or re-encodes planned entries.

    Attributes:
        handbrake_cli: The transcoder executable.
        encoding_options: Extra transcoder arguments, one list item per argument.
        encoding_timeout: Optional limit in seconds for one transcoder run.
        keep_mtime: If True, re-encoded files get the source's modification time.
        error_log_dir: Where failures are appended to `error.txt` (None disables it).
        success_log: Receives every processed entry (None disables the report).
    """

    def __init__(
        self,
        handbrake_cli: str,
        encoding_options: Optional[List[str]] = None,
        encoding_timeout: Optional[float] = None,
        keep_mtime: bool = False,
        error_log_dir: Optional[Path] = None,
        success_log: Optional[SuccessLog] = None,
    ):
        self.handbrake_cli = handbrake_cli
        self.encoding_options = list(encoding_options or [])
        self.encoding_timeout = encoding_timeout
        self.keep_mtime = keep_mtime
        self.error_log_dir = error_log_dir
        self.success_log = success_log

    @classmethod
    def from_settings(cls, settings, success_log: Optional[SuccessLog] = None) -> "BatchProcessor":
        return cls(
            handbrake_cli=settings.handbrake_cli,
            encoding_options=settings.encoding_option_tokens,
            encoding_timeout=settings.encoding_timeout,
            keep_mtime=settings.keep_mtime,
            error_log_dir=settings.destination_dir / ERROR_LOG_DIR_NAME if settings.write_reports else None,
            success_log=success_log,
        )

    def build_encode_command(self, entry: FileEntry) -> List[str]:
        """`<cli> -i <source> -o <destination> <options...>`"""
        return [
            self.handbrake_cli,
            "-i",
            str(entry.source_path),
            "-o",
            str(entry.destination_path),
            *self.encoding_options,
        ]

    @staticmethod
    def ensure_destination_dir(entry: FileEntry):
        """Creates the entry's destination directory (idempotent)."""
        try:
            entry.destination_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationDirectoryException(
                f"Could not create directory {entry.destination_path.parent}: {e}"
            ) from e

    def copy(self, entry: FileEntry) -> int:
        """
        Copies the source byte for byte (permission bits included) to its destination.

        Returns:
            The number of bytes written.

        Raises:
            CopyException: On any I/O error.
        """
        try:
            shutil.copy(entry.source_path, entry.destination_path)
            bytes_copied = entry.destination_path.stat().st_size
        except OSError as e:
            raise CopyException(f"Copy error --> {e}") from e
        logger.info(
            f"{entry.source_path} copied --> {entry.destination_path} ({formatted_size(bytes_copied)})"
        )
        return bytes_copied

    def reencode(self, entry: FileEntry) -> int:
        """
        Runs the transcoder for one entry and waits for it to exit.

        Returns:
            The size of the encoded file.

        Raises:
            EncodingException: If the transcoder cannot be started, times out, exits
                               with a non-zero status, or leaves no output file.
        """
        cmd_list = self.build_encode_command(entry)
        res = run_cmd(
            cmd_list,
            src_file_for_log=entry.source_path,
            error_log_dir_for_run_cmd=self.error_log_dir,
            show_cmd=True,
            timeout=self.encoding_timeout,
        )
        if res is None:
            raise EncodingException(f"Transcoder could not be executed for {entry.source_path.name}")

        success = res.returncode == 0
        logger.info(f"Handbrake execution finished, status --> {success}")
        if not success:
            raise EncodingException(
                f"Transcoder exited with status {res.returncode} for {entry.source_path.name}"
            )

        try:
            encoded_size = entry.destination_path.stat().st_size
        except OSError as e:
            raise EncodingException(
                f"Transcoder reported success, but the output file {entry.destination_path} is missing: {e}"
            ) from e

        if self.keep_mtime:
            try:
                os.utime(
                    entry.destination_path,
                    (datetime.now().timestamp(), entry.source_path.stat().st_mtime),
                )
            except OSError as utime_err:
                logger.warning(
                    f"Could not set modification time for {entry.destination_path.name}: {utime_err}"
                )
        return encoded_size

    def process_entry(self, entry: FileEntry) -> FileEntry:
        """
        Performs the entry's action and returns the processed entry.

        Never raises for action failures: they are logged and reflected in the
        returned entry (`success=False`, `size_after_action=0`).
        """
        try:
            self.ensure_destination_dir(entry)
            size_after = self.reencode(entry) if entry.reencode else self.copy(entry)
        except ActionException as e:
            logger.error(f"{entry.action} failed for {entry.source_path}: {e}")
            if self.error_log_dir is not None:
                ErrorLog(self.error_log_dir).write(
                    f"Action: {entry.action}",
                    f"Source: {entry.source_path}",
                    f"Destination: {entry.destination_path}",
                    f"Error: {e}",
                )
            result = entry.with_outcome(False)
        else:
            result = entry.with_outcome(True, size_after)

        if self.success_log is not None:
            self.success_log.write(result.as_dict())
        return result

    def process(self, entries: Iterable[FileEntry]) -> List[FileEntry]:
        """
        Processes all entries sequentially.

        Args:
            entries: The planned entries.

        Returns:
            The processed entries, in the same order.
        """
        entries = list(entries)
        logger.info(f"processing {len(entries)} files...")
        return [self.process_entry(entry) for entry in entries]
