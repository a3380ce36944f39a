"""
This module provides classes for writing file-based run reports.

It separates logging concerns into specific classes for handling errors (ErrorLog)
and successes (SuccessLog). Failed actions are appended to a human-readable text
file, while the run report listing every processed entry and the summary is
written in a machine-readable YAML format. Both are separate from the real-time
console logging done with loguru.
"""

import random
import string
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger

from ..config.common import (
    ERROR_LOG_FILE_NAME,
    SUCCESS_LOG_PREFIX,
    SUCCESS_LOG_RANDOM_LENGTH,
)


class Log:
    """
    A base class for all file logging operations.

    Handles the setup of the log directory, which is created on demand.
    """

    # A decorative separator line used in text-based logs for better readability.
    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path):
        """
        Args:
            log_dir: The directory the log file is written to. It is created if needed.
        """
        self.log_file_path: Path  # To be defined by the subclass.
        self.log_dir: Path = log_dir.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")

    @staticmethod
    def generate_random_string(length: int = SUCCESS_LOG_RANDOM_LENGTH) -> str:
        """Generates a random string of uppercase letters and digits."""
        return "".join(random.choices(string.ascii_uppercase + string.digits, k=length))


class ErrorLog(Log):
    """
    Appends error messages to a plain text file.

    Each call to `write()` adds one error event followed by a separator line,
    giving a chronological record of everything that failed during the run.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        """
        Writes one or more error messages to the log file.

        Args:
            *error_messages: The lines of one error event.
        """
        if not error_messages:
            return

        content_to_write = (
            f"[{datetime.now().isoformat(sep=' ', timespec='seconds')}]\n"
            + "\n".join(error_messages)
            + "\n"
            + self.linesep_marker
            + "\n"
        )

        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            # Fall back to the console so the message is not lost.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            logger.error("Original error messages attempted to log:")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class SuccessLog(Log):
    """
    Writes the YAML report of one import run.

    The report is a mapping with the run's start time, a list of processed
    entries (each with a sequential `index`) and, once the run has finished,
    the summary. The file is rewritten on every `write()` so that it is valid
    YAML even if the run is interrupted.
    """

    def __init__(self, success_log_dir: Path, use_dated_filename: bool = True):
        """
        Args:
            success_log_dir: The directory the report is written to.
            use_dated_filename: If True, the file is named
                                `import_log_<YYYYMMDD>_<random>.yaml`; otherwise
                                `import_log.yaml`.
        """
        super().__init__(success_log_dir)

        if use_dated_filename:
            date_str = datetime.now().strftime("%Y%m%d")
            log_filename = f"{SUCCESS_LOG_PREFIX}_{date_str}_{self.generate_random_string()}.yaml"
        else:
            log_filename = f"{SUCCESS_LOG_PREFIX}.yaml"

        self.log_file_path = self.log_dir / log_filename
        self.started: str = datetime.now().isoformat(sep=" ", timespec="seconds")
        self.log_entries: List[Dict[str, Any]] = []
        self.summary: Optional[Dict[str, Any]] = None

    def write(self, new_log_entry: dict):
        """
        Adds one processed entry to the report and rewrites the file.

        Args:
            new_log_entry: A dictionary describing the processed file.
        """
        if not isinstance(new_log_entry, dict):
            logger.error("SuccessLog.write expects a dictionary as a log entry.")
            return
        entry = dict(new_log_entry)
        entry["index"] = len(self.log_entries) + 1
        self.log_entries.append(entry)
        self._dump()

    def write_summary(self, summary: Dict[str, Any]):
        """Stores the run summary in the report and rewrites the file."""
        self.summary = dict(summary)
        self._dump()

    def _dump(self):
        report: Dict[str, Any] = {
            "started": self.started,
            "entries": self.log_entries,
        }
        if self.summary is not None:
            report["summary"] = self.summary
        try:
            with self.log_file_path.open("w", encoding="utf-8") as f:
                yaml.dump(
                    report,
                    f,
                    default_flow_style=False,
                    sort_keys=False,
                    allow_unicode=True,
                    indent=4,
                    width=220,
                )
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to write run report {self.log_file_path}: {e}")
