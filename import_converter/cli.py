"""
Command-Line Interface (CLI) setup for the Import Converter.

This module uses Python's `argparse` to define and parse the command-line
arguments. Everything that describes *what* to import lives in the settings
file; the flags here only select that file and override a few values for a
single run.
"""
import argparse
from pathlib import Path
from typing import List, Optional

from .config.common import DEFAULT_SETTINGS_FILE


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for the Import Converter.

    Args:
        argv: The arguments to parse (defaults to `sys.argv[1:]`).

    Returns:
        argparse.Namespace: An object containing the parsed command-line
                            arguments as attributes.
    """
    parser = argparse.ArgumentParser(
        description="Organise photos and videos into a dated folder structure, copying or re-encoding them."
    )
    parser.add_argument(
        "--config", type=Path, default=DEFAULT_SETTINGS_FILE,
        help="Settings file (default: settings.yaml in the current directory).",
    )
    parser.add_argument(
        "--user-config", type=Path, default=None,
        help="Optional settings file merged over --config (default: <config>.user.yaml next to it).",
    )
    dry_run = parser.add_mutually_exclusive_group()
    dry_run.add_argument(
        "--dry-run", dest="dry_run", action="store_true", default=None,
        help="Only list the planned actions, do not copy or encode anything.",
    )
    dry_run.add_argument(
        "--no-dry-run", dest="dry_run", action="store_false",
        help="Process the files even if the settings enable dry run.",
    )
    parser.add_argument(
        "--source", type=Path, default=None, help="Override directories.source."
    )
    parser.add_argument(
        "--destination", type=Path, default=None, help="Override directories.destination."
    )
    parser.add_argument(
        "--no-ffprobe", action="store_true",
        help="Do not ask ffprobe for creation dates of non-MP4 containers.",
    )
    parser.add_argument(
        "--log-level", type=str, default=None, choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set the logging level.",
    )
    return parser.parse_args(argv)
