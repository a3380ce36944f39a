"""
This module contains helper functions for formatting data into human-readable strings.
These functions are used in the plan listing, the summary and the run report.
"""

from datetime import timedelta
from typing import Any, Dict


def format_timedelta(td_object: timedelta) -> str:
    """
    Formats a timedelta object into a "HH:MM:SS" string.

    Args:
        td_object: The timedelta object to format.

    Returns:
        A string representing the timedelta in HH:MM:SS format.
        For example, a timedelta of 7261 seconds becomes "02:01:01".
        Returns "00:00:00" if the input is not a valid timedelta object.
    """
    if not isinstance(td_object, timedelta):
        return "00:00:00"

    total_seconds = int(td_object.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02}:{minutes:02}:{seconds:02}"


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB, TB).

    Args:
        size_bytes: The size in bytes.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{size_bytes} {unit}"
            # "2.00 MB" -> "2 MB"
            return f"{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{size_bytes:.2f} {units[-1]}".replace(".00", "")


def find_key_in_dictionary(data_dict: Dict[str, Any], target_key: str) -> Any | None:
    """
    Recursively searches for a `target_key` within a nested dictionary.

    Used to pull single tags (such as `creation_time`) out of the nested JSON
    returned by ffprobe, where the tag may sit under `format.tags` or deeper.

    Args:
        data_dict: The dictionary to search within.
        target_key: The key whose value you want to find.

    Returns:
        The value of the first `target_key` found, or `None` if the key is not
        found anywhere in the nested structure.
    """
    if not isinstance(data_dict, dict):
        return None

    if target_key in data_dict:
        return data_dict[target_key]

    for value in data_dict.values():
        if isinstance(value, dict):
            found_value = find_key_in_dictionary(value, target_key)
            if found_value is not None:
                return found_value

    return None
