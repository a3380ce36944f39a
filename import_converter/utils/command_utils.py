"""
This module provides a robust function for running external command-line
processes, such as the HandBrakeCLI transcoder.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..services.logging_service import ErrorLog


def display_command(cmd_list: List[str]) -> str:
    """Joins a command list into a string that can be pasted into a shell."""
    try:
        if os.name == "nt":
            return subprocess.list2cmdline(cmd_list)
        return shlex.join(cmd_list)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not format command list for display: {e}. Using simple join.")
        return " ".join(cmd_list)


def run_cmd(
    cmd_parts: List[str],
    src_file_for_log: Path = Path(),
    error_log_dir_for_run_cmd: Optional[Path] = None,
    show_cmd: bool = False,
    timeout: Optional[float] = None,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command safely and captures its output.

    This is a wrapper around `subprocess.run` that adds logging and error
    handling. The call blocks until the process exits (or `timeout` expires).

    Args:
        cmd_parts: The command to execute, one list item per argument (no shell is involved).
        src_file_for_log: The source file being processed, used for logging context
                          in case of an error.
        error_log_dir_for_run_cmd: The directory where an error log should be written
                                   if the command cannot be run.
        show_cmd: If True, the command will be logged at the INFO level before execution.
        timeout: Optional limit in seconds. None waits indefinitely.

    Returns:
        A `subprocess.CompletedProcess` once the process has exited (whatever its
        return code). Returns `None` if the command could not be started or timed out.
    """
    cmd_list = [str(part) for part in cmd_parts]
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = display_command(cmd_list)
    if show_cmd:
        logger.info(display_cmd_str)
    else:
        logger.debug(f"Executing command: {display_cmd_str}")

    def write_error_log(*lines: str):
        if error_log_dir_for_run_cmd and src_file_for_log.name:
            ErrorLog(error_log_dir_for_run_cmd).write(
                f"Command execution error for: {src_file_for_log.name}",
                f"Command: {display_cmd_str}",
                *lines,
            )

    # --- Execute the command and handle potential errors ---
    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
            timeout=timeout,
        )

        if result.stdout and len(result.stdout) > 500:
            logger.trace(f"Command stdout (truncated): {result.stdout[:500]}...")
        elif result.stdout:
            logger.trace(f"Command stdout: {result.stdout}")

        # The transcoder prints progress on stderr, so it is only an error when rc != 0.
        if result.stderr and result.returncode != 0:
            logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
        elif result.stderr:
            logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

        return result
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found ('{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
        )
        write_error_log("Error: Command not found (FileNotFoundError).")
        return None
    except subprocess.TimeoutExpired:
        logger.error(f"Error: Command timed out after {timeout} seconds. Command: {display_cmd_str}")
        write_error_log(f"Error: Command timed out after {timeout} seconds.")
        return None
    except OSError as e:
        logger.error(f"Could not start command for {src_file_for_log.name or 'N/A'}: {e}")
        write_error_log(f"Exception: {type(e).__name__} - {e}")
        return None
