"""
This module provides the Modules class to verify the external tools required by
the application, such as the HandBrakeCLI transcoder.
"""
import shutil
import subprocess

from loguru import logger


class Modules:
    """
    A utility class for checks on external modules.

    The checks only log what they find. A missing transcoder is not fatal here:
    every re-encode entry will then fail on its own and show up in the summary.
    """

    @staticmethod
    def resolve_executable(executable: str) -> str | None:
        """
        Returns the absolute path of `executable`, looking it up in PATH when it
        is a bare name, or None if it cannot be found.
        """
        return shutil.which(executable)

    @staticmethod
    def verify_transcoder(executable: str) -> bool:
        """
        Verifies that the transcoder is installed, accessible, and can be executed.

        Runs `<executable> --version` and logs the first line of the output.

        Args:
            executable: The configured transcoder (name in PATH or full path).

        Returns:
            True if the version command ran successfully, False otherwise.
        """
        resolved = Modules.resolve_executable(executable)
        if resolved is None:
            logger.error(
                f"Transcoder '{executable}' not found. Please ensure it is installed and either "
                f"in your system's PATH or configured with a full path in encoding.handbrake_cli."
            )
            return False

        try:
            result = subprocess.run(
                [resolved, "--version"],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"Transcoder version command failed (return code {e.returncode}):\n{e.stderr}")
            return False
        except OSError as e:
            logger.error(f"Could not execute transcoder '{resolved}': {e}")
            return False

        output_lines = (result.stdout or result.stderr).splitlines()
        first_line = output_lines[0] if output_lines else "(no output)"
        logger.info(f"Transcoder version check successful: {first_line}")
        return True
