"""
Common configuration settings used throughout the application.

This module contains globally shared constants for logging, report files,
settings discovery and metadata parsing. Values that a user is expected to
change (directories, extensions, encoder options) are not here; they live in
the YAML settings file loaded by `import_converter.config.settings`.
"""
from pathlib import Path

# --- Settings Files ---
# The default settings file is looked up in the current working directory.
# A second, optional file next to it may override any key without touching
# the shared defaults.
DEFAULT_SETTINGS_FILE = Path("settings.yaml")
USER_SETTINGS_SUFFIX = ".user"

# Environment variables with this prefix override single settings keys.
# Sections and keys are separated by a double underscore, for example
# `ICONV_OPTIONS__DRY_RUN=true` overrides `options.dry_run`.
ENV_PREFIX = "ICONV_"
ENV_SEPARATOR = "__"


# --- Logging Configuration ---
# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# The length of the random string appended to dated run reports, so that two
# runs on the same day never write to the same file.
SUCCESS_LOG_RANDOM_LENGTH = 10


# --- Report Files ---
# Reports are written below the destination root.
ERROR_LOG_DIR_NAME = "import_error"
ERROR_LOG_FILE_NAME = "error.txt"
SUCCESS_LOG_PREFIX = "import_log"


# --- Metadata Parsing ---
# Number of seconds between the MP4 epoch (1904-01-01) and the Unix epoch
# (1970-01-01). Movie header values at or above this are MP4-epoch based.
MP4_EPOCH_OFFSET = 2_082_844_800

# Exif stores dates as "YYYY:MM:DD HH:MM:SS". The dashed display form is
# accepted as well because some writers emit it.
EXIF_DATETIME_FORMATS = ("%Y:%m:%d %H:%M:%S", "%Y-%m-%d %H:%M:%S")


# --- Action Labels ---
ACTION_COPY = "copy"
ACTION_REENCODE = "reencode"
