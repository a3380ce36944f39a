"""
Defines custom exception types for the Import Converter.

All custom exceptions inherit from the base `ImportConverterException`, so a
caller can catch everything the application raises deliberately with a single
except clause while letting programming errors propagate.
"""


class ImportConverterException(Exception):
    """Base class for all custom exceptions in the Import Converter."""

    pass


class SettingsException(ImportConverterException):
    """
    Raised when the settings cannot be read or a required setting is missing
    or has the wrong type. This is fatal at startup.
    """

    pass


class UnreadableSourceException(ImportConverterException):
    """
    Raised when a discovered file cannot be opened while resolving its creation date.

    This is the only way timestamp resolution fails: every metadata problem
    falls through to the next source instead. The file is left out of the batch,
    the run itself continues.
    """

    pass


class ActionException(ImportConverterException):
    """
    Base class for failures of the per-file action (directory creation, copy or
    re-encode). The batch processor catches these and marks the entry as failed.
    """

    pass


class CopyException(ActionException):
    """Raised when copying a file to its destination fails."""

    pass


class EncodingException(ActionException):
    """
    Raised when the transcoder cannot be launched, exits with a non-zero status,
    times out, or reports success without producing the output file.
    """

    pass


class DestinationDirectoryException(ActionException):
    """Raised when the destination directory of an entry cannot be created."""

    pass
