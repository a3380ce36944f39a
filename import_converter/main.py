"""
Main entry point for the Import Converter application.

Parses the command line, configures the logger, loads the settings and runs
one `ImportPipeline`.
"""
import sys
from typing import List, Optional

from loguru import logger

from .cli import get_args
from .config.common import LOGGER_FORMAT
from .config.settings import load_settings
from .domain.exceptions import SettingsException
from .pipeline.import_pipeline import ImportPipeline


def configure_logger(level: str):
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs the import.

    Steps:
    1. Parses command-line arguments and configures the logger.
    2. Loads `settings.yaml`, the optional user settings and `ICONV_` variables.
    3. Applies command-line overrides.
    4. Runs the pipeline (which stops after the plan for a dry run).

    Returns:
        The process exit code: 0 after a run, 1 if the settings are unusable.
    """
    args = get_args(argv)

    # -O disables __debug__ and with it the default DEBUG output.
    effective_log_level = args.log_level or ("DEBUG" if __debug__ else "INFO")
    configure_logger(effective_log_level)
    logger.debug(f"Parsed arguments: {args}")
    logger.info("import_converter")

    try:
        settings = load_settings(args.config, args.user_config)
        settings = settings.with_overrides(
            dry_run=args.dry_run,
            source_dir=args.source,
            destination_dir=args.destination,
            use_ffprobe=False if args.no_ffprobe else None,
        )
    except SettingsException as e:
        logger.error(str(e))
        return 1

    logger.info(f"Source: {settings.source_dir.resolve()}")
    logger.info(f"Destination: {settings.destination_dir.resolve()}")

    summary = ImportPipeline(settings).run()
    if summary is not None and summary.fail_count:
        logger.warning(f"{summary.fail_count} file(s) could not be processed.")
    logger.success("Import Converter process finished.")
    return 0
