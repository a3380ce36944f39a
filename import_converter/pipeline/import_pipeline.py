from datetime import datetime
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.settings import Settings
from ..domain.entries import FileEntry
from ..services.batch_service import BatchProcessor
from ..services.destination_service import DestinationPathBuilder
from ..services.file_processing_service import FileDiscovery
from ..services.logging_service import SuccessLog
from ..services.summary_service import ImportSummary, render_summary, summarize
from ..services.timestamp_resolver import TimestampResolver
from ..utils.format_utils import format_timedelta, formatted_size
from ..utils.module_check import Modules


class ImportPipeline:
    """
    One import run: discover, plan, list the plan, then (unless dry run)
    process every entry and summarise.

    The planned and processed entries stay available on the instance after
    `run()` for inspection.
    """

    def __init__(self, settings: Settings, resolver: Optional[TimestampResolver] = None):
        self.settings = settings
        # A dry run starts no external process, ffprobe included.
        self.resolver = resolver or TimestampResolver(
            use_ffprobe=settings.use_ffprobe and not settings.dry_run, ffprobe_cmd=settings.ffprobe_cmd
        )
        self.destination_builder = DestinationPathBuilder.from_settings(settings)
        self.planned_entries: List[FileEntry] = []
        self.processed_entries: List[FileEntry] = []
        self.skipped_files: List[Path] = []
        self.summary: Optional[ImportSummary] = None

    def log_masks(self):
        for mask in self.settings.mask_entries:
            logger.info(f"{mask.extension} --> reencode: {mask.reencode}")

    def discover(self) -> List[FileEntry]:
        discovery = FileDiscovery(
            self.settings.source_dir,
            self.settings.mask_entries,
            self.resolver,
            self.destination_builder,
        )
        self.planned_entries = discovery.run()
        self.skipped_files = discovery.skipped
        return self.planned_entries

    def log_plan(self):
        total_size = sum(entry.size for entry in self.planned_entries)
        logger.info(f"found {len(self.planned_entries)} files (total of {formatted_size(total_size)}):")
        for entry in self.planned_entries:
            logger.info(
                f"{entry.source_path} ({formatted_size(entry.size)}) - taken {entry.creation_date} "
                f"({entry.creation_date_source}) --> {entry.destination_path} ({entry.action})"
            )
        if self.skipped_files:
            logger.warning(f"{len(self.skipped_files)} file(s) could not be read and are not part of the plan.")

    def process(self) -> List[FileEntry]:
        success_log = None
        if self.settings.write_reports:
            success_log = SuccessLog(self.settings.destination_dir)

        if any(entry.reencode for entry in self.planned_entries):
            Modules.verify_transcoder(self.settings.handbrake_cli)

        processor = BatchProcessor.from_settings(self.settings, success_log=success_log)
        self.processed_entries = processor.process(self.planned_entries)

        self.summary = summarize(self.processed_entries)
        if success_log is not None:
            success_log.write_summary(self.summary.as_dict())
            logger.info(f"Run report written to {success_log.log_file_path}")
        return self.processed_entries

    def run(self) -> Optional[ImportSummary]:
        """
        Executes the run.

        Returns:
            The summary, or None for a dry run.
        """
        started = datetime.now()
        self.log_masks()
        self.discover()
        self.log_plan()

        if self.settings.dry_run:
            logger.info("Dry run configured --> exiting.")
            return None

        self.process()
        logger.info("")
        for line in render_summary(self.summary):
            logger.info(line)
        logger.info(f"Elapsed: {format_timedelta(datetime.now() - started)}")
        return self.summary
