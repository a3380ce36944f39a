"""
Services Package for the Import Converter.

This package contains the service layer. Each module performs one step of an
import run:

- **Timestamp resolution (`timestamp_resolver`):** determines a file's creation
  date from Exif, container metadata, the filesystem or the local clock.
- **Destination planning (`destination_service`):** renders the date templates
  into the destination path.
- **Discovery (`file_processing_service`):** finds files per extension mask and
  plans a `FileEntry` for each.
- **Batch processing (`batch_service`):** copies or re-encodes the planned entries.
- **Summary (`summary_service`):** aggregates counts and sizes of a finished run.
- **Logging (`logging_service`):** writes the error log and the YAML run report.
"""
