"""
This file marks the 'import_converter' directory as a Python package.

The package is organised in layers:

    config/    - static constants and the `Settings` loader.
    domain/    - data records (`FileEntry`, `MaskEntry`, `TimestampSource`) and exceptions.
    services/  - timestamp resolution, destination planning, discovery, the batch
                 processor, summaries and file-based reports.
    pipeline/  - `ImportPipeline`, which wires the services together for one run.
    utils/     - helpers for running external commands, formatting and MP4 parsing.

The command-line entry point lives in `import_converter.cli`.
"""
