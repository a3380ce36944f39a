"""
This package contains the core domain models of the Import Converter.

Modules:
    entries.py: The data records of a run. `MaskEntry` pairs an extension mask with
                an action, `TimestampSource` tags where a creation date came from,
                and `FileEntry` is the plan (and later the outcome) for one file.
    exceptions.py: Custom exception types, all derived from `ImportConverterException`.
"""
