"""
Utilities Package for the Import Converter.

Modules:
    - command_utils.py: Runs external commands (the transcoder) safely and logs their output.
    - format_utils.py: Formats sizes and durations into human-readable strings and
      searches nested probe dictionaries.
    - module_check.py: Verifies that the configured transcoder can be executed.
    - mp4_utils.py: Reads the creation time from the movie header of MP4/MOV files.
"""
