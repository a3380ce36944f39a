"""
Configuration Package for the Import Converter.

This package separates configuration from the application logic:

- `common.py` holds static constants shared across the application, such as the
  logging format, report file names and the MP4 epoch offset.
- `settings.py` loads the user-editable YAML settings (plus optional user overrides
  and environment variables) into an explicit `Settings` object that is passed to
  the components that need it.
"""
