"""
Launcher for the Import Converter when run from a source checkout
(`python main.py --dry-run`). After installation the same entry point is
available as the `import-converter` command.
"""
import sys

from import_converter.main import main


if __name__ == "__main__":
    sys.exit(main())
