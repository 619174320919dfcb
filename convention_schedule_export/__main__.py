"""
Allows running the exporter via:

    python -m convention_schedule_export --start-date 2024-05-24
"""
import sys

from convention_schedule_export.cli import main

if __name__ == "__main__":
    sys.exit(main())
