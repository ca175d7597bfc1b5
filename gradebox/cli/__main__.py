"""
GradeBox CLI entry point.

Usage:
    python -m gradebox.cli run checks:Checks
    python -m gradebox.cli config --config grading.yaml
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
