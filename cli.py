#!/usr/bin/env python3
"""
sdc CLI entry point.

Runs the Typer app from a source checkout without installing it.

Usage:
    python cli.py --help
    python cli.py profile
    python cli.py dcs
    python cli.py machines state=running
    python cli.py -p prod machines --json
"""

import sys
from pathlib import Path

# Add project root to path for absolute imports
project_root = Path(__file__).resolve().parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from sdc_cli.cli.main import app

if __name__ == "__main__":
    app()
