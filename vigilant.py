#!/usr/bin/env python3
"""
Vigilant CLI - quick launcher.

Usage:
    python vigilant.py status
    python vigilant.py --help
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from src.cli.vigilant_cli import main

if __name__ == "__main__":
    main()
