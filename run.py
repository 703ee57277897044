#!/usr/bin/env python
"""
Convenience script to run DirQuota during development.

Usage:
    python run.py [--config settings.cfg] [--log-file program.log] [--dry-run]
"""

import sys
from pathlib import Path

# Add src to path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))


if __name__ == "__main__":
    from dirquota_app.__main__ import main
    sys.exit(main())
