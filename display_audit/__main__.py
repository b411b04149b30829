"""
Main entry point for the display audit.

Allows running: python -m display_audit <command>
"""

import sys
from display_audit.cli import main

if __name__ == "__main__":
    sys.exit(main())
