"""
meshtransfer CLI entry point.

Usage:
    python -m meshtransfer send report.csv --to X26ABC2
    python -m meshtransfer inbox
"""

from meshtransfer.cli import main

if __name__ == "__main__":
    main()
