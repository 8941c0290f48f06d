"""
OpenStax Ingest - Formula scraper for OpenStax University Physics
=================================================================

Scrapes chapter introduction pages of the three University Physics
volumes for the Physics Study Hub:

- Volume 1: all chapters
- Volume 2: chapters 1-4
- Volume 3: chapters 1-4

Each page yields a chapter summary and the formulas marked up on it.
Formulas are deduplicated by a hash of their LaTeX and then either
previewed (dry run) or imported into JSONL record files.
"""

__version__ = "0.1.0"
__author__ = "Physics Study Hub Team"
__license__ = "MIT"

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Main modules (imported on demand)
    "shared",
    "ingestion",
    "reporting",
    "storage",
    "cli",
]
