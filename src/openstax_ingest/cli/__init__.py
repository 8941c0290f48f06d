"""
CLI Module - Command-line interface for OpenStax Ingest.
========================================================

Usage:
    openstax-ingest --help
    openstax-ingest scrape --dry-run
    openstax-ingest scrape
    openstax-ingest search --chapter VOL1-CH5
    openstax-ingest info
"""

from openstax_ingest.cli.main import app, cli

__all__ = ["app", "cli"]
