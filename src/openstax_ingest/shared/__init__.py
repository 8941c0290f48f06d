"""
Shared Module - Common utilities, configuration, schemas, and logging.
======================================================================

This module provides foundational components used across all other modules:

- config: Configuration loading and management
- errors: Exception hierarchy
- logging: Logging setup
- schemas: Pydantic data models
- utils: Utility functions (hashing, text, JSONL I/O)
"""

from openstax_ingest.shared.config import get_settings, Settings
from openstax_ingest.shared.errors import (
    ConfigError,
    FatalSweepError,
    FetchError,
    ImporterError,
    OpenStaxIngestError,
    ParseError,
)
from openstax_ingest.shared.logging import get_logger, setup_logging
from openstax_ingest.shared.schemas import (
    ChapterRef,
    ScrapedChapter,
    ScrapedFormula,
    SweepResult,
    Volume,
)
from openstax_ingest.shared.utils import (
    hash_formula,
    normalize_whitespace,
    load_jsonl,
    save_jsonl,
)

__all__ = [
    # Config
    "get_settings",
    "Settings",
    # Errors
    "ConfigError",
    "FatalSweepError",
    "FetchError",
    "ImporterError",
    "OpenStaxIngestError",
    "ParseError",
    # Logging
    "get_logger",
    "setup_logging",
    # Schemas
    "ChapterRef",
    "ScrapedChapter",
    "ScrapedFormula",
    "SweepResult",
    "Volume",
    # Utils
    "hash_formula",
    "normalize_whitespace",
    "load_jsonl",
    "save_jsonl",
]
