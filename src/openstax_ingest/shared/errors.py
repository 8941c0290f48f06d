"""
Errors Module - Exception hierarchy for the ingestion pipeline.
===============================================================

Per-chapter errors (FetchError, ParseError) are recovered by the
orchestrator: the chapter is logged and skipped. Anything else escaping
the sweep is a FatalSweepError and terminates the CLI with exit code 1.
"""

from typing import Optional


class OpenStaxIngestError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(OpenStaxIngestError):
    """Invalid or inconsistent configuration."""


class FetchError(OpenStaxIngestError):
    """A chapter page could not be retrieved (non-2xx or network failure)."""

    def __init__(self, url: str, status_code: Optional[int] = None, message: str = ""):
        self.url = url
        self.status_code = status_code
        if not message:
            if status_code is not None:
                message = f"Failed to fetch {url}: HTTP {status_code}"
            else:
                message = f"Failed to fetch {url}"
        super().__init__(message)


class ParseError(OpenStaxIngestError):
    """Extraction failed for a fetched chapter page."""

    def __init__(self, chapter_id: str, cause: Exception):
        self.chapter_id = chapter_id
        self.cause = cause
        super().__init__(f"Failed to parse {chapter_id}: {cause}")


class FatalSweepError(OpenStaxIngestError):
    """An unexpected error escaped the per-chapter recovery boundary."""


class ImporterError(OpenStaxIngestError):
    """Persisting sweep results failed."""
