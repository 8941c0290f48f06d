"""
Ingestion Module - Fetch, extract, and deduplicate textbook formulas.
=====================================================================

This module handles the scraping pipeline:

- fetcher: HTTP retrieval with a fixed user agent and a post-fetch delay
- extractor: Strategy-based chapter and formula extraction from HTML
- dedup: Global first-seen formula deduplication
- pipeline: Chapter plan and sequential orchestrator

Pipeline flow:
    ChapterPlan → Fetcher → HTML → ChapterExtractor → records → deduplicate → SweepResult
"""

from openstax_ingest.ingestion.fetcher import Fetcher, chapter_url
from openstax_ingest.ingestion.extractor import (
    ChapterExtractor,
    EquationStrategy,
    FormulaBlockStrategy,
    SelectorTitleStrategy,
    synthesize_title,
)
from openstax_ingest.ingestion.dedup import deduplicate_formulas
from openstax_ingest.ingestion.pipeline import (
    ChapterPlan,
    Orchestrator,
    format_chapter_numbers,
    run_sweep,
)

__all__ = [
    # Fetcher
    "Fetcher",
    "chapter_url",
    # Extractor
    "ChapterExtractor",
    "EquationStrategy",
    "FormulaBlockStrategy",
    "SelectorTitleStrategy",
    "synthesize_title",
    # Dedup
    "deduplicate_formulas",
    # Pipeline
    "ChapterPlan",
    "Orchestrator",
    "format_chapter_numbers",
    "run_sweep",
]
