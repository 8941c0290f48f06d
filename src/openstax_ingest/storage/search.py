"""
Search Module - Look up imported formulas by chapter or keyword.
================================================================

Filtering happens in two stages: an exact chapter match, then a
case-insensitive substring match of the keyword against title, LaTeX,
description and tags. Every hit scores 1.0; results are capped at
``limit``.
"""

from pathlib import Path
from typing import Optional

from openstax_ingest.shared.logging import get_logger
from openstax_ingest.shared.schemas import ChapterRecord, FormulaHit, FormulaRecord
from openstax_ingest.storage.importer import load_chapter_records, load_formula_records

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 20


def _matches_keyword(formula: FormulaRecord, keyword: str) -> bool:
    needle = keyword.lower()
    fields = [formula.title, formula.latex, formula.description, *formula.tags]
    return any(needle in value.lower() for value in fields if value)


class FormulaCatalog:
    """
    In-memory view over imported chapter and formula records.

    Chapters can be addressed either by their record id or by the
    ``"{volume}-CH{number}"`` key.
    """

    def __init__(self, chapters: list[ChapterRecord], formulas: list[FormulaRecord]):
        self.chapters = {c.id: c for c in chapters}
        self._keys = {f"{c.volume}-CH{c.number}": c.id for c in chapters}
        self.formulas = formulas

    @classmethod
    def load(cls, chapters_file: Path, formulas_file: Path) -> "FormulaCatalog":
        return cls(load_chapter_records(chapters_file), load_formula_records(formulas_file))

    def chapter_key(self, record_id: str) -> str:
        chapter = self.chapters.get(record_id)
        if chapter is None:
            return record_id
        return f"{chapter.volume}-CH{chapter.number}"

    def resolve_chapter(self, chapter: str) -> Optional[str]:
        """Map a chapter key or record id to a record id."""
        if chapter in self.chapters:
            return chapter
        return self._keys.get(chapter.strip().upper())

    def search(
        self,
        chapter: Optional[str] = None,
        keyword: Optional[str] = None,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[FormulaHit]:
        """
        Search formulas.

        Args:
            chapter: Chapter key (e.g. "VOL1-CH5") or chapter record id
            keyword: Case-insensitive substring
            limit: Maximum number of hits

        Returns:
            Matching formulas in stored order
        """
        candidates = self.formulas

        if chapter:
            record_id = self.resolve_chapter(chapter)
            if record_id is None:
                logger.info(f"Unknown chapter '{chapter}'")
                return []
            candidates = [f for f in candidates if f.chapter_id == record_id]

        logger.debug(f"Found {len(candidates)} formulas before keyword filtering")

        if keyword:
            candidates = [f for f in candidates if _matches_keyword(f, keyword)]

        return [
            FormulaHit(
                formula_id=f.id,
                title=f.title,
                latex=f.latex,
                chapter_id=self.chapter_key(f.chapter_id),
            )
            for f in candidates[: max(limit, 0)]
        ]
