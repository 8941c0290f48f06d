"""
Importer Module - Persist sweep results.
========================================

The importer is the hand-off point of a live (non dry-run) sweep. Chapter
references carried by formulas are resolved to persisted chapter record
ids here, not during extraction.

``JsonlImporter`` keeps chapters and formulas in two JSONL files and
upserts by natural key: a chapter by (volume, number), a formula by hash.
Existing record ids are preserved across runs.
"""

import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from openstax_ingest.shared.errors import ImporterError
from openstax_ingest.shared.logging import get_logger
from openstax_ingest.shared.schemas import (
    ChapterRecord,
    ChapterRef,
    FormulaRecord,
    ImportSummary,
    SweepResult,
    Volume,
)
from openstax_ingest.shared.utils import load_jsonl, save_jsonl

logger = get_logger(__name__)


class Importer(ABC):
    """Destination for the chapters and formulas of a sweep."""

    @abstractmethod
    def import_sweep(self, result: SweepResult) -> ImportSummary:
        """Persist the sweep's chapters and deduplicated formulas."""


def load_chapter_records(path: Path) -> list[ChapterRecord]:
    if not path.exists():
        return []
    return [ChapterRecord.model_validate(item) for item in load_jsonl(path)]


def load_formula_records(path: Path) -> list[FormulaRecord]:
    if not path.exists():
        return []
    return [FormulaRecord.model_validate(item) for item in load_jsonl(path)]


class JsonlImporter(Importer):
    """
    Upsert sweep results into ``chapters.jsonl`` and ``formulas.jsonl``.

    Example:
        >>> importer = JsonlImporter(paths.chapters_file, paths.formulas_file)
        >>> summary = importer.import_sweep(result)
        >>> summary.formulas_created
        42
    """

    def __init__(self, chapters_file: Path, formulas_file: Path):
        self.chapters_file = Path(chapters_file)
        self.formulas_file = Path(formulas_file)

    def _upsert_chapters(
        self, result: SweepResult, summary: ImportSummary
    ) -> dict[ChapterRef, ChapterRecord]:
        by_ref: dict[ChapterRef, ChapterRecord] = {
            ChapterRef(volume=Volume(r.volume), number=r.number): r
            for r in load_chapter_records(self.chapters_file)
        }

        for chapter in result.chapters:
            existing = by_ref.get(chapter.ref)
            record = ChapterRecord(
                id=existing.id if existing else str(uuid.uuid4()),
                volume=chapter.volume,
                number=chapter.number,
                title=chapter.title,
                description=chapter.description,
                source_url=chapter.source_url,
            )
            if existing:
                summary.chapters_updated += 1
            else:
                summary.chapters_created += 1
            by_ref[chapter.ref] = record

        return by_ref

    def _upsert_formulas(
        self,
        result: SweepResult,
        chapters: dict[ChapterRef, ChapterRecord],
        summary: ImportSummary,
    ) -> dict[str, FormulaRecord]:
        by_hash = {r.hash: r for r in load_formula_records(self.formulas_file)}

        for formula in result.formulas:
            chapter_record = chapters.get(formula.chapter)
            if chapter_record is None:
                logger.warning(
                    f"No chapter record for {formula.chapter_id}; skipping formula '{formula.title}'"
                )
                summary.formulas_orphaned += 1
                continue

            existing = by_hash.get(formula.hash)
            by_hash[formula.hash] = FormulaRecord(
                id=existing.id if existing else str(uuid.uuid4()),
                chapter_id=chapter_record.id,
                title=formula.title,
                latex=formula.latex,
                description=formula.description,
                tags=existing.tags if existing else [],
                is_scraped=True,
                source_url=formula.source_url,
                hash=formula.hash,
            )
            if existing:
                summary.formulas_updated += 1
            else:
                summary.formulas_created += 1

        return by_hash

    def import_sweep(self, result: SweepResult) -> ImportSummary:
        summary = ImportSummary(destination=str(self.formulas_file.parent))

        try:
            chapters = self._upsert_chapters(result, summary)
            formulas = self._upsert_formulas(result, chapters, summary)

            ordered_chapters = sorted(chapters.values(), key=lambda r: (r.volume, r.number))
            save_jsonl(self.chapters_file, (r.model_dump(mode="json") for r in ordered_chapters))
            save_jsonl(self.formulas_file, (r.model_dump(mode="json") for r in formulas.values()))
        except (OSError, ValueError) as e:
            raise ImporterError(f"Failed to import sweep into {summary.destination}: {e}") from e

        logger.info(
            f"Imported chapters: {summary.chapters_created} created, "
            f"{summary.chapters_updated} updated; formulas: {summary.formulas_created} created, "
            f"{summary.formulas_updated} updated"
        )
        return summary
