"""
Tests for Storage Module.
=========================

Tests for:
- JsonlImporter: create, upsert, chapter ref resolution
- FormulaCatalog: chapter and keyword search
"""

import json

import pytest

from openstax_ingest.shared.schemas import (
    ChapterRef,
    ScrapedChapter,
    ScrapedFormula,
    SweepResult,
    Volume,
)
from openstax_ingest.shared.utils import hash_formula


def _chapter(volume: Volume, number: int, title: str = "") -> ScrapedChapter:
    return ScrapedChapter(
        volume=volume,
        number=number,
        title=title or f"Chapter {number}",
        description="intro",
        source_url=f"https://books.test/{volume.value}/{number}-introduction",
    )


def _formula(latex: str, volume: Volume, number: int, title: str = "") -> ScrapedFormula:
    return ScrapedFormula(
        title=title or f"{latex} Formula",
        latex=latex,
        description=f"about {latex}",
        chapter=ChapterRef(volume=volume, number=number),
        source_url=f"https://books.test/{volume.value}/{number}-introduction",
        hash=hash_formula(latex),
    )


@pytest.fixture
def sweep_result() -> SweepResult:
    formulas = [
        _formula("F = m a", Volume.VOL1, 5, "Newton's second law"),
        _formula("KE = 1/2 m v^2", Volume.VOL1, 7, "Kinetic energy"),
        _formula("Q = mcΔT", Volume.VOL2, 1, "Heat transfer"),
    ]
    return SweepResult(
        chapters=[
            _chapter(Volume.VOL1, 5, "Newton's Laws of Motion"),
            _chapter(Volume.VOL1, 7, "Work and Kinetic Energy"),
            _chapter(Volume.VOL2, 1, "Temperature and Heat"),
        ],
        raw_formulas=formulas,
        formulas=formulas,
    )


@pytest.fixture
def importer(temp_dir):
    from openstax_ingest.storage.importer import JsonlImporter

    return JsonlImporter(temp_dir / "chapters.jsonl", temp_dir / "formulas.jsonl")


def _read(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


# ─────────────────────────────────────────────────────────────────────────────
# Importer Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestJsonlImporter:
    """Tests for JsonlImporter.import_sweep()."""

    def test_first_import_creates_records(self, importer, sweep_result):
        summary = importer.import_sweep(sweep_result)

        assert summary.chapters_created == 3
        assert summary.formulas_created == 3
        assert summary.chapters_updated == 0
        assert len(_read(importer.chapters_file)) == 3
        assert len(_read(importer.formulas_file)) == 3

    def test_formulas_reference_resolved_chapter_ids(self, importer, sweep_result):
        importer.import_sweep(sweep_result)

        chapters = {(c["volume"], c["number"]): c["id"] for c in _read(importer.chapters_file)}
        formulas = {f["title"]: f for f in _read(importer.formulas_file)}

        assert formulas["Kinetic energy"]["chapter_id"] == chapters[("VOL1", 7)]
        assert formulas["Heat transfer"]["chapter_id"] == chapters[("VOL2", 1)]
        assert all(f["is_scraped"] for f in formulas.values())

    def test_reimport_updates_and_keeps_ids(self, importer, sweep_result):
        importer.import_sweep(sweep_result)
        first_ids = {f["hash"]: f["id"] for f in _read(importer.formulas_file)}

        summary = importer.import_sweep(sweep_result)
        second_ids = {f["hash"]: f["id"] for f in _read(importer.formulas_file)}

        assert summary.chapters_created == 0
        assert summary.chapters_updated == 3
        assert summary.formulas_updated == 3
        assert first_ids == second_ids

    def test_upsert_matches_formula_by_hash(self, importer, sweep_result):
        importer.import_sweep(sweep_result)
        changed = _formula("f=MA", Volume.VOL1, 5, "Second law")

        summary = importer.import_sweep(
            SweepResult(chapters=[], raw_formulas=[changed], formulas=[changed])
        )
        formulas = _read(importer.formulas_file)

        assert summary.formulas_updated == 1
        assert len(formulas) == 3
        assert "Second law" in {f["title"] for f in formulas}

    def test_formula_without_chapter_is_orphaned(self, importer):
        orphan = _formula("P = W / t", Volume.VOL3, 2)

        summary = importer.import_sweep(
            SweepResult(chapters=[], raw_formulas=[orphan], formulas=[orphan])
        )

        assert summary.formulas_orphaned == 1
        assert _read(importer.formulas_file) == []

    def test_write_failure_raises_importer_error(self, temp_dir, sweep_result):
        from openstax_ingest.shared.errors import ImporterError
        from openstax_ingest.storage.importer import JsonlImporter

        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        importer = JsonlImporter(blocker / "chapters.jsonl", blocker / "formulas.jsonl")

        with pytest.raises(ImporterError):
            importer.import_sweep(sweep_result)


# ─────────────────────────────────────────────────────────────────────────────
# Search Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestFormulaCatalog:
    """Tests for FormulaCatalog.search()."""

    @pytest.fixture
    def catalog(self, importer, sweep_result):
        from openstax_ingest.storage.search import FormulaCatalog

        importer.import_sweep(sweep_result)
        return FormulaCatalog.load(importer.chapters_file, importer.formulas_file)

    def test_no_filters_returns_everything(self, catalog):
        assert len(catalog.search()) == 3

    def test_filter_by_chapter_key(self, catalog):
        hits = catalog.search(chapter="VOL1-CH7")

        assert [h.title for h in hits] == ["Kinetic energy"]
        assert hits[0].chapter_id == "VOL1-CH7"

    def test_chapter_key_is_case_insensitive(self, catalog):
        assert len(catalog.search(chapter="vol2-ch1")) == 1

    def test_unknown_chapter_returns_nothing(self, catalog):
        assert catalog.search(chapter="VOL3-CH9") == []

    def test_keyword_matches_title_latex_and_description(self, catalog):
        assert [h.title for h in catalog.search(keyword="KINETIC")] == ["Kinetic energy"]
        assert [h.title for h in catalog.search(keyword="mcΔ")] == ["Heat transfer"]
        assert [h.title for h in catalog.search(keyword="about F")] == ["Newton's second law"]

    def test_keyword_and_chapter_combined(self, catalog):
        assert catalog.search(chapter="VOL1-CH5", keyword="heat") == []

    def test_limit(self, catalog):
        assert len(catalog.search(limit=2)) == 2

    def test_hits_score_one(self, catalog):
        assert all(h.relevance_score == 1.0 for h in catalog.search())
