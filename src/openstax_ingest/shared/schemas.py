"""
Schemas Module - Pydantic data models for the ingestion pipeline.
=================================================================

Defines the data contracts shared by the extractor, orchestrator,
reporter and importer:
- Volume enum and typed chapter references
- Scraped chapter and formula records
- Sweep results and import summaries
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

CHAPTER_DESCRIPTION_LIMIT = 500
FORMULA_DESCRIPTION_LIMIT = 200


# ─────────────────────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────────────────────


class Volume(str, Enum):
    """Textbook volumes of University Physics."""

    VOL1 = "VOL1"
    VOL2 = "VOL2"
    VOL3 = "VOL3"


# ─────────────────────────────────────────────────────────────────────────────
# Chapter Models
# ─────────────────────────────────────────────────────────────────────────────


class ChapterRef(BaseModel):
    """
    Natural key of a chapter: the (volume, number) pair.

    The importer resolves a ref to a persisted record id; ``chapter_id``
    renders the legacy ``"{volume}-CH{number}"`` string form.
    """

    model_config = ConfigDict(frozen=True)

    volume: Volume
    number: int = Field(..., ge=1)

    @property
    def chapter_id(self) -> str:
        return f"{self.volume.value}-CH{self.number}"

    def __str__(self) -> str:
        return self.chapter_id


class ScrapedChapter(BaseModel):
    """A chapter introduction page as extracted from OpenStax."""

    model_config = ConfigDict(frozen=True)

    volume: Volume = Field(..., description="Owning volume")
    number: int = Field(..., ge=1, description="Chapter ordinal within the volume")
    title: str = Field(..., description="Page heading or 'Chapter N'")
    description: str = Field(
        default="",
        max_length=CHAPTER_DESCRIPTION_LIMIT,
        description="First paragraph of the page",
    )
    source_url: str = Field(..., description="URL the page was fetched from")

    @property
    def ref(self) -> ChapterRef:
        return ChapterRef(volume=self.volume, number=self.number)


# ─────────────────────────────────────────────────────────────────────────────
# Formula Models
# ─────────────────────────────────────────────────────────────────────────────


class ScrapedFormula(BaseModel):
    """
    A formula extracted from a chapter page.

    ``hash`` is the deduplication key: two formulas with the same hash are
    the same formula, and only the first one seen is kept.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Heuristic title")
    latex: str = Field(..., min_length=1, description="Whitespace-normalized formula text")
    description: str = Field(
        default="",
        max_length=FORMULA_DESCRIPTION_LIMIT,
        description="Context text near the formula",
    )
    chapter: ChapterRef = Field(..., description="Owning chapter")
    source_url: str = Field(..., description="Page the formula was extracted from")
    hash: str = Field(..., description="MD5 of whitespace-stripped, lower-cased LaTeX")

    @computed_field
    @property
    def chapter_id(self) -> str:
        return self.chapter.chapter_id

    @computed_field
    @property
    def volume(self) -> Volume:
        return self.chapter.volume

    @computed_field
    @property
    def chapter_number(self) -> int:
        return self.chapter.number


class ChapterExtraction(BaseModel):
    """Everything extracted from one chapter page."""

    chapter: ScrapedChapter
    formulas: list[ScrapedFormula] = Field(default_factory=list)


# ─────────────────────────────────────────────────────────────────────────────
# Sweep Models
# ─────────────────────────────────────────────────────────────────────────────


class SkippedChapter(BaseModel):
    """A chapter dropped from the sweep after a fetch or parse failure."""

    chapter: ChapterRef
    source_url: str
    reason: str
    status_code: Optional[int] = None


class SweepResult(BaseModel):
    """Aggregated output of one sweep across all configured volumes."""

    chapters: list[ScrapedChapter] = Field(default_factory=list)
    raw_formulas: list[ScrapedFormula] = Field(default_factory=list)
    formulas: list[ScrapedFormula] = Field(
        default_factory=list, description="Formulas after global deduplication"
    )
    skipped: list[SkippedChapter] = Field(default_factory=list)

    def chapters_by_volume(self) -> dict[Volume, int]:
        """Count scraped chapters per volume (every volume present, zero if none)."""
        counts = {volume: 0 for volume in Volume}
        for chapter in self.chapters:
            counts[chapter.volume] += 1
        return counts

    @property
    def duplicate_count(self) -> int:
        return len(self.raw_formulas) - len(self.formulas)


# ─────────────────────────────────────────────────────────────────────────────
# Persistence Models
# ─────────────────────────────────────────────────────────────────────────────


class ChapterRecord(BaseModel):
    """Persisted shape of a chapter (mirrors the backend Chapter model)."""

    id: str
    volume: Volume
    number: int
    title: str
    description: str = ""
    source_url: str = ""

    model_config = ConfigDict(use_enum_values=True)


class FormulaRecord(BaseModel):
    """Persisted shape of a formula (mirrors the backend Formula model)."""

    id: str
    chapter_id: str = Field(..., description="Resolved id of the owning ChapterRecord")
    title: str
    latex: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_scraped: bool = True
    source_url: str = ""
    hash: str


class ImportSummary(BaseModel):
    """Counts reported by an importer after persisting a sweep."""

    chapters_created: int = 0
    chapters_updated: int = 0
    formulas_created: int = 0
    formulas_updated: int = 0
    formulas_orphaned: int = Field(
        default=0, description="Formulas whose chapter ref could not be resolved"
    )
    destination: str = ""


class FormulaHit(BaseModel):
    """A formula returned by search."""

    formula_id: str
    title: str
    latex: str
    chapter_id: str
    relevance_score: float = 1.0
