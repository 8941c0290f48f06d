"""
Pipeline Module - Sweep the configured volume/chapter matrix.
=============================================================

Pipeline flow:
    ChapterPlan → (per chapter) Fetcher → ChapterExtractor → aggregate
    → deduplicate_formulas → SweepResult

Chapters are processed strictly one after another. A chapter that fails for
any reason is logged and recorded as skipped, and the sweep moves on. No
chapter is retried within a run.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from openstax_ingest.ingestion.dedup import deduplicate_formulas
from openstax_ingest.ingestion.extractor import ChapterExtractor
from openstax_ingest.ingestion.fetcher import Fetcher, chapter_url
from openstax_ingest.shared.config import ScrapingConfig
from openstax_ingest.shared.errors import (
    ConfigError,
    FatalSweepError,
    FetchError,
    OpenStaxIngestError,
    ParseError,
)
from openstax_ingest.shared.logging import get_logger
from openstax_ingest.shared.schemas import (
    ChapterExtraction,
    ChapterRef,
    SkippedChapter,
    SweepResult,
    Volume,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, ChapterRef], None]


# ─────────────────────────────────────────────────────────────────────────────
# Chapter Plan
# ─────────────────────────────────────────────────────────────────────────────


def format_chapter_numbers(numbers: Iterable[int]) -> str:
    """
    Collapse chapter numbers into contiguous ranges.

    Example:
        >>> format_chapter_numbers([1, 2, 3, 5, 7, 8])
        '1-3, 5, 7-8'
    """
    ordered = sorted(set(numbers))
    if not ordered:
        return "-"

    spans: list[str] = []
    start = prev = ordered[0]
    for number in ordered[1:] + [None]:
        if number is not None and number == prev + 1:
            prev = number
            continue
        spans.append(str(start) if start == prev else f"{start}-{prev}")
        if number is not None:
            start = prev = number
    return ", ".join(spans)


@dataclass(frozen=True)
class PlannedChapter:
    """One chapter page the sweep will visit."""

    ref: ChapterRef
    url: str


class ChapterPlan:
    """
    The ordered list of chapters a sweep visits.

    Volume rules come from configuration: ``"all"`` expands to chapters
    1 through ``all_chapters_estimate``; an explicit list is used as given.
    """

    def __init__(self, chapters: list[PlannedChapter]):
        self.chapters = chapters

    @classmethod
    def from_config(
        cls,
        config: ScrapingConfig,
        volumes: Optional[Iterable[Volume]] = None,
    ) -> "ChapterPlan":
        selected = list(volumes) if volumes is not None else list(Volume)
        chapters: list[PlannedChapter] = []

        for volume in Volume:
            if volume not in selected:
                continue
            volume_config = config.get_volume(volume.value)
            if volume_config.includes_all:
                if config.all_chapters_estimate < 1:
                    raise ConfigError(
                        f"all_chapters_estimate must be positive, got {config.all_chapters_estimate}"
                    )
                numbers = list(range(1, config.all_chapters_estimate + 1))
            else:
                numbers = list(volume_config.chapters)

            for number in numbers:
                chapters.append(
                    PlannedChapter(
                        ref=ChapterRef(volume=volume, number=number),
                        url=chapter_url(volume_config.base_url, number),
                    )
                )

        return cls(chapters)

    def numbers_for(self, volume: Volume) -> list[int]:
        return [c.ref.number for c in self.chapters if c.ref.volume == volume]

    def __iter__(self):
        return iter(self.chapters)

    def __len__(self) -> int:
        return len(self.chapters)


# ─────────────────────────────────────────────────────────────────────────────
# Orchestrator
# ─────────────────────────────────────────────────────────────────────────────


class Orchestrator:
    """
    Drive a full sweep over a chapter plan.

    Example:
        >>> with Fetcher(config) as fetcher:
        ...     result = Orchestrator(config, fetcher).run()
        >>> len(result.formulas) <= len(result.raw_formulas)
        True
    """

    def __init__(
        self,
        config: ScrapingConfig,
        fetcher: Fetcher,
        extractor: Optional[ChapterExtractor] = None,
        volumes: Optional[Iterable[Volume]] = None,
    ):
        self.config = config
        self.fetcher = fetcher
        self.extractor = extractor or ChapterExtractor()
        self.plan = ChapterPlan.from_config(config, volumes)

    def scrape_chapter(self, planned: PlannedChapter) -> ChapterExtraction:
        """
        Fetch and extract one chapter.

        Raises:
            FetchError: The page could not be retrieved
            ParseError: Extraction raised for the retrieved page
        """
        html = self.fetcher.fetch(planned.url)
        try:
            return self.extractor.extract(
                html, planned.ref.volume, planned.ref.number, planned.url
            )
        except Exception as e:
            raise ParseError(planned.ref.chapter_id, e) from e

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> SweepResult:
        """
        Sweep every planned chapter in order.

        Per-chapter failures never propagate out of this method.
        """
        result = SweepResult()
        total = len(self.plan)
        current_volume: Optional[Volume] = None

        for index, planned in enumerate(self.plan, 1):
            if planned.ref.volume != current_volume:
                current_volume = planned.ref.volume
                numbers = self.plan.numbers_for(current_volume)
                logger.info(
                    f"{current_volume.value}: scraping chapters {format_chapter_numbers(numbers)}"
                    f" ({len(numbers)} chapters)"
                )

            if progress_callback:
                progress_callback(index, total, planned.ref)

            try:
                extraction = self.scrape_chapter(planned)
            except FetchError as e:
                logger.error(f"Skipping {planned.ref}: {e}")
                result.skipped.append(
                    SkippedChapter(
                        chapter=planned.ref,
                        source_url=planned.url,
                        reason=str(e),
                        status_code=e.status_code,
                    )
                )
                continue
            except ParseError as e:
                logger.error(f"Skipping {planned.ref}: {e}")
                result.skipped.append(
                    SkippedChapter(chapter=planned.ref, source_url=planned.url, reason=str(e))
                )
                continue
            except Exception as e:
                logger.exception(f"Skipping {planned.ref}: unexpected error: {e}")
                result.skipped.append(
                    SkippedChapter(
                        chapter=planned.ref,
                        source_url=planned.url,
                        reason=f"{type(e).__name__}: {e}",
                    )
                )
                continue

            logger.info(
                f"Found: \"{extraction.chapter.title}\" with {len(extraction.formulas)} formulas"
            )
            result.chapters.append(extraction.chapter)
            result.raw_formulas.extend(extraction.formulas)

        result.formulas = deduplicate_formulas(result.raw_formulas)
        logger.info(
            f"Sweep complete: {len(result.chapters)} chapters, "
            f"{len(result.raw_formulas)} formulas ({len(result.formulas)} unique), "
            f"{len(result.skipped)} skipped"
        )
        return result


def run_sweep(
    config: ScrapingConfig,
    fetcher: Optional[Fetcher] = None,
    extractor: Optional[ChapterExtractor] = None,
    volumes: Optional[Iterable[Volume]] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> SweepResult:
    """
    Run a sweep, converting anything unexpected into FatalSweepError.

    Args:
        config: Scraping settings built once at startup
        fetcher: Fetcher to use (a new one is created and closed if omitted)
        extractor: Extractor to use (defaults to ChapterExtractor())
        volumes: Restrict the sweep to these volumes
        progress_callback: Optional callback(current, total, ref)

    Raises:
        FatalSweepError: An error escaped the per-chapter recovery boundary
    """
    owns_fetcher = fetcher is None
    active_fetcher = fetcher or Fetcher(config)

    try:
        orchestrator = Orchestrator(config, active_fetcher, extractor, volumes)
        return orchestrator.run(progress_callback=progress_callback)
    except FatalSweepError:
        raise
    except OpenStaxIngestError as e:
        raise FatalSweepError(str(e)) from e
    except Exception as e:
        raise FatalSweepError(f"Unexpected error during sweep: {e}") from e
    finally:
        if owns_fetcher:
            active_fetcher.close()
