"""
Extractor Module - Pull chapter and formula records out of chapter HTML.
========================================================================

Extraction is an ordered list of named strategies so each one can be
tested against a fixed HTML fixture:

- Title strategies: tried in priority order, first non-empty text wins,
  otherwise the title is "Chapter N".
- Formula strategies: independent passes over the page. The equation pass
  reads LaTeX from ``data-math`` attributes; the formula-block pass reads
  explicitly marked formula sections and skips anything already found.

Formula titles come from a best-effort heuristic (see ``synthesize_title``)
and are expected to be reviewed before import.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from bs4 import BeautifulSoup, Tag

from openstax_ingest.shared.logging import get_logger
from openstax_ingest.shared.schemas import (
    CHAPTER_DESCRIPTION_LIMIT,
    FORMULA_DESCRIPTION_LIMIT,
    ChapterExtraction,
    ChapterRef,
    ScrapedChapter,
    ScrapedFormula,
    Volume,
)
from openstax_ingest.shared.utils import hash_formula, normalize_whitespace, truncate

logger = get_logger(__name__)

MIN_FORMULA_LENGTH = 3
MAX_TITLE_LENGTH = 50

_CONTEXT_TITLE_RE = re.compile(
    r"(?:equation|formula|law|theorem|principle|relation)[:\s]+([^.]{5,50})",
    re.IGNORECASE,
)


def synthesize_title(latex: str, context: str = "") -> str:
    """
    Generate a title for a formula that has no explicit title element.

    Order of preference:
    1. A law/theorem/equation-style phrase in the surrounding context
    2. The left-hand side of the formula plus "Formula"
    3. The first 50 characters of the formula

    Example:
        >>> synthesize_title("F = ma", "Newton's second law: force equals mass times acceleration")
        'force equals mass times acceleration'
        >>> synthesize_title("F = ma")
        'F Formula'
    """
    match = _CONTEXT_TITLE_RE.search(context)
    if match:
        return match.group(1).strip()

    if "=" in latex:
        left_side = latex.split("=", 1)[0].strip()
        return f"{left_side} Formula".strip()

    return latex[:MAX_TITLE_LENGTH]


# ─────────────────────────────────────────────────────────────────────────────
# Title Strategies
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SelectorTitleStrategy:
    """Take the chapter title from the first element matching a selector."""

    name: str
    selector: str

    def apply(self, soup: BeautifulSoup) -> Optional[str]:
        element = soup.select_one(self.selector)
        if element is None:
            return None
        text = normalize_whitespace(element.get_text())
        return text or None


DEFAULT_TITLE_STRATEGIES: tuple[SelectorTitleStrategy, ...] = (
    SelectorTitleStrategy("heading", "h1"),
    SelectorTitleStrategy("os-title", ".os-title"),
    SelectorTitleStrategy("document-title", '[data-type="document-title"]'),
)


# ─────────────────────────────────────────────────────────────────────────────
# Formula Strategies
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FormulaCandidate:
    """A formula found on the page, before it is bound to a chapter."""

    title: str
    latex: str
    description: str
    strategy: str


class EquationStrategy:
    """
    Equations marked by attribute, class or native ``<math>`` markup.

    LaTeX is read from the element's own ``data-math`` attribute, then a
    descendant's, then the element's text. The parent's trimmed text, with
    its inner whitespace kept, is the context.
    """

    name = "equation"
    selector = '[data-type="equation"], .equation, math, .os-equation'
    skip_seen = False

    def _read_latex(self, element: Tag) -> str:
        latex = element.get("data-math")
        if not latex:
            nested = element.select_one("[data-math]")
            if nested is not None:
                latex = nested.get("data-math")
        if not latex:
            latex = element.get_text()
        return normalize_whitespace(str(latex))

    def candidates(self, soup: BeautifulSoup) -> Iterator[FormulaCandidate]:
        for element in soup.select(self.selector):
            latex = self._read_latex(element)
            if len(latex) < MIN_FORMULA_LENGTH:
                continue

            parent = element.parent
            context = parent.get_text().strip() if parent is not None else ""
            context = truncate(context, FORMULA_DESCRIPTION_LIMIT)

            yield FormulaCandidate(
                title=synthesize_title(latex, context),
                latex=latex,
                description=context,
                strategy=self.name,
            )


class FormulaBlockStrategy:
    """
    Sections explicitly marked as formula blocks.

    Title and description come from nested elements when present; otherwise
    the title is synthesized and the description is the formula text itself.
    """

    name = "formula-block"
    selector = '.formula, .os-formula, [data-type="formula"]'
    title_selector = ".title, .os-title"
    description_selector = ".description, p"
    skip_seen = True

    def candidates(self, soup: BeautifulSoup) -> Iterator[FormulaCandidate]:
        for element in soup.select(self.selector):
            latex = normalize_whitespace(element.get_text())
            if len(latex) < MIN_FORMULA_LENGTH:
                continue

            title = " ".join(
                normalize_whitespace(t.get_text()) for t in element.select(self.title_selector)
            ).strip()
            if not title:
                title = synthesize_title(latex)

            description_elem = element.select_one(self.description_selector)
            description = (
                description_elem.get_text().strip()
                if description_elem is not None
                else ""
            )
            if not description:
                description = latex

            yield FormulaCandidate(
                title=title,
                latex=latex,
                description=truncate(description, FORMULA_DESCRIPTION_LIMIT),
                strategy=self.name,
            )


DEFAULT_FORMULA_STRATEGIES = (EquationStrategy(), FormulaBlockStrategy())


# ─────────────────────────────────────────────────────────────────────────────
# Chapter Extractor
# ─────────────────────────────────────────────────────────────────────────────


class ChapterExtractor:
    """
    Turn one chapter page into a chapter record and its formulas.

    Example:
        >>> extractor = ChapterExtractor()
        >>> result = extractor.extract(html, Volume.VOL1, 2, url)
        >>> result.chapter.title
        'Units and Measurement'
    """

    def __init__(
        self,
        title_strategies: Sequence[SelectorTitleStrategy] = DEFAULT_TITLE_STRATEGIES,
        formula_strategies: Sequence = DEFAULT_FORMULA_STRATEGIES,
        parser: str = "lxml",
    ):
        self.title_strategies = tuple(title_strategies)
        self.formula_strategies = tuple(formula_strategies)
        self.parser = parser

    def _create_soup(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, self.parser)

    def extract_title(self, soup: BeautifulSoup, chapter_number: int) -> str:
        for strategy in self.title_strategies:
            title = strategy.apply(soup)
            if title:
                logger.debug(f"Title from '{strategy.name}' strategy: {title}")
                return title
        return f"Chapter {chapter_number}"

    def extract_description(self, soup: BeautifulSoup) -> str:
        paragraph = soup.find("p")
        if paragraph is None:
            return ""
        return truncate(paragraph.get_text().strip(), CHAPTER_DESCRIPTION_LIMIT)

    def extract_formulas(
        self,
        soup: BeautifulSoup,
        ref: ChapterRef,
        source_url: str,
    ) -> list[ScrapedFormula]:
        formulas: list[ScrapedFormula] = []
        seen_hashes: set[str] = set()

        for strategy in self.formula_strategies:
            for candidate in strategy.candidates(soup):
                formula_hash = hash_formula(candidate.latex)
                if strategy.skip_seen and formula_hash in seen_hashes:
                    continue
                seen_hashes.add(formula_hash)
                formulas.append(
                    ScrapedFormula(
                        title=candidate.title,
                        latex=candidate.latex,
                        description=candidate.description,
                        chapter=ref,
                        source_url=source_url,
                        hash=formula_hash,
                    )
                )

        return formulas

    def extract(
        self,
        html: str,
        volume: Volume,
        chapter_number: int,
        source_url: str,
    ) -> ChapterExtraction:
        """
        Extract a chapter and its formulas from raw HTML.

        Args:
            html: Chapter page HTML
            volume: Owning volume
            chapter_number: Chapter ordinal within the volume
            source_url: URL the HTML was fetched from

        Returns:
            ChapterExtraction with one chapter and zero or more formulas
        """
        soup = self._create_soup(html)

        chapter = ScrapedChapter(
            volume=volume,
            number=chapter_number,
            title=self.extract_title(soup, chapter_number),
            description=self.extract_description(soup),
            source_url=source_url,
        )
        formulas = self.extract_formulas(soup, chapter.ref, source_url)

        return ChapterExtraction(chapter=chapter, formulas=formulas)
