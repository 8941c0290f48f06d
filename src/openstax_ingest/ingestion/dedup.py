"""Deduplicate formulas across chapters by content hash."""

from typing import Iterable

from openstax_ingest.shared.schemas import ScrapedFormula


def deduplicate_formulas(formulas: Iterable[ScrapedFormula]) -> list[ScrapedFormula]:
    """
    Keep only the first formula seen for each hash.

    Input order is preserved, and running the filter on its own output
    returns it unchanged.
    """
    seen: set[str] = set()
    unique = []
    for formula in formulas:
        if formula.hash in seen:
            continue
        seen.add(formula.hash)
        unique.append(formula)
    return unique
