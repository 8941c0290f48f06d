"""
Storage Module - Persist and query scraped formulas.
====================================================

- importer: Upsert sweep results into JSONL record files
- search: Chapter and keyword lookup over imported formulas
"""

from openstax_ingest.storage.importer import Importer, JsonlImporter
from openstax_ingest.storage.search import FormulaCatalog

__all__ = [
    "Importer",
    "JsonlImporter",
    "FormulaCatalog",
]
