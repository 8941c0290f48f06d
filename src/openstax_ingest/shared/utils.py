"""
Utilities Module - Common helper functions.
==========================================

Provides utility functions for:
- Formula hashing (deduplication keys)
- Text normalization and truncation
- File I/O (JSONL)
- Directory management
"""

import hashlib
import json
import re
from pathlib import Path
from typing import Any, Iterable, Iterator

from openstax_ingest.shared.logging import get_logger

logger = get_logger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


# ─────────────────────────────────────────────────────────────────────────────
# Hashing Functions
# ─────────────────────────────────────────────────────────────────────────────


def compute_hash(text: str, algorithm: str = "sha256") -> str:
    """
    Compute hash of text content.

    Example:
        >>> compute_hash("hello world")
        'b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9'
    """
    hasher = hashlib.new(algorithm)
    hasher.update(text.encode("utf-8"))
    return hasher.hexdigest()


def hash_formula(latex: str) -> str:
    """
    Compute the deduplication hash of a formula.

    All whitespace is removed and the text lower-cased before hashing, so
    ``"Q = mcΔT"`` and ``"q=mcΔt"`` hash to the same value.

    Returns:
        MD5 hex digest
    """
    normalized = _WHITESPACE_RE.sub("", latex).lower()
    return compute_hash(normalized, algorithm="md5")


# ─────────────────────────────────────────────────────────────────────────────
# Text Utilities
# ─────────────────────────────────────────────────────────────────────────────


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def truncate(text: str, max_length: int) -> str:
    """Cut text to at most ``max_length`` characters (no suffix added)."""
    return text[:max_length]


# ─────────────────────────────────────────────────────────────────────────────
# Directory Management
# ─────────────────────────────────────────────────────────────────────────────


def ensure_parent_directory(file_path: Path) -> Path:
    """Ensure the parent directory of a file exists."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return file_path


# ─────────────────────────────────────────────────────────────────────────────
# JSONL File I/O
# ─────────────────────────────────────────────────────────────────────────────


def load_jsonl(file_path: Path) -> Iterator[dict[str, Any]]:
    """
    Load data from a JSONL (JSON Lines) file.

    Yields one record at a time. Invalid lines are logged and skipped.
    """
    file_path = Path(file_path)

    with open(file_path, "r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid JSON at line {line_num} in {file_path}: {e}")
                continue


def save_jsonl(file_path: Path, items: Iterable[dict[str, Any]]) -> int:
    """
    Save data to a JSONL (JSON Lines) file.

    Returns:
        Number of items saved
    """
    file_path = Path(file_path)
    ensure_parent_directory(file_path)

    count = 0
    with open(file_path, "w", encoding="utf-8") as f:
        for item in items:
            line = json.dumps(item, ensure_ascii=False, default=str)
            f.write(line + "\n")
            count += 1

    logger.debug(f"Saved {count} items to JSONL at {file_path}")
    return count
