"""In-place text rewrites for files inside a generated project."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

__all__ = ["replace_in_file", "regex_replace_in_file"]

logger = logging.getLogger(__name__)


def replace_in_file(
    search: str | Sequence[str],
    replace: str | Sequence[str],
    path: str | Path,
) -> bool:
    """Replace literal text, pairwise when given sequences. Returns True when the file changed.

    Missing files are skipped.
    """
    target = Path(path)
    if not target.is_file():
        logger.debug("Skipping rewrite of missing file %s", target)
        return False

    searches = [search] if isinstance(search, str) else list(search)
    replacements = [replace] if isinstance(replace, str) else list(replace)
    if len(searches) != len(replacements):
        raise ValueError("search and replace must have the same length")

    original = target.read_text(encoding="utf-8")
    contents = original
    for old, new in zip(searches, replacements):
        contents = contents.replace(old, new)

    if contents == original:
        return False
    target.write_text(contents, encoding="utf-8")
    return True


def regex_replace_in_file(pattern: str, replacement: str, path: str | Path) -> bool:
    target = Path(path)
    if not target.is_file():
        logger.debug("Skipping rewrite of missing file %s", target)
        return False

    original = target.read_text(encoding="utf-8")
    contents = re.sub(pattern, lambda _match: replacement, original)
    if contents == original:
        return False
    target.write_text(contents, encoding="utf-8")
    return True
