"""Preview text for search hits."""

from __future__ import annotations

import re

ELLIPSIS = "..."

_WHITESPACE_RE = re.compile(r"\s+")


def snippet(text: str, limit: int = 200) -> str:
    """Single-line preview of ``text``.

    Runs of whitespace collapse to one space. Text longer than ``limit``
    is cut at ``limit`` characters and gets an ellipsis appended.
    """
    flat = _WHITESPACE_RE.sub(" ", text).strip()
    if len(flat) <= limit:
        return flat
    return f"{flat[:limit]}{ELLIPSIS}"
