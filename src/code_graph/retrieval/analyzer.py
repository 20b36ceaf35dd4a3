"""Keyword extraction for free-text prompts."""

from __future__ import annotations

import re

STOP_WORDS = frozenset({"the", "a", "an", "in", "is", "to", "of", "and", "for", "on"})
MIN_KEYWORD_LENGTH = 3

_NON_WORD_RE = re.compile(r"[^a-zA-Z0-9_]")


def extract_keywords(prompt: str) -> list[str]:
    """Return normalized keywords in first-occurrence order.

    Duplicates are kept; the ranker counts distinct keywords itself.
    """
    words = _NON_WORD_RE.sub(" ", prompt.lower()).split()
    return [w for w in words if len(w) >= MIN_KEYWORD_LENGTH and w not in STOP_WORDS]
