"""Message text tokenization."""

from __future__ import annotations

import re

MIN_TOKEN_LENGTH = 3

STOP_WORDS = frozenset(
    {
        "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
        "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
        "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
        "or", "an", "will", "my", "one", "all", "would", "there", "their",
        "what", "so", "up", "out", "if", "about", "who", "get", "which", "go",
        "me", "when", "make", "can", "like", "time", "no", "just", "him", "know",
        "take", "people", "into", "year", "your", "good", "some", "could", "them",
        "see", "other", "than", "then", "now", "look", "only", "come", "its", "over",
        "think", "also", "back", "after", "use", "two", "how", "our", "work",
        "first", "well", "way", "even", "new", "want", "because", "any", "these",
        "give", "day", "most", "us",
    }
)

_DELIMITER_RE = re.compile(r"[^a-z0-9]+")


def tokenize(text: str) -> list[str]:
    """Lowercase ``text`` and split it into indexable tokens.

    Any character outside ``[a-z0-9]`` separates tokens. Tokens shorter than
    ``MIN_TOKEN_LENGTH``, stop words and purely numeric tokens are dropped.
    Order is preserved so repeated terms keep their counts.
    """
    if not text:
        return []
    return [
        token
        for token in _DELIMITER_RE.split(text.lower())
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOP_WORDS and not token.isdigit()
    ]


__all__ = ["tokenize", "STOP_WORDS", "MIN_TOKEN_LENGTH"]
