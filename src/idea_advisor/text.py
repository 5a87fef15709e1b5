"""
Text normalization for local similarity.

Tokens are lower-cased, whitespace-separated words collapsed into a set.
No stemming and no stop-word removal, so scores stay comparable with the
portal's historical alerts.
"""

import re

_WHITESPACE = re.compile(r'\s+')


def tokenize(text: str | None) -> set[str]:
    """Lower-case ``text`` and return its unique whitespace-separated tokens."""
    if not text:
        return set()
    return {t for t in _WHITESPACE.split(text.lower()) if t}


def jaccard(a: set[str], b: set[str]) -> float:
    """|a ∩ b| / |a ∪ b|, or 0.0 when both sets are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def text_similarity(text_a: str | None, text_b: str | None) -> float:
    """Jaccard similarity of the token sets of two texts."""
    return jaccard(tokenize(text_a), tokenize(text_b))


def mentions(text: str, keywords: tuple[str, ...] | list[str]) -> bool:
    """
    True if ``text`` contains any keyword as a case-insensitive substring.

    Short keywords match inside longer words too, so "OpenAI" mentions
    "ai" and "FastAPI" mentions "api".
    """
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)
