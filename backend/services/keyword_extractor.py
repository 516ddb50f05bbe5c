"""Stop-word filtered keyword extraction and keyword normalization."""
import re
from typing import Iterable, List, Optional, Union

from config import MAX_KEYWORDS

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "been", "be",
    "have", "has", "had", "do", "does", "did", "will", "would", "should",
    "could", "may", "might", "must", "can", "this", "that", "these", "those",
})

_PUNCTUATION = re.compile(r"[^\w\s]")


def extract_keywords(text: str, max_terms: int = MAX_KEYWORDS) -> List[str]:
    """
    Extract a bounded, ordered set of salient terms from text.

    Lower-cases, strips punctuation, drops tokens of three characters or fewer
    and stop words, then de-duplicates keeping first-seen order.

    Args:
        text: Raw text to tag
        max_terms: Maximum number of keywords to return

    Returns:
        Ordered list of unique keywords, empty for empty input
    """
    if not text:
        return []

    cleaned = _PUNCTUATION.sub("", text.lower())

    keywords: List[str] = []
    seen = set()
    for token in cleaned.split():
        if len(token) <= 3 or token in STOP_WORDS or token in seen:
            continue
        seen.add(token)
        keywords.append(token)
        if len(keywords) >= max_terms:
            break

    return keywords


def normalize_keywords(value: Optional[Union[str, Iterable[str]]]) -> List[str]:
    """
    Normalize a keyword field to an ordered list of unique, lower-cased strings.

    Accepts a list of strings, a comma-joined string, or None.
    """
    if value is None:
        return []

    if isinstance(value, str):
        candidates = value.split(",")
    else:
        candidates = [str(item) for item in value]

    keywords: List[str] = []
    for candidate in candidates:
        keyword = candidate.strip().lower()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return keywords


def merge_keywords(*groups: Iterable[str]) -> List[str]:
    """Concatenate keyword groups, dropping duplicates while preserving order."""
    merged: List[str] = []
    for group in groups:
        for keyword in group:
            if keyword and keyword not in merged:
                merged.append(keyword)
    return merged
