"""Text processing utilities shared by indexing and querying."""

import re
import unicodedata
from typing import List, Tuple

ELLIPSIS = "..."
MAX_HIGHLIGHTS = 3

# Anything that is not a letter (CJK included), digit or whitespace.
_NON_WORD_PATTERN = re.compile(r'[^\w\s]|_')
_WHITESPACE_PATTERN = re.compile(r'\s+')


def normalize_text(text: str) -> str:
    """
    Normalize text for matching.

    Applies NFKC, lowercases, replaces punctuation and symbols with spaces
    and collapses whitespace. Index text and query text both go through
    this function so that they compare like for like.

    Args:
        text: Raw text

    Returns:
        Normalized text
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFKC', text).lower()
    text = _NON_WORD_PATTERN.sub(' ', text)
    return _WHITESPACE_PATTERN.sub(' ', text).strip()


def split_terms(text: str) -> List[str]:
    """Normalize text and split it into whitespace-separated terms."""
    normalized = normalize_text(text)
    return normalized.split(' ') if normalized else []


class TextProcessor:
    """Snippet generation for search result highlights."""

    def __init__(self, ellipsis: str = ELLIPSIS, max_highlights: int = MAX_HIGHLIGHTS):
        self.ellipsis = ellipsis
        self.max_highlights = max_highlights

    def truncate(self, text: str, max_length: int) -> str:
        """Cut text to max_length characters, marking the cut with an ellipsis."""
        if not text:
            return ""
        text = text.strip()
        if len(text) <= max_length:
            return text
        return text[:max_length].rstrip() + self.ellipsis

    def find_term_positions(self, text: str, terms: List[str]) -> List[Tuple[int, int]]:
        """
        Locate every occurrence of the terms in raw text.

        Args:
            text: Raw (not normalized) text
            terms: Normalized query terms

        Returns:
            Sorted (start, end) spans, case-insensitive
        """
        positions = []
        for term in terms:
            if not term:
                continue
            pattern = re.compile(re.escape(term), re.IGNORECASE)
            positions.extend((match.start(), match.end()) for match in pattern.finditer(text))
        positions.sort()
        return positions

    def generate_highlights(
        self,
        text: str,
        terms: List[str],
        max_length: int = 160,
        fallback: str = ""
    ) -> List[str]:
        """
        Generate snippets with context around matched terms.

        Occurrences are merged into one snippet while the span from the first
        to the last one fits in max_length. Each snippet is centered on its
        group, so every snippet contains at least one matched term.

        Args:
            text: Body or description text to extract snippets from
            terms: Normalized query terms
            max_length: Maximum snippet length, ellipsis markers excluded
            fallback: Text used when no term occurs in text

        Returns:
            At most max_highlights snippets
        """
        highlights: List[str] = []
        positions = self.find_term_positions(text, terms) if text else []

        if positions:
            groups = [list(positions[0])]
            for start, end in positions[1:]:
                group = groups[-1]
                if end - group[0] <= max_length:
                    group[1] = max(group[1], end)
                else:
                    groups.append([start, end])

            for start, end in groups:
                snippet = self._snippet(text, start, end, max_length)
                if snippet and snippet not in highlights:
                    highlights.append(snippet)
                if len(highlights) >= self.max_highlights:
                    break

        if not highlights:
            snippet = self.truncate(fallback, max_length)
            if snippet:
                highlights.append(snippet)

        return highlights

    def _snippet(self, text: str, start: int, end: int, max_length: int) -> str:
        """Cut a window of max_length characters centered on [start, end)."""
        center = (start + end) // 2
        window_start = max(0, center - max_length // 2)
        window_end = min(len(text), window_start + max_length)
        window_start = max(0, window_end - max_length)

        snippet = text[window_start:window_end].strip()
        if not snippet:
            return ""
        if window_start > 0:
            snippet = self.ellipsis + snippet
        if window_end < len(text):
            snippet = snippet + self.ellipsis
        return snippet
