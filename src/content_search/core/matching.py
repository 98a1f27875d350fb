"""Term matching strategies used by the query engine."""

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insertions, deletions, substitutions)."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost
            ))
        previous = current
    return previous[-1]


class Matcher(ABC):
    """Scores how well a single term matches a text."""

    @abstractmethod
    def matches(self, text: str, term: str, threshold: float) -> float:
        """
        Score a term against normalized text.

        Args:
            text: Normalized text
            term: Normalized query term
            threshold: Fuzziness tolerance (0.0 = exact only)

        Returns:
            Match score in [0.0, 1.0], 0.0 meaning no match
        """

    def fraction_matched(self, text: str, terms: Sequence[str], threshold: float) -> float:
        """Average match score of the terms against the text."""
        if not terms or not text:
            return 0.0
        return sum(self.matches(text, term, threshold) for term in terms) / len(terms)


class SubstringMatcher(Matcher):
    """Plain containment test."""

    def matches(self, text: str, term: str, threshold: float) -> float:
        return 1.0 if term and term in text else 0.0


class FuzzyMatcher(Matcher):
    """
    Containment first, then normalized edit distance against each word.

    A word matches when ``distance / max(len(word), len(term)) <= threshold``;
    the score is one minus that ratio.
    """

    def __init__(self, cache_size: int = 4096):
        self._words: Dict[str, List[str]] = {}
        self._cache_size = cache_size

    def matches(self, text: str, term: str, threshold: float) -> float:
        if not term or not text:
            return 0.0
        if term in text:
            return 1.0
        if threshold <= 0:
            return 0.0

        best = 0.0
        for word in self._split(text):
            longest = max(len(word), len(term))
            # Length difference alone is a lower bound on the distance.
            if abs(len(word) - len(term)) / longest > threshold:
                continue
            ratio = levenshtein_distance(word, term) / longest
            if ratio <= threshold:
                best = max(best, 1.0 - ratio)
                if best == 1.0:
                    break
        return best

    def _split(self, text: str) -> List[str]:
        words = self._words.get(text)
        if words is None:
            if len(self._words) >= self._cache_size:
                self._words.clear()
            words = list(dict.fromkeys(text.split()))
            self._words[text] = words
        return words
