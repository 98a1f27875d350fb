"""Autocomplete suggestions, related content and alternate query generation."""

from typing import List, Optional, Sequence, Set

from ..models.content import ContentType
from ..models.index import SearchIndexEntry
from ..models.result import RelatedContent
from ..utils.text_processing import normalize_text
from .embeddings import TermEmbedding
from .matching import levenshtein_distance
from .routing import content_url

MIN_SUGGESTION_QUERY_LENGTH = 2
MIN_VOCABULARY_TERM_LENGTH = 3
MAX_SUGGESTED_QUERIES = 5
MAX_SIMILAR_TERMS = 5
MAX_EDIT_DISTANCE = 2


def get_suggestions(entries: Sequence[SearchIndexEntry], query: str, limit: int = 5) -> List[str]:
    """
    Collect titles and tags containing the query, case-insensitively.

    Args:
        entries: Index entries
        query: Partial query, at least two characters
        limit: Maximum number of suggestions

    Returns:
        Deduplicated suggestions in index order
    """
    normalized_query = (query or "").lower().strip()
    if len(normalized_query) < MIN_SUGGESTION_QUERY_LENGTH or limit <= 0:
        return []

    suggestions: List[str] = []
    seen: Set[str] = set()

    def add(candidate: str) -> None:
        if candidate not in seen and normalized_query in candidate.lower():
            seen.add(candidate)
            suggestions.append(candidate)

    for entry in entries:
        add(entry.title)
        for tag in entry.tags:
            add(tag)
        if len(suggestions) >= limit:
            break

    return suggestions[:limit]


def get_related_content(
    entries: Sequence[SearchIndexEntry],
    content_id: str,
    limit: int = 5,
    content_type: Optional[ContentType] = None
) -> List[RelatedContent]:
    """
    Find entries related to a content item.

    Scores +1 for the same category and +1 per shared tag; entries scoring
    zero are dropped.

    Args:
        entries: Index entries
        content_id: Identifier of the reference item
        limit: Maximum number of related entries
        content_type: Type of the reference item; ids are only unique per
            type, so without it the first entry with content_id is used

    Returns:
        Related entries by score descending, then id
    """
    target = next(
        (
            entry for entry in entries
            if entry.id == content_id and (content_type is None or entry.type == content_type)
        ),
        None
    )
    if target is None:
        return []

    target_tags = set(target.tags)
    related = []
    for entry in entries:
        if entry is target or (entry.id == target.id and entry.type == target.type):
            continue

        score = 0
        if target.category and entry.category == target.category:
            score += 1
        score += len(target_tags.intersection(entry.tags))

        if score > 0:
            related.append(RelatedContent(
                id=entry.id,
                score=score,
                type=entry.type,
                title=entry.title,
                url=content_url(entry.type, entry.id)
            ))

    related.sort(key=lambda item: (-item.score, item.id))
    return related[:limit]


def build_vocabulary(entries: Sequence[SearchIndexEntry]) -> Set[str]:
    """Words of titles and tags long enough to be offered as replacements."""
    vocabulary = set()
    for entry in entries:
        for text in (entry.title, *entry.tags):
            vocabulary.update(
                word for word in normalize_text(text).split()
                if len(word) >= MIN_VOCABULARY_TERM_LENGTH
            )
    return vocabulary


def find_similar_terms(
    term: str,
    vocabulary: Set[str],
    embedding: Optional[TermEmbedding] = None
) -> List[str]:
    """
    Find vocabulary terms resembling a term.

    A candidate qualifies if either contains the other, if its edit distance
    is at most two, or if its n-gram embedding is close to the term.
    """
    min_length = max(MIN_VOCABULARY_TERM_LENGTH, len(term) - MAX_EDIT_DISTANCE)
    candidates = []
    for candidate in vocabulary:
        if candidate == term or len(candidate) < min_length:
            continue
        if candidate in term or term in candidate:
            candidates.append(candidate)
        elif abs(len(candidate) - len(term)) <= MAX_EDIT_DISTANCE:
            if levenshtein_distance(term, candidate) <= MAX_EDIT_DISTANCE:
                candidates.append(candidate)

    if embedding is None:
        return sorted(candidates)[:MAX_SIMILAR_TERMS]

    candidates.extend(embedding.most_similar(term, top_k=MAX_SIMILAR_TERMS))
    return embedding.rank(term, candidates)[:MAX_SIMILAR_TERMS]


def generate_suggested_queries(
    terms: Sequence[str],
    vocabulary: Set[str],
    embedding: Optional[TermEmbedding] = None,
    limit: int = MAX_SUGGESTED_QUERIES
) -> List[str]:
    """
    Propose alternate queries for a query that matched nothing.

    Multi-term queries first get every variant with one term removed; then
    each term of three or more characters is swapped for similar vocabulary
    terms.
    """
    terms = list(terms)
    if not terms:
        return []

    original = " ".join(terms)
    suggestions: List[str] = []

    def add(candidate: str) -> None:
        if candidate and candidate != original and candidate not in suggestions:
            suggestions.append(candidate)

    if len(terms) > 1:
        for i in range(len(terms)):
            add(" ".join(terms[:i] + terms[i + 1:]))

    for i, term in enumerate(terms):
        if len(term) < MIN_VOCABULARY_TERM_LENGTH:
            continue
        for similar in find_similar_terms(term, vocabulary, embedding):
            add(" ".join(terms[:i] + [similar] + terms[i + 1:]))

    return suggestions[:limit]
