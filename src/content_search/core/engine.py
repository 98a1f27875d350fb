"""Query engine: weighted fuzzy term matching, ranking and highlighting."""

import logging
import time
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..models.index import SearchIndexEntry
from ..models.query import SearchOptions
from ..models.result import SearchResult, SearchResponse, RelatedContent, MAX_HIGHLIGHTS
from ..utils.text_processing import TextProcessor, normalize_text, split_terms
from ..utils.validators import resolve_options, validate_content_type, validate_query_text
from .cache import ResultCache
from .embeddings import TermEmbedding
from .index_store import IndexStore
from .matching import FuzzyMatcher, Matcher, SubstringMatcher
from .routing import content_url
from .suggestions import (
    build_vocabulary,
    generate_suggested_queries,
    get_related_content,
    get_suggestions,
)

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 0.8
DESCRIPTION_WEIGHT = 0.6
CONTENT_WEIGHT = 0.4
TAG_WEIGHT = 0.7

OptionsLike = Union[SearchOptions, Mapping[str, Any], None]
Ranked = List[Tuple[SearchIndexEntry, float]]


@lru_cache(maxsize=8192)
def _normalized_fields(entry: SearchIndexEntry) -> Tuple[str, str, Tuple[str, ...]]:
    """Normalized title, description and tags of an entry."""
    return (
        normalize_text(entry.title),
        normalize_text(entry.description),
        tuple(normalize_text(tag) for tag in entry.tags)
    )


class ContentSearchEngine:
    """
    Searches the content index.

    Scores each candidate per field (title, description, body, tags) and
    keeps the best field score, so one strong match is enough to rank an
    item highly. Results are cached per query and options.
    """

    def __init__(
        self,
        store: IndexStore,
        cache: Optional[ResultCache] = None,
        defaults: Optional[Mapping[str, Any]] = None,
        fuzzy_matcher: Optional[Matcher] = None,
        exact_matcher: Optional[Matcher] = None
    ):
        """
        Initialize the query engine.

        Args:
            store: Index store to search
            cache: Result cache (a fresh ResultCache when None)
            defaults: Option defaults applied to mapping/None options
            fuzzy_matcher: Matcher used when options.fuzzy is set
            exact_matcher: Matcher used otherwise
        """
        self.store = store
        self.cache = cache if cache is not None else ResultCache()
        self.defaults = dict(defaults or {})
        self.text_processor = TextProcessor()
        self._fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self._exact_matcher = exact_matcher or SubstringMatcher()

        self._vocabulary_entries: Optional[Sequence[SearchIndexEntry]] = None
        self._vocabulary = set()
        self._embedding: Optional[TermEmbedding] = None

        self._stats = {
            'total_searches': 0,
            'cache_hits': 0,
            'avg_search_time': 0.0
        }

    def resolve(self, options: OptionsLike = None, **overrides: Any) -> SearchOptions:
        """Resolve options against the engine defaults."""
        return resolve_options(options, defaults=self.defaults, overrides=overrides)

    async def search(self, query: str, options: OptionsLike = None) -> List[SearchResult]:
        """
        Search the index.

        Args:
            query: Free-text query; empty queries return nothing unless
                options.list_all asks for a listing
            options: SearchOptions or a mapping of option fields

        Returns:
            Ranked results of the requested page

        Raises:
            ValidationError: If query or options are of the wrong type
        """
        query = validate_query_text(query)
        opts = self.resolve(options)

        if not query.strip():
            if not opts.list_all:
                return []
            return (await self._listing(opts)).results

        start_time = time.perf_counter()
        entries = await self._load_entries()
        candidates = self._apply_filters(entries, opts)

        cached = self.cache.get(query, opts)
        if cached is not None:
            self._stats['cache_hits'] += 1
            logger.debug(f"Cache hit for query: '{query[:50]}'")
            return cached

        terms = split_terms(query)
        ranked = self._rank(candidates, terms, opts)
        results = self._build_results(ranked[opts.offset:opts.offset + opts.limit], terms, opts)

        self.cache.put(query, opts, results)
        self._update_search_stats(time.perf_counter() - start_time)

        logger.info(f"Search completed: {len(results)} results for '{query[:50]}'")
        return results

    async def search_page(self, query: str, options: OptionsLike = None) -> SearchResponse:
        """
        Search and report pagination metadata.

        Computes the full ranking to know the total, so it does not read the
        cache; the page it returns is still cached for search(). When nothing
        matches, alternate queries are suggested.
        """
        query = validate_query_text(query)
        opts = self.resolve(options)

        if not query.strip():
            if opts.list_all:
                return await self._listing(opts)
            return SearchResponse(
                results=[], total=0, has_more=False,
                query=query, limit=opts.limit, offset=opts.offset
            )

        start_time = time.perf_counter()
        entries = await self._load_entries()
        candidates = self._apply_filters(entries, opts)

        terms = split_terms(query)
        ranked = self._rank(candidates, terms, opts)
        results = self._build_results(ranked[opts.offset:opts.offset + opts.limit], terms, opts)
        self.cache.put(query, opts, results)

        suggested_queries = None
        if not ranked and terms:
            suggested_queries = self._suggest_queries(terms, entries)

        elapsed = time.perf_counter() - start_time
        self._update_search_stats(elapsed)

        return SearchResponse(
            results=results,
            total=len(ranked),
            has_more=opts.offset + opts.limit < len(ranked),
            query=query,
            limit=opts.limit,
            offset=opts.offset,
            execution_time_ms=elapsed * 1000,
            suggested_queries=suggested_queries
        )

    async def list_content(self, options: OptionsLike = None) -> List[SearchResult]:
        """List filtered entries by static score, without a query."""
        opts = self.resolve(options, list_all=True)
        return (await self._listing(opts)).results

    async def simple_search(self, query: str, options: OptionsLike = None) -> List[SearchResult]:
        """Title, description and tag search with a strict fuzziness tolerance."""
        return await self.search(query, self.resolve(options, include_content=False, threshold=0.2))

    async def detailed_search(self, query: str, options: OptionsLike = None) -> List[SearchResult]:
        """Search including body text with a lenient fuzziness tolerance."""
        return await self.search(query, self.resolve(options, include_content=True, threshold=0.4))

    async def get_suggestions(self, query: str, limit: int = 5) -> List[str]:
        """Autocomplete suggestions from indexed titles and tags."""
        try:
            entries = await self.store.load()
            return get_suggestions(entries, query, limit)
        except Exception as e:
            logger.error(f"Failed to get search suggestions: {str(e)}")
            return []

    async def get_related_content(
        self,
        content_id: str,
        limit: int = 5,
        content_type: Optional[Any] = None
    ) -> List[RelatedContent]:
        """
        Entries sharing category or tags with the given content item.

        Raises:
            ValidationError: If content_type is not a known type
        """
        content_type = validate_content_type(content_type)
        try:
            entries = await self.store.load()
            return get_related_content(entries, content_id, limit, content_type)
        except Exception as e:
            logger.error(f"Failed to get related content for {content_id}: {str(e)}")
            return []

    async def _load_entries(self) -> List[SearchIndexEntry]:
        try:
            return await self.store.load()
        except Exception as e:
            logger.error(f"Failed to load search index: {str(e)}")
            return []

    async def _listing(self, opts: SearchOptions) -> SearchResponse:
        entries = await self._load_entries()
        candidates = sorted(
            self._apply_filters(entries, opts),
            key=lambda entry: (-entry.search_score, entry.id)
        )
        page = candidates[opts.offset:opts.offset + opts.limit]
        results = [
            SearchResult(
                id=entry.id,
                type=entry.type,
                title=entry.title,
                description=entry.description,
                url=content_url(entry.type, entry.id),
                score=1.0
            )
            for entry in page
        ]
        return SearchResponse(
            results=results,
            total=len(candidates),
            has_more=opts.offset + opts.limit < len(candidates),
            query="",
            limit=opts.limit,
            offset=opts.offset
        )

    def _apply_filters(self, entries: Sequence[SearchIndexEntry], opts: SearchOptions) -> List[SearchIndexEntry]:
        """Apply structural filters before any text scoring."""
        category = opts.category.lower() if opts.category else None
        tags = {tag.lower() for tag in opts.tags}

        filtered = []
        for entry in entries:
            if opts.type and entry.type != opts.type:
                continue
            if category and entry.category.lower() != category:
                continue
            if tags and not tags.intersection(tag.lower() for tag in entry.tags):
                continue
            filtered.append(entry)
        return filtered

    def _rank(self, candidates: Sequence[SearchIndexEntry], terms: List[str], opts: SearchOptions) -> Ranked:
        if not terms:
            return []

        normalized_query = " ".join(terms)
        matcher = self._fuzzy_matcher if opts.fuzzy else self._exact_matcher

        ranked = []
        for entry in candidates:
            try:
                score = self.score_entry(entry, normalized_query, terms, opts, matcher)
            except Exception as e:
                logger.warning(f"Failed to score entry {entry.id}: {str(e)}")
                continue
            if score > 0 and score >= opts.min_score:
                ranked.append((entry, score))

        ranked.sort(key=lambda item: (-item[1], -item[0].search_score, item[0].id))
        return ranked

    def score_entry(
        self,
        entry: SearchIndexEntry,
        normalized_query: str,
        terms: List[str],
        opts: SearchOptions,
        matcher: Matcher
    ) -> float:
        """
        Relevance of one entry in [0, 1].

        An exact title containment of the whole query scores 1.0; otherwise
        each field scores its weight times the fraction of terms matched.
        """
        title, description, tags = _normalized_fields(entry)
        threshold = opts.threshold

        if normalized_query and normalized_query in title:
            title_score = 1.0
        else:
            title_score = matcher.fraction_matched(title, terms, threshold) * TITLE_WEIGHT

        description_score = matcher.fraction_matched(description, terms, threshold) * DESCRIPTION_WEIGHT

        content_score = 0.0
        if opts.include_content:
            content_score = matcher.fraction_matched(entry.searchable_content, terms, threshold) * CONTENT_WEIGHT

        tag_score = 0.0
        if tags:
            matched = sum(
                max(matcher.matches(tag, term, threshold) for tag in tags)
                for term in terms
            )
            tag_score = matched / len(terms) * TAG_WEIGHT

        return min(1.0, max(0.0, title_score, description_score, content_score, tag_score))

    def _build_results(self, ranked: Ranked, terms: List[str], opts: SearchOptions) -> List[SearchResult]:
        results = []
        for entry, score in ranked:
            try:
                highlights = self.text_processor.generate_highlights(
                    self._highlight_source(entry, terms),
                    terms,
                    max_length=opts.highlight_length,
                    fallback=entry.description
                )
                results.append(SearchResult(
                    id=entry.id,
                    type=entry.type,
                    title=entry.title,
                    description=entry.description,
                    url=content_url(entry.type, entry.id),
                    score=score,
                    highlights=tuple(highlights[:MAX_HIGHLIGHTS])
                ))
            except Exception as e:
                logger.warning(f"Failed to generate result for entry {entry.id}: {str(e)}")
                continue
        return results

    def _highlight_source(self, entry: SearchIndexEntry, terms: List[str]) -> str:
        """Body text when a term occurs in it, else the description when one does."""
        for text in (entry.content, entry.description):
            if text and self.text_processor.find_term_positions(text, terms):
                return text
        return entry.content or entry.description

    def _suggest_queries(self, terms: List[str], entries: Sequence[SearchIndexEntry]) -> List[str]:
        try:
            if self._vocabulary_entries is not entries:
                self._vocabulary = build_vocabulary(entries)
                self._embedding = TermEmbedding().fit(self._vocabulary)
                self._vocabulary_entries = entries
            return generate_suggested_queries(terms, self._vocabulary, self._embedding)
        except Exception as e:
            logger.warning(f"Failed to generate suggested queries: {str(e)}")
            return []

    def _update_search_stats(self, search_time: float) -> None:
        """Update search performance statistics."""
        self._stats['total_searches'] += 1

        # Update rolling average
        total_searches = self._stats['total_searches']
        current_avg = self._stats['avg_search_time']
        self._stats['avg_search_time'] = (
            (current_avg * (total_searches - 1) + search_time) / total_searches
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics."""
        entries = self.store.entries
        return {
            **self._stats,
            'total_entries': len(entries) if entries is not None else 0,
            'cache': self.cache.stats()
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check of the search engine."""
        try:
            entries = await self.store.load()
            is_ready = len(entries) > 0

            return {
                'status': 'healthy' if is_ready else 'not_ready',
                'is_ready': is_ready,
                'stats': self.get_stats(),
                'timestamp': time.time()
            }

        except Exception as e:
            logger.error(f"Health check failed: {str(e)}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'timestamp': time.time()
            }
