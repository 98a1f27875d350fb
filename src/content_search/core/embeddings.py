"""Character n-gram TF-IDF embeddings for finding similar vocabulary terms."""

import logging
from typing import Iterable, List, Optional

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

logger = logging.getLogger(__name__)


class TermEmbedding:
    """
    Embeds single words as character n-gram TF-IDF vectors.

    Used to find vocabulary terms spelled like a query term that matched
    nothing, e.g. ``javscript`` -> ``javascript``.
    """

    def __init__(self, ngram_range: tuple = (2, 3)):
        """
        Args:
            ngram_range: Character n-gram range for feature extraction
        """
        self.ngram_range = ngram_range
        self.vectorizer = TfidfVectorizer(
            analyzer='char_wb',
            ngram_range=ngram_range,
            lowercase=True,
            min_df=1
        )
        self.vocabulary: List[str] = []
        self.term_vectors = None
        self.is_fitted = False

    def fit(self, terms: Iterable[str]) -> 'TermEmbedding':
        """Fit the embedding on a vocabulary of terms."""
        self.vocabulary = sorted({term for term in terms if term})
        self.term_vectors = None
        self.is_fitted = False

        if not self.vocabulary:
            return self

        try:
            self.term_vectors = self.vectorizer.fit_transform(self.vocabulary)
            self.is_fitted = True
        except ValueError as e:
            # Raised for vocabularies without any usable n-gram.
            logger.warning(f"Could not fit term embedding: {str(e)}")

        return self

    def similarities(self, term: str) -> Optional[np.ndarray]:
        """Cosine similarity of term against every vocabulary term."""
        if not self.is_fitted or not term:
            return None
        term_vector = self.vectorizer.transform([term])
        return cosine_similarity(term_vector, self.term_vectors).flatten()

    def most_similar(self, term: str, top_k: int = 5, min_similarity: float = 0.5) -> List[str]:
        """
        Find the vocabulary terms closest to a term.

        Args:
            term: Term to look up
            top_k: Maximum number of terms to return
            min_similarity: Minimum cosine similarity

        Returns:
            Terms ordered by similarity descending, the term itself excluded
        """
        scores = self.similarities(term)
        if scores is None:
            return []

        valid_indices = np.where(scores >= min_similarity)[0]
        if len(valid_indices) == 0:
            return []

        # Stable sort keeps alphabetical order among equal scores
        order = valid_indices[np.argsort(-scores[valid_indices], kind='stable')]
        results = []
        for idx in order:
            candidate = self.vocabulary[idx]
            if candidate == term:
                continue
            results.append(candidate)
            if len(results) >= top_k:
                break
        return results

    def rank(self, term: str, candidates: Iterable[str]) -> List[str]:
        """Order candidates by similarity to term, best first."""
        candidates = list(dict.fromkeys(candidates))
        scores = self.similarities(term)
        if scores is None:
            return sorted(candidates)

        index = {word: i for i, word in enumerate(self.vocabulary)}
        return sorted(
            candidates,
            key=lambda word: (-(scores[index[word]] if word in index else 0.0), word)
        )
