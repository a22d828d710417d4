# Path: core/search/pipeline.py
# Purpose: Orchestrate multi-source search by combining query understanding, repository reads, and scoring.
# Layer: core/search.
# Details: Fans out one read per entity type, scores candidates, and merges them into a single ranked list.

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from config.settings import SearchSettings
from core.models.domain import (
    Artist,
    Artwork,
    EntityType,
    QueryEntities,
    QueryFilters,
    ScoringOptions,
    SearchOutcome,
    SearchResult,
)
from core.query.entities import EntityExtractor
from core.query.intent import IntentClassifier
from core.query.vocabulary import ABSTRACT_GENRES, REPRESENTATIONAL_GENRES, SIZE_BOUNDS
from core.repository.base import Repository

from .cache import TTLCache, make_cache_key
from .scoring import Candidate, RelevanceScorer, tokenize

_LOGGER = logging.getLogger(__name__)

STOP_WORDS = frozenset({"the", "and", "for", "with", "from", "under", "over", "below", "above", "art", "by"})


def sub_limits(limit: int, settings: SearchSettings) -> Dict[EntityType, int]:
    """Split a requested total across entity types, rounding each share up."""

    return {
        EntityType.ARTWORK: math.ceil(round(limit * settings.artwork_share, 6)),
        EntityType.ARTIST: math.ceil(round(limit * settings.artist_share, 6)),
        EntityType.CATALOGUE: math.ceil(round(limit * settings.catalogue_share, 6)),
    }


class SearchOrchestrator:
    """High-level service bridging API layers with query understanding, the repository, and scoring."""

    def __init__(
        self,
        repository: Repository,
        extractor: Optional[EntityExtractor] = None,
        classifier: Optional[IntentClassifier] = None,
        scorer: Optional[RelevanceScorer] = None,
        settings: Optional[SearchSettings] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        cache: Optional[TTLCache[SearchOutcome]] = None,
    ) -> None:
        self.repository = repository
        self.extractor = extractor or EntityExtractor()
        self.classifier = classifier or IntentClassifier()
        self.scorer = scorer or RelevanceScorer()
        self.settings = settings or SearchSettings()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.max_workers, thread_name_prefix="sub-search"
        )
        self.cache: TTLCache[SearchOutcome] = cache if cache is not None else TTLCache(
            ttl_seconds=self.settings.cache_ttl_seconds, max_entries=self.settings.cache_max_entries
        )

    def close(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)

    def search_all(
        self,
        query: str,
        filters: Optional[QueryFilters] = None,
        limit: Optional[int] = None,
        options: Optional[ScoringOptions] = None,
    ) -> List[SearchResult]:
        return self.search_all_detailed(query, filters, limit, options).results

    def search_all_detailed(
        self,
        query: str,
        filters: Optional[QueryFilters] = None,
        limit: Optional[int] = None,
        options: Optional[ScoringOptions] = None,
    ) -> SearchOutcome:
        """
        Run one search across artworks, artists and catalogues.

        External calls:
        - core/repository/base.py::Repository.query_artworks - artwork candidates.
        - core/repository/base.py::Repository.query_artists - artist candidates.
        - core/repository/base.py::Repository.query_catalogues - catalogue candidates.
        """

        text = query if isinstance(query, str) else ""
        options = options or ScoringOptions()
        limit = self.settings.default_limit if limit is None else min(int(limit), self.settings.max_limit)

        entities = self.extractor.extract(text)
        intent = self.classifier.classify(text)
        if limit <= 0:
            return SearchOutcome(results=[], intent=intent, entities=entities)

        cache_key = make_cache_key(
            query=text.strip().lower(),
            filters=filters.to_dict() if filters else None,
            limit=limit,
            options=options.to_dict(),
        )
        cached = self.cache.get(cache_key)
        if cached is not None:
            _LOGGER.debug("Search cache hit for %r", text)
            return SearchOutcome(
                results=list(cached.results), intent=cached.intent, entities=cached.entities, failed_sources=[]
            )

        shares = sub_limits(limit, self.settings)
        readers = self._readers(text, entities, filters, options)
        candidates, failed = self._fan_out(readers, shares)

        results: List[SearchResult] = []
        for entity_type, items in candidates.items():
            scored = [self._to_result(entity_type, item, entities, text, options) for item in items]
            ranked = sorted(
                (result for result in scored if result.relevance_score > 0),
                key=lambda result: result.relevance_score,
                reverse=True,
            )
            results.extend(ranked[: shares[entity_type]])

        results.sort(key=lambda result: result.relevance_score, reverse=True)
        outcome = SearchOutcome(results=results[:limit], intent=intent, entities=entities, failed_sources=failed)

        if failed:
            _LOGGER.warning("Search for %r degraded; missing sources: %s", text, [s.value for s in failed])
        else:
            self.cache.set(cache_key, outcome)
            outcome = SearchOutcome(
                results=list(outcome.results), intent=intent, entities=entities, failed_sources=[]
            )
        return outcome

    def suggest(self, prefix: str, limit: int = 5) -> List[str]:
        """Return completions for a partially typed query."""

        needle = (prefix or "").strip().lower()
        if len(needle) < 2 or limit <= 0:
            return []

        suggestions: List[str] = []

        def add(value: Optional[str]) -> None:
            if value and needle in value.lower() and value.lower() not in (s.lower() for s in suggestions):
                suggestions.append(value)

        try:
            artworks = self.repository.query_artworks(
                QueryFilters(keywords=(needle,)), self.settings.suggestion_pool
            )
        except Exception:
            _LOGGER.warning("Suggestion lookup failed for %r", needle, exc_info=True)
            artworks = []

        for artwork in artworks:
            add(artwork.title)
            add(artwork.artist_name)
            add(artwork.medium)
            add(artwork.genre)
        vocabulary = self.extractor.vocabulary
        for term in (*vocabulary.genres, *vocabulary.mediums):
            if term.startswith(needle):
                add(term)
        for term in self.settings.trending_searches:
            add(term)
        return suggestions[:limit]

    def trending_searches(self, limit: Optional[int] = None) -> List[str]:
        trending = list(self.settings.trending_searches)
        return trending if limit is None else trending[: max(0, limit)]

    # Internals
    def _readers(
        self,
        text: str,
        entities: QueryEntities,
        filters: Optional[QueryFilters],
        options: ScoringOptions,
    ) -> Dict[EntityType, Callable[[int], Sequence[Candidate]]]:
        artwork_filters = QueryFilters.from_entities(entities, **self._option_overrides(entities, options))
        artwork_filters = artwork_filters.merged_with(filters)

        query_tokens = tuple(token for token in tokenize(text, 3) if token not in STOP_WORDS)
        if entities.is_empty() and query_tokens:
            # no structured fields: narrow artworks by free text instead of newest-first
            artwork_filters = replace(artwork_filters, keywords=artwork_filters.keywords + query_tokens)
        keywords = query_tokens
        if filters is not None:
            keywords += tuple(filters.keywords)
        directory_filters = QueryFilters(keywords=keywords, status=None)

        return {
            EntityType.ARTWORK: lambda n: self.repository.query_artworks(artwork_filters, n),
            EntityType.ARTIST: lambda n: self.repository.query_artists(directory_filters, n),
            EntityType.CATALOGUE: lambda n: self.repository.query_catalogues(directory_filters, n),
        }

    def _option_overrides(self, entities: QueryEntities, options: ScoringOptions) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        if not entities.genres:
            if options.abstraction_level < 0.3:
                overrides["genres"] = REPRESENTATIONAL_GENRES
            elif options.abstraction_level > 0.7:
                overrides["genres"] = ABSTRACT_GENRES
        size = options.size_bias or entities.size
        if size in SIZE_BOUNDS:
            overrides.update(SIZE_BOUNDS[size])
        if options.palette_bias in ("warm", "cool"):
            overrides["palette_temperature"] = options.palette_bias
        return overrides

    def _fan_out(
        self,
        readers: Dict[EntityType, Callable[[int], Sequence[Candidate]]],
        shares: Dict[EntityType, int],
    ) -> Tuple[Dict[EntityType, Sequence[Candidate]], List[EntityType]]:
        futures: Dict[EntityType, Future] = {
            entity_type: self.executor.submit(reader, shares[entity_type] * self.settings.overfetch_factor)
            for entity_type, reader in readers.items()
        }
        deadline = time.monotonic() + self.settings.sub_search_timeout_seconds
        candidates: Dict[EntityType, Sequence[Candidate]] = {}
        failed: List[EntityType] = []
        for entity_type, future in futures.items():
            try:
                candidates[entity_type] = future.result(timeout=max(0.0, deadline - time.monotonic()))
            except FutureTimeoutError:
                future.cancel()
                _LOGGER.warning(
                    "%s search timed out after %.1fs", entity_type.value, self.settings.sub_search_timeout_seconds
                )
                failed.append(entity_type)
            except Exception:
                _LOGGER.warning("%s search failed", entity_type.value, exc_info=True)
                failed.append(entity_type)
        return candidates, failed

    def _to_result(
        self,
        entity_type: EntityType,
        candidate: Candidate,
        entities: QueryEntities,
        text: str,
        options: ScoringOptions,
    ) -> SearchResult:
        breakdown = self.scorer.score(candidate, entities, text, options)
        if isinstance(candidate, Artwork):
            return SearchResult(
                id=candidate.id,
                type=entity_type,
                title=candidate.title,
                description=candidate.description,
                image_url=candidate.image_url,
                relevance_score=breakdown.score,
                reasons=breakdown.reasons,
                metadata={
                    "price": candidate.price,
                    "medium": candidate.medium,
                    "genre": candidate.genre,
                    "artist_name": candidate.artist_name,
                    "dominant_colors": list(candidate.dominant_colors),
                    "year": candidate.year,
                },
            )
        if isinstance(candidate, Artist):
            return SearchResult(
                id=candidate.id,
                type=entity_type,
                title=candidate.name,
                description=candidate.bio,
                image_url=candidate.avatar_url,
                relevance_score=breakdown.score,
                reasons=breakdown.reasons,
                metadata={"follower_count": candidate.follower_count, "artwork_count": candidate.artwork_count},
            )
        return SearchResult(
            id=candidate.id,
            type=entity_type,
            title=candidate.name,
            description=candidate.description,
            image_url=candidate.cover_image_url,
            relevance_score=breakdown.score,
            reasons=breakdown.reasons,
            metadata={"artist_name": candidate.artist_name, "artwork_count": candidate.artwork_count},
        )


__all__ = ["STOP_WORDS", "SearchOrchestrator", "sub_limits"]
