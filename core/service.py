# Path: core/service.py
# Purpose: Composition root wiring repository, query understanding, search, and learning components.
# Layer: core.
# Details: Built once at startup from AppSettings; owns the shared worker pool and releases it on close().

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from config.settings import AppSettings
from core.imaging.base import ImageDecoder, PaletteExtractor
from core.imaging.pil_decoder import KMeansPaletteExtractor, PilImageDecoder
from core.learning.engine import PreferenceLearningEngine
from core.learning.signals import ScoreSource
from core.models.domain import ImageSearchResult, QueryFilters, ScoringOptions, SearchOutcome, SearchResult
from core.models.profile import (
    ArtworkRecommendation,
    CollectorInsights,
    RecommendationContext,
    TasteProfile,
    UserInteraction,
)
from core.query.entities import EntityExtractor
from core.query.intent import IntentClassifier
from core.query.vocabulary import Vocabulary
from core.repository.base import Repository
from core.repository.memory_store import InMemoryRepository
from core.repository.sqlite_store import SqliteRepository
from core.search.cache import TTLCache
from core.search.image_search import ImageSearchOrchestrator
from core.search.pipeline import SearchOrchestrator
from core.search.scoring import RelevanceScorer

_LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once; later calls only adjust the level."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)


def build_repository(settings: AppSettings) -> Repository:
    backend = settings.repository.backend
    if backend == "memory":
        return InMemoryRepository()
    if backend == "sqlite":
        return SqliteRepository(settings.repository.database_path)
    raise ValueError(f"Unknown repository backend: {backend}")


class IntelligenceService:
    """Single entry point for API and CLI layers."""

    def __init__(
        self,
        repository: Repository,
        settings: Optional[AppSettings] = None,
        decoder: Optional[ImageDecoder] = None,
        palette_extractor: Optional[PaletteExtractor] = None,
        vocabulary: Optional[Vocabulary] = None,
        score_source: Optional[ScoreSource] = None,
    ) -> None:
        self.settings = settings or AppSettings()
        self.repository = repository
        self.executor = ThreadPoolExecutor(
            max_workers=self.settings.search.max_workers, thread_name_prefix="artflow"
        )
        image_settings = self.settings.image_search
        self.search_orchestrator = SearchOrchestrator(
            repository=repository,
            extractor=EntityExtractor(vocabulary),
            classifier=IntentClassifier(),
            scorer=RelevanceScorer(self.settings.scoring),
            settings=self.settings.search,
            executor=self.executor,
            cache=TTLCache(
                ttl_seconds=self.settings.search.cache_ttl_seconds,
                max_entries=self.settings.search.cache_max_entries,
            ),
        )
        self.image_orchestrator = ImageSearchOrchestrator(
            repository=repository,
            decoder=decoder or PilImageDecoder(image_settings.sample_size, image_settings.max_image_bytes),
            palette_extractor=palette_extractor
            or KMeansPaletteExtractor(image_settings.palette_size, image_settings.kmeans_iterations),
            settings=image_settings,
            executor=self.executor,
        )
        self.learning = PreferenceLearningEngine(
            repository=repository,
            settings=self.settings.learning,
            score_source=score_source,
            low_price_threshold=self.settings.scoring.low_price_threshold,
        )
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Optional[AppSettings] = None) -> "IntelligenceService":
        settings = settings or AppSettings.from_env()
        configure_logging(settings.log_level)
        repository = build_repository(settings)
        _LOGGER.info("Intelligence service starting with %s repository", repository.name)
        return cls(repository=repository, settings=settings)

    # Search
    def search(
        self,
        query: str,
        filters: Optional[QueryFilters] = None,
        limit: Optional[int] = None,
        options: Optional[ScoringOptions] = None,
    ) -> List[SearchResult]:
        return self.search_orchestrator.search_all(query, filters, limit, options)

    def search_detailed(
        self,
        query: str,
        filters: Optional[QueryFilters] = None,
        limit: Optional[int] = None,
        options: Optional[ScoringOptions] = None,
    ) -> SearchOutcome:
        return self.search_orchestrator.search_all_detailed(query, filters, limit, options)

    def search_by_image(self, image_bytes: bytes) -> List[ImageSearchResult]:
        return self.image_orchestrator.search_by_image(image_bytes)

    def suggest(self, prefix: str, limit: int = 5) -> List[str]:
        return self.search_orchestrator.suggest(prefix, limit)

    def trending_searches(self, limit: Optional[int] = None) -> List[str]:
        return self.search_orchestrator.trending_searches(limit)

    # Learning
    def record_interaction(self, event: UserInteraction) -> TasteProfile:
        return self.learning.record_interaction(event)

    def get_recommendations(
        self, user_id: str, context: Optional[RecommendationContext] = None
    ) -> List[ArtworkRecommendation]:
        return self.learning.generate_recommendations(user_id, context)

    def predict_purchase_intent(self, artwork_id: str, user_id: str) -> float:
        return self.learning.predict_purchase_intent(artwork_id, user_id)

    def get_profile(self, user_id: str) -> TasteProfile:
        return self.learning.get_profile(user_id)

    def generate_insights(self, user_id: str) -> CollectorInsights:
        return self.learning.generate_insights(user_id)

    # Lifecycle
    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.executor.shutdown(wait=False, cancel_futures=True)
        self.repository.close()
        _LOGGER.info("Intelligence service stopped")

    def __enter__(self) -> "IntelligenceService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
