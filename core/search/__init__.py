# Path: core/search/__init__.py
# Purpose: Package initializer for relevance scoring and search orchestration.
# Layer: core/search.
# Details: Exposes the scorer, the text and image orchestrators, and the read cache.

from .cache import TTLCache, make_cache_key
from .image_search import ImageSearchOrchestrator
from .pipeline import SearchOrchestrator, sub_limits
from .scoring import RelevanceScorer, price_fit, tokenize

__all__ = [
    "ImageSearchOrchestrator",
    "RelevanceScorer",
    "SearchOrchestrator",
    "TTLCache",
    "make_cache_key",
    "price_fit",
    "sub_limits",
    "tokenize",
]
