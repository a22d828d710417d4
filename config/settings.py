# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes scoring weights, search fan-out limits, learning tables, and repository paths.

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field


class ScoringSettings(BaseModel):
    """Weight bands used by the additive relevance scorer."""

    title_match_bonus: float = Field(default=50.0, description="Bonus when the title contains the raw query.")
    description_match_bonus: float = Field(default=30.0, description="Bonus when only the description contains the raw query.")
    keyword_bonus: float = Field(default=10.0, description="Bonus per query token found in the candidate text.")
    min_keyword_length: int = Field(default=3, description="Shortest query token counted for keyword overlap.")
    attribute_bonus: float = Field(default=15.0, description="Bonus per matched medium, genre, subject, or color.")
    artist_token_bonus: float = Field(default=20.0, description="Bonus per query token found in the artist name.")
    price_fit_weight: float = Field(default=20.0, description="Multiplier applied to the 0..1 price fit.")
    price_upper_bound: float = Field(default=50000.0, description="Budget reached at price sensitivity 1.0.")
    low_price_threshold: float = Field(default=1000.0, description="Price accepted when the derived budget is zero.")
    perfect_price_fit: float = Field(default=0.8, description="Price fit above which a reason is attached.")
    popularity_cap: float = Field(default=20.0, description="Maximum popularity contribution.")
    popularity_scale: float = Field(default=10.0, description="Divisor turning raw popularity into points.")
    like_multiplier: float = Field(default=3.0, description="How many views a single like is worth.")
    popular_reason_threshold: float = Field(default=50.0, description="Raw popularity above which a reason is attached.")
    recency_bonus: float = Field(default=15.0, description="Flat bonus for recently created candidates.")
    recency_window_days: float = Field(default=7.0, description="Age in days still counted as recent.")
    discovery_threshold: float = Field(default=0.5, description="Discovery mode above which low popularity is boosted.")
    discovery_weight: float = Field(default=10.0, description="Scale of the discovery boost.")
    hidden_gem_threshold: float = Field(default=5.0, description="Discovery boost above which a reason is attached.")


class SearchSettings(BaseModel):
    """Settings controlling multi-source search fan-out and caching."""

    artwork_share: float = Field(default=0.6, description="Share of the requested limit given to artworks.")
    artist_share: float = Field(default=0.3, description="Share of the requested limit given to artists.")
    catalogue_share: float = Field(default=0.1, description="Share of the requested limit given to catalogues.")
    overfetch_factor: int = Field(default=2, description="Multiplier on sub-limits when reading candidates.")
    default_limit: int = Field(default=20, description="Result count used when callers do not pass one.")
    max_limit: int = Field(default=100, description="Largest accepted result count.")
    sub_search_timeout_seconds: float = Field(default=5.0, description="Per-request bound on each sub-search.")
    max_workers: int = Field(default=6, description="Threads shared by sub-searches and image decoding.")
    cache_ttl_seconds: float = Field(default=300.0, description="Lifetime of cached search outcomes.")
    cache_max_entries: int = Field(default=256, description="Upper bound on cached search outcomes.")
    suggestion_pool: int = Field(default=10, description="Artworks inspected when building suggestions.")
    trending_searches: List[str] = Field(
        default_factory=lambda: [
            "abstract art",
            "contemporary paintings",
            "digital art",
            "portrait photography",
            "landscape paintings",
            "sculpture",
            "watercolor",
            "mixed media",
            "street art",
            "minimalist",
        ],
        description="Curated trending queries surfaced to the UI.",
    )


class ImageSearchSettings(BaseModel):
    """Settings for palette extraction and color-based image search."""

    min_similarity: float = Field(default=30.0, description="Similarity floor (0..100) for returned matches.")
    max_results: int = Field(default=20, description="Page size of image search results.")
    neutral_visual_score: float = Field(default=0.5, description="Value of visual sub-scores without a vision model.")
    palette_size: int = Field(default=5, description="Number of representative colors extracted per image.")
    sample_size: int = Field(default=64, description="Edge length of the thumbnail sampled for colors.")
    kmeans_iterations: int = Field(default=10, description="Maximum iterations of the palette k-means reduction.")
    corpus_limit: int = Field(default=1000, description="Artworks with palettes compared per request.")
    decode_timeout_seconds: float = Field(default=10.0, description="Bound on decoding and palette extraction.")
    max_image_bytes: int = Field(default=16 * 1024 * 1024, description="Largest accepted upload.")


class LearningSettings(BaseModel):
    """Weight tables and thresholds of the preference learning engine."""

    interaction_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "purchase": 10.0,
            "inquiry": 8.0,
            "save": 6.0,
            "like": 4.0,
            "share": 3.0,
            "view": 1.0,
            "reject": -2.0,
        },
        description="Weight added to observed attribute values per interaction type.",
    )
    presence_weight: float = Field(default=1.0, description="Weight added to every already-ranked value.")
    preference_cap: int = Field(default=20, description="Length of each ranked preference list.")
    taste_shift_threshold: float = Field(default=0.7, description="Confidence above which a shift is reported.")
    shift_window_days: int = Field(default=14, description="Recent window compared against the profile.")
    shift_min_evidence: int = Field(default=5, description="Interactions needed for full shift confidence.")
    stability_smoothing: float = Field(default=0.1, description="Smoothing factor of preference stability.")
    budget_widen_low: float = Field(default=0.8, description="Factor applied to a price to widen the budget floor.")
    budget_widen_high: float = Field(default=1.2, description="Factor applied to a price to widen the budget ceiling.")
    budget_confidence_step_up: float = Field(default=0.1, description="Confidence gain for in-range prices.")
    budget_confidence_step_down: float = Field(default=0.05, description="Confidence loss for out-of-range prices.")
    market_awareness_step: float = Field(default=0.02, description="Awareness gain per inquiry or purchase.")
    recent_window_days: int = Field(default=30, description="Interaction window used for recommendations.")
    intent_window_days: int = Field(default=7, description="Interaction window used for purchase intent.")
    novelty_saturation: int = Field(default=5, description="Similar recent interactions that exhaust novelty.")
    social_proof_scale: float = Field(default=100.0, description="Engagement points mapping to full social proof.")
    intent_weights: Dict[str, float] = Field(
        default_factory=lambda: {
            "style_match": 0.30,
            "budget_fit": 0.25,
            "novelty_factor": 0.20,
            "social_proof": 0.15,
            "urgency_factor": 0.10,
        },
        description="Weights of the purchase intent formula.",
    )
    dominant_signal_threshold: float = Field(default=0.7, description="Sub-score above which a reason is attached.")
    recommendation_limit: int = Field(default=10, description="Default number of recommendations.")
    candidate_pool: int = Field(default=100, description="Candidates read per recommendation request.")
    experience_thresholds: Dict[str, int] = Field(
        default_factory=lambda: {"intermediate": 3, "advanced": 10, "expert": 25},
        description="Purchases needed to reach each experience level.",
    )


class RepositorySettings(BaseModel):
    """Settings controlling repository selection and persistence paths."""

    backend: str = Field(default="sqlite", description="Identifier of the repository implementation.")
    database_path: Path = Field(default=Path("storage/db/artflow.sqlite3"), description="Path to the SQLite database.")


class AppSettings(BaseModel):
    """Top-level application settings shared across services and interfaces."""

    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    image_search: ImageSearchSettings = Field(default_factory=ImageSearchSettings)
    learning: LearningSettings = Field(default_factory=LearningSettings)
    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    image_folder: Path = Field(default=Path("storage/images"), description="Root folder scanned for artwork images.")
    api_enabled: bool = Field(default=False, description="Flag indicating if the HTTP API should be initialized.")
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")

    @classmethod
    def from_env(cls) -> "AppSettings":
        """Instantiate settings, applying ARTFLOW_* environment overrides when present."""

        settings = cls()
        settings.log_level = os.getenv("ARTFLOW_LOG_LEVEL", settings.log_level).strip().upper() or settings.log_level
        settings.api_enabled = _env_bool("ARTFLOW_API_ENABLED", settings.api_enabled)
        settings.repository.backend = (
            os.getenv("ARTFLOW_REPOSITORY_BACKEND", settings.repository.backend).strip().lower()
            or settings.repository.backend
        )
        db_path = os.getenv("ARTFLOW_DB_PATH", "").strip()
        if db_path:
            settings.repository.database_path = Path(db_path)
        image_folder = os.getenv("ARTFLOW_IMAGE_FOLDER", "").strip()
        if image_folder:
            settings.image_folder = Path(image_folder)
        settings.search.sub_search_timeout_seconds = _env_float(
            "ARTFLOW_SUBSEARCH_TIMEOUT_SECONDS", settings.search.sub_search_timeout_seconds
        )
        settings.search.cache_ttl_seconds = _env_float("ARTFLOW_CACHE_TTL_SECONDS", settings.search.cache_ttl_seconds)
        settings.image_search.decode_timeout_seconds = _env_float(
            "ARTFLOW_DECODE_TIMEOUT_SECONDS", settings.image_search.decode_timeout_seconds
        )
        settings.learning.taste_shift_threshold = _env_float(
            "ARTFLOW_TASTE_SHIFT_THRESHOLD", settings.learning.taste_shift_threshold
        )
        return settings


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "AppSettings",
    "ImageSearchSettings",
    "LearningSettings",
    "RepositorySettings",
    "ScoringSettings",
    "SearchSettings",
]
