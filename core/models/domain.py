# Path: core/models/domain.py
# Purpose: Define domain models shared across query understanding, ranking, and image search.
# Layer: core/models.
# Details: Lightweight dataclasses simplify serialization between API, repositories, and core services.

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from core.errors import InputError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse ISO strings or datetimes into timezone-aware UTC datetimes."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def finite_or_zero(value: float) -> float:
    """Clamp a computed score to a finite, non-negative float."""

    if value is None or not math.isfinite(value):
        return 0.0
    return max(0.0, float(value))


class EntityType(str, Enum):
    ARTWORK = "artwork"
    ARTIST = "artist"
    CATALOGUE = "catalogue"


class Intent(str, Enum):
    SEARCH_ARTWORK = "search_artwork"
    SEARCH_ARTIST = "search_artist"
    SEARCH_CATALOGUE = "search_catalogue"
    DISCOVER_SIMILAR = "discover_similar"
    FIND_BY_STYLE = "find_by_style"
    FIND_BY_MOOD = "find_by_mood"


@dataclass(frozen=True)
class PriceRange:
    """Inclusive price bounds; an absent maximum means open-ended."""

    min: float = 0.0
    max: Optional[float] = None

    def contains(self, price: Optional[float]) -> bool:
        if price is None:
            return False
        if price < self.min:
            return False
        return self.max is None or price <= self.max


@dataclass(frozen=True)
class TimePeriod:
    """Inclusive range of years."""

    start_year: int
    end_year: int

    def contains(self, year: Optional[int]) -> bool:
        return year is not None and self.start_year <= year <= self.end_year


@dataclass
class QueryEntities:
    """Structured fields extracted from a free-text query."""

    mediums: Set[str] = field(default_factory=set)
    genres: Set[str] = field(default_factory=set)
    subjects: Set[str] = field(default_factory=set)
    colors: Set[str] = field(default_factory=set)
    moods: Set[str] = field(default_factory=set)
    price_range: Optional[PriceRange] = None
    time_period: Optional[TimePeriod] = None
    size: Optional[str] = None

    def is_empty(self) -> bool:
        return not (
            self.mediums
            or self.genres
            or self.subjects
            or self.colors
            or self.moods
            or self.price_range
            or self.time_period
            or self.size
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mediums": sorted(self.mediums),
            "genres": sorted(self.genres),
            "subjects": sorted(self.subjects),
            "colors": sorted(self.colors),
            "moods": sorted(self.moods),
            "price_range": asdict(self.price_range) if self.price_range else None,
            "time_period": asdict(self.time_period) if self.time_period else None,
            "size": self.size,
        }


_PALETTE_TEMPERATURES = {"warm", "cool", "neutral"}


def _lowered(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    return frozenset(str(value).strip().lower() for value in values if str(value).strip())


@dataclass(frozen=True)
class QueryFilters:
    """Validated repository filters; every field is optional and combined with AND.

    Within a set-valued field a candidate matches when any value matches.
    """

    mediums: FrozenSet[str] = frozenset()
    genres: FrozenSet[str] = frozenset()
    subjects: FrozenSet[str] = frozenset()
    colors: FrozenSet[str] = frozenset()
    keywords: Tuple[str, ...] = ()
    price_range: Optional[PriceRange] = None
    time_period: Optional[TimePeriod] = None
    min_width_cm: Optional[float] = None
    max_width_cm: Optional[float] = None
    min_height_cm: Optional[float] = None
    max_height_cm: Optional[float] = None
    palette_temperature: Optional[str] = None
    require_palette: bool = False
    status: Optional[str] = "available"

    def __post_init__(self) -> None:
        object.__setattr__(self, "mediums", _lowered(self.mediums))
        object.__setattr__(self, "genres", _lowered(self.genres))
        object.__setattr__(self, "subjects", _lowered(self.subjects))
        object.__setattr__(self, "colors", frozenset(str(c).strip().upper() for c in self.colors if str(c).strip()))
        object.__setattr__(
            self, "keywords", tuple(sorted({str(k).strip().lower() for k in self.keywords if str(k).strip()}))
        )

        if self.price_range is not None:
            if self.price_range.min < 0:
                raise InputError("Price range minimum must not be negative.")
            if self.price_range.max is not None and self.price_range.max < self.price_range.min:
                raise InputError("Price range maximum must not be below its minimum.")
        if self.time_period is not None and self.time_period.end_year < self.time_period.start_year:
            raise InputError("Time period must not end before it starts.")
        for low, high, label in (
            (self.min_width_cm, self.max_width_cm, "width"),
            (self.min_height_cm, self.max_height_cm, "height"),
        ):
            if (low is not None and low < 0) or (high is not None and high < 0):
                raise InputError(f"Artwork {label} bounds must not be negative.")
            if low is not None and high is not None and high < low:
                raise InputError(f"Artwork {label} maximum must not be below its minimum.")
        if self.palette_temperature is not None and self.palette_temperature not in _PALETTE_TEMPERATURES:
            raise InputError(f"Unknown palette temperature: {self.palette_temperature}")

    @classmethod
    def from_entities(cls, entities: QueryEntities, **overrides: Any) -> "QueryFilters":
        """Translate extracted entities into hard repository filters.

        Colors are left to scoring; they never exclude candidates.
        """

        values: Dict[str, Any] = {
            "mediums": entities.mediums,
            "genres": entities.genres,
            "subjects": entities.subjects,
            "price_range": entities.price_range,
            "time_period": entities.time_period,
        }
        values.update(overrides)
        return cls(**values)

    def merged_with(self, other: Optional["QueryFilters"]) -> "QueryFilters":
        """Combine with caller filters: sets are unioned, scalar fields from ``other`` win."""

        if other is None:
            return self

        def pick(name: str) -> Any:
            value = getattr(other, name)
            return value if value is not None else getattr(self, name)

        return QueryFilters(
            mediums=self.mediums | other.mediums,
            genres=self.genres | other.genres,
            subjects=self.subjects | other.subjects,
            colors=self.colors | other.colors,
            keywords=tuple(self.keywords) + tuple(other.keywords),
            price_range=pick("price_range"),
            time_period=pick("time_period"),
            min_width_cm=pick("min_width_cm"),
            max_width_cm=pick("max_width_cm"),
            min_height_cm=pick("min_height_cm"),
            max_height_cm=pick("max_height_cm"),
            palette_temperature=pick("palette_temperature"),
            require_palette=self.require_palette or other.require_palette,
            status=other.status,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Deterministic representation used for cache keys and logging."""

        return {
            "mediums": sorted(self.mediums),
            "genres": sorted(self.genres),
            "subjects": sorted(self.subjects),
            "colors": sorted(self.colors),
            "keywords": list(self.keywords),
            "price_range": asdict(self.price_range) if self.price_range else None,
            "time_period": asdict(self.time_period) if self.time_period else None,
            "min_width_cm": self.min_width_cm,
            "max_width_cm": self.max_width_cm,
            "min_height_cm": self.min_height_cm,
            "max_height_cm": self.max_height_cm,
            "palette_temperature": self.palette_temperature,
            "require_palette": self.require_palette,
            "status": self.status,
        }


@dataclass
class Artwork:
    """Artwork record as returned by the repository."""

    id: str
    title: str
    description: str = ""
    price: Optional[float] = None
    medium: Optional[str] = None
    genre: Optional[str] = None
    subject: Optional[str] = None
    style: Optional[str] = None
    dominant_colors: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    artist_id: Optional[str] = None
    artist_name: Optional[str] = None
    view_count: int = 0
    like_count: int = 0
    save_count: int = 0
    created_at: Optional[datetime] = None
    year: Optional[int] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None
    status: str = "available"
    is_unique: bool = False
    edition_size: Optional[int] = None
    stock_level: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat() if self.created_at else None
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Artwork":
        values = dict(payload)
        values["created_at"] = parse_datetime(values.get("created_at"))
        values["dominant_colors"] = list(values.get("dominant_colors") or [])
        known = cls.__dataclass_fields__.keys()
        return cls(**{key: value for key, value in values.items() if key in known})


@dataclass
class Artist:
    """Artist profile record as returned by the repository."""

    id: str
    name: str
    bio: str = ""
    avatar_url: Optional[str] = None
    artwork_count: int = 0
    follower_count: int = 0
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat() if self.created_at else None
        return payload


@dataclass
class Catalogue:
    """Public catalogue record as returned by the repository."""

    id: str
    name: str
    description: str = ""
    cover_image_url: Optional[str] = None
    artist_name: Optional[str] = None
    artwork_count: int = 0
    is_public: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["created_at"] = self.created_at.isoformat() if self.created_at else None
        return payload


@dataclass
class ScoringOptions:
    """Caller-tunable knobs of relevance scoring and search filtering."""

    price_sensitivity: float = 0.5
    discovery_mode: float = 0.3
    abstraction_level: float = 0.5
    size_bias: Optional[str] = None
    palette_bias: Optional[str] = None
    now: Optional[datetime] = None

    def __post_init__(self) -> None:
        for name in ("price_sensitivity", "discovery_mode", "abstraction_level"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or not 0.0 <= value <= 1.0:
                raise InputError(f"{name} must be a number between 0 and 1.")
        if self.size_bias not in (None, "any", "small", "medium", "large"):
            raise InputError(f"Unknown size bias: {self.size_bias}")
        if self.palette_bias not in (None, "neutral", "warm", "cool"):
            raise InputError(f"Unknown palette bias: {self.palette_bias}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "price_sensitivity": self.price_sensitivity,
            "discovery_mode": self.discovery_mode,
            "abstraction_level": self.abstraction_level,
            "size_bias": self.size_bias,
            "palette_bias": self.palette_bias,
        }


@dataclass
class ScoreBreakdown:
    """Relevance score of one candidate with the reasons that produced it."""

    score: float
    reasons: List[str] = field(default_factory=list)


@dataclass
class SearchResult:
    """Search result item combining relevance scores with entity metadata."""

    id: str
    type: EntityType
    title: str
    description: str
    relevance_score: float
    image_url: Optional[str] = None
    reasons: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "relevance_score": self.relevance_score,
            "reasons": list(self.reasons),
            "metadata": dict(self.metadata),
        }


@dataclass
class SearchOutcome:
    """Ranked results plus the query interpretation and degraded sub-searches."""

    results: List[SearchResult]
    intent: Intent
    entities: QueryEntities
    failed_sources: List[EntityType] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "intent": self.intent.value,
            "entities": self.entities.to_dict(),
            "failed_sources": [source.value for source in self.failed_sources],
            "missing_sources": len(self.failed_sources),
        }


@dataclass
class VisualMatches:
    """Per-aspect visual similarity; only color is measured without a vision model."""

    color_similarity: float
    composition_similarity: float
    style_similarity: float
    subject_similarity: float


@dataclass
class ImageSearchResult:
    """Artwork matched against an uploaded image."""

    artwork_id: str
    similarity_score: float
    visual_matches: VisualMatches
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artwork_id": self.artwork_id,
            "similarity_score": self.similarity_score,
            "visual_matches": asdict(self.visual_matches),
            "metadata": dict(self.metadata),
        }
