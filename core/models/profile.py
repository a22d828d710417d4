# Path: core/models/profile.py
# Purpose: Define the collector taste profile and interaction event models.
# Layer: core/models.
# Details: Profiles serialize to plain dicts so repositories can store them as JSON documents.

from __future__ import annotations

import logging
import warnings
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.errors import DataIntegrityWarning, InputError
from core.models.domain import Artwork, parse_datetime, utc_now

_LOGGER = logging.getLogger(__name__)

PREFERENCE_DIMENSIONS = ("medium", "style", "color", "price")


class InteractionType(str, Enum):
    VIEW = "view"
    LIKE = "like"
    SHARE = "share"
    SAVE = "save"
    INQUIRY = "inquiry"
    PURCHASE = "purchase"
    REJECT = "reject"


@dataclass(frozen=True)
class ArtworkAttributes:
    """Attributes of an interacted artwork that feed the taste model."""

    medium: Optional[str] = None
    style: Optional[str] = None
    colors: Tuple[str, ...] = ()
    price: Optional[float] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None

    @classmethod
    def from_artwork(cls, artwork: Artwork) -> "ArtworkAttributes":
        return cls(
            medium=artwork.medium,
            style=artwork.style or artwork.genre,
            colors=tuple(artwork.dominant_colors),
            price=artwork.price,
            width_cm=artwork.width_cm,
            height_cm=artwork.height_cm,
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ArtworkAttributes":
        return cls(
            medium=payload.get("medium"),
            style=payload.get("style"),
            colors=tuple(payload.get("colors") or ()),
            price=payload.get("price"),
            width_cm=payload.get("width_cm"),
            height_cm=payload.get("height_cm"),
        )


@dataclass(frozen=True)
class InteractionMetadata:
    artwork_attributes: Optional[ArtworkAttributes] = None
    search_query: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artwork_attributes": asdict(self.artwork_attributes) if self.artwork_attributes else None,
            "search_query": self.search_query,
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> Optional["InteractionMetadata"]:
        if not payload:
            return None
        attributes = payload.get("artwork_attributes")
        return cls(
            artwork_attributes=ArtworkAttributes.from_dict(attributes) if attributes else None,
            search_query=payload.get("search_query"),
        )


@dataclass(frozen=True)
class UserInteraction:
    """Immutable, append-only interaction event."""

    user_id: str
    interaction_type: InteractionType
    target_type: str
    target_id: str
    timestamp: datetime
    metadata: Optional[InteractionMetadata] = None

    def __post_init__(self) -> None:
        if not str(self.user_id).strip():
            raise InputError("Interaction user_id must not be empty.")
        try:
            object.__setattr__(self, "interaction_type", InteractionType(self.interaction_type))
        except ValueError as exc:
            raise InputError(f"Unknown interaction type: {self.interaction_type}") from exc
        timestamp = parse_datetime(self.timestamp)
        if timestamp is None:
            raise InputError("Interaction timestamp is missing or malformed.")
        object.__setattr__(self, "timestamp", timestamp)

    @property
    def attributes(self) -> Optional[ArtworkAttributes]:
        return self.metadata.artwork_attributes if self.metadata else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "interaction_type": self.interaction_type.value,
            "target_type": self.target_type,
            "target_id": self.target_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "UserInteraction":
        return cls(
            user_id=payload["user_id"],
            interaction_type=payload["interaction_type"],
            target_type=payload.get("target_type", "artwork"),
            target_id=payload["target_id"],
            timestamp=payload["timestamp"],
            metadata=InteractionMetadata.from_dict(payload.get("metadata")),
        )


@dataclass(frozen=True)
class TasteEvolutionEvent:
    """Immutable record of a detected taste shift."""

    timestamp: datetime
    preference_type: str
    old_value: Optional[str]
    new_value: str
    confidence: float
    trigger_event: str

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TasteEvolutionEvent":
        return cls(
            timestamp=parse_datetime(payload.get("timestamp")) or utc_now(),
            preference_type=str(payload.get("preference_type", "")),
            old_value=payload.get("old_value"),
            new_value=str(payload.get("new_value", "")),
            confidence=float(payload.get("confidence", 0.0)),
            trigger_event=str(payload.get("trigger_event", "")),
        )


@dataclass
class Dimensions:
    width: float
    height: float


@dataclass
class BudgetProfile:
    min_budget: float = 0.0
    max_budget: float = 100000.0
    typical_range: Tuple[float, float] = (1000.0, 10000.0)
    confidence: float = 0.5
    price_sensitivity: str = "medium"
    price_bands: List[str] = field(default_factory=list)


@dataclass
class SizeRange:
    min_dimensions: Dimensions = field(default_factory=lambda: Dimensions(10.0, 10.0))
    max_dimensions: Dimensions = field(default_factory=lambda: Dimensions(200.0, 200.0))
    preferred_ratios: List[str] = field(default_factory=lambda: ["1:1", "4:3", "16:9"])


@dataclass
class AestheticPreferences:
    """Ranked preference lists, most preferred first.

    ``preference_weights`` keeps the accumulated weight behind each ranked value
    per dimension (medium, style, color, price).
    """

    color_palette: List[str] = field(default_factory=list)
    style_affinities: List[str] = field(default_factory=list)
    medium_preferences: List[str] = field(default_factory=list)
    size_preferences: SizeRange = field(default_factory=SizeRange)
    preference_weights: Dict[str, Dict[str, float]] = field(default_factory=dict)


@dataclass
class BehavioralPatterns:
    browsing_frequency: str = "occasional"
    purchase_frequency: str = "rare"
    decision_speed: str = "considered"
    research_depth: str = "moderate"
    social_influence: str = "independent"
    interaction_counts: Dict[str, int] = field(default_factory=dict)


@dataclass
class LearningInsights:
    taste_evolution: List[TasteEvolutionEvent] = field(default_factory=list)
    preference_stability: float = 0.5
    market_awareness: float = 0.3
    rejection_patterns: List[str] = field(default_factory=list)


@dataclass
class TasteProfile:
    """Persisted, continuously updated model of one collector's preferences."""

    user_id: str
    experience_level: str = "beginner"
    collecting_focus: str = "mixed"
    budget_profile: BudgetProfile = field(default_factory=BudgetProfile)
    aesthetic_preferences: AestheticPreferences = field(default_factory=AestheticPreferences)
    behavioral_patterns: BehavioralPatterns = field(default_factory=BehavioralPatterns)
    learning_insights: LearningInsights = field(default_factory=LearningInsights)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    @classmethod
    def initial(cls, user_id: str, now: Optional[datetime] = None) -> "TasteProfile":
        """Create a profile populated with the documented defaults."""

        timestamp = now or utc_now()
        return cls(user_id=user_id, created_at=timestamp, updated_at=timestamp)

    def ranked(self, dimension: str) -> List[str]:
        """Return the ranked preference list backing a learning dimension."""

        prefs = self.aesthetic_preferences
        if dimension == "medium":
            return prefs.medium_preferences
        if dimension == "style":
            return prefs.style_affinities
        if dimension == "color":
            return prefs.color_palette
        if dimension == "price":
            return self.budget_profile.price_bands
        raise KeyError(f"Unknown preference dimension: {dimension}")

    def set_ranked(self, dimension: str, values: List[str], weights: Dict[str, float]) -> None:
        prefs = self.aesthetic_preferences
        if dimension == "medium":
            prefs.medium_preferences = values
        elif dimension == "style":
            prefs.style_affinities = values
        elif dimension == "color":
            prefs.color_palette = values
        elif dimension == "price":
            self.budget_profile.price_bands = values
        else:
            raise KeyError(f"Unknown preference dimension: {dimension}")
        prefs.preference_weights[dimension] = weights

    def weights(self, dimension: str) -> Dict[str, float]:
        return dict(self.aesthetic_preferences.preference_weights.get(dimension, {}))

    def to_dict(self) -> Dict[str, Any]:
        insights = self.learning_insights
        return {
            "user_id": self.user_id,
            "experience_level": self.experience_level,
            "collecting_focus": self.collecting_focus,
            "budget_profile": {
                **asdict(self.budget_profile),
                "typical_range": list(self.budget_profile.typical_range),
            },
            "aesthetic_preferences": asdict(self.aesthetic_preferences),
            "behavioral_patterns": asdict(self.behavioral_patterns),
            "learning_insights": {
                "taste_evolution": [event.to_dict() for event in insights.taste_evolution],
                "preference_stability": insights.preference_stability,
                "market_awareness": insights.market_awareness,
                "rejection_patterns": list(insights.rejection_patterns),
            },
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TasteProfile":
        """Rebuild a profile, filling documented defaults for missing sections."""

        if not payload.get("user_id"):
            raise InputError("Stored taste profile has no user_id.")

        defaults = cls.initial(str(payload["user_id"]))
        missing = [
            key
            for key in (
                "experience_level",
                "collecting_focus",
                "budget_profile",
                "aesthetic_preferences",
                "behavioral_patterns",
                "learning_insights",
            )
            if key not in payload
        ]
        if missing:
            message = f"Taste profile {payload['user_id']} is missing {', '.join(missing)}; defaults applied."
            _LOGGER.warning(message)
            warnings.warn(message, DataIntegrityWarning, stacklevel=2)

        budget_raw = payload.get("budget_profile") or {}
        budget_defaults = defaults.budget_profile
        budget = BudgetProfile(
            min_budget=float(budget_raw.get("min_budget", budget_defaults.min_budget)),
            max_budget=float(budget_raw.get("max_budget", budget_defaults.max_budget)),
            typical_range=tuple(budget_raw.get("typical_range", budget_defaults.typical_range)),  # type: ignore[arg-type]
            confidence=float(budget_raw.get("confidence", budget_defaults.confidence)),
            price_sensitivity=str(budget_raw.get("price_sensitivity", budget_defaults.price_sensitivity)),
            price_bands=list(budget_raw.get("price_bands", [])),
        )

        aesthetic_raw = payload.get("aesthetic_preferences") or {}
        size_raw = aesthetic_raw.get("size_preferences") or {}
        size_defaults = SizeRange()
        min_dims = _dimensions(payload["user_id"], size_raw.get("min_dimensions"), size_defaults.min_dimensions)
        max_dims = _dimensions(payload["user_id"], size_raw.get("max_dimensions"), size_defaults.max_dimensions)
        aesthetic = AestheticPreferences(
            color_palette=list(aesthetic_raw.get("color_palette", [])),
            style_affinities=list(aesthetic_raw.get("style_affinities", [])),
            medium_preferences=list(aesthetic_raw.get("medium_preferences", [])),
            size_preferences=SizeRange(
                min_dimensions=min_dims,
                max_dimensions=max_dims,
                preferred_ratios=list(size_raw.get("preferred_ratios", size_defaults.preferred_ratios)),
            ),
            preference_weights={
                str(dimension): {str(k): float(v) for k, v in (weights or {}).items()}
                for dimension, weights in (aesthetic_raw.get("preference_weights") or {}).items()
            },
        )

        behavior_raw = payload.get("behavioral_patterns") or {}
        behavior_defaults = defaults.behavioral_patterns
        behavior = BehavioralPatterns(
            browsing_frequency=behavior_raw.get("browsing_frequency", behavior_defaults.browsing_frequency),
            purchase_frequency=behavior_raw.get("purchase_frequency", behavior_defaults.purchase_frequency),
            decision_speed=behavior_raw.get("decision_speed", behavior_defaults.decision_speed),
            research_depth=behavior_raw.get("research_depth", behavior_defaults.research_depth),
            social_influence=behavior_raw.get("social_influence", behavior_defaults.social_influence),
            interaction_counts={str(k): int(v) for k, v in (behavior_raw.get("interaction_counts") or {}).items()},
        )

        insights_raw = payload.get("learning_insights") or {}
        insights = LearningInsights(
            taste_evolution=[TasteEvolutionEvent.from_dict(item) for item in insights_raw.get("taste_evolution", [])],
            preference_stability=float(
                insights_raw.get("preference_stability", defaults.learning_insights.preference_stability)
            ),
            market_awareness=float(insights_raw.get("market_awareness", defaults.learning_insights.market_awareness)),
            rejection_patterns=list(insights_raw.get("rejection_patterns", [])),
        )

        return cls(
            user_id=str(payload["user_id"]),
            experience_level=str(payload.get("experience_level", defaults.experience_level)),
            collecting_focus=str(payload.get("collecting_focus", defaults.collecting_focus)),
            budget_profile=budget,
            aesthetic_preferences=aesthetic,
            behavioral_patterns=behavior,
            learning_insights=insights,
            created_at=parse_datetime(payload.get("created_at")) or defaults.created_at,
            updated_at=parse_datetime(payload.get("updated_at")) or defaults.updated_at,
        )


@dataclass
class TasteShift:
    """Confidence-scored change of the top value of one preference dimension."""

    dimension: str
    shift_type: str
    old_value: Optional[str]
    new_value: str
    confidence: float
    evidence: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_OCCASIONS = {"casual_browsing", "serious_shopping", "gift_hunting", "investment"}
_DISCOVERY_MODES = {"explore", "refine", "discover"}


@dataclass
class RecommendationContext:
    """Caller context narrowing or widening the recommendation candidate pool."""

    occasion: Optional[str] = None
    budget_range: Optional[Tuple[float, float]] = None
    discovery_mode: Optional[str] = None
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.occasion is not None and self.occasion not in _OCCASIONS:
            raise InputError(f"Unknown occasion: {self.occasion}")
        if self.discovery_mode is not None and self.discovery_mode not in _DISCOVERY_MODES:
            raise InputError(f"Unknown discovery mode: {self.discovery_mode}")
        if self.budget_range is not None:
            low, high = self.budget_range
            if low < 0 or high < low:
                raise InputError("Budget range must be non-negative and ordered.")
        if self.limit is not None and self.limit < 1:
            raise InputError("Recommendation limit must be positive.")


@dataclass
class ArtworkRecommendation:
    artwork_id: str
    confidence_score: float
    reasons: List[str]
    style_match: float
    budget_fit: float
    novelty_factor: float
    social_proof: float
    urgency_factor: float
    personalized_message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CollectorInsights:
    taste_summary: str
    top_mediums: List[str]
    top_styles: List[str]
    top_colors: List[str]
    budget_summary: str
    recent_shifts: List[TasteShift] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["recent_shifts"] = [shift.to_dict() for shift in self.recent_shifts]
        return payload


def _dimensions(user_id: Any, raw: Optional[Dict[str, Any]], default: Dimensions) -> Dimensions:
    """Read stored width/height, filling absent or unreadable values from ``default``."""

    raw = raw or {}
    values = {}
    for name in ("width", "height"):
        try:
            values[name] = float(raw[name])
        except (KeyError, TypeError, ValueError):
            values[name] = getattr(default, name)
            if raw:
                message = f"Taste profile {user_id} has no usable size {name}; default applied."
                _LOGGER.warning(message)
                warnings.warn(message, DataIntegrityWarning, stacklevel=3)
    return Dimensions(width=values["width"], height=values["height"])
