# Path: core/learning/engine.py
# Purpose: Evolve collector taste profiles from interactions and score purchase intent and recommendations.
# Layer: core/learning.
# Details: Writes are serialized per user and propagate failures; reads degrade to empty results.

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from config.settings import LearningSettings
from core.errors import CollaboratorError
from core.models.domain import Artwork, PriceRange, QueryFilters, finite_or_zero, utc_now
from core.models.profile import (
    PREFERENCE_DIMENSIONS,
    ArtworkAttributes,
    ArtworkRecommendation,
    CollectorInsights,
    Dimensions,
    InteractionMetadata,
    InteractionType,
    RecommendationContext,
    TasteEvolutionEvent,
    TasteProfile,
    TasteShift,
    UserInteraction,
)
from core.repository.base import Repository
from core.search.scoring import price_fit

from .locks import KeyedLocks
from .preferences import dimension_values, merge_preferences
from .signals import CurrentPreferences, HeuristicSource, ScoreSource, urgency_factor

_LOGGER = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_AWARENESS_TYPES = {InteractionType.INQUIRY, InteractionType.PURCHASE}
_EXPERIENCE_ORDER = ("beginner", "intermediate", "advanced", "expert")

_REASON_TEXT = {
    "style_match": "Matches your taste",
    "budget_fit": "Fits your budget",
    "novelty_factor": "Something new for your collection",
    "social_proof": "Popular with other collectors",
    "urgency_factor": "Limited availability",
}


class PreferenceLearningEngine:
    """Maintain taste profiles and derive purchase intent and recommendations from them."""

    def __init__(
        self,
        repository: Repository,
        settings: Optional[LearningSettings] = None,
        score_source: Optional[ScoreSource] = None,
        locks: Optional[KeyedLocks] = None,
        clock: Callable[[], datetime] = utc_now,
        low_price_threshold: float = 1000.0,
    ) -> None:
        self.repository = repository
        self.settings = settings or LearningSettings()
        self.score_source = score_source or HeuristicSource()
        self.locks = locks if locks is not None else KeyedLocks()
        self.clock = clock
        self.low_price_threshold = low_price_threshold

    # Profiles
    def get_profile(self, user_id: str) -> TasteProfile:
        """Return the user's profile, creating and persisting the documented defaults on first access."""

        with self.locks.hold(user_id):
            profile = self._call("load profile", self.repository.get_taste_profile, user_id)
            if profile is None:
                profile = TasteProfile.initial(user_id, self.clock())
                self._call("create profile", self.repository.upsert_taste_profile, profile)
                _LOGGER.info("Created initial taste profile for %s", user_id)
            return profile

    # Writes
    def record_interaction(self, event: UserInteraction) -> TasteProfile:
        """
        Persist an interaction and fold it into the user's taste profile.

        External calls:
        - core/repository/base.py::Repository.get_artwork - attributes for events sent without metadata.
        - core/repository/base.py::Repository.append_interaction - store the event with its resolved attributes.
        - core/repository/base.py::Repository.get_recent_interactions - taste-shift window.
        - core/repository/base.py::Repository.upsert_taste_profile - persist the updated profile.
        """

        with self.locks.hold(event.user_id):
            attributes = self._resolve_attributes(event)
            event = _with_attributes(event, attributes)
            self._call("append interaction", self.repository.append_interaction, event)

            now = self.clock()
            profile = self._call("load profile", self.repository.get_taste_profile, event.user_id)
            if profile is None:
                profile = TasteProfile.initial(event.user_id, now)
            previous_tops = {dimension: _top(profile.ranked(dimension)) for dimension in PREFERENCE_DIMENSIONS}

            weight = self.settings.interaction_weights.get(event.interaction_type.value, 1.0)
            if attributes is not None:
                self._update_preferences(profile, attributes, weight)
                if event.interaction_type == InteractionType.REJECT:
                    self._record_rejection(profile, attributes)
                if attributes.price is not None:
                    self._update_budget(profile, attributes.price)
                if attributes.width_cm and attributes.height_cm:
                    self._update_size(profile, attributes.width_cm, attributes.height_cm)
            self._update_behavior(profile, event)

            recent = self._call(
                "load recent interactions",
                self.repository.get_recent_interactions,
                event.user_id,
                now - timedelta(days=self.settings.shift_window_days),
            )
            shifts = self._compute_shifts(previous_tops, recent)
            self._apply_shifts(profile, shifts, event, now)

            profile.updated_at = now
            self._call("save profile", self.repository.upsert_taste_profile, profile)
            _LOGGER.debug(
                "Recorded %s by %s on %s (%d shifts)",
                event.interaction_type.value,
                event.user_id,
                event.target_id,
                len(shifts),
            )
            return profile

    # Reads
    def identify_taste_shifts(self, user_id: str) -> List[TasteShift]:
        """Compare the recent window with the persisted profile and report confident shifts."""

        try:
            profile = self._load_profile(user_id)
            recent = self.repository.get_recent_interactions(
                user_id, self.clock() - timedelta(days=self.settings.shift_window_days)
            )
        except Exception:
            _LOGGER.warning("Taste shift analysis failed for %s", user_id, exc_info=True)
            return []
        tops = {dimension: _top(profile.ranked(dimension)) for dimension in PREFERENCE_DIMENSIONS}
        return self._compute_shifts(tops, recent)

    def predict_purchase_intent(self, artwork_id: str, user_id: str) -> float:
        """Return purchase intent on a 0..100 scale; failures and unknown artworks score 0."""

        try:
            artwork = self.repository.get_artwork(artwork_id)
            if artwork is None:
                return 0.0
            profile = self._load_profile(user_id)
            recent = self.repository.get_recent_interactions(
                user_id, self.clock() - timedelta(days=self.settings.intent_window_days)
            )
        except Exception:
            _LOGGER.warning("Purchase intent lookup failed for %s/%s", user_id, artwork_id, exc_info=True)
            return 0.0
        preferences = self.current_preferences(profile, recent)
        confidence, _ = self._score_artwork(artwork, preferences, recent)
        return confidence

    def generate_recommendations(
        self, user_id: str, context: Optional[RecommendationContext] = None
    ) -> List[ArtworkRecommendation]:
        """
        Rank candidate artworks for a collector.

        External calls:
        - core/repository/base.py::Repository.get_recent_interactions - full interaction history.
        - core/repository/base.py::Repository.query_artworks - candidate pool.
        """

        context = context or RecommendationContext()
        limit = context.limit or self.settings.recommendation_limit
        try:
            profile = self._load_profile(user_id)
            history = self.repository.get_recent_interactions(user_id, _EPOCH)
            cutoff = self.clock() - timedelta(days=self.settings.recent_window_days)
            recent = [event for event in history if event.timestamp >= cutoff]
            preferences = self.current_preferences(profile, recent)
            excluded = {
                event.target_id
                for event in history
                if event.interaction_type in (InteractionType.PURCHASE, InteractionType.REJECT)
            }
            candidates = self._find_candidates(profile, preferences, context, excluded)
        except Exception:
            _LOGGER.error("Recommendation generation failed for %s", user_id, exc_info=True)
            return []

        recommendations: List[ArtworkRecommendation] = []
        for artwork in candidates:
            confidence, subscores = self._score_artwork(artwork, preferences, recent)
            recommendations.append(
                ArtworkRecommendation(
                    artwork_id=artwork.id,
                    confidence_score=confidence,
                    reasons=self._reasons(subscores),
                    style_match=subscores["style_match"],
                    budget_fit=subscores["budget_fit"],
                    novelty_factor=subscores["novelty_factor"],
                    social_proof=subscores["social_proof"],
                    urgency_factor=subscores["urgency_factor"],
                    personalized_message=self._personalized_message(artwork, preferences, subscores),
                )
            )
        recommendations.sort(key=lambda item: item.confidence_score, reverse=True)
        return recommendations[:limit]

    def generate_insights(self, user_id: str) -> CollectorInsights:
        try:
            profile = self._load_profile(user_id)
        except Exception:
            _LOGGER.warning("Profile lookup for insights failed for %s", user_id, exc_info=True)
            profile = TasteProfile.initial(user_id, self.clock())
        shifts = self.identify_taste_shifts(user_id)
        prefs = profile.aesthetic_preferences
        budget = profile.budget_profile

        focus = ", ".join(prefs.medium_preferences[:3]) or "no particular medium yet"
        styles = ", ".join(prefs.style_affinities[:3])
        summary = f"{profile.experience_level.capitalize()} collector drawn to {focus}"
        if styles:
            summary += f" in {styles}"
        if shifts:
            summary += f"; recently moving toward {shifts[0].new_value}"
        budget_summary = (
            f"Budget ${budget.min_budget:,.0f} to ${budget.max_budget:,.0f} "
            f"(confidence {budget.confidence:.0%})"
        )
        return CollectorInsights(
            taste_summary=summary + ".",
            top_mediums=prefs.medium_preferences[:5],
            top_styles=prefs.style_affinities[:5],
            top_colors=prefs.color_palette[:5],
            budget_summary=budget_summary,
            recent_shifts=shifts,
        )

    def current_preferences(self, profile: TasteProfile, recent: Sequence[UserInteraction]) -> CurrentPreferences:
        """Recent positively-weighted values first, followed by the persisted ranked lists."""

        ranked: Dict[str, List[str]] = {}
        for dimension in PREFERENCE_DIMENSIONS:
            recent_weights, _ = self._window_weights(recent, dimension)
            recent_ranked = sorted(recent_weights, key=lambda value: -recent_weights[value])
            combined = list(recent_ranked)
            combined.extend(value for value in profile.ranked(dimension) if value not in combined)
            ranked[dimension] = combined
        return CurrentPreferences(
            mediums=ranked["medium"],
            styles=ranked["style"],
            colors=ranked["color"],
            price_bands=ranked["price"],
            max_budget=profile.budget_profile.max_budget,
        )

    # Internals
    def _call(self, operation: str, fn: Callable, *args):
        """Run a repository call, converting failures into CollaboratorError."""

        try:
            return fn(*args)
        except CollaboratorError:
            _LOGGER.error("Repository failed to %s", operation, exc_info=True)
            raise
        except Exception as exc:
            _LOGGER.error("Repository failed to %s", operation, exc_info=True)
            raise CollaboratorError(f"Failed to {operation}: {exc}") from exc

    def _load_profile(self, user_id: str) -> TasteProfile:
        return self.repository.get_taste_profile(user_id) or TasteProfile.initial(user_id, self.clock())

    def _resolve_attributes(self, event: UserInteraction) -> Optional[ArtworkAttributes]:
        if event.attributes is not None:
            return event.attributes
        if event.target_type != "artwork":
            return None
        artwork = self._call("load artwork", self.repository.get_artwork, event.target_id)
        return ArtworkAttributes.from_artwork(artwork) if artwork else None

    def _update_preferences(self, profile: TasteProfile, attributes: ArtworkAttributes, weight: float) -> None:
        for dimension in PREFERENCE_DIMENSIONS:
            observed = dimension_values(attributes, dimension)
            ranked, weights = merge_preferences(
                profile.ranked(dimension),
                profile.weights(dimension),
                observed,
                weight,
                presence_weight=self.settings.presence_weight,
                cap=self.settings.preference_cap,
            )
            profile.set_ranked(dimension, ranked, weights)

    def _record_rejection(self, profile: TasteProfile, attributes: ArtworkAttributes) -> None:
        patterns = profile.learning_insights.rejection_patterns
        for dimension in ("medium", "style"):
            for value in dimension_values(attributes, dimension):
                label = f"{dimension}:{value}"
                if label in patterns:
                    patterns.remove(label)
                patterns.insert(0, label)
        del patterns[self.settings.preference_cap :]

    def _update_budget(self, profile: TasteProfile, price: float) -> None:
        if not math.isfinite(price) or price < 0:
            return
        budget = profile.budget_profile
        in_range = budget.min_budget <= price <= budget.max_budget
        budget.min_budget = min(budget.min_budget, price * self.settings.budget_widen_low)
        budget.max_budget = max(budget.max_budget, price * self.settings.budget_widen_high)
        if in_range:
            budget.confidence = min(1.0, budget.confidence + self.settings.budget_confidence_step_up)
        else:
            budget.confidence = max(0.0, budget.confidence - self.settings.budget_confidence_step_down)

    def _update_size(self, profile: TasteProfile, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            return
        sizes = profile.aesthetic_preferences.size_preferences
        area = width * height
        aspect = width / height
        min_area = min(sizes.min_dimensions.width * sizes.min_dimensions.height, area * self.settings.budget_widen_low)
        max_area = max(sizes.max_dimensions.width * sizes.max_dimensions.height, area * self.settings.budget_widen_high)
        min_width = math.sqrt(min_area * aspect)
        max_width = math.sqrt(max_area * aspect)
        sizes.min_dimensions = Dimensions(width=min_width, height=min_width / aspect)
        sizes.max_dimensions = Dimensions(width=max_width, height=max_width / aspect)

    def _update_behavior(self, profile: TasteProfile, event: UserInteraction) -> None:
        counts = profile.behavioral_patterns.interaction_counts
        kind = event.interaction_type.value
        counts[kind] = counts.get(kind, 0) + 1

        total = sum(counts.values())
        profile.behavioral_patterns.browsing_frequency = (
            "frequent" if total >= 50 else "regular" if total >= 10 else "occasional"
        )
        purchases = counts.get(InteractionType.PURCHASE.value, 0)
        profile.behavioral_patterns.purchase_frequency = (
            "frequent" if purchases >= 10 else "occasional" if purchases >= 3 else "rare"
        )

        insights = profile.learning_insights
        if event.interaction_type in _AWARENESS_TYPES:
            insights.market_awareness = min(1.0, insights.market_awareness + self.settings.market_awareness_step)

        level = "beginner"
        for name in _EXPERIENCE_ORDER[1:]:
            if purchases >= self.settings.experience_thresholds.get(name, math.inf):
                level = name
        current = profile.experience_level
        if current not in _EXPERIENCE_ORDER or _EXPERIENCE_ORDER.index(level) > _EXPERIENCE_ORDER.index(current):
            profile.experience_level = level

    def _window_weights(self, events: Sequence[UserInteraction], dimension: str) -> Tuple[Dict[str, float], int]:
        """Sum interaction weights per value within a window; returns positive totals and evidence count."""

        totals: Dict[str, float] = {}
        evidence = 0
        for event in events:
            values = dimension_values(event.attributes, dimension)
            if not values:
                continue
            evidence += 1
            weight = self.settings.interaction_weights.get(event.interaction_type.value, 1.0)
            for value in values:
                totals[value] = totals.get(value, 0.0) + weight
        return {value: total for value, total in totals.items() if total > 0}, evidence

    def _compute_shifts(
        self, baseline_tops: Dict[str, Optional[str]], recent: Sequence[UserInteraction]
    ) -> List[TasteShift]:
        shifts: List[TasteShift] = []
        for dimension in PREFERENCE_DIMENSIONS:
            weights, evidence = self._window_weights(recent, dimension)
            if not weights:
                continue
            top_value = max(weights, key=lambda value: (weights[value], value))
            share = weights[top_value] / sum(weights.values())
            confidence = share * min(1.0, evidence / max(1, self.settings.shift_min_evidence))
            old_value = baseline_tops.get(dimension)
            if top_value == old_value or confidence <= self.settings.taste_shift_threshold:
                continue
            shifts.append(
                TasteShift(
                    dimension=dimension,
                    shift_type="emerging",
                    old_value=old_value,
                    new_value=top_value,
                    confidence=round(confidence, 4),
                    evidence=[
                        f"{evidence} recent interactions",
                        f"{share:.0%} of recent weight on {top_value}",
                    ],
                )
            )
        return shifts

    def _apply_shifts(
        self, profile: TasteProfile, shifts: Sequence[TasteShift], event: UserInteraction, now: datetime
    ) -> None:
        insights = profile.learning_insights
        smoothing = self.settings.stability_smoothing
        target = 0.0 if shifts else 1.0
        insights.preference_stability = insights.preference_stability * (1 - smoothing) + target * smoothing

        for shift in shifts:
            last = next(
                (item for item in reversed(insights.taste_evolution) if item.preference_type == shift.dimension),
                None,
            )
            if last is not None and last.new_value == shift.new_value:
                continue
            evolution = TasteEvolutionEvent(
                timestamp=now,
                preference_type=shift.dimension,
                old_value=shift.old_value,
                new_value=shift.new_value,
                confidence=shift.confidence,
                trigger_event=event.interaction_type.value,
            )
            self._call(
                "append taste evolution", self.repository.append_taste_evolution_event, profile.user_id, evolution
            )
            insights.taste_evolution.append(evolution)
            _LOGGER.info(
                "Taste shift for %s: %s %s -> %s (%.2f)",
                profile.user_id,
                shift.dimension,
                shift.old_value,
                shift.new_value,
                shift.confidence,
            )

    def _find_candidates(
        self,
        profile: TasteProfile,
        preferences: CurrentPreferences,
        context: RecommendationContext,
        excluded: Set[str],
    ) -> List[Artwork]:
        """Focused candidates first; the whole budget-bounded pool when the focus yields nothing new."""

        if context.budget_range is not None:
            price_range = PriceRange(min=context.budget_range[0], max=context.budget_range[1])
        elif context.occasion == "gift_hunting":
            price_range = PriceRange(min=0.0, max=profile.budget_profile.typical_range[1])
        else:
            price_range = PriceRange(min=profile.budget_profile.min_budget, max=profile.budget_profile.max_budget)

        pool = self.settings.candidate_pool
        exploring = context.discovery_mode in ("explore", "discover")
        if not exploring and (preferences.mediums or preferences.styles):
            focused = QueryFilters(
                mediums=preferences.mediums[:3],
                genres=preferences.styles[:3],
                price_range=price_range,
            )
            candidates = [
                artwork for artwork in self.repository.query_artworks(focused, pool) if artwork.id not in excluded
            ]
            if candidates:
                return candidates
        return [
            artwork
            for artwork in self.repository.query_artworks(QueryFilters(price_range=price_range), pool)
            if artwork.id not in excluded
        ]

    def _score_artwork(
        self, artwork: Artwork, preferences: CurrentPreferences, recent: Sequence[UserInteraction]
    ) -> Tuple[float, Dict[str, float]]:
        subscores = {
            "style_match": self.score_source.style_match(artwork, preferences),
            "budget_fit": price_fit(artwork.price, preferences.max_budget, self.low_price_threshold),
            "novelty_factor": self.score_source.novelty_factor(artwork, recent, self.settings.novelty_saturation),
            "social_proof": self.score_source.social_proof(artwork, self.settings.social_proof_scale),
            "urgency_factor": urgency_factor(artwork),
        }
        subscores = {name: min(1.0, finite_or_zero(value)) for name, value in subscores.items()}
        weights = self.settings.intent_weights
        intent = sum(subscores[name] * weights.get(name, 0.0) for name in subscores)
        return min(100.0, finite_or_zero(intent * 100.0)), subscores

    def _reasons(self, subscores: Dict[str, float]) -> List[str]:
        threshold = self.settings.dominant_signal_threshold
        ranked = sorted(subscores.items(), key=lambda item: item[1], reverse=True)
        return [_REASON_TEXT[name] for name, value in ranked if value >= threshold]

    @staticmethod
    def _personalized_message(
        artwork: Artwork, preferences: CurrentPreferences, subscores: Dict[str, float]
    ) -> str:
        medium = (artwork.medium or "").lower()
        style = (artwork.style or artwork.genre or "").lower()
        if medium and medium in preferences.mediums[:3]:
            return f"Since you keep returning to {medium}, {artwork.title} should feel right at home."
        if style and style in preferences.styles[:3]:
            return f"{artwork.title} continues your interest in {style}."
        if subscores["novelty_factor"] >= 0.8:
            return f"{artwork.title} is a step outside your usual picks."
        return f"We think {artwork.title} suits your collection."


def _top(values: List[str]) -> Optional[str]:
    return values[0] if values else None


def _with_attributes(event: UserInteraction, attributes: Optional[ArtworkAttributes]) -> UserInteraction:
    """Carry resolved attributes on the stored event so window analysis can see them."""

    if attributes is None or event.attributes is not None:
        return event
    search_query = event.metadata.search_query if event.metadata else None
    return replace(event, metadata=InteractionMetadata(artwork_attributes=attributes, search_query=search_query))
