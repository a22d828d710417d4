# Path: tests/test_learning.py
# Purpose: Taste profile evolution, taste shifts, purchase intent, and recommendations.
# Layer: tests.
# Details: The engine runs on a fixed clock; events carry explicit timestamps.

from __future__ import annotations

import threading
import time
from datetime import timedelta

import pytest

from core.errors import CollaboratorError, InputError
from core.learning import KeyedLocks, ModelSource, PreferenceLearningEngine, merge_preferences, price_band
from core.models.domain import Artwork, utc_now
from core.models.profile import (
    ArtworkAttributes,
    InteractionMetadata,
    RecommendationContext,
    TasteProfile,
    UserInteraction,
)
from core.repository.memory_store import InMemoryRepository

NOW = utc_now()


def event(kind, target="x1", user="u1", when=None, **attributes):
    metadata = InteractionMetadata(artwork_attributes=ArtworkAttributes(**attributes)) if attributes else None
    return UserInteraction(
        user_id=user,
        interaction_type=kind,
        target_type="artwork",
        target_id=target,
        timestamp=when or NOW,
        metadata=metadata,
    )


@pytest.fixture
def engine(repository):
    return PreferenceLearningEngine(repository, clock=lambda: NOW)


def test_three_oil_purchases_rank_oil_first(engine):
    for index in range(3):
        profile = engine.record_interaction(event("purchase", target=f"p{index}", medium="oil"))

    assert profile.aesthetic_preferences.medium_preferences[0] == "oil"
    assert profile.behavioral_patterns.purchase_frequency == "occasional"
    assert profile.experience_level == "intermediate"
    assert profile.learning_insights.market_awareness == pytest.approx(0.36)
    assert engine.get_profile("u1").aesthetic_preferences.medium_preferences[0] == "oil"


def test_repeated_likes_accumulate(engine):
    engine.record_interaction(event("like", medium="oil"))
    profile = engine.record_interaction(event("like", medium="oil"))

    # like weight twice plus one presence bonus
    assert profile.aesthetic_preferences.preference_weights["medium"]["oil"] == pytest.approx(9.0)


def test_first_access_creates_default_profile(engine, repository):
    profile = engine.get_profile("newcomer")

    assert profile.experience_level == "beginner"
    assert profile.collecting_focus == "mixed"
    assert (profile.budget_profile.min_budget, profile.budget_profile.max_budget) == (0.0, 100000.0)
    assert profile.aesthetic_preferences.size_preferences.max_dimensions.width == 200.0
    assert repository.get_taste_profile("newcomer") is not None


def test_budget_widens_and_tracks_confidence(engine):
    inside = engine.record_interaction(event("purchase", user="b1", price=5000.0))
    assert inside.budget_profile.confidence == pytest.approx(0.6)
    assert inside.aesthetic_preferences.preference_weights["price"] == {"5k_20k": 10.0}

    outside = engine.record_interaction(event("purchase", user="b1", price=150000.0))
    assert outside.budget_profile.max_budget == pytest.approx(180000.0)
    assert outside.budget_profile.min_budget == 0.0
    assert outside.budget_profile.confidence == pytest.approx(0.55)


def test_rejections_are_recorded_and_demote_values(engine):
    engine.record_interaction(event("view", user="r1", style="pop art"))
    profile = engine.record_interaction(event("reject", user="r1", style="pop art", medium="digital"))

    assert profile.learning_insights.rejection_patterns[:2] == ["style:pop art", "medium:digital"]
    assert "digital" not in profile.aesthetic_preferences.medium_preferences
    assert "pop art" not in profile.aesthetic_preferences.style_affinities


def test_size_preferences_follow_large_work(engine):
    profile = engine.record_interaction(event("save", user="s1", width_cm=300.0, height_cm=150.0))
    largest = profile.aesthetic_preferences.size_preferences.max_dimensions

    assert largest.width * largest.height == pytest.approx(300.0 * 150.0 * 1.2)
    assert largest.width / largest.height == pytest.approx(2.0)


def test_recent_activity_produces_a_single_taste_shift(engine, repository):
    old = NOW - timedelta(days=60)
    for index in range(3):
        engine.record_interaction(event("purchase", user="t1", target=f"o{index}", when=old, medium="oil"))
    stability = []
    for index in range(5):
        profile = engine.record_interaction(event("like", user="t1", target=f"w{index}", medium="watercolor"))
        stability.append(profile.learning_insights.preference_stability)

    assert profile.aesthetic_preferences.medium_preferences[0] == "oil"
    evolution = profile.learning_insights.taste_evolution
    assert [(item.preference_type, item.old_value, item.new_value) for item in evolution] == [
        ("medium", "oil", "watercolor")
    ]
    assert len(repository.taste_evolution("t1")) == 1
    # stability rises while tastes hold and drops once shifts appear
    assert stability[0] < stability[1] < stability[2]
    assert stability[2] > stability[3] > stability[4]

    shifts = engine.identify_taste_shifts("t1")
    assert [(shift.dimension, shift.new_value) for shift in shifts] == [("medium", "watercolor")]
    assert shifts[0].confidence == pytest.approx(1.0)


def test_taste_shift_from_events_without_metadata(engine, repository):
    repository.add_artworks(
        [Artwork(id=f"o{index}", title=f"Oil study {index}", medium="oil") for index in range(3)]
        + [Artwork(id=f"w{index}", title=f"Wash {index}", medium="watercolor") for index in range(5)]
    )
    old = NOW - timedelta(days=60)
    for index in range(3):
        engine.record_interaction(event("purchase", user="t2", target=f"o{index}", when=old))
    for index in range(5):
        profile = engine.record_interaction(event("like", user="t2", target=f"w{index}"))

    stored = repository.get_recent_interactions("t2", NOW - timedelta(days=1))
    assert {item.attributes.medium for item in stored} == {"watercolor"}
    evolution = profile.learning_insights.taste_evolution
    assert [(item.preference_type, item.old_value, item.new_value) for item in evolution] == [
        ("medium", "oil", "watercolor")
    ]
    assert [(shift.dimension, shift.new_value) for shift in engine.identify_taste_shifts("t2")] == [
        ("medium", "watercolor")
    ]


def test_attributes_are_resolved_from_the_catalog(engine):
    profile = engine.record_interaction(event("like", user="c1", target="a3"))

    assert profile.aesthetic_preferences.medium_preferences == ["watercolor"]
    assert profile.aesthetic_preferences.style_affinities == ["impressionism"]


def test_malformed_events_are_rejected():
    with pytest.raises(InputError):
        event("teleport")
    with pytest.raises(InputError):
        UserInteraction(user_id="", interaction_type="view", target_type="artwork", target_id="a1", timestamp=NOW)
    with pytest.raises(InputError):
        UserInteraction(user_id="u", interaction_type="view", target_type="artwork", target_id="a1", timestamp="soon")


class FailingWrites(InMemoryRepository):
    def upsert_taste_profile(self, profile):
        raise RuntimeError("disk full")


def test_write_failures_propagate():
    engine = PreferenceLearningEngine(FailingWrites(), clock=lambda: NOW)

    with pytest.raises(CollaboratorError):
        engine.record_interaction(event("like", medium="oil"))


def test_purchase_intent_for_a_perfect_match(repository):
    repository.add_artworks(
        [
            Artwork(
                id="m1",
                title="Harbor at Dawn",
                price=1000.0,
                medium="oil",
                style="impressionism",
                like_count=20,
                view_count=50,
                save_count=10,
                is_unique=True,
            )
        ]
    )
    profile = TasteProfile.initial("collector", NOW)
    profile.set_ranked("style", ["impressionism"], {"impressionism": 20.0})
    profile.set_ranked("medium", ["oil"], {"oil": 20.0})
    repository.upsert_taste_profile(profile)
    engine = PreferenceLearningEngine(repository, clock=lambda: NOW)

    assert engine.predict_purchase_intent("m1", "collector") > 70
    assert engine.predict_purchase_intent("missing", "collector") == 0.0


def test_model_source_is_neutral(repository):
    engine = PreferenceLearningEngine(repository, score_source=ModelSource("taste-v1"), clock=lambda: NOW)

    # 0.5 on the three model sub-scores, full budget fit and urgency for a unique 800 work
    assert engine.predict_purchase_intent("a1", "anyone") == pytest.approx(
        (0.5 * 0.30 + 0.992 * 0.25 + 0.5 * 0.20 + 0.5 * 0.15 + 1.0 * 0.10) * 100
    )


def test_recommendations_skip_purchased_and_rejected(engine):
    engine.record_interaction(event("purchase", user="k1", target="a1"))
    engine.record_interaction(event("reject", user="k1", target="a2"))

    recommendations = engine.generate_recommendations("k1")

    ids = [item.artwork_id for item in recommendations]
    assert ids == ["a3"]
    assert recommendations[0].personalized_message
    assert 0.0 <= recommendations[0].confidence_score <= 100.0


def test_recommendation_context_bounds_price(engine):
    recommendations = engine.generate_recommendations(
        "k2", RecommendationContext(budget_range=(1000.0, 2000.0), discovery_mode="explore")
    )

    assert [item.artwork_id for item in recommendations] == ["a3"]
    with pytest.raises(InputError):
        RecommendationContext(occasion="birthday")


def test_recommendations_degrade_to_empty_on_read_failure():
    class BrokenReads(InMemoryRepository):
        def get_recent_interactions(self, user_id, since):
            raise RuntimeError("timeout")

    engine = PreferenceLearningEngine(BrokenReads(), clock=lambda: NOW)

    assert engine.generate_recommendations("u1") == []
    assert engine.identify_taste_shifts("u1") == []


def test_insights_fall_back_to_defaults_on_read_failure():
    class BrokenProfiles(InMemoryRepository):
        def get_taste_profile(self, user_id):
            raise RuntimeError("replica lagging")

    insights = PreferenceLearningEngine(BrokenProfiles(), clock=lambda: NOW).generate_insights("u1")

    assert insights.top_mediums == []
    assert insights.recent_shifts == []
    assert insights.taste_summary.startswith("Beginner collector")


def test_insights_summarize_the_profile(engine):
    engine.record_interaction(event("purchase", user="i1", medium="oil", style="abstract", colors=("#ff0000",)))
    insights = engine.generate_insights("i1")

    assert insights.top_mediums == ["oil"]
    assert insights.top_colors == ["#FF0000"]
    assert "oil" in insights.taste_summary
    assert insights.budget_summary.startswith("Budget $0 to $100,000")


def test_merge_preferences_keeps_prior_order_on_ties():
    ranked, weights = merge_preferences(["a", "b"], {"a": 1.0, "b": 1.0}, ["c"], 1.0, presence_weight=1.0, cap=2)

    assert ranked == ["a", "b"]
    assert weights == {"a": 2.0, "b": 2.0}
    assert price_band(999) == "under_1k"
    assert price_band(25000) == "20k_plus"


def test_keyed_locks_serialize_same_key_only():
    locks = KeyedLocks()
    order = []
    inside = threading.Event()
    proceed = threading.Event()

    def hold_first():
        with locks.hold("u1"):
            inside.set()
            proceed.wait(2.0)
            order.append("first")

    thread = threading.Thread(target=hold_first)
    thread.start()
    inside.wait(2.0)
    with locks.hold("u2"):
        order.append("other user")
    proceed.set()
    with locks.hold("u1"):
        order.append("second")
    thread.join()

    assert order == ["other user", "first", "second"]
    assert len(locks) == 0


class SlowProfiles(InMemoryRepository):
    def get_taste_profile(self, user_id):
        profile = super().get_taste_profile(user_id)
        time.sleep(0.01)
        return profile


def test_concurrent_events_for_one_user_are_not_lost():
    engine = PreferenceLearningEngine(SlowProfiles(), clock=lambda: NOW)
    count = 8
    start = threading.Barrier(count)

    def like(index):
        start.wait(2.0)
        engine.record_interaction(event("like", user="busy", target=f"x{index}", medium="oil"))

    threads = [threading.Thread(target=like, args=(index,)) for index in range(count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5.0)

    profile = engine.get_profile("busy")
    assert profile.behavioral_patterns.interaction_counts == {"like": count}
    # first like adds its weight; every later one adds the weight plus one presence point
    assert profile.aesthetic_preferences.preference_weights["medium"]["oil"] == pytest.approx(4.0 + 5.0 * (count - 1))


def test_a_busy_user_does_not_block_others(engine):
    finished = []

    def record(user):
        engine.record_interaction(event("like", user=user, medium="oil"))
        finished.append(user)

    with engine.locks.hold("busy"):
        blocked = threading.Thread(target=record, args=("busy",))
        other = threading.Thread(target=record, args=("calm",))
        blocked.start()
        other.start()
        other.join(2.0)
        blocked.join(0.1)
        assert finished == ["calm"]
        assert blocked.is_alive()
    blocked.join(2.0)

    assert finished == ["calm", "busy"]
