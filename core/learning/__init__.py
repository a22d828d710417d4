# Path: core/learning/__init__.py
# Purpose: Package initializer for collector preference learning.
# Layer: core/learning.
# Details: Exposes the learning engine, score sources, and ranked-list helpers.

from .engine import PreferenceLearningEngine
from .locks import KeyedLocks
from .preferences import dimension_values, merge_preferences, price_band
from .signals import CurrentPreferences, HeuristicSource, ModelSource, ScoreSource, urgency_factor

__all__ = [
    "CurrentPreferences",
    "HeuristicSource",
    "KeyedLocks",
    "ModelSource",
    "PreferenceLearningEngine",
    "ScoreSource",
    "dimension_values",
    "merge_preferences",
    "price_band",
    "urgency_factor",
]
