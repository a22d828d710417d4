# Path: core/query/__init__.py
# Purpose: Package initializer for query understanding.
# Layer: core/query.
# Details: Exposes the entity extractor, intent classifier, and their vocabularies.

from .entities import EntityExtractor
from .intent import INTENT_RULES, IntentClassifier
from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

__all__ = ["DEFAULT_VOCABULARY", "EntityExtractor", "INTENT_RULES", "IntentClassifier", "Vocabulary"]
