# Path: core/query/vocabulary.py
# Purpose: Hold the fixed vocabularies used to understand free-text art queries.
# Layer: core/query.
# Details: Vocabulary is configuration; extractors receive it at construction so deployments can swap it.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from core.color.similarity import NAMED_COLORS

# Color words matched as substrings; named colors map to hex tokens, descriptors stay literal.
COLOR_KEYWORDS: Dict[str, str] = {
    "red": NAMED_COLORS["red"],
    "blue": NAMED_COLORS["blue"],
    "green": NAMED_COLORS["green"],
    "yellow": NAMED_COLORS["yellow"],
    "purple": NAMED_COLORS["purple"],
    "orange": NAMED_COLORS["orange"],
    "pink": NAMED_COLORS["pink"],
    "black": NAMED_COLORS["black"],
    "white": NAMED_COLORS["white"],
    "gray": NAMED_COLORS["gray"],
    "brown": NAMED_COLORS["brown"],
    "teal": NAMED_COLORS["teal"],
    "vibrant": "vibrant",
    "muted": "muted",
    "bright": "bright",
    "dark": "dark",
    "light": "light",
}

# Synonyms are matched on word boundaries only: "ash" must not fire inside "fashion".
COLOR_SYNONYMS: Dict[str, List[str]] = {
    "red": ["crimson", "scarlet", "ruby", "cherry", "burgundy", "cardinal", "maroon", "rose"],
    "orange": ["amber", "tangerine", "apricot", "copper", "rust", "terracotta"],
    "yellow": ["gold", "golden", "lemon", "canary", "mustard", "honey"],
    "green": ["emerald", "forest", "lime", "mint", "sage", "olive", "jade", "fern"],
    "blue": ["azure", "navy", "cobalt", "sapphire", "cerulean", "ocean", "indigo"],
    "purple": ["violet", "lavender", "plum", "mauve", "amethyst", "lilac", "orchid"],
    "pink": ["fuchsia", "salmon", "blush", "coral"],
    "black": ["ebony", "jet", "obsidian", "onyx", "charcoal"],
    "white": ["ivory", "cream", "pearl", "snow", "alabaster"],
    "gray": ["grey", "silver", "slate", "ash", "pewter", "steel"],
    "brown": ["tan", "beige", "chocolate", "mahogany", "walnut", "espresso"],
    "teal": ["turquoise", "cyan", "aqua", "seafoam"],
}

MEDIUMS: Tuple[str, ...] = (
    "oil",
    "acrylic",
    "watercolor",
    "digital",
    "photography",
    "sculpture",
    "print",
    "drawing",
    "collage",
    "mixed media",
    "canvas",
    "paper",
    "wood",
    "metal",
    "ceramic",
    "glass",
)

GENRES: Tuple[str, ...] = (
    "abstract",
    "realism",
    "impressionism",
    "expressionism",
    "surrealism",
    "pop art",
    "contemporary",
    "minimalism",
    "conceptual",
    "street art",
    "landscape",
    "portrait",
    "still life",
    "figurative",
    "modern",
    "classical",
)

SUBJECTS: Tuple[str, ...] = (
    "nature",
    "urban",
    "city",
    "human",
    "figure",
    "animal",
    "architecture",
    "building",
    "flower",
    "tree",
    "mountain",
    "ocean",
    "sky",
    "sunset",
    "emotion",
    "love",
    "sadness",
    "joy",
    "anger",
    "peace",
    "war",
    "politics",
)

MOOD_WORDS: Dict[str, List[str]] = {
    "passionate": ["passionate", "intense", "fiery", "dramatic"],
    "calm": ["calm", "peaceful", "serene", "tranquil", "quiet", "soothing", "meditative"],
    "energetic": ["energetic", "dynamic", "lively", "exciting", "stimulating"],
    "romantic": ["romantic", "intimate", "tender", "affectionate"],
    "mysterious": ["mysterious", "enigmatic", "moody", "atmospheric", "intriguing"],
    "cheerful": ["cheerful", "happy", "joyful", "uplifting", "sunny", "playful"],
    "sophisticated": ["sophisticated", "elegant", "refined", "polished"],
    "earthy": ["earthy", "natural", "organic", "rustic", "grounded"],
}

SIZE_WORDS: Dict[str, List[str]] = {
    "small": ["small", "compact", "miniature", "tiny"],
    "large": ["large", "oversized", "big", "huge", "monumental"],
}

# Words blanked out before substring matching; each hides a vocabulary term it is unrelated to.
DENY_LIST: Tuple[str, ...] = ("hundred", "hundreds", "credit", "bored", "tiredness", "oilcloth")

# Genre groups used when a caller pins the abstraction level.
REPRESENTATIONAL_GENRES: Tuple[str, ...] = ("realism", "portrait", "landscape", "still life")
ABSTRACT_GENRES: Tuple[str, ...] = ("abstract", "minimalism", "conceptual")

# Width/height bounds (cm) for each size bias.
SIZE_BOUNDS: Dict[str, Dict[str, float]] = {
    "small": {"max_width_cm": 60.0, "max_height_cm": 60.0},
    "medium": {"min_width_cm": 60.0, "max_width_cm": 120.0, "min_height_cm": 60.0, "max_height_cm": 120.0},
    "large": {"min_width_cm": 120.0, "min_height_cm": 120.0},
}


@dataclass(frozen=True)
class Vocabulary:
    """Bundle of vocabularies handed to the entity extractor."""

    colors: Dict[str, str] = field(default_factory=lambda: dict(COLOR_KEYWORDS))
    color_synonyms: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in COLOR_SYNONYMS.items()})
    mediums: Tuple[str, ...] = MEDIUMS
    genres: Tuple[str, ...] = GENRES
    subjects: Tuple[str, ...] = SUBJECTS
    moods: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in MOOD_WORDS.items()})
    sizes: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in SIZE_WORDS.items()})
    deny_list: Tuple[str, ...] = DENY_LIST


DEFAULT_VOCABULARY = Vocabulary()
