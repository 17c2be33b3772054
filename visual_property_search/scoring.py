"""
Composite similarity scoring for visual search results.

Combines three independent signals into a single similarity in [0, 1]:
    - structural     perceptual hash agreement (room layout)
    - color_palette  dominant color overlap (decor, lighting)
    - composition    aspect ratio agreement (framing)

Weights are fixed constants and sum to 1.0.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple

from .color_palette import color_similarity
from .features import ImageFeatures
from .geometry import aspect_ratio_similarity
from .perceptual_hash import phash_similarity

logger = logging.getLogger(__name__)

WEIGHTS = {
    "structural": 0.6,
    "color_palette": 0.25,
    "composition": 0.15,
}

# (threshold, phrase) ladders, checked top-down; first hit wins per signal.
STRUCTURAL_PHRASES = [
    (0.8, "very similar layout and structure"),
    (0.6, "similar room layout"),
]
COLOR_PHRASES = [
    (0.8, "matching color scheme"),
    (0.6, "similar color palette"),
]
COMPOSITION_PHRASES = [
    (0.9, "same perspective"),
    (0.7, "similar composition"),
]
FALLBACK_EXPLANATION = "Some visual similarities found"


class Score(NamedTuple):
    similarity: float
    structural: float
    color_palette: float
    composition: float


def compute_similarity(structural: float,
                       color_palette: float,
                       composition: float,
                       weights: Dict[str, float] = None) -> float:
    """Weighted sum of the three sub-scores."""
    weights = weights or WEIGHTS
    return (
        weights["structural"] * structural
        + weights["color_palette"] * color_palette
        + weights["composition"] * composition
    )


def score_features(query: ImageFeatures, candidate: ImageFeatures) -> Score:
    """
    Score a candidate's features against the query's.

    Color similarity is averaged over the query palette, so the query
    is always passed first.
    """
    structural = phash_similarity(query.phash, candidate.phash)
    color_palette = color_similarity(query.dominant_colors, candidate.dominant_colors)
    composition = aspect_ratio_similarity(query.aspect_ratio, candidate.aspect_ratio)

    return Score(
        similarity=compute_similarity(structural, color_palette, composition),
        structural=structural,
        color_palette=color_palette,
        composition=composition,
    )


def _phrase(value: float, ladder) -> str:
    for threshold, phrase in ladder:
        if value >= threshold:
            return phrase
    return ""


def generate_explanation(structural: float,
                         color_palette: float,
                         composition: float) -> str:
    """
    Human-readable summary of why a photo matched.

    Example:
        >>> generate_explanation(0.9, 0.65, 0.5)
        'Similar property with very similar layout and structure and similar color palette'
    """
    aspects = [
        phrase for phrase in (
            _phrase(structural, STRUCTURAL_PHRASES),
            _phrase(color_palette, COLOR_PHRASES),
            _phrase(composition, COMPOSITION_PHRASES),
        ) if phrase
    ]

    if not aspects:
        return FALLBACK_EXPLANATION

    return "Similar property with " + " and ".join(aspects)


def best_per_property(scored: Iterable[tuple]) -> List[tuple]:
    """
    Keep the highest-similarity entry per property.

    Args:
        scored: (candidate, Score) pairs; candidates need a property_id.

    Returns:
        One pair per property. On ties the first pair seen is kept.
    """
    best = {}
    for candidate, score in scored:
        existing = best.get(candidate.property_id)
        if existing is None or score.similarity > existing[1].similarity:
            best[candidate.property_id] = (candidate, score)
    return list(best.values())


def rank_results(scored: List[tuple]) -> List[tuple]:
    """Sort (candidate, Score) pairs by similarity, highest first."""
    return sorted(scored, key=lambda pair: -pair[1].similarity)
