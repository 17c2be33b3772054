"""
Visual property search engine.

Orchestrates a search for properties whose photos resemble a query image:
    1. Extract features from the query image
    2. Pull indexed candidates whose property passes the filter
    3. Score every candidate (structure, color, composition)
    4. Drop candidates below the similarity threshold
    5. Keep the best photo per property, rank, and truncate

Query-side errors (bad upload, undecodable image) abort the call.
Stored candidates passed extraction when indexed, so scoring them
cannot fail.
"""

import logging
import os
import time
from typing import Any, Mapping, Optional, Union

import pydantic

from .collaborators import FeatureStore
from .exceptions import ValidationError
from .features import extract_image_features
from .models import (
    MatchBreakdown, MatchedPhoto, SearchFilter, SearchResponse, SearchResult,
    UploadedFile,
)
from .scoring import best_per_property, generate_explanation, rank_results, score_features
from .utils import round_half_up

logger = logging.getLogger(__name__)

SUPPORTED_MEDIA_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
MAX_IMAGE_BYTES = int(os.environ.get("VISUAL_SEARCH_MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

SCORE_PRECISION = 3


def parse_filter(search_filter: Union[SearchFilter, Mapping[str, Any], None]) -> SearchFilter:
    """
    Coerce caller input into a SearchFilter.

    Raises:
        ValidationError: On unknown keys or out-of-range values.
    """
    if search_filter is None:
        return SearchFilter()
    if isinstance(search_filter, SearchFilter):
        return search_filter
    try:
        return SearchFilter.model_validate(dict(search_filter))
    except (pydantic.ValidationError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid search filter: {e}") from e


def validate_upload(file: Optional[UploadedFile]) -> None:
    """
    Reject missing, unsupported, or oversized uploads.

    Raises:
        ValidationError: Describing the first problem found.
    """
    if file is None:
        raise ValidationError("No image file provided")

    if file.media_type not in SUPPORTED_MEDIA_TYPES:
        raise ValidationError(
            f"Unsupported image format. Supported formats: {', '.join(SUPPORTED_MEDIA_TYPES)}"
        )

    if file.size > MAX_IMAGE_BYTES:
        raise ValidationError(
            f"Image size exceeds maximum allowed size of {MAX_IMAGE_BYTES // (1024 * 1024)}MB"
        )


class SearchEngine:
    """
    Ranked visual search over the feature store.

    Holds no per-request state; one instance can serve concurrent calls
    if the feature store can.
    """

    def __init__(self, feature_store: FeatureStore):
        self.feature_store = feature_store

    def validate_upload(self, file: Optional[UploadedFile]) -> None:
        validate_upload(file)

    def search_upload(self,
                      file: Optional[UploadedFile],
                      search_filter: Union[SearchFilter, Mapping[str, Any], None] = None
                      ) -> SearchResponse:
        """Validate an uploaded file, then search with its content."""
        validate_upload(file)
        return self.find_similar(file.content, search_filter)

    def find_similar(self,
                     image_bytes: bytes,
                     search_filter: Union[SearchFilter, Mapping[str, Any], None] = None
                     ) -> SearchResponse:
        """
        Find properties with photos visually similar to the query image.

        Args:
            image_bytes: Encoded query image.
            search_filter: SearchFilter or mapping of filter options.

        Returns:
            SearchResponse with at most one result per property, sorted by
            similarity (highest first).

        Raises:
            ValidationError: If the filter is malformed.
            ImageProcessingError: If the query image cannot be decoded.
        """
        start = time.perf_counter()
        search_filter = parse_filter(search_filter)

        query_features = extract_image_features(image_bytes)
        candidates = self.feature_store.query_candidates(search_filter)

        scored = []
        for candidate in candidates:
            score = score_features(query_features, candidate.features)
            if score.similarity >= search_filter.min_similarity:
                scored.append((candidate, score))

        top = rank_results(best_per_property(scored))[:search_filter.effective_limit]
        results = [self._to_result(candidate, score) for candidate, score in top]

        elapsed_ms = int(round((time.perf_counter() - start) * 1000))

        logger.info(
            f"Visual search complete: {len(candidates)} candidates, "
            f"{len(scored)} above {search_filter.min_similarity} → "
            f"{len(results)} results in {elapsed_ms}ms"
        )

        return SearchResponse(
            results=results,
            total=len(results),
            query_features=query_features,
            processing_time_ms=elapsed_ms,
        )

    @staticmethod
    def _to_result(candidate, score) -> SearchResult:
        return SearchResult(
            property_id=candidate.property_id,
            similarity=round_half_up(score.similarity, SCORE_PRECISION),
            breakdown=MatchBreakdown(
                structural=round_half_up(score.structural, SCORE_PRECISION),
                color_palette=round_half_up(score.color_palette, SCORE_PRECISION),
                composition=round_half_up(score.composition, SCORE_PRECISION),
            ),
            matched_photo=MatchedPhoto(
                url=candidate.url,
                photo_id=candidate.photo_id,
                thumbnail_url=candidate.thumbnail_url,
            ),
            explanation=generate_explanation(
                score.structural, score.color_palette, score.composition
            ),
            property=candidate.property,
        )
