"""
Photo indexing for visual search.

Walks a property's photos, fetches each one that has no stored
features yet, extracts ImageFeatures and writes them to the feature
store. Indexing is idempotent: photos already in the store are counted
as indexed without being fetched again.

Failures are isolated per photo (and, for batches, per property): a
broken URL or undecodable file is recorded in the outcome and the run
moves on to the next item.
"""

import logging
from typing import Iterable

from .collaborators import ByteFetcher, FeatureStore, MediaRepository
from .exceptions import FetchError, ImageProcessingError
from .features import extract_image_features
from .models import (
    BatchIndexingOutcome, IndexingFailure, IndexingOutcome, IndexingStats,
    PropertyFailure,
)
from .utils import round_half_up

logger = logging.getLogger(__name__)


class IndexingPipeline:
    """Populate the feature store from the media repository."""

    def __init__(self,
                 media_repository: MediaRepository,
                 feature_store: FeatureStore,
                 fetcher: ByteFetcher):
        self.media_repository = media_repository
        self.feature_store = feature_store
        self.fetcher = fetcher

    def index_property(self, property_id: str) -> IndexingOutcome:
        """
        Index every photo of one property.

        Args:
            property_id: Property whose photos should be indexed.

        Returns:
            IndexingOutcome listing indexed photo ids (including ones
            indexed by earlier runs) and per-photo failures.
        """
        outcome = IndexingOutcome(property_id=property_id)
        photos = self.media_repository.list_photos(property_id)

        for photo in photos:
            if self.feature_store.has(photo.photo_id):
                outcome.indexed_photo_ids.append(photo.photo_id)
                continue

            try:
                data = self.fetcher.fetch(photo.url)
                if isinstance(data, FetchError):
                    raise data
            except FetchError as e:
                logger.warning(f"Could not fetch photo {photo.photo_id}: {e}")
                outcome.failures.append(IndexingFailure(photo.photo_id, str(e)))
                continue

            try:
                features = extract_image_features(data)
            except ImageProcessingError as e:
                logger.warning(f"Could not process photo {photo.photo_id}: {e}")
                outcome.failures.append(IndexingFailure(photo.photo_id, str(e)))
                continue

            self.feature_store.insert(photo.photo_id, property_id, features)
            outcome.indexed_photo_ids.append(photo.photo_id)

        logger.info(
            f"Indexed property {property_id}: {outcome.indexed_count}/{len(photos)} photos, "
            f"{outcome.failed_count} failures"
        )

        return outcome

    def index_properties(self, property_ids: Iterable[str]) -> BatchIndexingOutcome:
        """
        Index several properties in order.

        A property whose photo listing or storage raises is recorded in
        property_failures; the remaining properties are still indexed.
        """
        batch = BatchIndexingOutcome()

        for property_id in property_ids:
            try:
                batch.details.append(self.index_property(property_id))
            except Exception as e:
                logger.error(f"Indexing property {property_id} failed: {e}")
                batch.property_failures.append(PropertyFailure(property_id, str(e)))

        logger.info(
            f"Batch indexing complete: {batch.total_processed} properties, "
            f"{batch.total_indexed} indexed, {batch.total_failed} failed"
        )

        return batch

    def is_indexed(self, photo_id: str) -> bool:
        return self.feature_store.has(photo_id)

    def indexing_stats(self) -> IndexingStats:
        total = self.feature_store.count_all()
        indexed = self.feature_store.count_indexed()
        percentage = int(round_half_up(indexed / total * 100, 0)) if total > 0 else 0

        return IndexingStats(
            total_media=total,
            indexed_media=indexed,
            unindexed_media=total - indexed,
            indexed_percentage=percentage,
        )
