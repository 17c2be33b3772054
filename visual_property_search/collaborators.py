"""
Interfaces to the systems visual search depends on, plus reference
implementations.

    MediaRepository     photos per property
    PropertyRepository  filter attributes and listing summary per property
    FeatureStore        one ImageHashRecord per indexed photo
    ByteFetcher         raw bytes for a photo URL

The in-memory implementations back the test suite and small
deployments; production callers plug in their own database-backed
classes. HttpByteFetcher is usable as-is.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Union

import requests

from .exceptions import FetchError
from .features import ImageFeatures
from .models import (
    Candidate, ImageHashRecord, MediaItem, PropertyRecord, PropertyStatus,
    PropertySummary, SearchFilter,
)

logger = logging.getLogger(__name__)

FETCH_TIMEOUT_SECONDS = float(os.environ.get("FETCH_TIMEOUT_SECONDS", "10"))


class MediaRepository(ABC):

    @abstractmethod
    def list_photos(self, property_id: str) -> List[MediaItem]:
        """Return the photo-type media of a property."""

    @abstractmethod
    def count_photos(self) -> int:
        """Total photo-type media across all properties."""

    @abstractmethod
    def get_photo(self, photo_id: str) -> Optional[MediaItem]:
        """Look up a single photo by id."""


class PropertyRepository(ABC):

    @abstractmethod
    def get(self, property_id: str) -> Optional[PropertyRecord]:
        """Return the property's filter attributes and listing summary, or None if unknown."""


class FeatureStore(ABC):

    @abstractmethod
    def has(self, photo_id: str) -> bool:
        """Whether features for this photo are stored (the 'is indexed' signal)."""

    @abstractmethod
    def insert(self, photo_id: str, property_id: str, features: ImageFeatures) -> None:
        """Store features for a photo if none are stored yet."""

    @abstractmethod
    def query_candidates(self, search_filter: SearchFilter) -> List[Candidate]:
        """Indexed photos whose owning property passes the filter."""

    @abstractmethod
    def count_all(self) -> int:
        """Total photos eligible for indexing."""

    @abstractmethod
    def count_indexed(self) -> int:
        """Photos with stored features."""


class ByteFetcher(ABC):

    @abstractmethod
    def fetch(self, url: str) -> Union[bytes, FetchError]:
        """
        Retrieve raw bytes for a URL.

        Failures are returned as a FetchError value, never raised.
        """


def property_matches(record: Optional[PropertyRecord], search_filter: SearchFilter) -> bool:
    """
    Candidate predicate shared by property repositories.

    Active status is always required. Listing types must intersect when
    given; city and country are case-insensitive substring matches.
    """
    if record is None or record.status != PropertyStatus.ACTIVE:
        return False

    if search_filter.listing_types:
        if not set(search_filter.listing_types) & set(record.listing_types):
            return False

    if search_filter.city and search_filter.city.lower() not in record.city.lower():
        return False

    if search_filter.country and search_filter.country.lower() not in record.country.lower():
        return False

    return True


class HttpByteFetcher(ByteFetcher):
    """Fetch photo bytes over HTTP(S) with requests."""

    def __init__(self, session: requests.Session = None,
                 timeout: float = FETCH_TIMEOUT_SECONDS):
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, url: str) -> Union[bytes, FetchError]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning(f"Fetch failed for {url}: {e}")
            return FetchError(f"Failed to fetch image: {e}", url=url)

        if not response.ok:
            return FetchError(
                f"Failed to fetch image: {response.status_code}",
                url=url, status_code=response.status_code,
            )

        return response.content


class InMemoryMediaRepository(MediaRepository):

    def __init__(self, photos: Dict[str, Iterable[MediaItem]] = None):
        self._photos: Dict[str, List[MediaItem]] = {}
        self._by_id: Dict[str, MediaItem] = {}
        for property_id, items in (photos or {}).items():
            for item in items:
                self.add_photo(property_id, item)

    def add_photo(self, property_id: str, item: MediaItem) -> None:
        self._photos.setdefault(property_id, []).append(item)
        self._by_id[item.photo_id] = item

    def list_photos(self, property_id: str) -> List[MediaItem]:
        return list(self._photos.get(property_id, []))

    def count_photos(self) -> int:
        return sum(len(items) for items in self._photos.values())

    def get_photo(self, photo_id: str) -> Optional[MediaItem]:
        return self._by_id.get(photo_id)


class InMemoryPropertyRepository(PropertyRepository):

    def __init__(self, properties: Iterable[PropertyRecord] = ()):
        self._properties = {p.property_id: p for p in properties}

    def add(self, record: PropertyRecord) -> None:
        self._properties[record.property_id] = record

    def get(self, property_id: str) -> Optional[PropertyRecord]:
        return self._properties.get(property_id)


class InMemoryFeatureStore(FeatureStore):
    """
    Dict-backed feature store.

    Joins stored records with the media repository (for URLs) and the
    property repository (for filtering and the result summary) at query time.
    """

    def __init__(self,
                 media_repository: MediaRepository,
                 property_repository: PropertyRepository):
        self.media_repository = media_repository
        self.property_repository = property_repository
        self._records: Dict[str, ImageHashRecord] = {}
        self._lock = threading.Lock()

    def has(self, photo_id: str) -> bool:
        return photo_id in self._records

    def get(self, photo_id: str) -> Optional[ImageHashRecord]:
        return self._records.get(photo_id)

    def insert(self, photo_id: str, property_id: str, features: ImageFeatures) -> None:
        with self._lock:
            if photo_id in self._records:
                logger.debug(f"Photo {photo_id} already indexed, insert ignored")
                return
            self._records[photo_id] = ImageHashRecord(
                photo_id=photo_id, property_id=property_id, features=features,
            )

    def query_candidates(self, search_filter: SearchFilter) -> List[Candidate]:
        with self._lock:
            records = list(self._records.values())

        candidates = []
        for record in records:
            property_record = self.property_repository.get(record.property_id)
            if not property_matches(property_record, search_filter):
                continue
            media = self.media_repository.get_photo(record.photo_id)
            if media is None:
                continue
            candidates.append(Candidate(
                photo_id=record.photo_id,
                property_id=record.property_id,
                features=record.features,
                url=media.url,
                thumbnail_url=media.thumbnail_url,
                property=PropertySummary.from_record(property_record),
            ))
        return candidates

    def count_all(self) -> int:
        return self.media_repository.count_photos()

    def count_indexed(self) -> int:
        return len(self._records)
