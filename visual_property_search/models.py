"""
Data shapes exchanged with callers and collaborators.

SearchFilter is a pydantic model because it is built from untrusted
request input; everything else is produced by this package and uses
plain dataclasses.
"""

import enum
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .features import ImageFeatures

DEFAULT_MIN_SIMILARITY = float(os.environ.get("VISUAL_SEARCH_MIN_SIMILARITY", "0.3"))
DEFAULT_LIMIT = int(os.environ.get("VISUAL_SEARCH_DEFAULT_LIMIT", "10"))
MAX_LIMIT = int(os.environ.get("VISUAL_SEARCH_MAX_LIMIT", "20"))


class ListingType(str, enum.Enum):
    FOR_SALE = "FOR_SALE"
    SHORT_TERM_RENT = "SHORT_TERM_RENT"
    LONG_TERM_RENT = "LONG_TERM_RENT"
    EVENTS = "EVENTS"
    BARTER = "BARTER"


class PropertyStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    SOLD = "SOLD"
    RENTED = "RENTED"
    EXPIRED = "EXPIRED"
    DELETED = "DELETED"


class SearchFilter(BaseModel):
    """Candidate filter and ranking options for a visual search."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    min_similarity: float = Field(DEFAULT_MIN_SIMILARITY, ge=0.0, le=1.0, alias="minSimilarity")
    """Candidates scoring below this composite similarity are dropped."""

    limit: int = Field(DEFAULT_LIMIT, ge=1)
    """Requested result count; clamped to MAX_LIMIT by effective_limit."""

    listing_types: Optional[List[ListingType]] = Field(None, alias="listingTypes")
    """Property must offer at least one of these listing types."""

    city: Optional[str] = None
    """Case-insensitive substring of the property's city."""

    country: Optional[str] = None
    """Case-insensitive substring of the property's country."""

    @field_validator("listing_types", mode="before")
    @classmethod
    def _split_listing_types(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @property
    def effective_limit(self) -> int:
        return min(self.limit, MAX_LIMIT)


@dataclass(frozen=True)
class MediaItem:
    """A photo owned by the media repository."""

    photo_id: str
    url: str
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class PropertyRecord:
    """A property as seen by visual search: filter attributes plus listing summary."""

    property_id: str
    status: PropertyStatus = PropertyStatus.ACTIVE
    listing_types: List[ListingType] = field(default_factory=list)
    city: str = ""
    country: str = ""
    title: str = ""
    base_price: str = "0"
    currency: str = ""
    square_meters: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None


@dataclass(frozen=True)
class PropertySummary:
    """Listing data shown next to a visual match."""

    id: str
    title: str
    city: str
    country: str
    listing_types: List[ListingType]
    base_price: str
    currency: str
    status: PropertyStatus
    square_meters: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None

    @classmethod
    def from_record(cls, record: PropertyRecord) -> "PropertySummary":
        return cls(
            id=record.property_id,
            title=record.title,
            city=record.city,
            country=record.country,
            listing_types=list(record.listing_types),
            base_price=str(record.base_price or "0"),
            currency=record.currency,
            status=record.status,
            square_meters=record.square_meters,
            bedrooms=record.bedrooms,
            bathrooms=record.bathrooms,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "city": self.city,
            "country": self.country,
            "listingTypes": [ListingType(t).value for t in self.listing_types],
            "basePrice": self.base_price,
            "currency": self.currency,
            "status": PropertyStatus(self.status).value,
        }
        for key, value in (("squareMeters", self.square_meters),
                           ("bedrooms", self.bedrooms),
                           ("bathrooms", self.bathrooms)):
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class ImageHashRecord:
    """Stored features of one indexed photo."""

    photo_id: str
    property_id: str
    features: ImageFeatures
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class Candidate:
    """An indexed photo joined with its media URLs and property summary, ready for scoring."""

    photo_id: str
    property_id: str
    features: ImageFeatures
    url: str
    thumbnail_url: Optional[str] = None
    property: Optional[PropertySummary] = None


@dataclass(frozen=True)
class MatchBreakdown:
    structural: float
    color_palette: float
    composition: float


@dataclass(frozen=True)
class MatchedPhoto:
    url: str
    photo_id: str
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class SearchResult:
    property_id: str
    similarity: float
    breakdown: MatchBreakdown
    matched_photo: MatchedPhoto
    explanation: str
    property: Optional[PropertySummary] = None

    def to_dict(self) -> Dict[str, Any]:
        photo = {"url": self.matched_photo.url, "photoId": self.matched_photo.photo_id}
        if self.matched_photo.thumbnail_url is not None:
            photo["thumbnailUrl"] = self.matched_photo.thumbnail_url
        data = {
            "propertyId": self.property_id,
            "similarity": self.similarity,
            "breakdown": {
                "structural": self.breakdown.structural,
                "colorPalette": self.breakdown.color_palette,
                "composition": self.breakdown.composition,
            },
            "matchedPhoto": photo,
            "explanation": self.explanation,
        }
        if self.property is not None:
            data["property"] = self.property.to_dict()
        return data


@dataclass(frozen=True)
class SearchResponse:
    results: List[SearchResult]
    total: int
    query_features: ImageFeatures
    processing_time_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "total": self.total,
            "queryFeatures": self.query_features.to_dict(),
            "processingTimeMs": self.processing_time_ms,
        }


@dataclass
class IndexingFailure:
    photo_id: str
    error: str


@dataclass
class IndexingOutcome:
    property_id: str
    indexed_photo_ids: List[str] = field(default_factory=list)
    failures: List[IndexingFailure] = field(default_factory=list)

    @property
    def indexed_count(self) -> int:
        return len(self.indexed_photo_ids)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "propertyId": self.property_id,
            "indexedCount": self.indexed_count,
            "failedCount": self.failed_count,
            "indexedPhotoIds": list(self.indexed_photo_ids),
            "failures": [{"photoId": f.photo_id, "error": f.error} for f in self.failures],
        }


@dataclass
class PropertyFailure:
    property_id: str
    error: str


@dataclass
class BatchIndexingOutcome:
    details: List[IndexingOutcome] = field(default_factory=list)
    property_failures: List[PropertyFailure] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.details) + len(self.property_failures)

    @property
    def total_indexed(self) -> int:
        return sum(outcome.indexed_count for outcome in self.details)

    @property
    def total_failed(self) -> int:
        return sum(outcome.failed_count for outcome in self.details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalProcessed": self.total_processed,
            "totalIndexed": self.total_indexed,
            "totalFailed": self.total_failed,
            "details": [outcome.to_dict() for outcome in self.details],
            "propertyFailures": [
                {"propertyId": f.property_id, "error": f.error} for f in self.property_failures
            ],
        }


@dataclass(frozen=True)
class IndexingStats:
    total_media: int
    indexed_media: int
    unindexed_media: int
    indexed_percentage: int


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded query image as handed over by the transport layer."""

    content: bytes
    media_type: str
    size: int
    filename: Optional[str] = None
