"""Tests for collaborator reference implementations."""

import requests

from visual_property_search.collaborators import (
    HttpByteFetcher, InMemoryMediaRepository, property_matches,
)
from visual_property_search.exceptions import FetchError
from visual_property_search.features import ImageFeatures
from visual_property_search.models import (
    ListingType, MediaItem, PropertyRecord, PropertyStatus, SearchFilter,
)

FEATURES = ImageFeatures("0707070707070707", ("#C0C0C0",), 1.5, 120.0)


class FakeResponse:

    def __init__(self, status_code=200, content=b""):
        self.status_code = status_code
        self.content = content

    @property
    def ok(self):
        return self.status_code < 400


class FakeSession:

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, timeout=None):
        self.requests.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


class TestHttpByteFetcher:
    """Tests for the requests-based fetcher."""

    def test_returns_content(self):
        session = FakeSession(FakeResponse(200, b"\x89PNG"))
        fetcher = HttpByteFetcher(session=session, timeout=2.5)
        assert fetcher.fetch("http://img/1.png") == b"\x89PNG"
        assert session.requests == [("http://img/1.png", 2.5)]

    def test_http_error_returned(self):
        fetcher = HttpByteFetcher(session=FakeSession(FakeResponse(404)))
        result = fetcher.fetch("http://img/missing.png")
        assert isinstance(result, FetchError)
        assert result.status_code == 404
        assert result.url == "http://img/missing.png"
        assert str(result) == "Failed to fetch image: 404"

    def test_transport_error_returned(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        result = HttpByteFetcher(session=session).fetch("http://img/1.png")
        assert isinstance(result, FetchError)
        assert result.status_code is None
        assert "refused" in str(result)


class TestPropertyMatches:
    """Tests for the candidate predicate."""

    def test_unknown_property(self):
        assert not property_matches(None, SearchFilter())

    def test_requires_active(self):
        for status in PropertyStatus:
            record = PropertyRecord("p1", status=status)
            assert property_matches(record, SearchFilter()) == (status == PropertyStatus.ACTIVE)

    def test_listing_types_intersect(self):
        record = PropertyRecord("p1", listing_types=[ListingType.FOR_SALE, ListingType.EVENTS])
        assert property_matches(record, SearchFilter(listing_types=[ListingType.EVENTS]))
        assert not property_matches(record, SearchFilter(listing_types=[ListingType.BARTER]))

    def test_empty_listing_types_ignored(self):
        assert property_matches(PropertyRecord("p1"), SearchFilter(listing_types=[]))

    def test_city_country_substring(self):
        record = PropertyRecord("p1", city="Budapest", country="Hungary")
        assert property_matches(record, SearchFilter(city="PEST", country="hung"))
        assert not property_matches(record, SearchFilter(city="Vienna"))


class TestInMemoryFeatureStore:
    """Tests for the dict-backed store."""

    def test_insert_if_absent(self, feature_store):
        feature_store.insert("m1", "p1", FEATURES)
        other = ImageFeatures("ffffffffffffffff", ("#000000",), 1.0, 0.0)
        feature_store.insert("m1", "p2", other)

        assert feature_store.count_indexed() == 1
        assert feature_store.get("m1").features == FEATURES
        assert feature_store.get("m1").property_id == "p1"

    def test_query_joins_media_urls(self, feature_store, media_repository, property_repository):
        property_repository.add(PropertyRecord("p1"))
        media_repository.add_photo("p1", MediaItem("m1", "http://img/m1.jpg", "http://img/t1.jpg"))
        feature_store.insert("m1", "p1", FEATURES)

        candidates = feature_store.query_candidates(SearchFilter())

        assert len(candidates) == 1
        assert candidates[0].url == "http://img/m1.jpg"
        assert candidates[0].thumbnail_url == "http://img/t1.jpg"
        assert candidates[0].features == FEATURES

    def test_query_attaches_property_summary(self, feature_store, media_repository,
                                             property_repository):
        property_repository.add(PropertyRecord(
            "p1", listing_types=[ListingType.FOR_SALE], city="Lisbon", country="Portugal",
            title="Sunny loft", base_price="250000.00", currency="EUR",
            square_meters=72.5, bedrooms=2, bathrooms=1,
        ))
        media_repository.add_photo("p1", MediaItem("m1", "http://img/m1.jpg"))
        feature_store.insert("m1", "p1", FEATURES)

        summary = feature_store.query_candidates(SearchFilter())[0].property

        assert summary.id == "p1"
        assert summary.title == "Sunny loft"
        assert summary.to_dict() == {
            "id": "p1",
            "title": "Sunny loft",
            "city": "Lisbon",
            "country": "Portugal",
            "listingTypes": ["FOR_SALE"],
            "basePrice": "250000.00",
            "currency": "EUR",
            "status": "ACTIVE",
            "squareMeters": 72.5,
            "bedrooms": 2,
            "bathrooms": 1,
        }

    def test_summary_omits_unknown_sizes(self, feature_store, media_repository,
                                         property_repository):
        property_repository.add(PropertyRecord("p1"))
        media_repository.add_photo("p1", MediaItem("m1", "u1"))
        feature_store.insert("m1", "p1", FEATURES)

        data = feature_store.query_candidates(SearchFilter())[0].property.to_dict()

        assert data["basePrice"] == "0"
        assert data["listingTypes"] == []
        assert "bedrooms" not in data
        assert "squareMeters" not in data

    def test_counts(self, feature_store, media_repository):
        media_repository.add_photo("p1", MediaItem("m1", "u1"))
        media_repository.add_photo("p1", MediaItem("m2", "u2"))
        feature_store.insert("m1", "p1", FEATURES)

        assert feature_store.count_all() == 2
        assert feature_store.count_indexed() == 1
        assert feature_store.has("m1")
        assert not feature_store.has("m2")


class TestInMemoryMediaRepository:
    """Tests for the dict-backed media repository."""

    def test_get_photo_from_constructor(self):
        item = MediaItem("m1", "u1")
        repository = InMemoryMediaRepository({"p1": [item, MediaItem("m2", "u2")]})

        assert repository.get_photo("m1") is item
        assert repository.count_photos() == 2

    def test_get_photo_after_add(self):
        repository = InMemoryMediaRepository()
        item = MediaItem("m3", "u3", "t3")
        repository.add_photo("p2", item)

        assert repository.get_photo("m3") is item
        assert repository.list_photos("p2") == [item]

    def test_get_photo_unknown(self):
        repository = InMemoryMediaRepository({"p1": [MediaItem("m1", "u1")]})
        assert repository.get_photo("missing") is None
