"""
Tests for the external intelligence search client.

Uses a fake requests session; no network access.
"""

import pytest
from pathlib import Path
import sys

import requests

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.models import SOURCE_EXTERNAL, SearchCriteria
from intel.client import (
    DEFAULT_AGENCY_NAME,
    DEFAULT_SCORE,
    DEFAULT_TITLE,
    IntelSearchClient,
    map_external_result,
)


# =============================================================================
# Test Fixtures
# =============================================================================

class FakeResponse:
    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self.reason = "OK" if self.ok else "Error"
        self._body = body
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1")
        return self._body


class FakeSession:
    """Records POSTs and replays a canned response or exception."""

    def __init__(self, response=None, error=None):
        self.headers = {}
        self.calls = []
        self.closed = False
        self._response = response
        self._error = error

    def post(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self._error is not None:
            raise self._error
        return self._response

    def close(self):
        self.closed = True


def _client(session, api_key="test-key"):
    return IntelSearchClient(
        base_url="http://intel.local/",
        api_key=api_key,
        timeout=2.5,
        session=session,
    )


CRITERIA = SearchCriteria(beds=3, type="house", max_price=500000)


# =============================================================================
# Test: Request
# =============================================================================

class TestRequest:
    """Outgoing request shape."""

    def test_payload_and_headers(self):
        session = FakeSession(FakeResponse(body={"results": []}))
        client = _client(session)

        client.search("3 bedroom house under 500k", CRITERIA)

        url, kwargs = session.calls[0]
        assert url == "http://intel.local/intel/search"
        assert kwargs["json"] == {
            "query": "3 bedroom house under 500k",
            "filters": {"beds": 3, "type": "house", "maxPrice": 500000},
        }
        assert kwargs["headers"]["Authorization"] == "Bearer test-key"
        assert kwargs["timeout"] == 2.5
        assert session.headers["Content-Type"] == "application/json"

    def test_disabled_without_key(self):
        session = FakeSession(FakeResponse(body={"results": [{"id": 1}]}))
        client = _client(session, api_key="")

        assert client.enabled is False
        assert client.search("house", CRITERIA) == []
        assert session.calls == []

    def test_context_manager_closes_session(self):
        session = FakeSession()

        with _client(session):
            pass

        assert session.closed


# =============================================================================
# Test: Failure Handling
# =============================================================================

class TestFailures:
    """Every failure degrades to an empty list."""

    @pytest.mark.parametrize("status", [400, 401, 500, 503])
    def test_non_success_status(self, status):
        client = _client(FakeSession(FakeResponse(status_code=status, body={"results": [{}]})))

        assert client.search("house", CRITERIA) == []

    @pytest.mark.parametrize("error", [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        requests.RequestException("boom"),
    ])
    def test_transport_errors(self, error):
        client = _client(FakeSession(error=error))

        assert client.search("house", CRITERIA) == []

    def test_timeout_reported(self):
        client = _client(FakeSession(error=requests.Timeout("slow")))

        outcome = client.fetch("house", CRITERIA)

        assert not outcome.ok
        assert "timed out" in outcome.error

    def test_unparseable_body(self):
        client = _client(FakeSession(FakeResponse(invalid_json=True)))

        assert client.search("house", CRITERIA) == []

    @pytest.mark.parametrize("body", [[1, 2], "text", {"results": "nope"}])
    def test_unexpected_body_shape(self, body):
        client = _client(FakeSession(FakeResponse(body=body)))

        assert client.search("house", CRITERIA) == []

    def test_missing_results_is_empty(self):
        client = _client(FakeSession(FakeResponse(body={})))

        outcome = client.fetch("house", CRITERIA)

        assert outcome.ok
        assert outcome.records == []

    def test_non_object_items_skipped(self):
        body = {"results": ["junk", {"id": "a1", "title": "Villa"}, None]}
        client = _client(FakeSession(FakeResponse(body=body)))

        records = client.search("villa", CRITERIA)

        assert [r.id for r in records] == ["external_a1"]


# =============================================================================
# Test: Mapping
# =============================================================================

class TestMapping:
    """Provider results become external UnifiedProperty records."""

    def test_full_item(self):
        item = {
            "id": 42,
            "title": "Villa in Phakalane",
            "price": "P 1,500,000",
            "address": "Plot 3, Phakalane",
            "city": "Gaborone",
            "propertyType": "house",
            "bedrooms": 4,
            "bathrooms": "2",
            "score": 0.93,
            "description": "Golf estate villa",
            "images": "a.jpg, b.jpg",
            "lat": "-24.56",
            "lng": 25.95,
            "agent": {"name": "Pam Golding", "phone": "+267 71 000 000"},
        }

        record = map_external_result(item, 0)

        assert record.id == "external_42"
        assert record.source == SOURCE_EXTERNAL
        assert record.price == 1500000
        assert record.property_type == "house"
        assert record.bedrooms == 4
        assert record.bathrooms == 2
        assert record.score == 0.93
        assert record.images == ["a.jpg", "b.jpg"]
        assert record.coordinates.to_dict() == {"lat": -24.56, "lng": 25.95}
        assert record.agency.to_dict() == {"name": "Pam Golding", "contact": "+267 71 000 000"}

    def test_defaults_for_sparse_item(self):
        record = map_external_result({}, 3)

        assert record.id == "external_3"
        assert record.title == DEFAULT_TITLE
        assert record.price == 0
        assert record.score == DEFAULT_SCORE
        assert record.images == []
        assert record.coordinates is None
        assert record.bedrooms is None
        assert record.agency.name == DEFAULT_AGENCY_NAME
        assert record.agency.contact is None

    def test_alternate_field_names(self):
        item = {
            "property_type": "plot",
            "latitude": -19.98,
            "longitude": 23.41,
            "agent": {"email": "sales@example.com"},
        }

        record = map_external_result(item, 0)

        assert record.property_type == "plot"
        assert record.coordinates.lat == -19.98
        assert record.agency.contact == "sales@example.com"

    def test_garbage_price_and_partial_coordinates(self):
        record = map_external_result({"price": "call us", "lat": 1.0}, 0)

        assert record.price == 0
        assert record.coordinates is None

    def test_zero_score_kept(self):
        assert map_external_result({"score": 0}, 0).score == 0
