"""
Unit tests for the Disasters main service.
"""

import json
import pytest
import httpx
from collections import Counter, defaultdict
from fastapi.testclient import TestClient

from shared.config import get_config
from shared.retry import RetryConfig
from service_disasters.app.adapters import (
    Geocoder, ImageVerifier, LocationExtractor, OfficialUpdatesScraper, SocialMediaClient
)
from service_disasters.app.caching import InMemoryCacheStore
from service_disasters.app.main import DisasterService, create_app

GEMINI_HOST = "generativelanguage.googleapis.com"
MAPS_HOST = "maps.googleapis.com"
REDCROSS_HOST = "www.redcross.org"
IMAGE_HOST = "img.example"


class FakeUpstreams:
    """Routes adapter requests by host and counts them."""

    places = {"Flood in Miami": "Miami, FL", "Hurricane damage around Miami": "Miami, FL"}
    coordinates = {"Miami, FL": {"lat": 25.76, "lng": -80.19}}

    def __init__(self):
        self.calls = Counter()
        self.failing = set()
        self.queued = defaultdict(list)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.calls[host] += 1
        if host.endswith(".invalid"):
            raise httpx.ConnectError("name resolution failed", request=request)
        if self.queued[host]:
            return httpx.Response(self.queued[host].pop(0))
        if host in self.failing:
            return httpx.Response(500, json={"error": "upstream exploded"})

        if host == GEMINI_HOST:
            prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            place = next((p for d, p in self.places.items() if f'"{d}"' in prompt), "")
            return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": place}]}}]})
        if host == MAPS_HOST:
            location = self.coordinates.get(request.url.params["address"])
            results = [{"geometry": {"location": location}}] if location else []
            return httpx.Response(200, json={"results": results})
        if host == REDCROSS_HOST:
            return httpx.Response(200, text="<html><h2>Shelters open</h2><h2>Donate blood</h2></html>")
        if host == IMAGE_HOST:
            return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})
        return httpx.Response(404)


class TestDisasterService:
    """Test cases for DisasterService."""

    @pytest.fixture
    def upstreams(self):
        return FakeUpstreams()

    @pytest.fixture
    def cache_store(self):
        return InMemoryCacheStore()

    @pytest.fixture
    def service(self, upstreams, cache_store):
        """Service wired to in-memory stores and mocked upstream HTTP."""
        config = get_config(
            "disasters",
            3000,
            env="test",
            cache_backend="memory",
            record_backend="memory",
            gemini_api_key="gemini-key",
            google_maps_api_key="maps-key",
        )
        options = {
            "transport": httpx.MockTransport(upstreams),
            "retry_config": RetryConfig(max_attempts=1),
        }
        return DisasterService(
            config,
            cache_store=cache_store,
            extractor=LocationExtractor(config.gemini_api_key, **options),
            geocoder=Geocoder(config.google_maps_api_key, **options),
            social_media=SocialMediaClient(**options),
            official_updates=OfficialUpdatesScraper(**options),
            image_verifier=ImageVerifier(**options),
        )

    @pytest.fixture
    def client(self, service):
        return TestClient(service.app)

    @pytest.fixture
    def disaster(self, client):
        """A created disaster."""
        response = client.post(
            "/disasters",
            json={
                "title": "NYC Flood",
                "location_name": "Manhattan, NYC",
                "description": "Heavy flooding in Manhattan",
                "tags": ["flood", "urgent"],
                "lat": 40.7831,
                "lon": -73.9712,
            },
            headers={"X-User-Id": "netrunnerX"},
        )
        assert response.status_code == 201
        return response.json()

    def test_root_endpoint(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["service"] == "disasters"

    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["dependencies"]["cache"] == "ok"
        assert data["dependencies"]["disasters"] == "ok"
        assert data["dependencies"]["upstreams"]["gemini"]["state"] == "closed"

    def test_request_id_is_echoed(self, client):
        response = client.get("/", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_lifespan_starts_and_stops_stores(self, service):
        with TestClient(service.app) as client:
            assert client.get("/health").status_code == 200

    def test_create_disaster(self, disaster):
        assert disaster["owner_id"] == "netrunnerX"
        assert disaster["tags"] == ["flood", "urgent"]
        assert disaster["audit_trail"][0]["action"] == "create"
        assert disaster["audit_trail"][0]["user_id"] == "netrunnerX"

    def test_create_defaults_user(self, client):
        response = client.post("/disasters", json={"title": "Quake"})

        assert response.status_code == 201
        assert response.json()["owner_id"] == "anonymous"

    def test_create_requires_title(self, client):
        response = client.post("/disasters", json={"description": "No title"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_list_disasters_by_tag(self, client, disaster):
        client.post("/disasters", json={"title": "Wildfire", "tags": ["fire"]})

        assert len(client.get("/disasters").json()) == 2
        tagged = client.get("/disasters", params={"tag": "flood"}).json()
        assert [d["id"] for d in tagged] == [disaster["id"]]

    def test_update_disaster_replaces_audit_trail(self, client, disaster):
        response = client.put(
            f"/disasters/{disaster['id']}",
            json={"description": "Water receding"},
            headers={"X-User-Id": "reliefAdmin"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "Water receding"
        assert data["title"] == "NYC Flood"
        assert len(data["audit_trail"]) == 1
        assert data["audit_trail"][0]["action"] == "update"
        assert data["audit_trail"][0]["user_id"] == "reliefAdmin"

    def test_update_unknown_disaster(self, client):
        response = client.put("/disasters/missing", json={"title": "x"})

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_delete_disaster(self, client, disaster):
        response = client.delete(f"/disasters/{disaster['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/disasters").json() == []

    def test_delete_unknown_disaster_succeeds(self, client):
        response = client.delete("/disasters/missing")

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_geocode(self, client, upstreams, cache_store):
        response = client.post("/disasters/geocode", json={"description": "Flood in Miami"})

        assert response.status_code == 200
        assert response.json() == {
            "location_name": "Miami, FL",
            "coordinates": {"lat": 25.76, "lon": -80.19},
        }
        assert "gemini_Flood in Miami" in cache_store
        assert "google_Miami, FL" in cache_store

    def test_geocode_is_cached(self, client, upstreams):
        first = client.post("/disasters/geocode", json={"description": "Flood in Miami"})
        second = client.post("/disasters/geocode", json={"description": "Flood in Miami"})
        client.post("/disasters/geocode", json={"description": "Hurricane damage around Miami"})

        assert first.json() == second.json()
        assert upstreams.calls[GEMINI_HOST] == 2
        assert upstreams.calls[MAPS_HOST] == 1

    def test_geocode_unknown_location(self, client, cache_store):
        response = client.post("/disasters/geocode", json={"description": "Trapped on the roof in Houston"})

        assert response.status_code == 200
        assert response.json() == {"location_name": "Unknown", "coordinates": {"lat": 0.0, "lon": 0.0}}
        assert "google_Unknown" in cache_store

    def test_geocode_missing_description(self, client, upstreams):
        response = client.post("/disasters/geocode", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing description in request body"
        assert sum(upstreams.calls.values()) == 0

    def test_geocode_upstream_failure_is_generic(self, client, upstreams, cache_store):
        upstreams.failing.add(GEMINI_HOST)

        response = client.post("/disasters/geocode", json={"description": "Flood in Miami"})

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Failed to extract or convert location."
        assert data["details"] == {"lookup": "geocoding", "stage": "extraction"}
        assert "upstream exploded" not in response.text
        assert len(cache_store) == 0

    def test_social_media_sample_posts(self, client, disaster, cache_store):
        response = client.get(f"/disasters/{disaster['id']}/social-media")

        assert response.status_code == 200
        assert [post["user"] for post in response.json()] == ["citizen1", "citizen2"]
        assert f"social_{disaster['id']}" in cache_store

    def test_nearby_resources(self, client, disaster):
        response = client.get(
            f"/disasters/{disaster['id']}/resources",
            params={"lat": 40.78, "lon": -73.97},
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["disaster_id"] == disaster["id"]
        assert data[0]["distance_m"] < 1000

    def test_nearby_resources_requires_coordinates(self, client, disaster):
        response = client.get(f"/disasters/{disaster['id']}/resources", params={"lat": 40.78})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_official_updates(self, client, upstreams):
        first = client.get("/disasters/d1/official-updates")
        second = client.get("/disasters/d1/official-updates")

        assert first.status_code == 200
        assert first.json() == second.json() == ["Shelters open", "Donate blood"]
        assert upstreams.calls[REDCROSS_HOST] == 1

    def test_official_updates_failure(self, client, upstreams):
        upstreams.failing.add(REDCROSS_HOST)

        response = client.get("/disasters/d1/official-updates")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to fetch official updates."

    def test_verify_image(self, client, upstreams, cache_store):
        url = f"https://{IMAGE_HOST}/flood.png"

        response = client.post("/disasters/d1/verify-image", json={"image_url": url})
        client.post("/disasters/d1/verify-image", json={"image_url": url})

        assert response.status_code == 200
        assert response.json()["verified"] is True
        assert upstreams.calls[IMAGE_HOST] == 1
        assert f"verify_{url}" in cache_store

    def test_verify_image_missing_url(self, client):
        response = client.post("/disasters/d1/verify-image", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing image_url in request body"

    def test_verify_image_rejects_non_http_url(self, client, upstreams, cache_store):
        response = client.post("/disasters/d1/verify-image", json={"image_url": "ftp://img.example/flood.png"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid image_url in request body"
        assert sum(upstreams.calls.values()) == 0
        assert len(cache_store) == 0

    def test_verify_image_server_error_is_not_cached(self, client, upstreams):
        url = f"https://{IMAGE_HOST}/flood.png"
        upstreams.queued[IMAGE_HOST].append(503)

        first = client.post("/disasters/d1/verify-image", json={"image_url": url})
        second = client.post("/disasters/d1/verify-image", json={"image_url": url})

        assert first.status_code == 500
        assert first.json()["message"] == "Failed to verify image."
        assert second.status_code == 200
        assert second.json()["verified"] is True
        assert upstreams.calls[IMAGE_HOST] == 2

    def test_unreachable_image_hosts_do_not_block_verification(self, client):
        for n in range(6):
            response = client.post(
                "/disasters/d1/verify-image",
                json={"image_url": f"http://user-typo-{n}.invalid/x.png"},
            )
            assert response.status_code == 500

        response = client.post("/disasters/d1/verify-image", json={"image_url": f"https://{IMAGE_HOST}/ok.png"})

        assert response.status_code == 200
        assert response.json()["verified"] is True
        assert "image_verification" not in client.get("/health").json()["dependencies"]["upstreams"]

    def test_metrics_endpoint(self, client, disaster):
        client.get(f"/disasters/{disaster['id']}/social-media")
        client.get(f"/disasters/{disaster['id']}/social-media")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'cache_lookups_total{namespace="social",result="miss"} 1.0' in response.text
        assert 'cache_lookups_total{namespace="social",result="hit"} 1.0' in response.text


def test_create_app_with_defaults():
    """The default wiring builds in-memory backends."""
    app = create_app(get_config("disasters", 3000, env="test"))

    assert any(getattr(route, "path", None) == "/disasters/geocode" for route in app.routes)
