"""Integration tests for the HTTP API."""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from processor.models import Event, RawEvent, RefreshResult
from scheduler.refresh_scheduler import RefreshScheduler
from storage.event_cache import EventCache


def make_event(event_id, title, is_upcoming):
    """Create an Event for API responses."""
    return Event(
        id=event_id,
        title=title,
        date_display="07 nov. nov. (jeu.)",
        start_date="2024-11-07T10:00:00",
        end_date="2024-11-07T18:00:00",
        location="Test City",
        organizer="Test Org",
        description="Test description",
        url="https://test.com",
        is_upcoming=is_upcoming
    )


@pytest.fixture
def mock_cache():
    """Create a cache stub serving two events."""
    cache = Mock(spec=EventCache)
    events = (
        make_event("test-1", "Upcoming Event", True),
        make_event("test-2", "Past Event", False)
    )
    cache.get_all.return_value = events
    cache.get_upcoming.return_value = [events[0]]
    cache.get_cache_info.return_value = {
        'totalEvents': 2,
        'upcomingEvents': 1,
        'lastRefresh': '2024-11-01T06:00:00+00:00',
        'cacheDurationHours': 1
    }
    cache.force_refresh.return_value = RefreshResult(success=True, total_events=2, upcoming_events=1)
    cache.initialize.return_value = RefreshResult(success=True, total_events=2, upcoming_events=1)
    return cache


@pytest.fixture
def client(mock_cache):
    """Create a test client without running the lifespan."""
    return TestClient(create_app(mock_cache), raise_server_exceptions=False)


class TestEventRoutes:
    """Test cases for event endpoints."""

    def test_get_all_events(self, client):
        """Test that all events are returned in the envelope."""
        response = client.get("/api/v1/events")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Successfully retrieved 2 events"
        assert body["error"] is None
        assert body["timestamp"]
        assert [event["id"] for event in body["data"]] == ["test-1", "test-2"]
        assert body["data"][0]["title"] == "Upcoming Event"
        assert body["data"][0]["dateDisplay"] == "07 nov. nov. (jeu.)"

    def test_get_upcoming_events(self, client):
        """Test that only upcoming events are returned."""
        response = client.get("/api/v1/events/upcoming")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Successfully retrieved 1 upcoming events"
        assert len(body["data"]) == 1
        assert body["data"][0]["isUpcoming"] is True

    def test_refresh_events(self, client, mock_cache):
        """Test that the refresh endpoint runs a forced refresh."""
        response = client.post("/api/v1/events/refresh")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == "Refresh initiated"
        assert body["message"] == "Events refresh completed successfully"
        mock_cache.force_refresh.assert_called_once()

    def test_refresh_events_failed_cycle_still_ok(self, client, mock_cache):
        """Test that an upstream failure during refresh keeps answering 200."""
        mock_cache.force_refresh.return_value = RefreshResult(
            success=False,
            error_type="TransportError",
            error_message="timed out"
        )

        response = client.post("/api/v1/events/refresh")

        assert response.status_code == 200
        assert response.json()["success"] is True

    def test_unexpected_error_returns_500(self, client, mock_cache):
        """Test that unhandled errors are wrapped without a stack trace."""
        mock_cache.get_all.side_effect = RuntimeError("boom")

        response = client.get("/api/v1/events")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "An unexpected error occurred: boom"
        assert "Traceback" not in response.text

    def test_value_error_returns_400(self, client, mock_cache):
        """Test that invalid argument conditions map to 400."""
        mock_cache.get_upcoming.side_effect = ValueError("invalid filter")

        response = client.get("/api/v1/events/upcoming")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "invalid filter"


class TestHealthRoute:
    """Test cases for the health endpoint."""

    def test_health_check(self, client):
        """Test health payload with cache metadata."""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Service is healthy"
        assert body["data"]["status"] == "UP"
        assert body["data"]["service"] == "SRRC Calendar API"
        assert body["data"]["cache"]["totalEvents"] == 2
        assert body["data"]["cache"]["cacheDurationHours"] == 1

    def test_health_check_unhealthy(self, client, mock_cache):
        """Test 503 when cache metadata cannot be read."""
        mock_cache.get_cache_info.side_effect = RuntimeError("lock poisoned")

        response = client.get("/api/v1/health")

        assert response.status_code == 503
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Service unhealthy: lock poisoned"


class TestLifespan:
    """Test cases for application startup and shutdown."""

    def test_startup_initializes_cache_and_starts_scheduler(self, mock_cache):
        """Test that startup loads the cache before starting the scheduler."""
        scheduler = Mock(spec=RefreshScheduler)
        order = []
        mock_cache.initialize.side_effect = lambda: order.append("initialize")
        scheduler.start.side_effect = lambda: order.append("start")

        with TestClient(create_app(mock_cache, scheduler=scheduler)) as client:
            assert client.get("/api/v1/health").status_code == 200
            scheduler.stop.assert_not_called()

        assert order == ["initialize", "start"]
        scheduler.stop.assert_called_once()

    def test_startup_with_real_cache_and_failing_upstream(self):
        """Test that a failing startup load serves an empty never-refreshed cache."""
        fetcher = Mock()
        fetcher.fetch_events.side_effect = ConnectionError("unreachable")
        cache = EventCache(fetcher=fetcher)

        with TestClient(create_app(cache)) as client:
            events = client.get("/api/v1/events").json()
            health = client.get("/api/v1/health").json()

        assert events["success"] is True
        assert events["data"] == []
        assert health["data"]["cache"]["lastRefresh"] == "never"

    def test_startup_with_real_cache(self):
        """Test end-to-end serving of transformed events."""
        fetcher = Mock()
        fetcher.fetch_events.return_value = [
            RawEvent(
                date_display="07 nov.",
                month="nov.",
                weekday="jeu.",
                title="Test Event",
                start_date="2099-11-07T10:00:00",
                end_date="2099-11-07T18:00:00"
            )
        ]
        cache = EventCache(fetcher=fetcher)

        with TestClient(create_app(cache)) as client:
            body = client.get("/api/v1/events/upcoming").json()

        assert body["data"][0]["id"] == "20991107-test-event"
        assert body["data"][0]["dateDisplay"] == "07 nov. nov. (jeu.)"
        assert body["data"][0]["isUpcoming"] is True

    def test_cors_preflight(self, client):
        """Test that cross-origin preflight requests are answered."""
        response = client.options(
            "/api/v1/events",
            headers={
                "Origin": "https://srrc.ch",
                "Access-Control-Request-Method": "GET"
            }
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] in ("*", "https://srrc.ch")
        assert response.headers["access-control-max-age"] == "3600"
