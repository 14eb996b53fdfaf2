"""
Integration tests for the HTTP API.

Runs the FastAPI app against in-memory collaborators: no Supabase, Resend or
GitHub calls are made.
"""

import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from api import create_app
from api.services import build_services
from shared.errors import BroadcastInProgressError
from tests.fixtures.event_factory import create_test_events
from tests.fixtures.fakes import (
    FakeDispatcher,
    FakeEventSource,
    InMemorySubscriberDirectory,
    create_test_settings,
)


class ApiTestCase(unittest.TestCase):
    """Builds an app with fakes; subclasses override settings as needed."""

    settings_overrides: dict = {}

    def setUp(self):
        self.directory = InMemorySubscriberDirectory()
        self.event_source = FakeEventSource(create_test_events(6))
        self.dispatcher = FakeDispatcher()
        self.services = build_services(
            create_test_settings(**self.settings_overrides),
            directory=self.directory,
            event_source=self.event_source,
            dispatcher=self.dispatcher,
            sleep=lambda _: None,
        )
        self.client = TestClient(create_app(self.services))


class TestSignupFlow(ApiTestCase):
    """End-to-end signup, duplicate, unsubscribe and stats."""

    def test_signup_then_duplicate(self):
        response = self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Successfully subscribed!")
        self.assertEqual(body["subscriber"]["email"], "a@b.com")
        self.assertTrue(body["subscriber"]["is_active"])
        self.assertEqual(self.directory.list_active(), ["a@b.com"])

        duplicate = self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(duplicate.status_code, 400)
        self.assertEqual(duplicate.json(), {"message": "Email already subscribed"})
        self.assertEqual(self.directory.count_active(), 1)

    def test_duplicate_after_normalization(self):
        self.client.post("/api/signup", json={"email": "a@b.com"})

        response = self.client.post("/api/signup", json={"email": "  A@B.com "})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get("/api/stats").json()["totalActiveSubscribers"], 1)

    def test_unsubscribe_then_stats(self):
        self.client.post("/api/signup", json={"email": "a@b.com"})

        response = self.client.post("/api/unsubscribe", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Successfully unsubscribed"})
        stats = self.client.get("/api/stats").json()
        self.assertEqual(stats["totalActiveSubscribers"], 0)
        self.assertIn("timestamp", stats)

    def test_signup_after_unsubscribe_is_duplicate(self):
        self.client.post("/api/signup", json={"email": "a@b.com"})
        self.client.post("/api/unsubscribe", json={"email": "a@b.com"})

        response = self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Email already subscribed"})
        self.assertEqual(self.directory.count_active(), 0)

    def test_invalid_email(self):
        response = self.client.post("/api/signup", json={"email": "not-an-email"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Valid email is required"})

    def test_missing_body(self):
        response = self.client.post("/api/signup")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Valid email is required"})

    def test_malformed_json(self):
        response = self.client.post(
            "/api/signup",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        self.assertEqual(response.status_code, 400)

    def test_store_failure_on_signup(self):
        self.directory.fail = True

        response = self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 500)

    def test_unsubscribe_missing_email(self):
        response = self.client.post("/api/unsubscribe", json={})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"message": "Email is required"})

    def test_unsubscribe_store_failure(self):
        self.directory.fail = True

        response = self.client.post("/api/unsubscribe", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Database error"})

    def test_no_welcome_email_when_disabled(self):
        self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(self.dispatcher.attempted, [])


class TestWelcomeEmail(ApiTestCase):
    settings_overrides = {"send_welcome_email": True}

    def test_welcome_digest_sent_after_signup(self):
        response = self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.dispatcher.attempted, ["a@b.com"])

    def test_welcome_failure_does_not_fail_signup(self):
        self.dispatcher.failing = {"a@b.com"}

        response = self.client.post("/api/signup", json={"email": "a@b.com"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.directory.count_active(), 1)


class TestSendUpdates(ApiTestCase):
    """Tests for POST /api/send-updates."""

    def test_no_subscribers(self):
        response = self.client.post("/api/send-updates")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"message": "No active subscribers found", "sent": 0, "failed": 0, "total": 0},
        )
        self.assertEqual(self.event_source.calls, 0)

    def test_counts_sent_and_failed(self):
        for email in ("a@example.com", "b@example.com", "c@example.com"):
            self.directory.insert(email)
        self.dispatcher.failing = {"b@example.com"}

        response = self.client.post("/api/send-updates")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual((body["sent"], body["failed"], body["total"]), (2, 1, 3))
        self.assertEqual(body["message"], "Updates sent to 2 subscribers")

    def test_store_failure(self):
        self.directory.fail = True

        response = self.client.post("/api/send-updates")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Failed to send updates"})

    def test_unexpected_failure_returns_json(self):
        """A formatting error aborts the cycle with the usual JSON body."""
        self.directory.insert("a@example.com")

        with patch(
            "notifications.broadcast.format_digest", side_effect=ValueError("bad event")
        ):
            response = self.client.post("/api/send-updates")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"message": "Failed to send updates"})
        self.assertEqual(self.dispatcher.attempted, [])

    def test_cycle_in_flight(self):
        with patch.object(
            self.services.runner, "run_cycle", side_effect=BroadcastInProgressError()
        ):
            response = self.client.post("/api/send-updates")

        self.assertEqual(response.status_code, 409)


class TestDiagnostics(ApiTestCase):
    """Tests for /, /api/test-db, /api/test-github and 404 handling."""

    def test_root(self):
        body = self.client.get("/").json()

        self.assertEqual(body["message"], "GitHub Updates API is running!")
        self.assertEqual(body["environment"], "development")
        self.assertIn("timestamp", body)

    def test_db_ok(self):
        response = self.client.get("/api/test-db")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Database connection successful")

    def test_db_failure(self):
        self.directory.fail = True

        response = self.client.get("/api/test-db")

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "Database connection failed")
        self.assertIn("details", response.json())

    def test_github(self):
        body = self.client.get("/api/test-github").json()

        self.assertEqual(body["eventsCount"], 6)
        self.assertEqual(len(body["sampleEvents"]), 3)
        self.assertEqual(body["sampleEvents"][0]["type"], "PushEvent")

    def test_stats_failure(self):
        self.directory.fail = True

        response = self.client.get("/api/stats")

        self.assertEqual(response.status_code, 500)
        self.assertIn("message", response.json())

    def test_unknown_route(self):
        response = self.client.get("/api/nope")

        self.assertEqual(response.status_code, 404)
        body = response.json()
        self.assertEqual(body["message"], "Route not found")
        self.assertIn("POST /api/signup", body["availableRoutes"])

    def test_cors_allows_configured_origin(self):
        response = self.client.get("/", headers={"Origin": "http://localhost:3000"})

        self.assertEqual(
            response.headers.get("access-control-allow-origin"), "http://localhost:3000"
        )

    def test_cors_rejects_unknown_origin(self):
        response = self.client.get("/", headers={"Origin": "https://evil.example.com"})

        self.assertNotIn("access-control-allow-origin", response.headers)
