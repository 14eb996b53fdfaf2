"""
Unit tests for notifications/digest_formatter.py

Tests event line rendering, the 5-event cap and unknown kinds.
"""

import unittest
from datetime import datetime, timedelta, timezone

from models import EventKind
from notifications.digest_formatter import (
    DIGEST_BANNER,
    EMPTY_DIGEST_LINE,
    FALLBACK_PHRASE,
    MAX_DIGEST_EVENTS,
    describe_event,
    digest_lines,
    format_digest,
)
from tests.fixtures.event_factory import create_test_event, create_test_events


class TestFormatDigest(unittest.TestCase):
    """Tests for format_digest() function."""

    def test_starts_with_banner(self):
        digest = format_digest(create_test_events(2))

        self.assertEqual(digest.split("\n")[0], DIGEST_BANNER)

    def test_one_line_per_event_up_to_five(self):
        """Exactly min(5, len(events)) lines follow the banner."""
        for count in (1, 3, 5, 6, 10):
            with self.subTest(count=count):
                lines = format_digest(create_test_events(count)).split("\n")

                self.assertEqual(len(lines) - 1, min(MAX_DIGEST_EVENTS, count))

    def test_keeps_source_order(self):
        """First five events used as delivered, no re-sorting."""
        oldest_first = list(reversed(create_test_events(7)))

        lines = format_digest(oldest_first).split("\n")[1:]

        self.assertIn("user6", lines[0])
        self.assertIn("user2", lines[4])

    def test_unknown_kind_uses_fallback_phrase(self):
        event = create_test_event(kind="GollumEvent", handle="wiki", repo="org/docs")

        digest = format_digest([event])

        self.assertIn(f"wiki {FALLBACK_PHRASE} org/docs", digest)

    def test_empty_events(self):
        digest = format_digest([])

        self.assertEqual(digest, f"{DIGEST_BANNER}\n{EMPTY_DIGEST_LINE}")

    def test_deterministic(self):
        events = create_test_events(4)

        self.assertEqual(format_digest(events), format_digest(events))


class TestDescribeEvent(unittest.TestCase):
    """Tests for describe_event() function."""

    def test_known_phrases(self):
        expected = {
            EventKind.PUSH: "pushed to",
            EventKind.CREATE: "created",
            EventKind.WATCH: "starred",
            EventKind.FORK: "forked",
            EventKind.ISSUES: "opened issue in",
            EventKind.PULL_REQUEST: "created pull request in",
        }
        for kind, phrase in expected.items():
            with self.subTest(kind=kind):
                event = create_test_event(kind=kind.value, handle="dev", repo="org/app")

                self.assertIn(f"dev {phrase} org/app", describe_event(event))

    def test_time_rendered_in_utc(self):
        plus_two = timezone(timedelta(hours=2))
        event = create_test_event(occurred_at=datetime(2026, 1, 24, 14, 5, tzinfo=plus_two))

        self.assertTrue(describe_event(event).endswith("at 2026-01-24 12:05 UTC"))

    def test_bullet_prefix(self):
        self.assertTrue(describe_event(create_test_event()).startswith("• "))


class TestDigestLines(unittest.TestCase):
    def test_skips_blank_lines(self):
        self.assertEqual(digest_lines("a\n\n  \nb\n"), ["a", "b"])
