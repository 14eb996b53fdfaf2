"""
Subscriber directory backed by the Supabase `subscribers` table.

The directory is the only owner of subscriber records. Callers get a narrow
query/mutate contract and never cache records beyond one request.
"""

from abc import ABC, abstractmethod
from typing import Any, cast

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from models import Subscriber
from models.types import EmailAddress
from shared.errors import DuplicateSubscriberError, StoreError
from shared.logging import get_logger
from shared.utils import utc_now

logger = get_logger(__name__)

SUBSCRIBERS_TABLE = "subscribers"
LIST_PAGE_SIZE = 1000

# PostgREST: .single() matched no rows
NO_ROWS_CODE = "PGRST116"
# Postgres: unique_violation
UNIQUE_VIOLATION_CODE = "23505"


class SubscriberDirectory(ABC):
    """Contract the rest of the backend relies on."""

    @abstractmethod
    def get(self, email: EmailAddress) -> Subscriber | None:
        """Return the subscriber record, or None if no row exists."""

    def exists(self, email: EmailAddress) -> bool:
        return self.get(email) is not None

    @abstractmethod
    def insert(self, email: EmailAddress) -> Subscriber:
        """Insert a new active subscriber. Raises DuplicateSubscriberError."""

    @abstractmethod
    def set_active(self, email: EmailAddress, active: bool) -> None:
        """Flip the is_active flag. Records are never hard-deleted."""

    @abstractmethod
    def list_active(self) -> list[EmailAddress]:
        """All active subscriber emails in subscription order."""

    @abstractmethod
    def count_active(self) -> int:
        """Number of active subscribers."""

    @abstractmethod
    def ping(self) -> list[dict[str, Any]]:
        """Cheap round trip to verify the store is reachable."""


class SupabaseSubscriberDirectory(SubscriberDirectory):
    """SubscriberDirectory over a Supabase (PostgREST) client."""

    def __init__(
        self,
        client: Client,
        table: str = SUBSCRIBERS_TABLE,
        page_size: int = LIST_PAGE_SIZE,
    ):
        self.client = client
        self.table = table
        self.page_size = page_size

    def _execute(self, query: Any, failure_message: str) -> Any:
        """Run a query builder, mapping store failures to StoreError.

        APIError is re-raised untouched so callers can inspect its code.
        """
        try:
            return query.execute()
        except APIError:
            raise
        except httpx.HTTPError as e:
            logger.error("%s: %s", failure_message, e)
            raise StoreError(failure_message) from e

    def get(self, email: EmailAddress) -> Subscriber | None:
        query = (
            self.client.table(self.table)
            .select("email, subscribed_at, is_active, updated_at")
            .eq("email", email)
            .single()
        )
        try:
            response = self._execute(query, "Database error during email check")
        except APIError as e:
            if e.code == NO_ROWS_CODE:
                return None
            logger.error("Error checking existing subscriber %s: %s", email, e.message)
            raise StoreError("Database error during email check", code=e.code) from e

        if not response.data:
            return None

        return Subscriber.model_validate(response.data)

    def insert(self, email: EmailAddress) -> Subscriber:
        record = {
            "email": email,
            "subscribed_at": utc_now().isoformat(),
            "is_active": True,
        }

        query = self.client.table(self.table).insert(record)
        try:
            response = self._execute(query, "Database error during insertion")
        except APIError as e:
            if e.code == UNIQUE_VIOLATION_CODE:
                raise DuplicateSubscriberError(email) from e
            logger.error("Supabase error inserting %s: %s", email, e.message)
            raise StoreError("Database error during insertion", code=e.code) from e

        rows = cast(list[dict[str, Any]], response.data or [])
        if not rows:
            raise StoreError("Database error during insertion: no row returned")

        return Subscriber.model_validate(rows[0])

    def set_active(self, email: EmailAddress, active: bool) -> None:
        query = (
            self.client.table(self.table)
            .update({"is_active": active, "updated_at": utc_now().isoformat()})
            .eq("email", email)
        )
        try:
            self._execute(query, "Database error")
        except APIError as e:
            logger.error("Supabase error updating %s: %s", email, e.message)
            raise StoreError("Database error", code=e.code) from e

    def list_active(self) -> list[EmailAddress]:
        emails: list[EmailAddress] = []
        start = 0

        # PostgREST caps each response at its max-rows setting
        while True:
            query = (
                self.client.table(self.table)
                .select("email")
                .eq("is_active", True)
                .order("subscribed_at")
                .range(start, start + self.page_size - 1)
            )
            try:
                response = self._execute(query, "Database error while listing subscribers")
            except APIError as e:
                logger.error("Supabase error listing active subscribers: %s", e.message)
                raise StoreError(
                    "Database error while listing subscribers", code=e.code
                ) from e

            rows = cast(list[dict[str, Any]], response.data or [])
            emails.extend(EmailAddress(row["email"]) for row in rows)

            if len(rows) < self.page_size:
                return emails
            start += self.page_size

    def count_active(self) -> int:
        query = (
            self.client.table(self.table)
            .select("email", count="exact", head=True)
            .eq("is_active", True)
        )
        try:
            response = self._execute(query, "Database error while counting subscribers")
        except APIError as e:
            logger.error("Supabase error counting subscribers: %s", e.message)
            raise StoreError(
                "Database error while counting subscribers", code=e.code
            ) from e

        if response.count is None:
            raise StoreError("Database error while counting subscribers: no count returned")
        return cast(int, response.count)

    def ping(self) -> list[dict[str, Any]]:
        query = self.client.table(self.table).select("email", count="exact").limit(1)
        try:
            response = self._execute(query, "Database connection failed")
        except APIError as e:
            logger.error("Database test error: %s", e.message)
            raise StoreError(e.message or "Database connection failed", code=e.code) from e

        return [{"count": response.count}]
