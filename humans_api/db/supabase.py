"""Supabase client module for database operations.

The CRM keeps its own records (humans, emails, phones, activities, sync
runs) in one Supabase project and reads website sign-ups and booking
requests from a second project. Each gets its own singleton.
"""

import logging
from typing import Any, cast

from supabase import Client, create_client

from humans_api.core.config import settings
from humans_api.core.exceptions import DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

# PostgREST caps a single select at this many rows by default
PAGE_SIZE = 1000


class SupabaseClient:
    """Singleton Supabase client for the CRM database."""

    _client: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """Get or create the Supabase client singleton.

        Returns:
            Initialized Supabase client.

        Raises:
            DatabaseError: If client initialization fails.
        """
        if cls._client is None:
            try:
                cls._client = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                logger.exception("Failed to initialize Supabase client")
                raise DatabaseError(f"Failed to initialize database connection: {e}") from e
        return cls._client

    @classmethod
    def reset_client(cls) -> None:
        """Reset the client singleton (useful for testing)."""
        cls._client = None

    @classmethod
    async def get_colleague_by_id(cls, colleague_id: str) -> dict[str, Any]:
        """Fetch a colleague (CRM staff member) by ID.

        Args:
            colleague_id: The colleague's ID, which is also their auth user ID.

        Returns:
            Colleague row.

        Raises:
            NotFoundError: If the colleague does not exist.
            DatabaseError: If the database operation fails.
        """
        try:
            client = cls.get_client()
            response = (
                client.table("colleagues")
                .select("*")
                .eq("id", colleague_id)
                .maybe_single()
                .execute()
            )
            if response is None or response.data is None:
                raise NotFoundError("Colleague", colleague_id)
            return cast(dict[str, Any], response.data)
        except NotFoundError:
            raise
        except Exception as e:
            logger.exception("Error fetching colleague", extra={"colleague_id": colleague_id})
            raise DatabaseError(f"Failed to fetch colleague: {e}") from e


class WebsiteSupabaseClient:
    """Singleton Supabase client for the public website database."""

    _client: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """Get or create the website Supabase client singleton.

        Returns:
            Initialized Supabase client.

        Raises:
            DatabaseError: If client initialization fails.
        """
        if cls._client is None:
            try:
                cls._client = create_client(
                    settings.WEBSITE_SUPABASE_URL,
                    settings.WEBSITE_SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
                )
                logger.info("Website Supabase client initialized successfully")
            except Exception as e:
                logger.exception("Failed to initialize website Supabase client")
                raise DatabaseError(f"Failed to initialize website database connection: {e}") from e
        return cls._client

    @classmethod
    def reset_client(cls) -> None:
        """Reset the client singleton (useful for testing)."""
        cls._client = None


def fetch_all_rows(
    client: Client,
    table: str,
    columns: str,
    eq: dict[str, Any] | None = None,
    not_null: tuple[str, ...] = (),
) -> list[dict[str, Any]]:
    """Select every matching row from a table, paging past the row cap.

    Args:
        client: Supabase client to query.
        table: Table name.
        columns: PostgREST select expression.
        eq: Column equality filters.
        not_null: Columns that must be non-null.

    Returns:
        All matching rows in primary-key order.
    """
    rows: list[dict[str, Any]] = []
    start = 0
    while True:
        query = client.table(table).select(columns)
        for column, value in (eq or {}).items():
            query = query.eq(column, value)
        for column in not_null:
            query = query.not_.is_(column, "null")
        response = query.order("id").range(start, start + PAGE_SIZE - 1).execute()
        batch = cast(list[dict[str, Any]], response.data or [])
        rows.extend(batch)
        if len(batch) < PAGE_SIZE:
            return rows
        start += PAGE_SIZE

