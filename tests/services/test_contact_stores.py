"""Tests for the Supabase-backed contact stores."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from humans_api.services.contact_stores import (
    CrmContactStore,
    WebsiteContactStore,
    _escape_like,
)


def _client(query: MagicMock) -> MagicMock:
    client = MagicMock()
    client.table.return_value = query
    return client


def test_escape_like_neutralizes_wildcards() -> None:
    assert _escape_like("a_b%c@example.com") == "a\\_b\\%c@example.com"


class TestCrmContactStore:
    @pytest.mark.asyncio
    async def test_find_human_by_email_exact_case_insensitive(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain([{"owner_id": "h1", "email": "Jane@Example.com"}])
        store = CrmContactStore(_client(query))

        assert await store.find_human_by_email("jane@example.com") == "h1"
        query.eq.assert_any_call("owner_type", "human")
        query.ilike.assert_called_once_with("email", "jane@example.com")

    @pytest.mark.asyncio
    async def test_find_human_by_email_rejects_near_miss(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain([{"owner_id": "h1", "email": "jane@example.co"}])
        store = CrmContactStore(_client(query))

        assert await store.find_human_by_email("jane@example.com") is None

    @pytest.mark.asyncio
    async def test_find_human_by_phone_compares_suffix(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain(
            [
                {"id": "p1", "owner_id": "h1", "phone_number": "+44 20 7946 0000"},
                {"id": "p2", "owner_id": "h2", "phone_number": "12025550123"},
            ]
        )
        store = CrmContactStore(_client(query))

        assert await store.find_human_by_phone("+1-202-555-0123") == "h2"

    @pytest.mark.asyncio
    async def test_find_human_by_phone_short_number_skips_query(self) -> None:
        client = MagicMock()
        store = CrmContactStore(client)

        assert await store.find_human_by_phone("555-0123") is None
        client.table.assert_not_called()

    @pytest.mark.asyncio
    async def test_find_account_for_human(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        store = CrmContactStore(_client(supabase_chain([{"account_id": "acc1"}])))
        assert await store.find_account_for_human("h1") == "acc1"

        store = CrmContactStore(_client(supabase_chain([])))
        assert await store.find_account_for_human("h1") is None

    @pytest.mark.asyncio
    async def test_find_colleague_by_email(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain([{"id": "c1", "email": "ops@humans.travel"}])
        store = CrmContactStore(_client(query))

        assert await store.find_colleague_by_email(" OPS@humans.travel ") == "c1"
        assert await store.find_colleague_by_email("") is None


class TestWebsiteContactStore:
    @pytest.mark.asyncio
    async def test_find_lead_signup_by_email(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain([{"id": "s1", "email": "Lead@Example.com"}])
        client = _client(query)
        store = WebsiteContactStore(client)

        assert await store.find_lead_signup_by_email("lead@example.com") == "s1"
        client.table.assert_called_with("announcement_signups")

    @pytest.mark.asyncio
    async def test_find_booking_by_email_checks_both_columns(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain(
            [{"id": "b1", "client_email": None, "email_for_notifications": "guest@example.com"}]
        )
        store = WebsiteContactStore(_client(query))

        assert await store.find_booking_by_email("Guest@Example.com") == "b1"
        filter_string = query.or_.call_args.args[0]
        assert 'client_email.ilike."guest@example.com"' in filter_string
        assert 'email_for_notifications.ilike."guest@example.com"' in filter_string

    @pytest.mark.asyncio
    async def test_find_lead_signup_star_is_not_a_wildcard(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        # PostgREST reads "*" as "%", so the query also returns near misses
        query = supabase_chain(
            [
                {"id": "s0", "email": "jane@example.com"},
                {"id": "s1", "email": "j*ne@example.com"},
            ]
        )
        store = WebsiteContactStore(_client(query))

        assert await store.find_lead_signup_by_email("j*ne@example.com") == "s1"

    @pytest.mark.asyncio
    async def test_find_booking_star_is_not_a_wildcard(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain(
            [{"id": "b0", "client_email": "jane@example.com", "email_for_notifications": None}]
        )
        store = WebsiteContactStore(_client(query))

        assert await store.find_booking_by_email("j*ne@example.com") is None

    @pytest.mark.asyncio
    async def test_find_booking_by_email_no_rows(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        store = WebsiteContactStore(_client(supabase_chain([])))
        assert await store.find_booking_by_email("guest@example.com") is None

    @pytest.mark.asyncio
    async def test_find_booking_by_phone_checks_alternate_number(
        self, supabase_chain: Callable[..., MagicMock]
    ) -> None:
        query = supabase_chain(
            [
                {"id": "b1", "phone_number": None, "alt_whatsapp_phone_number": None},
                {
                    "id": "b2",
                    "phone_number": "+33 1 00 00 00 00",
                    "alt_whatsapp_phone_number": "+356 7954 9994",
                },
            ]
        )
        store = WebsiteContactStore(_client(query))

        assert await store.find_booking_by_phone("0035679549994") == "b2"
