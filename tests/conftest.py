"""Shared test fixtures.

Settings are read when ``humans_api.core.config`` is first imported, so the
environment is prepared here before any test module imports the app.
"""

import os
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

os.environ.setdefault("SUPABASE_URL", "https://crm.test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ.setdefault("WEBSITE_SUPABASE_URL", "https://website.test.supabase.co")
os.environ.setdefault("WEBSITE_SUPABASE_SERVICE_ROLE_KEY", "test-website-key")
os.environ.setdefault("FRONT_API_TOKEN", "test-front-token")


def _chain(data: list[dict[str, Any]] | dict[str, Any] | None) -> MagicMock:
    """Make a fluent Supabase query mock whose ``.execute()`` returns ``data``."""
    query = MagicMock()
    for method in (
        "select",
        "eq",
        "ilike",
        "or_",
        "order",
        "limit",
        "range",
        "insert",
        "update",
        "upsert",
        "delete",
        "maybe_single",
        "is_",
    ):
        getattr(query, method).return_value = query
    query.not_ = query
    query.execute.return_value = MagicMock(data=data)
    return query


@pytest.fixture
def supabase_chain() -> Callable[..., MagicMock]:
    """Factory for fluent Supabase query mocks."""
    return _chain


class FakePrimaryStore:
    """In-memory CRM directory keyed the way the Supabase store queries it."""

    def __init__(self) -> None:
        self.human_emails: dict[str, str] = {}
        self.human_phones: list[tuple[str, str]] = []
        self.accounts: dict[str, str] = {}
        self.colleagues: dict[str, str] = {}

    async def find_human_by_email(self, email: str) -> str | None:
        return self.human_emails.get(email.lower())

    async def find_human_by_phone(self, phone: str) -> str | None:
        from humans_api.services.phone import phones_match

        for stored, human_id in self.human_phones:
            if phones_match(stored, phone):
                return human_id
        return None

    async def find_account_for_human(self, human_id: str) -> str | None:
        return self.accounts.get(human_id)

    async def find_colleague_by_email(self, email: str) -> str | None:
        return self.colleagues.get(email.strip().lower())


class FakeSecondaryStore:
    """In-memory website sign-ups and bookings."""

    def __init__(self) -> None:
        self.signups: dict[str, str] = {}
        self.booking_emails: dict[str, str] = {}
        self.booking_phones: list[tuple[str, str]] = []

    async def find_lead_signup_by_email(self, email: str) -> str | None:
        return self.signups.get(email.lower())

    async def find_booking_by_email(self, email: str) -> str | None:
        return self.booking_emails.get(email.lower())

    async def find_booking_by_phone(self, phone: str) -> str | None:
        from humans_api.services.phone import phones_match

        for stored, booking_id in self.booking_phones:
            if phones_match(stored, phone):
                return booking_id
        return None


@pytest.fixture
def primary_store() -> FakePrimaryStore:
    return FakePrimaryStore()


@pytest.fixture
def secondary_store() -> FakeSecondaryStore:
    return FakeSecondaryStore()
