"""Supabase-backed contact stores used by the contact resolver."""

import logging
from typing import Any, cast

from supabase import Client

from humans_api.db.supabase import fetch_all_rows
from humans_api.services.phone import phone_suffix

logger = logging.getLogger(__name__)

HUMAN_OWNER = "human"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards in an ``ilike`` pattern.

    PostgREST still reads ``*`` as ``%``, so matched rows are re-checked
    with ``_first_exact``.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _quote_filter_value(value: str) -> str:
    """Quote a value for use inside a PostgREST ``or`` filter string."""
    escaped = _escape_like(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _first_exact(rows: list[dict[str, Any]], column: str, email: str, id_column: str) -> str | None:
    for row in rows:
        value = row.get(column)
        if value and str(value).lower() == email:
            return cast(str, row[id_column])
    return None


class CrmContactStore:
    """Primary store: the CRM's email/phone directory, accounts and colleagues."""

    def __init__(self, client: Client) -> None:
        self._db = client

    async def find_human_by_email(self, email: str) -> str | None:
        """Find the human owning an email address (case-insensitive exact match)."""
        result = (
            self._db.table("emails")
            .select("owner_id, email")
            .eq("owner_type", HUMAN_OWNER)
            .ilike("email", _escape_like(email))
            .execute()
        )
        return _first_exact(result.data or [], "email", email.lower(), "owner_id")

    async def find_human_by_phone(self, phone: str) -> str | None:
        """Find the human owning a phone number by last-nine-digit suffix."""
        suffix = phone_suffix(phone)
        if suffix is None:
            return None
        rows = fetch_all_rows(
            self._db, "phones", "id, owner_id, phone_number", eq={"owner_type": HUMAN_OWNER}
        )
        for row in rows:
            stored = row.get("phone_number")
            if stored and phone_suffix(stored) == suffix:
                return cast(str, row["owner_id"])
        return None

    async def find_account_for_human(self, human_id: str) -> str | None:
        """Return the first account linked to a human, if any."""
        result = (
            self._db.table("account_humans")
            .select("account_id")
            .eq("human_id", human_id)
            .limit(1)
            .execute()
        )
        rows = result.data or []
        return cast(str, rows[0]["account_id"]) if rows else None

    async def find_colleague_by_email(self, email: str) -> str | None:
        """Find a colleague by email (case-insensitive exact match)."""
        lowered = email.strip().lower()
        if not lowered:
            return None
        result = (
            self._db.table("colleagues")
            .select("id, email")
            .ilike("email", _escape_like(lowered))
            .execute()
        )
        return _first_exact(result.data or [], "email", lowered, "id")


class WebsiteContactStore:
    """Secondary store: website announcement sign-ups and booking requests."""

    def __init__(self, client: Client) -> None:
        self._db = client

    async def find_lead_signup_by_email(self, email: str) -> str | None:
        """Find an announcement sign-up by email (case-insensitive exact match)."""
        lowered = email.lower()
        result = (
            self._db.table("announcement_signups")
            .select("id, email")
            .ilike("email", _escape_like(lowered))
            .execute()
        )
        return _first_exact(result.data or [], "email", lowered, "id")

    async def find_booking_by_email(self, email: str) -> str | None:
        """Find a booking whose client or notification email matches."""
        lowered = email.lower()
        quoted = _quote_filter_value(lowered)
        result = (
            self._db.table("bookings")
            .select("id, client_email, email_for_notifications")
            .or_(f"client_email.ilike.{quoted},email_for_notifications.ilike.{quoted}")
            .execute()
        )
        for row in result.data or []:
            stored = (row.get("client_email"), row.get("email_for_notifications"))
            if any(value and str(value).lower() == lowered for value in stored):
                return cast(str, row["id"])
        return None

    async def find_booking_by_phone(self, phone: str) -> str | None:
        """Find a booking whose phone or alternate WhatsApp number matches."""
        suffix = phone_suffix(phone)
        if suffix is None:
            return None
        rows = fetch_all_rows(
            self._db, "bookings", "id, phone_number, alt_whatsapp_phone_number"
        )
        for row in rows:
            for column in ("phone_number", "alt_whatsapp_phone_number"):
                stored = row.get(column)
                if stored and phone_suffix(stored) == suffix:
                    return cast(str, row["id"])
        return None
