"""Resolve a conversation's contact handle to a CRM identity.

Two stores are searched in a fixed order. The CRM's own email and phone
directories come first, so a known human always beats an anonymous website
record. The website database (announcement sign-ups, then booking requests)
is the fallback. Email lookups are exact (case-insensitive); phone lookups
compare the last nine digits.
"""

import logging
import re
from dataclasses import dataclass
from typing import Protocol

from humans_api.models.activity import ActivityType

logger = logging.getLogger(__name__)

_HAS_DIGIT = re.compile(r"\d")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of contact resolution.

    At most one of ``human_id``, ``route_signup_id`` and
    ``website_booking_request_id`` is set. ``account_id`` rides along with a
    human match and is not an identity reference of its own.
    """

    human_id: str | None = None
    account_id: str | None = None
    route_signup_id: str | None = None
    website_booking_request_id: str | None = None
    matched_entity: str | None = None

    @property
    def is_unmatched(self) -> bool:
        return (
            self.human_id is None
            and self.route_signup_id is None
            and self.website_booking_request_id is None
        )

    @classmethod
    def for_human(cls, human_id: str, account_id: str | None = None) -> "MatchResult":
        return cls(human_id=human_id, account_id=account_id, matched_entity=f"human:{human_id}")

    @classmethod
    def for_signup(cls, signup_id: str) -> "MatchResult":
        return cls(route_signup_id=signup_id, matched_entity=f"signup:{signup_id}")

    @classmethod
    def for_booking(cls, booking_id: str) -> "MatchResult":
        return cls(website_booking_request_id=booking_id, matched_entity=f"booking:{booking_id}")


UNMATCHED = MatchResult()


class PrimaryContactStore(Protocol):
    """CRM-side lookups: human email/phone directory and related links."""

    async def find_human_by_email(self, email: str) -> str | None: ...

    async def find_human_by_phone(self, phone: str) -> str | None: ...

    async def find_account_for_human(self, human_id: str) -> str | None: ...

    async def find_colleague_by_email(self, email: str) -> str | None: ...


class SecondaryContactStore(Protocol):
    """Website-side lookups: announcement sign-ups and booking requests."""

    async def find_lead_signup_by_email(self, email: str) -> str | None: ...

    async def find_booking_by_email(self, email: str) -> str | None: ...

    async def find_booking_by_phone(self, phone: str) -> str | None: ...


class ContactResolver:
    """Searches both stores for the identity behind a contact handle."""

    def __init__(self, primary: PrimaryContactStore, secondary: SecondaryContactStore) -> None:
        self.primary = primary
        self.secondary = secondary

    async def match_contact(self, handle: str, activity_type: ActivityType) -> MatchResult:
        """Resolve a handle using the strategy for its activity type.

        Args:
            handle: Contact handle (email, phone-like string, or username).
            activity_type: Classification of the conversation.

        Returns:
            The first match found, or an unmatched result.
        """
        if activity_type == ActivityType.EMAIL:
            result = await self.match_by_email(handle)
        elif activity_type == ActivityType.WHATSAPP_MESSAGE:
            result = await self.match_by_phone(handle)
        elif "@" in handle:
            result = await self.match_by_email(handle)
        elif _HAS_DIGIT.search(handle):
            result = await self.match_by_phone(handle)
        else:
            # Bare social usernames carry nothing we can look up
            result = UNMATCHED

        logger.debug(
            "Contact resolved",
            extra={
                "handle": handle,
                "activity_type": activity_type.value,
                "matched_entity": result.matched_entity,
            },
        )
        return result

    async def match_by_email(self, handle: str) -> MatchResult:
        email = handle.strip().lower()
        if not email:
            return UNMATCHED

        human_id = await self.primary.find_human_by_email(email)
        if human_id:
            account_id = await self.primary.find_account_for_human(human_id)
            return MatchResult.for_human(human_id, account_id)

        signup_id = await self.secondary.find_lead_signup_by_email(email)
        if signup_id:
            return MatchResult.for_signup(signup_id)

        booking_id = await self.secondary.find_booking_by_email(email)
        if booking_id:
            return MatchResult.for_booking(booking_id)

        return UNMATCHED

    async def match_by_phone(self, handle: str) -> MatchResult:
        human_id = await self.primary.find_human_by_phone(handle)
        if human_id:
            account_id = await self.primary.find_account_for_human(human_id)
            return MatchResult.for_human(human_id, account_id)

        booking_id = await self.secondary.find_booking_by_phone(handle)
        if booking_id:
            return MatchResult.for_booking(booking_id)

        return UNMATCHED
