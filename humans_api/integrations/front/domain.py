"""Domain models for Front API payloads.

Only the fields the sync pipeline reads are kept. Parsing is strict about
ids (a conversation or message without one is a malformed payload) and
lenient about everything optional.
"""

from dataclasses import dataclass, field
from typing import Any

from humans_api.core.exceptions import FrontAPIError


@dataclass(frozen=True)
class FrontContact:
    """A handle plus optional display name (conversation recipient or author)."""

    handle: str
    name: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any] | None) -> "FrontContact | None":
        if not data:
            return None
        return cls(handle=str(data.get("handle") or ""), name=data.get("name") or None)


@dataclass(frozen=True)
class FrontRecipient:
    """A message recipient with its role (``from``, ``to``, ``cc``, ``bcc``)."""

    handle: str
    role: str


@dataclass(frozen=True)
class FrontConversation:
    """One conversation from ``GET /conversations``."""

    id: str
    subject: str
    recipient: FrontContact | None = None
    messages_url: str | None = None

    @property
    def contact_handle(self) -> str:
        return self.recipient.handle if self.recipient else ""

    @property
    def contact_name(self) -> str:
        if self.recipient and self.recipient.name:
            return self.recipient.name
        return self.contact_handle

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FrontConversation":
        conversation_id = data.get("id")
        if not conversation_id:
            raise FrontAPIError("Front API returned a conversation without an id")
        links = data.get("_links") or {}
        related = links.get("related") or {}
        return cls(
            id=str(conversation_id),
            subject=data.get("subject") or "",
            recipient=FrontContact.from_api(data.get("recipient")),
            messages_url=related.get("messages"),
        )


@dataclass(frozen=True)
class FrontMessage:
    """One message from ``GET /conversations/{id}/messages``."""

    id: str
    is_inbound: bool
    is_draft: bool
    created_at: float
    author: FrontContact | None = None
    text: str = ""
    blurb: str = ""
    recipients: tuple[FrontRecipient, ...] = ()

    @property
    def body(self) -> str | None:
        """Plain-text body, falling back to the short blurb."""
        return self.text or self.blurb or None

    @property
    def author_label(self) -> str:
        if self.author and self.author.name:
            return self.author.name
        if self.author and self.author.handle:
            return self.author.handle
        return "Unknown"

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "FrontMessage":
        message_id = data.get("id")
        if not message_id:
            raise FrontAPIError("Front API returned a message without an id")
        author = FrontContact.from_api(data.get("author"))
        recipients = tuple(
            FrontRecipient(handle=str(r.get("handle") or ""), role=str(r.get("role") or ""))
            for r in data.get("recipients") or []
        )
        return cls(
            id=str(message_id),
            is_inbound=bool(data.get("is_inbound")),
            is_draft=bool(data.get("is_draft")),
            created_at=float(data.get("created_at") or 0),
            author=author,
            text=data.get("text") or "",
            blurb=data.get("blurb") or "",
            recipients=recipients,
        )


@dataclass
class FrontPage:
    """A page of results with the cursor for the next page."""

    results: list[Any] = field(default_factory=list)
    next_url: str | None = None
