"""Front API client for conversations and messages."""

import logging
from typing import Any

import httpx

from humans_api.core.config import settings
from humans_api.core.exceptions import FrontAPIError
from humans_api.integrations.front.domain import FrontConversation, FrontMessage, FrontPage

logger = logging.getLogger(__name__)


class FrontClient:
    """Paginated read-only client for the Front API.

    Every call is a single blocking round-trip with a per-request timeout.
    Any failure (transport error, timeout, non-2xx, unreadable JSON) is
    raised as ``FrontAPIError``; callers decide whether it is fatal.
    """

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Front client.

        Args:
            token: Front API bearer token.
            base_url: API root, defaults to ``FRONT_API_BASE_URL``.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = (base_url or settings.FRONT_API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.FRONT_REQUEST_TIMEOUT_SECONDS
        self.headers: dict[str, str] = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        self._transport = transport

    def conversations_url(self, limit: int) -> str:
        """URL of the first page of conversations."""
        return f"{self.base_url}/conversations?limit={limit}"

    def messages_url(self, conversation_id: str) -> str:
        """URL of a conversation's messages."""
        return f"{self.base_url}/conversations/{conversation_id}/messages"

    async def _get(self, url: str) -> dict[str, Any]:
        """GET a Front URL and return the decoded JSON object.

        Raises:
            FrontAPIError: On any transport or HTTP failure.
        """
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(url, headers=self.headers, timeout=self.timeout)
        except httpx.TimeoutException as e:
            logger.error("Front API timeout: url=%s", url)
            raise FrontAPIError(f"Front API timeout after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.error("Front connection error: %s", str(e))
            raise FrontAPIError(f"Failed to connect to Front API: {e}") from e

        if not response.is_success:
            text = response.text
            logger.error(
                "Front API error: status=%s url=%s",
                response.status_code,
                url,
            )
            raise FrontAPIError(
                f"Front API {response.status_code}: {text}",
                status_code=response.status_code,
                body=text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise FrontAPIError("Front API returned invalid JSON") from e
        if not isinstance(payload, dict):
            raise FrontAPIError("Front API returned an unexpected payload")
        return payload

    @staticmethod
    def _page(payload: dict[str, Any]) -> tuple[list[dict[str, Any]], str | None]:
        results = payload.get("_results")
        if not isinstance(results, list):
            raise FrontAPIError("Front API response is missing _results")
        pagination = payload.get("_pagination") or {}
        return results, pagination.get("next") or None

    async def list_conversations(
        self, limit: int, cursor: str | None = None
    ) -> FrontPage:
        """Fetch one page of conversations.

        Args:
            limit: Page size used when no cursor is given.
            cursor: Fully-qualified ``_pagination.next`` URL from a previous page.

        Returns:
            Page of ``FrontConversation`` objects and the next cursor.
        """
        url = cursor or self.conversations_url(limit)
        results, next_url = self._page(await self._get(url))
        conversations = [FrontConversation.from_api(item) for item in results]
        logger.info(
            "Fetched Front conversations",
            extra={"count": len(conversations), "has_next": next_url is not None},
        )
        return FrontPage(results=conversations, next_url=next_url)

    async def list_messages(self, conversation_id: str) -> list[FrontMessage]:
        """Fetch every message of one conversation, following pagination."""
        messages: list[FrontMessage] = []
        url: str | None = self.messages_url(conversation_id)
        seen: set[str] = set()
        while url and url not in seen:
            seen.add(url)
            results, url = self._page(await self._get(url))
            messages.extend(FrontMessage.from_api(item) for item in results)
        return messages
