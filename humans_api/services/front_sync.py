"""Front conversation sync.

Imports one page of Front conversations per call into CRM activities:

1. Fetch the conversation page (fatal on failure).
2. Load the ids of every Front message already imported.
3. For each conversation: fetch its messages, classify the contact handle,
   resolve the contact, then import each message that is neither a draft
   nor a duplicate.

A failing conversation is recorded in ``SyncResult.errors`` and skipped.
A failing message insert is recorded the same way and counted in
``failed``; the rest of its conversation is still imported, and the
message is retried on a later run because its id never entered the
idempotency set.
"""

import logging
import uuid
from collections import deque
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from supabase import Client

from humans_api.core.config import settings
from humans_api.core.exceptions import NotFoundError, ValidationError
from humans_api.db.supabase import fetch_all_rows
from humans_api.integrations.front.client import FrontClient
from humans_api.integrations.front.domain import FrontConversation, FrontMessage
from humans_api.models.activity import SUBJECT_MAX_LENGTH, ActivityCreate, ActivityType
from humans_api.services.channel_classifier import ChannelClassifier
from humans_api.services.contact_matching import ContactResolver, MatchResult
from humans_api.services.display_id import ACTIVITY_PREFIX, DisplayIdAllocator
from humans_api.services.sync_runs import SyncRunService, SyncRunStatus

logger = logging.getLogger(__name__)

_SUBJECT_DEFAULTS: dict[ActivityType, str] = {
    ActivityType.EMAIL: "Email conversation",
    ActivityType.WHATSAPP_MESSAGE: "WhatsApp conversation",
    ActivityType.SOCIAL_MESSAGE: "Social conversation",
}

_COLLEAGUE_RECIPIENT_ROLES = ("to", "cc")


class SyncState(str, Enum):
    """Orchestrator states for one page."""

    FETCHING_PAGE = "fetching_page"
    PROCESSING_CONVERSATION = "processing_conversation"
    DONE = "done"


@dataclass
class SyncResult:
    """Summary of one sync page."""

    total: int = 0
    imported: int = 0
    skipped: int = 0
    unmatched: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    next_cursor: str | None = None
    sync_run_id: str | None = None
    linked_to_humans: int = 0
    linked_to_accounts: int = 0
    linked_to_route_signups: int = 0
    linked_to_bookings: int = 0
    linked_to_colleagues: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def clamp_limit(limit: int | None) -> int:
    """Clamp a requested page size to ``[1, FRONT_SYNC_MAX_LIMIT]``."""
    if not limit:
        return settings.FRONT_SYNC_DEFAULT_LIMIT
    return max(1, min(settings.FRONT_SYNC_MAX_LIMIT, limit))


def epoch_to_iso(seconds: float) -> str:
    """Convert epoch seconds to an ISO-8601 UTC instant with millisecond precision."""
    instant = datetime.fromtimestamp(seconds, UTC)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IdempotencyGuard:
    """Front message ids already imported, plus ids imported during this run."""

    def __init__(self, front_ids: Iterable[str] = ()) -> None:
        self._seen: set[str] = set(front_ids)

    @classmethod
    async def load(cls, client: Client) -> "IdempotencyGuard":
        """Snapshot every non-null ``activities.front_id``."""
        rows = fetch_all_rows(client, "activities", "front_id", not_null=("front_id",))
        guard = cls(str(row["front_id"]) for row in rows if row.get("front_id"))
        logger.debug("Idempotency set loaded", extra={"front_ids": len(guard)})
        return guard

    def __contains__(self, front_id: object) -> bool:
        return front_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def should_skip(self, message: FrontMessage) -> bool:
        """Drafts and already-imported messages are skipped."""
        return message.is_draft or message.id in self._seen

    def mark_imported(self, front_id: str) -> None:
        self._seen.add(front_id)


class ActivityWriter:
    """Builds and inserts one activity row per imported Front message."""

    def __init__(
        self,
        client: Client,
        allocator: DisplayIdAllocator,
        created_by_colleague_id: str,
    ) -> None:
        self._db = client
        self._allocator = allocator
        self.created_by_colleague_id = created_by_colleague_id

    @staticmethod
    def build_subject(conversation: FrontConversation, activity_type: ActivityType) -> str:
        subject = conversation.subject or _SUBJECT_DEFAULTS.get(
            activity_type, "Social conversation"
        )
        return subject[:SUBJECT_MAX_LENGTH]

    @staticmethod
    def build_notes(
        conversation: FrontConversation, message: FrontMessage, match: MatchResult
    ) -> str:
        lines: list[str] = []
        if match.is_unmatched:
            lines.append(
                f"[UNMATCHED] Contact: {conversation.contact_name} ({conversation.contact_handle})"
            )
        direction = "Inbound" if message.is_inbound else "Outbound"
        lines.append(f"{direction} from {message.author_label}")
        if message.body:
            lines.append(message.body)
        return "\n".join(lines)

    async def write(
        self,
        conversation: FrontConversation,
        message: FrontMessage,
        activity_type: ActivityType,
        match: MatchResult,
        colleague_id: str | None = None,
        sync_run_id: str | None = None,
    ) -> ActivityCreate:
        """Insert the activity for a message.

        Raises:
            Exception: Whatever the display-id allocator or the insert raises;
                no partial write is attempted.
        """
        display_id = await self._allocator.next_display_id(ACTIVITY_PREFIX)
        now = datetime.now(UTC).isoformat()
        activity = ActivityCreate(
            id=str(uuid.uuid4()),
            display_id=display_id,
            type=activity_type,
            subject=self.build_subject(conversation, activity_type),
            body=message.body,
            notes=self.build_notes(conversation, message, match),
            activity_date=epoch_to_iso(message.created_at),
            human_id=match.human_id,
            account_id=match.account_id,
            route_signup_id=match.route_signup_id,
            website_booking_request_id=match.website_booking_request_id,
            front_id=message.id,
            front_conversation_id=conversation.id,
            sync_run_id=sync_run_id,
            colleague_id=colleague_id,
            created_by_colleague_id=self.created_by_colleague_id,
            created_at=now,
            updated_at=now,
        )
        self._db.table("activities").insert(activity.model_dump(mode="json")).execute()
        return activity


class FrontSyncService:
    """Drives one page of the Front conversation import."""

    def __init__(
        self,
        front: FrontClient,
        crm_client: Client,
        resolver: ContactResolver,
        classifier: ChannelClassifier | None = None,
        allocator: DisplayIdAllocator | None = None,
        sync_runs: SyncRunService | None = None,
    ) -> None:
        self.front = front
        self.crm = crm_client
        self.resolver = resolver
        self.classifier = classifier or ChannelClassifier()
        self.allocator = allocator or DisplayIdAllocator(crm_client)
        self.sync_runs = sync_runs or SyncRunService(crm_client, self.allocator)

    async def sync_page(
        self,
        initiated_by_colleague_id: str,
        cursor: str | None = None,
        limit: int | None = None,
        sync_run_id: str | None = None,
    ) -> SyncResult:
        """Import one page of conversations.

        Args:
            initiated_by_colleague_id: Colleague triggering the import.
            cursor: ``next_cursor`` from the previous page, or None for the first.
            limit: Conversations per page, clamped to ``[1, 50]``.
            sync_run_id: Run to continue; a new run is created when omitted.

        Returns:
            Page summary including the cursor for the next page.

        Raises:
            NotFoundError: If ``sync_run_id`` names no sync run.
            ValidationError: If ``sync_run_id`` names a reverted run.
            FrontAPIError: If the conversation page cannot be fetched.
        """
        if sync_run_id:
            await self._check_run_open(sync_run_id)
            run_id = sync_run_id
        else:
            run_id = await self.sync_runs.create_run(initiated_by_colleague_id)

        try:
            result = await self._sync_page(
                initiated_by_colleague_id, cursor, clamp_limit(limit), run_id
            )
        except Exception as e:
            logger.exception("Front sync page failed", extra={"sync_run_id": run_id})
            await self.sync_runs.mark_failed(run_id, str(e))
            raise

        # The page is already imported; a ledger failure is reported, not raised
        try:
            await self.sync_runs.record_page(run_id, result)
        except Exception as e:
            logger.exception("Failed to record sync run progress", extra={"sync_run_id": run_id})
            result.errors.append(f"sync run {run_id}: {e}")

        logger.info(
            "Front sync page complete",
            extra={
                "sync_run_id": run_id,
                "total": result.total,
                "imported": result.imported,
                "skipped": result.skipped,
                "unmatched": result.unmatched,
                "failed": result.failed,
                "errors": len(result.errors),
                "has_next": result.next_cursor is not None,
            },
        )
        return result

    async def _check_run_open(self, run_id: str) -> None:
        run = await self.sync_runs.get_run(run_id)
        if run is None:
            raise NotFoundError("Sync run", run_id)
        if run.get("status") == SyncRunStatus.REVERTED.value:
            raise ValidationError(
                f"Sync run {run_id} has been reverted", field="sync_run_id"
            )

    async def _sync_page(
        self,
        initiated_by_colleague_id: str,
        cursor: str | None,
        limit: int,
        run_id: str,
    ) -> SyncResult:
        result = SyncResult(sync_run_id=run_id)
        writer = ActivityWriter(self.crm, self.allocator, initiated_by_colleague_id)
        pending: deque[FrontConversation] = deque()
        guard = IdempotencyGuard()
        state = SyncState.FETCHING_PAGE

        while state is not SyncState.DONE:
            if state is SyncState.FETCHING_PAGE:
                # Failures here are fatal for the whole page
                page = await self.front.list_conversations(limit=limit, cursor=cursor)
                result.next_cursor = page.next_url
                guard = await IdempotencyGuard.load(self.crm)
                pending.extend(page.results)
                state = SyncState.PROCESSING_CONVERSATION if pending else SyncState.DONE

            elif state is SyncState.PROCESSING_CONVERSATION:
                conversation = pending.popleft()
                try:
                    await self._process_conversation(conversation, guard, writer, result)
                except Exception as e:
                    logger.warning(
                        "Front conversation failed",
                        extra={"conversation_id": conversation.id, "error": str(e)},
                    )
                    result.errors.append(f"conversation {conversation.id}: {e}")
                if not pending:
                    state = SyncState.DONE

        return result

    async def _process_conversation(
        self,
        conversation: FrontConversation,
        guard: IdempotencyGuard,
        writer: ActivityWriter,
        result: SyncResult,
    ) -> None:
        messages = await self.front.list_messages(conversation.id)
        handle = conversation.contact_handle
        activity_type = self.classifier.classify(None, handle)
        match = await self.resolver.match_contact(handle, activity_type)

        for message in messages:
            result.total += 1
            if guard.should_skip(message):
                result.skipped += 1
                continue

            try:
                colleague_id = await self._find_colleague(message)
                await writer.write(
                    conversation,
                    message,
                    activity_type,
                    match,
                    colleague_id=colleague_id,
                    sync_run_id=result.sync_run_id,
                )
            except Exception as e:
                logger.warning(
                    "Front message import failed",
                    extra={
                        "conversation_id": conversation.id,
                        "front_id": message.id,
                        "error": str(e),
                    },
                )
                result.failed += 1
                result.errors.append(f"conversation {conversation.id}: message {message.id}: {e}")
                continue

            guard.mark_imported(message.id)
            result.imported += 1
            if match.is_unmatched:
                result.unmatched += 1
            self._count_links(result, match, colleague_id)

    async def _find_colleague(self, message: FrontMessage) -> str | None:
        """Outbound: the author. Inbound: the first to/cc recipient who is a colleague."""
        primary = self.resolver.primary
        if not message.is_inbound:
            if message.author and message.author.handle:
                return await primary.find_colleague_by_email(message.author.handle)
            return None
        for recipient in message.recipients:
            if recipient.role in _COLLEAGUE_RECIPIENT_ROLES and recipient.handle:
                colleague_id = await primary.find_colleague_by_email(recipient.handle)
                if colleague_id:
                    return colleague_id
        return None

    @staticmethod
    def _count_links(result: SyncResult, match: MatchResult, colleague_id: str | None) -> None:
        if match.human_id:
            result.linked_to_humans += 1
        if match.account_id:
            result.linked_to_accounts += 1
        if match.route_signup_id:
            result.linked_to_route_signups += 1
        if match.website_booking_request_id:
            result.linked_to_bookings += 1
        if colleague_id:
            result.linked_to_colleagues += 1
