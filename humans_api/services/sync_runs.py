"""Front sync run ledger.

A sync run spans every page of one operator-driven import. Each page adds
its counters to the run row; the run completes when Front reports no next
page. A run can later be reverted, which deletes the activities it created
as long as nobody has edited them since.
"""

import json
import logging
import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, cast

from supabase import Client

from humans_api.core.exceptions import DatabaseError
from humans_api.db.supabase import fetch_all_rows
from humans_api.services.display_id import FRONT_SYNC_RUN_PREFIX, DisplayIdAllocator

if TYPE_CHECKING:
    from humans_api.services.front_sync import SyncResult

logger = logging.getLogger(__name__)

SYNC_RUNS_TABLE = "front_sync_runs"

# SyncResult field → sync run column for counters accumulated across pages
_COUNTER_COLUMNS: dict[str, str] = {
    "total": "total_messages",
    "imported": "imported",
    "skipped": "skipped",
    "unmatched": "unmatched",
    "failed": "failed",
    "linked_to_humans": "linked_to_humans",
    "linked_to_accounts": "linked_to_accounts",
    "linked_to_route_signups": "linked_to_route_signups",
    "linked_to_bookings": "linked_to_bookings",
    "linked_to_colleagues": "linked_to_colleagues",
}


class SyncRunStatus(str, Enum):
    """Lifecycle of a sync run."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    REVERTED = "reverted"


def _now() -> str:
    return datetime.now(UTC).isoformat()


class SyncRunService:
    """Creates, updates, lists and reverts Front sync runs."""

    def __init__(self, client: Client, allocator: DisplayIdAllocator | None = None) -> None:
        self._db = client
        self._allocator = allocator or DisplayIdAllocator(client)

    async def create_run(self, initiated_by_colleague_id: str) -> str:
        """Insert a new running sync run and return its id."""
        run_id = str(uuid.uuid4())
        display_id = await self._allocator.next_display_id(FRONT_SYNC_RUN_PREFIX)
        now = _now()
        self._db.table(SYNC_RUNS_TABLE).insert(
            {
                "id": run_id,
                "display_id": display_id,
                "status": SyncRunStatus.RUNNING.value,
                "started_at": now,
                "initiated_by_colleague_id": initiated_by_colleague_id,
                "created_at": now,
            }
        ).execute()
        logger.info(
            "Front sync run started",
            extra={"sync_run_id": run_id, "display_id": display_id},
        )
        return run_id

    async def get_run(self, run_id: str) -> dict[str, Any] | None:
        """Return a sync run row, or None if it does not exist."""
        result = (
            self._db.table(SYNC_RUNS_TABLE).select("*").eq("id", run_id).maybe_single().execute()
        )
        if result is None or result.data is None:
            return None
        return cast(dict[str, Any], result.data)

    async def list_runs(self) -> list[dict[str, Any]]:
        """Return all sync runs, newest first."""
        result = (
            self._db.table(SYNC_RUNS_TABLE).select("*").order("started_at", desc=True).execute()
        )
        return cast(list[dict[str, Any]], result.data or [])

    async def record_page(self, run_id: str, result: "SyncResult") -> None:
        """Add one page's counters to the run and complete it at end of feed.

        Raises:
            DatabaseError: If the run row is missing.
        """
        run = await self.get_run(run_id)
        if run is None:
            raise DatabaseError(f"Sync run {run_id} not found while recording progress")

        update: dict[str, Any] = {
            column: int(run.get(column) or 0) + int(getattr(result, field))
            for field, column in _COUNTER_COLUMNS.items()
        }
        update["error_count"] = int(run.get("error_count") or 0) + len(result.errors)
        if result.errors:
            previous = json.loads(run["error_messages"]) if run.get("error_messages") else []
            update["error_messages"] = json.dumps([*previous, *result.errors])
        if result.next_cursor is None:
            update["status"] = SyncRunStatus.COMPLETED.value
            update["completed_at"] = _now()

        self._db.table(SYNC_RUNS_TABLE).update(update).eq("id", run_id).execute()

    async def mark_failed(self, run_id: str, error: str) -> None:
        """Mark a run as failed with the fatal error message."""
        self._db.table(SYNC_RUNS_TABLE).update(
            {
                "status": SyncRunStatus.FAILED.value,
                "completed_at": _now(),
                "error_count": 1,
                "error_messages": json.dumps([error]),
            }
        ).eq("id", run_id).execute()
        logger.warning("Front sync run failed", extra={"sync_run_id": run_id, "error": error})

    async def revert_run(self, run_id: str) -> dict[str, Any]:
        """Delete the untouched activities a run created and mark it reverted.

        Returns:
            ``{"deleted": n, "skipped": m}``, or ``{"deleted": 0, "skipped": 0,
            "error": ...}`` when the run is missing or already reverted.
        """
        run = await self.get_run(run_id)
        if run is None:
            return {"deleted": 0, "skipped": 0, "error": "Sync run not found"}
        if run.get("status") == SyncRunStatus.REVERTED.value:
            return {"deleted": 0, "skipped": 0, "error": "Already reverted"}

        activities = fetch_all_rows(
            self._db, "activities", "id, created_at, updated_at", eq={"sync_run_id": run_id}
        )
        deleted = 0
        skipped = 0
        for activity in activities:
            if activity.get("updated_at") != activity.get("created_at"):
                skipped += 1
                continue
            activity_id = activity["id"]
            for table in ("geo_interest_expressions", "route_interest_expressions"):
                self._db.table(table).update({"activity_id": None}).eq(
                    "activity_id", activity_id
                ).execute()
            self._db.table("activities").delete().eq("id", activity_id).execute()
            deleted += 1

        self._db.table(SYNC_RUNS_TABLE).update({"status": SyncRunStatus.REVERTED.value}).eq(
            "id", run_id
        ).execute()
        logger.info(
            "Front sync run reverted",
            extra={"sync_run_id": run_id, "deleted": deleted, "skipped": skipped},
        )
        return {"deleted": deleted, "skipped": skipped}
