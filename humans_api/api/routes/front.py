"""Front sync admin routes.

Key endpoints:
- POST /admin/front/sync - Import one page of Front conversations
- GET /admin/front/sync-runs - List sync runs, newest first
- GET /admin/front/sync-runs/{run_id} - Get one sync run
- POST /admin/front/sync-runs/{run_id}/revert - Delete a run's untouched activities
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Query, status

from humans_api.api.deps import ColleagueManager
from humans_api.core.config import settings
from humans_api.core.exceptions import FrontSyncError, NotFoundError, ValidationError
from humans_api.db.supabase import SupabaseClient, WebsiteSupabaseClient
from humans_api.integrations.front.client import FrontClient
from humans_api.models.front_sync import (
    RevertEnvelope,
    SyncResultEnvelope,
    SyncRunEnvelope,
    SyncRunItem,
    SyncRunListEnvelope,
)
from humans_api.services.contact_matching import ContactResolver
from humans_api.services.contact_stores import CrmContactStore, WebsiteContactStore
from humans_api.services.front_sync import FrontSyncService
from humans_api.services.sync_runs import SyncRunService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/front", tags=["front-sync"])


def build_front_sync_service(front_token: str) -> FrontSyncService:
    """Wire the sync pipeline to the CRM and website databases."""
    crm = SupabaseClient.get_client()
    resolver = ContactResolver(
        primary=CrmContactStore(crm),
        secondary=WebsiteContactStore(WebsiteSupabaseClient.get_client()),
    )
    return FrontSyncService(front=FrontClient(front_token), crm_client=crm, resolver=resolver)


def get_sync_run_service() -> SyncRunService:
    return SyncRunService(SupabaseClient.get_client())


@router.post("/sync", response_model=SyncResultEnvelope)
async def trigger_front_sync(
    colleague: ColleagueManager,
    limit: int | None = Query(None, description="Conversations per page (1-50, default 20)"),
    cursor: str | None = Query(None, description="next_cursor from the previous page"),
    sync_run_id: str | None = Query(None, description="Sync run to continue"),
) -> dict[str, Any]:
    """Import one page of Front conversations as activities.

    Call repeatedly with the returned ``next_cursor`` and ``sync_run_id``
    until ``next_cursor`` is null.

    Raises:
        FrontSyncError: If Front is not configured or the page fetch fails.
        NotFoundError: If ``sync_run_id`` names no sync run.
        ValidationError: If ``sync_run_id`` names a reverted run.
    """
    if not settings.front_configured:
        raise FrontSyncError("FRONT_API_TOKEN not configured")

    service = build_front_sync_service(settings.FRONT_API_TOKEN.get_secret_value())
    try:
        result = await service.sync_page(
            colleague["id"],
            cursor=cursor or None,
            limit=limit,
            sync_run_id=sync_run_id or None,
        )
    except (NotFoundError, ValidationError):
        raise
    except Exception as e:
        logger.exception(
            "Front sync failed",
            extra={"colleague_id": colleague["id"], "sync_run_id": sync_run_id},
        )
        raise FrontSyncError(f"Front sync failed: {e}", sync_run_id=sync_run_id) from e

    return {"data": result.to_dict()}


@router.get("/sync-runs", response_model=SyncRunListEnvelope)
async def list_sync_runs(_colleague: ColleagueManager) -> dict[str, Any]:
    """List all Front sync runs, newest first."""
    runs = await get_sync_run_service().list_runs()
    return {"data": [SyncRunItem.model_validate(run) for run in runs]}


@router.get("/sync-runs/{run_id}", response_model=SyncRunEnvelope)
async def get_sync_run(run_id: str, _colleague: ColleagueManager) -> dict[str, Any]:
    """Get a single Front sync run.

    Raises:
        NotFoundError: If the run does not exist.
    """
    run = await get_sync_run_service().get_run(run_id)
    if run is None:
        raise NotFoundError("Sync run", run_id)
    return {"data": SyncRunItem.model_validate(run)}


@router.post("/sync-runs/{run_id}/revert", response_model=RevertEnvelope)
async def revert_sync_run(run_id: str, _colleague: ColleagueManager) -> dict[str, Any]:
    """Delete the activities a run imported, skipping any edited since.

    Raises:
        HTTPException: 400 if the run is missing or already reverted.
    """
    result = await get_sync_run_service().revert_run(run_id)
    if "error" in result:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result["error"])
    return {"data": result}
