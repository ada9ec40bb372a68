"""Pydantic response models for the Front sync API."""

from pydantic import BaseModel, Field


class SyncResultResponse(BaseModel):
    """Summary of one imported page of Front conversations."""

    total: int = Field(..., description="Messages seen on this page")
    imported: int
    skipped: int = Field(..., description="Drafts and already-imported messages")
    unmatched: int = Field(..., description="Imported messages with no resolved contact")
    failed: int = Field(0, description="Messages whose insert failed")
    errors: list[str] = Field(default_factory=list)
    next_cursor: str | None = Field(None, description="Pass back as cursor; null at end of feed")
    sync_run_id: str | None = None
    linked_to_humans: int = 0
    linked_to_accounts: int = 0
    linked_to_route_signups: int = 0
    linked_to_bookings: int = 0
    linked_to_colleagues: int = 0


class SyncResultEnvelope(BaseModel):
    data: SyncResultResponse


class SyncRunItem(BaseModel):
    """A Front sync run row."""

    id: str
    display_id: str
    status: str
    started_at: str
    completed_at: str | None = None
    total_messages: int = 0
    imported: int = 0
    skipped: int = 0
    unmatched: int = 0
    failed: int = 0
    error_count: int = 0
    error_messages: str | None = None
    linked_to_humans: int = 0
    linked_to_accounts: int = 0
    linked_to_route_signups: int = 0
    linked_to_bookings: int = 0
    linked_to_colleagues: int = 0
    initiated_by_colleague_id: str | None = None
    created_at: str | None = None


class SyncRunEnvelope(BaseModel):
    data: SyncRunItem


class SyncRunListEnvelope(BaseModel):
    data: list[SyncRunItem]


class RevertResult(BaseModel):
    deleted: int
    skipped: int


class RevertEnvelope(BaseModel):
    data: RevertResult
