"""Tests for SyncRunService."""

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from humans_api.core.exceptions import DatabaseError
from humans_api.services.front_sync import SyncResult
from humans_api.services.sync_runs import SyncRunService


def _client(tables: dict[str, MagicMock]) -> MagicMock:
    client = MagicMock()
    client.table.side_effect = lambda name: tables[name]
    return client


def _allocator(display_id: str = "FRY-alpha-001") -> MagicMock:
    allocator = MagicMock()
    allocator.next_display_id = AsyncMock(return_value=display_id)
    return allocator


@pytest.fixture
def running_run() -> dict[str, Any]:
    return {
        "id": "run-1",
        "display_id": "FRY-alpha-007",
        "status": "running",
        "started_at": "2026-01-05T10:00:00+00:00",
        "total_messages": 5,
        "imported": 3,
        "skipped": 2,
        "unmatched": 1,
        "error_count": 1,
        "error_messages": json.dumps(["conversation cnv_0: timeout"]),
        "linked_to_humans": 2,
    }


class TestCreateRun:
    @pytest.mark.asyncio
    async def test_inserts_running_row(self, supabase_chain: Callable[..., MagicMock]) -> None:
        runs = supabase_chain([])
        allocator = _allocator("FRY-alpha-003")
        service = SyncRunService(_client({"front_sync_runs": runs}), allocator)

        run_id = await service.create_run("col-1")

        row = runs.insert.call_args.args[0]
        assert row["id"] == run_id
        assert row["display_id"] == "FRY-alpha-003"
        assert row["status"] == "running"
        assert row["initiated_by_colleague_id"] == "col-1"
        allocator.next_display_id.assert_awaited_once_with("FRY")


class TestRecordPage:
    @pytest.mark.asyncio
    async def test_accumulates_counters_and_completes(
        self, supabase_chain: Callable[..., MagicMock], running_run: dict[str, Any]
    ) -> None:
        runs = supabase_chain(running_run)
        service = SyncRunService(_client({"front_sync_runs": runs}), _allocator())
        result = SyncResult(
            total=4,
            imported=2,
            skipped=1,
            unmatched=0,
            failed=1,
            errors=["conversation cnv_2: message msg_9: insert failed"],
            next_cursor=None,
            linked_to_humans=2,
        )

        await service.record_page("run-1", result)

        update = runs.update.call_args.args[0]
        assert update["total_messages"] == 9
        assert update["imported"] == 5
        assert update["skipped"] == 3
        assert update["unmatched"] == 1
        assert update["failed"] == 1
        assert update["linked_to_humans"] == 4
        assert update["error_count"] == 2
        assert json.loads(update["error_messages"]) == [
            "conversation cnv_0: timeout",
            "conversation cnv_2: message msg_9: insert failed",
        ]
        assert update["status"] == "completed"
        assert "completed_at" in update

    @pytest.mark.asyncio
    async def test_stays_running_while_pages_remain(
        self, supabase_chain: Callable[..., MagicMock], running_run: dict[str, Any]
    ) -> None:
        runs = supabase_chain(running_run)
        service = SyncRunService(_client({"front_sync_runs": runs}), _allocator())

        await service.record_page(
            "run-1", SyncResult(total=1, imported=1, next_cursor="https://api2.frontapp.com/x")
        )

        update = runs.update.call_args.args[0]
        assert "status" not in update
        assert "error_messages" not in update
        assert update["error_count"] == 1

    @pytest.mark.asyncio
    async def test_missing_run_raises(self, supabase_chain: Callable[..., MagicMock]) -> None:
        service = SyncRunService(
            _client({"front_sync_runs": supabase_chain(None)}), _allocator()
        )

        with pytest.raises(DatabaseError):
            await service.record_page("missing", SyncResult())


class TestMarkFailed:
    @pytest.mark.asyncio
    async def test_records_fatal_error(self, supabase_chain: Callable[..., MagicMock]) -> None:
        runs = supabase_chain([])
        service = SyncRunService(_client({"front_sync_runs": runs}), _allocator())

        await service.mark_failed("run-1", "Front API 500: down")

        update = runs.update.call_args.args[0]
        assert update["status"] == "failed"
        assert json.loads(update["error_messages"]) == ["Front API 500: down"]
        runs.eq.assert_called_with("id", "run-1")


class TestRevertRun:
    @pytest.mark.asyncio
    async def test_deletes_untouched_activities_only(
        self, supabase_chain: Callable[..., MagicMock], running_run: dict[str, Any]
    ) -> None:
        runs = supabase_chain(running_run)
        activities = supabase_chain(
            [
                {"id": "a1", "created_at": "t0", "updated_at": "t0"},
                {"id": "a2", "created_at": "t0", "updated_at": "t1"},
            ]
        )
        geo = supabase_chain([])
        route = supabase_chain([])
        service = SyncRunService(
            _client(
                {
                    "front_sync_runs": runs,
                    "activities": activities,
                    "geo_interest_expressions": geo,
                    "route_interest_expressions": route,
                }
            ),
            _allocator(),
        )

        result = await service.revert_run("run-1")

        assert result == {"deleted": 1, "skipped": 1}
        assert activities.delete.call_count == 1
        activities.eq.assert_any_call("sync_run_id", "run-1")
        activities.eq.assert_any_call("id", "a1")
        geo.update.assert_called_once_with({"activity_id": None})
        route.update.assert_called_once_with({"activity_id": None})
        runs.update.assert_called_once_with({"status": "reverted"})

    @pytest.mark.asyncio
    async def test_missing_run(self, supabase_chain: Callable[..., MagicMock]) -> None:
        service = SyncRunService(
            _client({"front_sync_runs": supabase_chain(None)}), _allocator()
        )

        result = await service.revert_run("missing")

        assert result["error"] == "Sync run not found"

    @pytest.mark.asyncio
    async def test_already_reverted(
        self, supabase_chain: Callable[..., MagicMock], running_run: dict[str, Any]
    ) -> None:
        runs = supabase_chain({**running_run, "status": "reverted"})
        service = SyncRunService(_client({"front_sync_runs": runs}), _allocator())

        result = await service.revert_run("run-1")

        assert result == {"deleted": 0, "skipped": 0, "error": "Already reverted"}
        runs.update.assert_not_called()
