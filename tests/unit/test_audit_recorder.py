"""AuditRecorder tests: best-effort writes, limits, ordering, background records."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from gatekeeper.application.services.audit_recorder import AuditRecorder
from gatekeeper.domain.enums import AuditAction
from gatekeeper.domain.exceptions import PersistenceException
from gatekeeper.infrastructure.persistence.memory_stores import InMemoryAuditLog
from tests.conftest import OWNER_ID, TENANT_ID, FakeClock


@pytest.fixture
def log() -> InMemoryAuditLog:
    return InMemoryAuditLog()


@pytest.fixture
def recorder(log: InMemoryAuditLog, clock: FakeClock) -> AuditRecorder:
    return AuditRecorder(log, clock, default_limit=5, max_limit=10)


async def _fill(recorder: AuditRecorder, clock: FakeClock, count: int, tenant_id: str = TENANT_ID) -> None:
    for i in range(count):
        await recorder.record(tenant_id, AuditAction.UPDATE, OWNER_ID, operation_name=f"op{i}")
        clock.advance(1)


async def test_query_is_newest_first_and_bounded(recorder: AuditRecorder, clock: FakeClock) -> None:
    await _fill(recorder, clock, 8)
    entries = await recorder.query(TENANT_ID, limit=3)
    assert [e.operation_name for e in entries] == ["op7", "op6", "op5"]
    timestamps = [e.timestamp for e in entries]
    assert timestamps == sorted(timestamps, reverse=True)
    assert all(e.id for e in entries)


async def test_limit_defaults_and_clamps(recorder: AuditRecorder, clock: FakeClock) -> None:
    await _fill(recorder, clock, 12)
    assert len(await recorder.query(TENANT_ID)) == 5
    assert len(await recorder.query(TENANT_ID, limit=500)) == 10
    assert len(await recorder.query(TENANT_ID, limit=0)) == 1
    assert recorder.clamp_limit(None) == 5


async def test_query_by_operation_and_tenant(recorder: AuditRecorder, clock: FakeClock) -> None:
    await _fill(recorder, clock, 3)
    await _fill(recorder, clock, 2, tenant_id="999")
    entries = await recorder.query(TENANT_ID, operation_name="op1")
    assert [e.operation_name for e in entries] == ["op1"]
    assert len(await recorder.query("999")) == 2


async def test_same_timestamp_keeps_insertion_order(recorder: AuditRecorder) -> None:
    await recorder.record(TENANT_ID, AuditAction.UPDATE, OWNER_ID, operation_name="first")
    await recorder.record(TENANT_ID, AuditAction.DELETE, OWNER_ID, operation_name="second")
    entries = await recorder.query(TENANT_ID)
    assert [e.operation_name for e in entries] == ["second", "first"]


async def test_append_failure_is_swallowed(
    recorder: AuditRecorder, log: InMemoryAuditLog, caplog: pytest.LogCaptureFixture
) -> None:
    log.append = AsyncMock(side_effect=OSError("audit store down"))
    await recorder.record(TENANT_ID, AuditAction.UPDATE, OWNER_ID)
    assert any("Audit write failed" in r.getMessage() for r in caplog.records)


async def test_append_timeout_is_swallowed(log: InMemoryAuditLog, clock: FakeClock) -> None:
    async def hang(entry):
        await asyncio.sleep(5)

    log.append = hang
    recorder = AuditRecorder(log, clock, timeout=0.05)
    await recorder.record(TENANT_ID, AuditAction.UPDATE, OWNER_ID)


async def test_background_record_and_drain(
    recorder: AuditRecorder, log: InMemoryAuditLog, clock: FakeClock
) -> None:
    recorder.record_in_background(TENANT_ID, AuditAction.PERMISSION_DENIED, OWNER_ID, reason="explicit deny")
    stamped_at = clock.now()
    clock.advance(30)
    await recorder.drain()
    assert recorder.pending == 0
    assert len(log) == 1
    entry = (await recorder.query(TENANT_ID))[0]
    assert entry.timestamp == stamped_at
    assert entry.reason == "explicit deny"


async def test_query_failure_raises(recorder: AuditRecorder, log: InMemoryAuditLog) -> None:
    log.query = AsyncMock(side_effect=OSError("down"))
    with pytest.raises(PersistenceException):
        await recorder.query(TENANT_ID)
