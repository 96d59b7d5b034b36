"""
Tests for the candidate scanner.
"""

from dataclasses import replace
from datetime import date, datetime

import pytest

from app.features.expiry_notifications.services.scanner import CandidateScanner

NOW = datetime(2026, 1, 10, 9, 0)


@pytest.fixture
def no_claims(expiry_config):
    return replace(expiry_config, claim_lease_seconds=0)


@pytest.mark.asyncio
async def test_scan_includes_expired_and_window_boundary(
    store_factory, user_factory, record_factory, no_claims
):
    store = store_factory(
        users=[user_factory("user-1")],
        records=[
            record_factory("expired", date(2026, 1, 5)),
            record_factory("today", date(2026, 1, 10)),
            record_factory("boundary", date(2026, 1, 17)),
            record_factory("outside", date(2026, 1, 18)),
        ],
    )

    candidates = await CandidateScanner(store, no_claims).scan(NOW)

    assert [c.record.id for c in candidates] == ["expired", "today", "boundary"]


@pytest.mark.asyncio
async def test_scan_excludes_notified_records(store_factory, user_factory, record_factory, no_claims):
    store = store_factory(
        users=[user_factory("user-1")],
        records=[
            record_factory("done", date(2026, 1, 12), notification_sent=True),
            record_factory("pending", date(2026, 1, 12)),
        ],
    )

    candidates = await CandidateScanner(store, no_claims).scan(NOW)

    assert [c.record.id for c in candidates] == ["pending"]


@pytest.mark.asyncio
async def test_scan_drops_records_with_dangling_owner(
    store_factory, user_factory, record_factory, no_claims
):
    store = store_factory(
        users=[user_factory("user-1")],
        records=[
            record_factory("owned", date(2026, 1, 12)),
            record_factory("orphan", date(2026, 1, 12), owner_id="deleted-user"),
            record_factory("no-owner", date(2026, 1, 12), owner_id=None),
        ],
    )

    candidates = await CandidateScanner(store, no_claims).scan(NOW)

    assert [c.record.id for c in candidates] == ["owned"]
    assert candidates[0].owner.id == "user-1"


@pytest.mark.asyncio
async def test_scan_propagates_store_failure(store_factory, no_claims):
    store = store_factory()
    store.fail_scan = True

    with pytest.raises(RuntimeError):
        await CandidateScanner(store, no_claims).scan(NOW)


@pytest.mark.asyncio
async def test_scan_claims_records_for_the_run(store_factory, user_factory, record_factory, expiry_config):
    store = store_factory(
        users=[user_factory("user-1")],
        records=[record_factory("r1", date(2026, 1, 12)), record_factory("r2", date(2026, 1, 13))],
    )

    candidates = await CandidateScanner(store, expiry_config).scan(NOW)

    assert [c.record.id for c in candidates] == ["r1", "r2"]
    assert store.claimed == {"r1", "r2"}


@pytest.mark.asyncio
async def test_overlapping_scan_skips_records_claimed_elsewhere(
    store_factory, user_factory, record_factory, expiry_config
):
    store = store_factory(
        users=[user_factory("user-1")],
        records=[record_factory("r1", date(2026, 1, 12)), record_factory("r2", date(2026, 1, 13))],
    )
    store.claimed.add("r1")

    candidates = await CandidateScanner(store, expiry_config).scan(NOW)

    assert [c.record.id for c in candidates] == ["r2"]


@pytest.mark.asyncio
async def test_scan_with_nothing_expiring(store_factory, user_factory, record_factory, expiry_config):
    store = store_factory(
        users=[user_factory("user-1")],
        records=[record_factory("r1", date(2026, 2, 1))],
    )

    assert await CandidateScanner(store, expiry_config).scan(NOW) == []
    assert store.claimed == set()
