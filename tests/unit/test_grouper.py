"""
Tests for owner grouping.
"""

from datetime import date

from app.features.expiry_notifications.domain import ExpiryCandidate
from app.features.expiry_notifications.services.grouper import group_by_owner


def test_group_by_owner_one_group_per_user(user_factory, record_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    candidates = [
        ExpiryCandidate(record_factory("r1", date(2026, 1, 11), "alice"), alice),
        ExpiryCandidate(record_factory("r2", date(2026, 1, 12), "bob"), bob),
        ExpiryCandidate(record_factory("r3", date(2026, 1, 13), "alice"), alice),
    ]

    groups = group_by_owner(candidates)

    assert [g.user_id for g in groups] == ["alice", "bob"]
    assert groups[0].record_ids == ["r1", "r3"]
    assert groups[1].record_ids == ["r2"]


def test_group_by_owner_is_deterministic(user_factory, record_factory):
    alice = user_factory("alice")
    bob = user_factory("bob")
    candidates = [
        ExpiryCandidate(record_factory("r2", date(2026, 1, 12), "bob"), bob),
        ExpiryCandidate(record_factory("r1", date(2026, 1, 11), "alice"), alice),
        ExpiryCandidate(record_factory("r3", date(2026, 1, 14), "bob"), bob),
    ]

    first = group_by_owner(candidates)
    second = group_by_owner(list(candidates))

    assert [(g.user_id, g.record_ids) for g in first] == [(g.user_id, g.record_ids) for g in second]
    assert first[0].user_id == "bob"


def test_group_by_owner_empty():
    assert group_by_owner([]) == []


def test_group_earliest_expiry(user_factory, record_factory):
    alice = user_factory("alice")
    groups = group_by_owner(
        [
            ExpiryCandidate(record_factory("r1", date(2026, 1, 15), "alice"), alice),
            ExpiryCandidate(record_factory("r2", date(2026, 1, 11), "alice"), alice),
        ]
    )

    assert groups[0].earliest_expiry == date(2026, 1, 11)
