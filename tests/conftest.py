import asyncio
from dataclasses import replace
from datetime import date

import pytest

from app.auth.verify import auth_dependency
from app.features.expiry_notifications.domain import (
    ExpiryNotificationConfig,
    PerishableRecord,
    UserContact,
)
from app.features.expiry_notifications.services.dispatcher import NotificationDispatcher


@pytest.fixture
def auth_override():
    def _override():
        return {"sub": "user-123"}

    return _override


@pytest.fixture
def apply_auth_override(auth_override):
    def _apply(app):
        app.dependency_overrides[auth_dependency] = auth_override

    return _apply


def make_user(user_id: str = "user-1", phone_number: str | None = "0771234567", **kwargs) -> UserContact:
    return UserContact(
        id=user_id,
        name=kwargs.pop("name", f"User {user_id}"),
        email=kwargs.pop("email", f"{user_id}@example.com"),
        phone_number=phone_number,
    )


def make_record(
    record_id: str, expiry_date: date, owner_id: str | None = "user-1", **kwargs
) -> PerishableRecord:
    return PerishableRecord(
        id=record_id,
        name=kwargs.pop("name", f"Item {record_id}"),
        expiry_date=expiry_date,
        owner_id=owner_id,
        notification_sent=kwargs.pop("notification_sent", False),
    )


class FakeExpiryStore:
    """In-memory ExpiryStore with the same selection rules as the SQL one."""

    def __init__(self, users=(), records=()):
        self.users: dict[str, UserContact] = {u.id: u for u in users}
        self.records: dict[str, PerishableRecord] = {r.id: r for r in records}
        self.claimed: set[str] = set()
        self.fail_scan = False
        self.failing_flag_ids: set[str] = set()
        self.set_notified_calls: list[str] = []
        self.released: list[str] = []

    async def find_expiring_unnotified(self, window_end: date):
        if self.fail_scan:
            raise RuntimeError("database unavailable")

        rows = [
            r
            for r in self.records.values()
            if r.expiry_date <= window_end and not r.notification_sent and r.owner_id
        ]
        rows.sort(key=lambda r: r.expiry_date)
        return [(r, self.users.get(r.owner_id)) for r in rows]

    async def find_user_by_id(self, user_id: str):
        return self.users.get(user_id)

    async def set_notified(self, record_id: str) -> bool:
        self.set_notified_calls.append(record_id)
        if record_id in self.failing_flag_ids:
            raise RuntimeError("write failed")

        record = self.records.get(record_id)
        if record is None:
            return False

        self.records[record_id] = replace(record, notification_sent=True)
        self.claimed.discard(record_id)
        return True

    async def claim_records(self, record_ids: list[str], lease_seconds: int) -> list[str]:
        taken = [
            rid
            for rid in record_ids
            if rid not in self.claimed and not self.records[rid].notification_sent
        ]
        self.claimed.update(taken)
        return taken

    async def release_claims(self, record_ids: list[str]) -> None:
        self.released.extend(record_ids)
        self.claimed.difference_update(record_ids)


class FakeSender:
    """Channel sender double: records every call and returns a scripted outcome."""

    def __init__(self, channel: str, outcome: bool = True, delay: float = 0.0, raises: Exception | None = None):
        self.channel = channel
        self.outcome = outcome
        self.delay = delay
        self.raises = raises
        self.calls: list[tuple[UserContact, list[PerishableRecord], date | None]] = []

    async def send(self, user, records, today=None) -> bool:
        self.calls.append((user, list(records), today))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            raise self.raises
        return self.outcome


@pytest.fixture
def expiry_config():
    return ExpiryNotificationConfig(
        timezone="Asia/Colombo",
        sms_from="+15005550006",
        channel_timeout_seconds=1.0,
    )


@pytest.fixture
def fake_senders():
    return {
        "email": FakeSender("email"),
        "chat": FakeSender("chat"),
        "text": FakeSender("text"),
    }


@pytest.fixture
def dispatcher(fake_senders, expiry_config):
    return NotificationDispatcher(
        email_sender=fake_senders["email"],
        chat_sender=fake_senders["chat"],
        text_sender=fake_senders["text"],
        config=expiry_config,
    )


@pytest.fixture
def user_factory():
    return make_user


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def store_factory():
    return FakeExpiryStore


@pytest.fixture
def sender_factory():
    return FakeSender
