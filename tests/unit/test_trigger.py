"""
Tests for the fire-and-forget expiry check trigger.
"""

import asyncio

import pytest

from app.features.expiry_notifications.domain import RunSummary
from app.features.expiry_notifications.services import trigger
from app.features.expiry_notifications.services.dispatcher import NotificationDispatcher
from app.features.expiry_notifications.services.notification_service import (
    ExpiryNotificationService,
)


@pytest.fixture(autouse=True)
def reset_trigger(monkeypatch):
    monkeypatch.setattr(trigger, "_current_task", None)
    monkeypatch.setattr(trigger, "_rerun_pending", None)


def _runner(calls: list, gate: asyncio.Event | None = None, fail: bool = False, tag: str = "run"):
    async def run():
        calls.append(tag)
        if gate is not None:
            await gate.wait()
        if fail:
            raise RuntimeError("boom")
        return RunSummary(success=True, message="ok")

    return run


async def _drain(rounds: int = 6):
    for _ in range(rounds):
        await asyncio.sleep(0)


async def _wait_until_idle(timeout: float = 2.0):
    async with asyncio.timeout(timeout):
        while trigger.is_check_in_flight() or trigger.is_rerun_pending():
            await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_schedule_starts_background_run():
    calls = []

    started = trigger.schedule_expiry_check("test", runner=_runner(calls))
    assert started is True

    await _drain()

    assert calls == ["run"]
    assert trigger.is_check_in_flight() is False


@pytest.mark.asyncio
async def test_triggers_during_a_run_queue_exactly_one_follow_up():
    calls = []
    gate = asyncio.Event()

    assert trigger.schedule_expiry_check("first", runner=_runner(calls, gate, tag="first")) is True
    await _drain(1)

    assert trigger.notify_grocery_created("g1", runner=_runner(calls, tag="follow-up")) is False
    assert trigger.notify_grocery_created("g2", runner=_runner(calls, tag="follow-up")) is False
    assert trigger.is_rerun_pending() is True
    assert calls == ["first"]

    gate.set()
    await _drain()

    assert calls == ["first", "follow-up"]
    assert trigger.is_check_in_flight() is False
    assert trigger.is_rerun_pending() is False


@pytest.mark.asyncio
async def test_follow_up_runs_after_failed_run():
    calls = []
    gate = asyncio.Event()

    trigger.schedule_expiry_check("first", runner=_runner(calls, gate, fail=True, tag="first"))
    await _drain(1)
    trigger.notify_grocery_created("g1", runner=_runner(calls, tag="follow-up"))

    gate.set()
    await _drain()

    assert calls == ["first", "follow-up"]


@pytest.mark.asyncio
async def test_record_created_mid_run_is_notified_by_follow_up(
    store_factory, user_factory, record_factory, sender_factory, expiry_config
):
    today = expiry_config.today()
    store = store_factory(users=[user_factory("user-1")], records=[record_factory("old", today)])
    senders = {
        "email": sender_factory("email", delay=0.05),
        "chat": sender_factory("chat", outcome=False),
        "text": sender_factory("text", outcome=False),
    }
    dispatcher = NotificationDispatcher(
        email_sender=senders["email"],
        chat_sender=senders["chat"],
        text_sender=senders["text"],
        config=expiry_config,
    )
    service = ExpiryNotificationService(store, dispatcher, expiry_config)

    assert trigger.schedule_expiry_check("first", runner=service.run_expiry_check) is True
    await asyncio.sleep(0.01)

    # Scan already happened; the new record arrives while email is in flight
    store.records["new"] = record_factory("new", today)
    trigger.notify_grocery_created("new", runner=service.run_expiry_check)

    await _wait_until_idle()

    assert store.records["old"].notification_sent is True
    assert store.records["new"].notification_sent is True
    assert len(senders["email"].calls) == 2


@pytest.mark.asyncio
async def test_failed_background_run_does_not_propagate():
    calls = []

    assert trigger.schedule_expiry_check("test", runner=_runner(calls, fail=True)) is True
    await _drain()

    assert calls == ["run"]
    assert trigger.is_check_in_flight() is False


def test_schedule_without_event_loop_is_a_noop():
    calls = []

    assert trigger.schedule_expiry_check("sync", runner=_runner(calls)) is False
    assert calls == []
