from datetime import datetime, timedelta, timezone

import pytest

from fakes import EMPLOYEE, MANAGER, OFFICER, FailingNotificationStore, FakeUserDirectory
from hr_loans.core.exceptions import NotFound, Unauthorized
from hr_loans.domain.records import Role
from hr_loans.services.notification_service import NotificationService


@pytest.mark.asyncio
async def test_dispatch_skips_duplicates_and_blanks(notifications, notification_store):
    sent = await notifications.dispatch([EMPLOYEE["id"], EMPLOYEE["id"], None, ""], "Hello")

    assert sent == 1
    assert notification_store.messages_for(EMPLOYEE["id"]) == ["Hello"]


@pytest.mark.asyncio
async def test_dispatch_to_role_includes_extra_recipients(notifications, notification_store):
    sent = await notifications.dispatch_to_role(Role.hr_manager, "Awaiting decision", also=[EMPLOYEE["id"]])

    assert sent == 2
    assert notification_store.messages_for(MANAGER["id"]) == ["Awaiting decision"]
    assert notification_store.messages_for(EMPLOYEE["id"]) == ["Awaiting decision"]
    assert notification_store.messages_for(OFFICER["id"]) == []


@pytest.mark.asyncio
async def test_dispatch_failures_are_swallowed(clock):
    service = NotificationService(FailingNotificationStore(), FakeUserDirectory(), clock=clock)

    assert await service.dispatch([EMPLOYEE["id"]], "Hello") == 0


@pytest.mark.asyncio
async def test_directory_failure_still_notifies_extra_recipients(notification_store, clock):
    class BrokenDirectory(FakeUserDirectory):
        async def ids_with_role(self, role):
            raise RuntimeError("users collection unavailable")

    service = NotificationService(notification_store, BrokenDirectory(), clock=clock)

    assert await service.dispatch_to_role(Role.hr_officer, "New request", also=[EMPLOYEE["id"]]) == 1


@pytest.mark.asyncio
async def test_feed_is_newest_first_and_limited(notification_store, directory, clock):
    service = NotificationService(notification_store, directory, clock=clock, feed_limit=3)
    start = clock.now()
    for i in range(5):
        clock.set(start + timedelta(minutes=i))
        await service.dispatch([EMPLOYEE["id"]], f"message {i}")

    feed = await service.feed(EMPLOYEE["id"])

    assert [n.message for n in feed] == ["message 4", "message 3", "message 2"]
    assert all(n.created_at.tzinfo == timezone.utc for n in feed)


@pytest.mark.asyncio
async def test_mark_read_only_by_recipient(notifications, notification_store):
    await notifications.dispatch([EMPLOYEE["id"]], "Approved")
    notification = (await notifications.feed(EMPLOYEE["id"]))[0]

    with pytest.raises(Unauthorized):
        await notifications.mark_read(OFFICER["id"], notification.id)
    with pytest.raises(NotFound):
        await notifications.mark_read(EMPLOYEE["id"], "missing")

    updated = await notifications.mark_read(EMPLOYEE["id"], notification.id)
    assert updated.is_read
    assert notification_store.notifications[notification.id].is_read


@pytest.mark.asyncio
async def test_mark_all_read_counts_unread_only(notifications):
    await notifications.dispatch([EMPLOYEE["id"]], "one")
    await notifications.dispatch([EMPLOYEE["id"]], "two")
    await notifications.dispatch([OFFICER["id"]], "other")

    assert await notifications.mark_all_read(EMPLOYEE["id"]) == 2
    assert await notifications.mark_all_read(EMPLOYEE["id"]) == 0
    assert not (await notifications.feed(OFFICER["id"]))[0].is_read


def test_fixed_clock_assumes_utc():
    from hr_loans.core.clock import FixedClock

    clock = FixedClock(datetime(2026, 1, 1, 12, 0))
    assert clock.now().tzinfo == timezone.utc
    assert clock.today().year == 2026


def test_today_follows_business_timezone():
    from zoneinfo import ZoneInfo

    from hr_loans.core.clock import FixedClock

    instant = datetime(2026, 12, 31, 22, 0, tzinfo=timezone.utc)
    assert FixedClock(instant).today().year == 2026
    manila = FixedClock(instant, tz=ZoneInfo("Asia/Manila"))
    assert manila.today().isoformat() == "2027-01-01"
    assert manila.now() == instant


def test_system_clock_reads_timezone_from_settings(monkeypatch):
    from zoneinfo import ZoneInfo

    from hr_loans.core.clock import SystemClock
    from hr_loans.core.config import settings

    monkeypatch.setattr(settings, "APP_TIMEZONE", "Asia/Manila")
    assert SystemClock().tz == ZoneInfo("Asia/Manila")
    assert SystemClock().now().tzinfo == timezone.utc
