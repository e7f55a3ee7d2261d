"""ActivityTracker unit tests."""

from datetime import datetime

import pytest

from activity_notifier import (
    ActivityKind,
    ActivityPayload,
    ActivityTracker,
    ChannelSelector,
    InMemoryChannelSender,
    NotificationChannel,
    NotificationDispatcher,
    NotifierErrorCodes,
    OutcomeStatus,
    RateLimiter,
    RateLimiterConfig,
    User,
)
from activity_notifier.senders import ChannelSender

FIXED_NOW = datetime(2026, 10, 19, 14, 5, 9)
TS = "10/19/2026, 02:05:09 PM"
WALLET = "0x1234567890123456789012345678901234567890"


def make_tracker(
    activity_max: int = 50,
    channel_max: int = 10,
) -> tuple[ActivityTracker, RateLimiter, dict[NotificationChannel, InMemoryChannelSender]]:
    senders = {ch: InMemoryChannelSender() for ch in NotificationChannel}
    limiters = {
        ch: RateLimiter(RateLimiterConfig(max_requests=channel_max, window_ms=60000))
        for ch in NotificationChannel
    }
    dispatcher = NotificationDispatcher(senders=senders, limiters=limiters)
    activity = RateLimiter(RateLimiterConfig(max_requests=activity_max, window_ms=60000))
    return ActivityTracker(activity, dispatcher, now=lambda: FIXED_NOW), activity, senders


async def test_selector_none_logs_activity_only() -> None:
    tracker, activity, senders = make_tracker()
    result = await tracker.track_activity(
        User(identity="0xabc"), ActivityKind.LIKE, ChannelSelector.NONE, {"contentId": "5"}
    )
    assert result.success is True
    assert result.activity_logged is True
    assert result.notification_sent is False
    assert result.per_channel == {}
    status = activity.get_status("0xabc")
    assert status is not None and status.current == 1


async def test_email_like_message_and_outcome() -> None:
    tracker, _, senders = make_tracker()
    user = User(identity="0xabc", email="a@b.com", phone=None)
    result = await tracker.track_activity(user, ActivityKind.LIKE, ChannelSelector.EMAIL, {"contentId": "5"})
    assert result.message == f"Content liked with ID: 5 at {TS}"
    assert set(result.per_channel) == {NotificationChannel.EMAIL}
    assert result.per_channel[NotificationChannel.EMAIL].status is OutcomeStatus.SENT
    assert result.notification_sent is True
    assert senders[NotificationChannel.EMAIL].sent[0].body == result.message


async def test_login_message_shortens_wallet() -> None:
    tracker, _, _ = make_tracker()
    result = await tracker.track_activity(User(identity=WALLET), ActivityKind.LOGIN, ChannelSelector.NONE)
    assert result.message == f"Login detected for account 0x1234...7890 at {TS}"


async def test_accepts_raw_kind_and_selector_values() -> None:
    tracker, _, _ = make_tracker()
    user = User(identity="0xabc", email="a@b.com")
    result = await tracker.track_activity(user, 2, "email", ActivityPayload(query="web3"))
    assert result.message == f'Search performed with query: "web3" at {TS}'
    assert result.notification_sent is True


async def test_unknown_kind_uses_generic_message() -> None:
    tracker, _, _ = make_tracker()
    result = await tracker.track_activity(User(identity="0xabc"), 42, ChannelSelector.NONE)
    assert result.activity_logged is True
    assert result.message == f"Activity detected for account 0xabc at {TS}"


async def test_activity_limit_preempts_dispatch() -> None:
    tracker, _, senders = make_tracker(activity_max=2)
    user = User(identity="0xabc", email="a@b.com")
    for _ in range(2):
        ok = await tracker.track_activity(user, ActivityKind.LIKE, ChannelSelector.EMAIL, {"content_id": "1"})
        assert ok.activity_logged is True

    result = await tracker.track_activity(user, ActivityKind.LIKE, ChannelSelector.EMAIL, {"content_id": "1"})
    assert result.activity_logged is False
    assert result.rate_limited is True
    assert result.notification_sent is False
    assert result.message is None
    assert result.retry_at is not None
    assert result.per_channel == {}
    assert len(senders[NotificationChannel.EMAIL].sent) == 2


async def test_channel_rate_limit_is_merged() -> None:
    tracker, _, _ = make_tracker(channel_max=1)
    user = User(identity="0xabc", email="a@b.com")
    await tracker.track_activity(user, ActivityKind.LIKE, ChannelSelector.EMAIL, {"content_id": "1"})
    result = await tracker.track_activity(user, ActivityKind.LIKE, ChannelSelector.EMAIL, {"content_id": "1"})
    assert result.activity_logged is True
    assert result.rate_limited is True
    assert result.notification_sent is False
    assert result.per_channel[NotificationChannel.EMAIL].status is OutcomeStatus.RATE_LIMITED


async def test_missing_identity_consumes_nothing() -> None:
    tracker, activity, _ = make_tracker()
    result = await tracker.track_activity(User(identity=""), ActivityKind.LOGIN, ChannelSelector.ALL)
    assert result.success is False
    assert result.error_code == NotifierErrorCodes.VALIDATION
    assert len(activity) == 0


async def test_dispatch_fault_is_captured() -> None:
    class BrokenDispatcher(NotificationDispatcher):
        async def send_notification(self, *args, **kwargs):  # type: ignore[override]
            raise RuntimeError("dispatch blew up")

    senders: dict[NotificationChannel, ChannelSender] = {ch: InMemoryChannelSender() for ch in NotificationChannel}
    limiters = {ch: RateLimiter() for ch in NotificationChannel}
    tracker = ActivityTracker(RateLimiter(), BrokenDispatcher(senders, limiters), now=lambda: FIXED_NOW)

    result = await tracker.track_activity(User(identity="0xabc"), ActivityKind.LIKE, ChannelSelector.ALL)
    assert result.success is False
    assert result.error == "dispatch blew up"
    assert result.error_code == NotifierErrorCodes.INTERNAL


@pytest.mark.parametrize(
    ("kind", "verb"),
    [
        (ActivityKind.CREATE, "created"),
        (ActivityKind.UPDATE, "updated"),
        (ActivityKind.DELETE, "deleted"),
        (ActivityKind.UNLIKE, "unliked"),
    ],
)
async def test_content_messages(kind: ActivityKind, verb: str) -> None:
    tracker, _, _ = make_tracker()
    result = await tracker.track_activity(User(identity="0xabc"), kind, ChannelSelector.NONE, {"content_id": 7})
    assert result.message == f"Content {verb} with ID: 7 at {TS}"


async def test_contract_codes_for_kind_and_selector() -> None:
    tracker, activity, senders = make_tracker()
    user = User(identity="0xabc", email="a@b.com")
    result = await tracker.track_activity(user, 6, 1, {"contentId": "5"})
    assert result.success is True
    assert result.message == f"Content liked with ID: 5 at {TS}"
    assert result.per_channel[NotificationChannel.EMAIL].status is OutcomeStatus.SENT
    assert len(senders[NotificationChannel.EMAIL].sent) == 1


async def test_unknown_selector_consumes_no_quota() -> None:
    tracker, activity, senders = make_tracker()
    user = User(identity="0xabc", email="a@b.com")
    result = await tracker.track_activity(user, ActivityKind.LIKE, 9, {"contentId": "5"})
    assert result.success is False
    assert result.activity_logged is False
    assert result.error_code == NotifierErrorCodes.VALIDATION
    assert activity.get_status("0xabc") is None
    assert senders[NotificationChannel.EMAIL].sent == []
