"""NotificationService wires limiters, dispatcher and tracker together."""

from __future__ import annotations

import time
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

from .config import ChannelSection, NotifierConfig
from .dispatcher import NotificationDispatcher
from .rate_limiter import RateLimiter
from .senders import ChannelSender, HttpChannelSender, LoggingChannelSender
from .tracker import ActivityTracker
from .types import (
    ActivityKind,
    ActivityPayload,
    ActivityResult,
    ChannelSelector,
    DispatchResult,
    NotificationChannel,
    RateLimitSnapshot,
    User,
)

ACTIVITY_LIMITER = "activity"


class NotificationService:
    """Owns the long-lived rate limiters and the dispatch pipeline.

    Build one per process and hand it to callers; limiter state is per
    instance, never module-global.
    """

    def __init__(
        self,
        activity_limiter: RateLimiter,
        channel_limiters: Mapping[NotificationChannel, RateLimiter],
        senders: Mapping[NotificationChannel, ChannelSender],
        timeouts: Mapping[NotificationChannel, float] | None = None,
        subject_prefix: str = "UGC Tracker",
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._activity_limiter = activity_limiter
        self._channel_limiters = dict(channel_limiters)
        self._dispatcher = NotificationDispatcher(
            senders=senders,
            limiters=self._channel_limiters,
            timeouts=timeouts,
            subject_prefix=subject_prefix,
        )
        self._tracker = ActivityTracker(activity_limiter, self._dispatcher, now=now)

    @classmethod
    def from_config(
        cls,
        config: NotifierConfig | None = None,
        senders: Mapping[NotificationChannel, ChannelSender] | None = None,
        now: Callable[[], datetime] = datetime.now,
        clock: Callable[[], float] = time.time,
    ) -> NotificationService:
        """Build a service from config.

        Channels without an explicit sender get an HTTP sender when an
        endpoint is configured and a logging sender otherwise.
        """
        config = config or NotifierConfig()
        limits = config.limits
        channel_sections: dict[NotificationChannel, ChannelSection] = {
            NotificationChannel.EMAIL: config.channels.email,
            NotificationChannel.SMS: config.channels.sms,
            NotificationChannel.CHAT: config.channels.chat,
        }
        resolved: dict[NotificationChannel, ChannelSender] = dict(senders or {})
        for channel, section in channel_sections.items():
            if channel in resolved:
                continue
            if section.endpoint:
                resolved[channel] = HttpChannelSender(
                    endpoint=section.endpoint,
                    api_key=section.api_key,
                    timeout_seconds=section.timeout_seconds,
                )
            else:
                resolved[channel] = LoggingChannelSender()

        return cls(
            activity_limiter=RateLimiter(limits.activity.to_limiter_config(), clock=clock),
            channel_limiters={
                NotificationChannel.EMAIL: RateLimiter(limits.email.to_limiter_config(), clock=clock),
                NotificationChannel.SMS: RateLimiter(limits.sms.to_limiter_config(), clock=clock),
                NotificationChannel.CHAT: RateLimiter(limits.chat.to_limiter_config(), clock=clock),
            },
            senders=resolved,
            timeouts={ch: s.timeout_seconds for ch, s in channel_sections.items()},
            subject_prefix=config.notifications.subject_prefix,
            now=now,
        )

    @property
    def tracker(self) -> ActivityTracker:
        return self._tracker

    @property
    def dispatcher(self) -> NotificationDispatcher:
        return self._dispatcher

    async def track_activity(
        self,
        user: User | None,
        activity_kind: ActivityKind | str | int,
        channel_selector: ChannelSelector | str | int,
        payload: ActivityPayload | Mapping[str, Any] | None = None,
    ) -> ActivityResult:
        return await self._tracker.track_activity(user, activity_kind, channel_selector, payload)

    async def send_notification(
        self,
        user: User | None,
        activity_kind: ActivityKind | None,
        channel_selector: ChannelSelector | str | int,
        message: str,
    ) -> DispatchResult:
        return await self._dispatcher.send_notification(
            user, activity_kind, channel_selector, message
        )

    def _limiters(self) -> dict[str, RateLimiter]:
        limiters = {ACTIVITY_LIMITER: self._activity_limiter}
        limiters.update({str(ch): lim for ch, lim in self._channel_limiters.items()})
        return limiters

    def get_rate_limit_status(self, identity: str) -> dict[str, RateLimitSnapshot | None]:
        """Status of every limiter for ``identity``, keyed activity/email/sms/chat."""
        return {name: lim.get_status(identity) for name, lim in self._limiters().items()}

    def reset_rate_limits(self, identity: str) -> None:
        for limiter in self._limiters().values():
            limiter.remove(identity)
