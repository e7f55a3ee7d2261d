"""Activity tracking entry point."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Callable

import structlog

from .dispatcher import NotificationDispatcher
from .exceptions import NotifierErrorCodes
from .messages import format_activity_message
from .metrics import activities_tracked_total
from .rate_limiter import RateLimiter
from .types import (
    ActivityKind,
    ActivityPayload,
    ActivityResult,
    ChannelSelector,
    User,
)

logger = structlog.get_logger(__name__)


class ActivityTracker:
    """Throttles, describes and dispatches user activities."""

    def __init__(
        self,
        limiter: RateLimiter,
        dispatcher: NotificationDispatcher,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._limiter = limiter
        self._dispatcher = dispatcher
        self._now = now

    async def track_activity(
        self,
        user: User | None,
        activity_kind: ActivityKind | str | int,
        channel_selector: ChannelSelector | str | int,
        payload: ActivityPayload | Mapping[str, Any] | None = None,
    ) -> ActivityResult:
        """Track one activity and notify the user about it.

        An activity-level denial returns before any message is formatted or
        dispatched. Failures never propagate; they come back as
        ``success=False`` with ``error`` set.
        """
        if user is None or not user.identity:
            logger.error("activity_invalid_user")
            activities_tracked_total.add(1, {"outcome": "invalid"})
            return ActivityResult(
                success=False,
                error="Invalid user data",
                error_code=NotifierErrorCodes.VALIDATION,
            )

        selector = ChannelSelector.coerce(channel_selector)
        if selector is None:
            logger.error("activity_invalid_channel", channel_selector=channel_selector)
            activities_tracked_total.add(1, {"outcome": "invalid"})
            return ActivityResult(
                success=False,
                error=f"Unknown notification channel: {channel_selector}",
                error_code=NotifierErrorCodes.VALIDATION,
            )

        decision = self._limiter.check(user.identity)
        if not decision.allowed:
            logger.warning(
                "activity_rate_limited",
                identity=user.identity,
                reset_at=decision.reset_at.isoformat(),
            )
            activities_tracked_total.add(1, {"outcome": "rate_limited"})
            return ActivityResult(
                success=True,
                activity_logged=False,
                rate_limited=True,
                notification_sent=False,
                retry_at=decision.reset_at,
            )

        try:
            kind = ActivityKind.coerce(activity_kind)
            message = format_activity_message(
                kind, user.identity, _to_payload(payload), self._now()
            )
            logger.info("activity_tracked", identity=user.identity, kind=str(kind), text=message)

            dispatch = await self._dispatcher.send_notification(
                user, kind, selector, message
            )
        except Exception as e:
            logger.exception("activity_tracking_failed", identity=user.identity)
            activities_tracked_total.add(1, {"outcome": "error"})
            return ActivityResult(
                success=False,
                error=str(e),
                error_code=NotifierErrorCodes.INTERNAL,
            )

        activities_tracked_total.add(1, {"outcome": "logged"})
        return ActivityResult(
            success=dispatch.success,
            activity_logged=True,
            rate_limited=dispatch.rate_limited,
            message=message,
            notification_sent=dispatch.notification_sent,
            per_channel=dispatch.per_channel,
            error=dispatch.error,
            error_code=dispatch.error_code,
        )


def _to_payload(payload: ActivityPayload | Mapping[str, Any] | None) -> ActivityPayload:
    if payload is None:
        return ActivityPayload()
    if isinstance(payload, ActivityPayload):
        return payload
    return ActivityPayload.from_dict(dict(payload))
