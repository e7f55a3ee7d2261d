"""Multi-channel notification fan-out."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping

import structlog

from .exceptions import NotifierError, NotifierErrorCodes
from .messages import notification_subject
from .metrics import notifications_total
from .rate_limiter import RateLimiter
from .senders import STATUS_SENT, ChannelSender, NotificationRequest
from .types import (
    CHANNELS_BY_SELECTOR,
    ActivityKind,
    ChannelSelector,
    DispatchOutcome,
    DispatchResult,
    NotificationChannel,
    OutcomeStatus,
    User,
)

logger = structlog.get_logger(__name__)

DEFAULT_SEND_TIMEOUT = 10.0
DEFAULT_SUBJECT_PREFIX = "UGC Tracker"


class NotificationDispatcher:
    """Sends one message to every channel a selector expands to.

    Each channel is rate limited, timed out and reported on its own; one
    channel's skip, denial or failure never prevents another's attempt.
    """

    def __init__(
        self,
        senders: Mapping[NotificationChannel, ChannelSender],
        limiters: Mapping[NotificationChannel, RateLimiter],
        timeouts: Mapping[NotificationChannel, float] | None = None,
        subject_prefix: str = DEFAULT_SUBJECT_PREFIX,
    ) -> None:
        missing = [str(ch) for ch in NotificationChannel if ch not in senders or ch not in limiters]
        if missing:
            raise NotifierError(
                code=NotifierErrorCodes.INVALID_CONFIG,
                message=f"sender and limiter required for channels: {', '.join(missing)}",
            )
        self._senders = dict(senders)
        self._limiters = dict(limiters)
        self._timeouts = dict(timeouts or {})
        self._subject_prefix = subject_prefix

    async def send_notification(
        self,
        user: User | None,
        activity_kind: ActivityKind | None,
        channel_selector: ChannelSelector | str | int,
        message: str,
    ) -> DispatchResult:
        if user is None or not user.identity:
            logger.error("notification_invalid_user")
            return DispatchResult(
                success=False,
                error="Invalid user data",
                error_code=NotifierErrorCodes.VALIDATION,
            )

        selector = ChannelSelector.coerce(channel_selector)
        if selector is None:
            logger.error("notification_invalid_channel", channel_selector=channel_selector)
            return DispatchResult(
                success=False,
                error=f"Unknown notification channel: {channel_selector}",
                error_code=NotifierErrorCodes.VALIDATION,
            )
        channels = CHANNELS_BY_SELECTOR[selector]
        if not channels:
            logger.info("notifications_disabled", identity=user.identity)
            return DispatchResult(
                success=True,
                message="Notifications disabled for this activity type",
            )

        subject = notification_subject(self._subject_prefix, activity_kind)
        outcomes: dict[NotificationChannel, DispatchOutcome] = {}
        pending: list[tuple[NotificationChannel, NotificationRequest]] = []

        for channel in channels:
            recipient = user.contact_for(channel)
            if recipient is None:
                logger.warning(
                    "notification_skipped",
                    channel=str(channel),
                    identity=user.identity,
                    reason="no contact for channel",
                )
                outcomes[channel] = DispatchOutcome.skipped_no_contact()
                continue

            decision = self._limiters[channel].check(user.identity)
            if not decision.allowed:
                logger.warning(
                    "notification_rate_limited",
                    channel=str(channel),
                    identity=user.identity,
                    reset_at=decision.reset_at.isoformat(),
                )
                outcomes[channel] = DispatchOutcome.rate_limited(decision.reset_at)
                continue

            pending.append(
                (
                    channel,
                    NotificationRequest(
                        channel=channel,
                        recipient=recipient,
                        body=message,
                        subject=subject if channel is NotificationChannel.EMAIL else None,
                    ),
                )
            )

        sent = await asyncio.gather(*(self._deliver(ch, req) for ch, req in pending))
        for (channel, _), outcome in zip(pending, sent):
            outcomes[channel] = outcome

        for channel, outcome in outcomes.items():
            notifications_total.add(1, {"channel": str(channel), "outcome": str(outcome.status)})

        # keep the selector's channel order in the result
        per_channel = {ch: outcomes[ch] for ch in channels}
        attempted = [
            o for o in per_channel.values() if o.status is not OutcomeStatus.SKIPPED_NO_CONTACT
        ]
        return DispatchResult(
            success=True,
            notification_sent=any(o.status is OutcomeStatus.SENT for o in attempted),
            rate_limited=bool(attempted)
            and all(o.status is OutcomeStatus.RATE_LIMITED for o in attempted),
            per_channel=per_channel,
        )

    async def _deliver(
        self, channel: NotificationChannel, request: NotificationRequest
    ) -> DispatchOutcome:
        timeout = self._timeouts.get(channel, DEFAULT_SEND_TIMEOUT)
        try:
            response = await asyncio.wait_for(self._senders[channel].send(request), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "notification_failed",
                channel=str(channel),
                request_id=request.id,
                error="timeout",
                timeout=timeout,
            )
            return DispatchOutcome.send_failed(f"timed out after {timeout:.1f}s")
        except Exception as e:
            logger.warning(
                "notification_failed",
                channel=str(channel),
                request_id=request.id,
                error=str(e),
            )
            return DispatchOutcome.send_failed(str(e))

        if response.status != STATUS_SENT:
            error = response.error or f"provider status {response.status}"
            logger.warning(
                "notification_failed",
                channel=str(channel),
                request_id=request.id,
                error=error,
            )
            return DispatchOutcome.send_failed(error)

        logger.info("notification_sent", channel=str(channel), request_id=request.id)
        return DispatchOutcome.sent()
