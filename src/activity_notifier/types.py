"""Activity notifier types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from .exceptions import NotifierError, NotifierErrorCodes

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_MS = 60 * 1000
DEFAULT_LIMIT_MESSAGE = "Too many requests, please try again later."


class ActivityKind(StrEnum):
    """Trackable user actions."""

    LOGIN = "login"
    LOGOUT = "logout"
    SEARCH = "search"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LIKE = "like"
    UNLIKE = "unlike"

    @classmethod
    def coerce(cls, value: Any) -> ActivityKind | None:
        """Resolve a member, its value or its contract code (0-7); None if unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            return None
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                return None
        return None


class NotificationChannel(StrEnum):
    """Notification channel types."""

    EMAIL = "email"
    SMS = "sms"
    CHAT = "chat"


class ChannelSelector(StrEnum):
    """Channel preference requested for an activity."""

    NONE = "none"
    EMAIL = "email"
    SMS = "sms"
    CHAT = "chat"
    ALL = "all"

    @classmethod
    def coerce(cls, value: Any) -> ChannelSelector | None:
        """Resolve a member, its value or its contract code (0-4); None if unknown.

        Contract code 3 is the messaging channel, mapped to CHAT.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            return None
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                return None
        return None


CHANNELS_BY_SELECTOR: dict[ChannelSelector, tuple[NotificationChannel, ...]] = {
    ChannelSelector.NONE: (),
    ChannelSelector.EMAIL: (NotificationChannel.EMAIL,),
    ChannelSelector.SMS: (NotificationChannel.SMS,),
    ChannelSelector.CHAT: (NotificationChannel.CHAT,),
    ChannelSelector.ALL: (
        NotificationChannel.EMAIL,
        NotificationChannel.SMS,
        NotificationChannel.CHAT,
    ),
}


class OutcomeStatus(StrEnum):
    """Per-channel dispatch outcome."""

    SENT = "sent"
    SKIPPED_NO_CONTACT = "skipped_no_contact"
    RATE_LIMITED = "rate_limited"
    SEND_FAILED = "send_failed"


@dataclass(frozen=True)
class RateLimiterConfig:
    """Fixed-window limiter configuration."""

    max_requests: int = DEFAULT_MAX_REQUESTS
    window_ms: int = DEFAULT_WINDOW_MS
    message: str = DEFAULT_LIMIT_MESSAGE

    def __post_init__(self) -> None:
        if self.max_requests <= 0:
            raise NotifierError(
                code=NotifierErrorCodes.INVALID_CONFIG,
                message=f"max_requests must be positive, got {self.max_requests}",
            )
        if self.window_ms <= 0:
            raise NotifierError(
                code=NotifierErrorCodes.INVALID_CONFIG,
                message=f"window_ms must be positive, got {self.window_ms}",
            )

    @property
    def window_secs(self) -> float:
        return self.window_ms / 1000


@dataclass
class RateLimitRecord:
    """Counter state for one key."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Rate limit check result."""

    allowed: bool
    current: int
    max: int
    remaining: int
    reset_at: datetime
    message: str | None = None


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Rate limit status for a key, read without consuming."""

    current: int
    max: int
    remaining: int
    reset_at: datetime
    time_remaining_ms: int


@dataclass(frozen=True)
class User:
    """Notification recipient."""

    identity: str
    email: str | None = None
    phone: str | None = None

    def contact_for(self, channel: NotificationChannel) -> str | None:
        if channel is NotificationChannel.EMAIL:
            return self.email or None
        return self.phone or None


@dataclass(frozen=True)
class ActivityPayload:
    """Kind-dependent activity data."""

    query: str | None = None
    content_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivityPayload:
        content_id = data.get("content_id", data.get("contentId"))
        return cls(
            query=data.get("query"),
            content_id=str(content_id) if content_id is not None else None,
        )


@dataclass(frozen=True)
class DispatchOutcome:
    """What happened on one channel."""

    status: OutcomeStatus
    reset_at: datetime | None = None
    error: str | None = None

    @classmethod
    def sent(cls) -> DispatchOutcome:
        return cls(status=OutcomeStatus.SENT)

    @classmethod
    def skipped_no_contact(cls) -> DispatchOutcome:
        return cls(status=OutcomeStatus.SKIPPED_NO_CONTACT)

    @classmethod
    def rate_limited(cls, reset_at: datetime) -> DispatchOutcome:
        return cls(status=OutcomeStatus.RATE_LIMITED, reset_at=reset_at)

    @classmethod
    def send_failed(cls, error: str) -> DispatchOutcome:
        return cls(status=OutcomeStatus.SEND_FAILED, error=error)


@dataclass
class DispatchResult:
    """Aggregated result of a notification fan-out."""

    success: bool
    notification_sent: bool = False
    rate_limited: bool = False
    per_channel: dict[NotificationChannel, DispatchOutcome] = field(default_factory=dict)
    message: str | None = None
    error: str | None = None
    error_code: str | None = None


@dataclass
class ActivityResult:
    """Result of tracking one activity."""

    success: bool
    activity_logged: bool = False
    rate_limited: bool = False
    message: str | None = None
    notification_sent: bool = False
    per_channel: dict[NotificationChannel, DispatchOutcome] = field(default_factory=dict)
    retry_at: datetime | None = None
    error: str | None = None
    error_code: str | None = None
