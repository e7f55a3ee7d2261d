"""Rate-limited multi-channel activity notification library."""

from .config import NotifierConfig, load
from .dispatcher import NotificationDispatcher
from .exceptions import ConfigError, ConfigErrorCodes, NotifierError, NotifierErrorCodes
from .logger import new_logger
from .messages import format_activity_message
from .rate_limiter import RateLimiter
from .senders import (
    ChannelSender,
    HttpChannelSender,
    InMemoryChannelSender,
    LoggingChannelSender,
    NotificationRequest,
    NotificationResponse,
)
from .service import NotificationService
from .simulator import ActionSimulator
from .tracker import ActivityTracker
from .types import (
    CHANNELS_BY_SELECTOR,
    ActivityKind,
    ActivityPayload,
    ActivityResult,
    ChannelSelector,
    DispatchOutcome,
    DispatchResult,
    NotificationChannel,
    OutcomeStatus,
    RateLimitDecision,
    RateLimiterConfig,
    RateLimitSnapshot,
    User,
)

__all__ = [
    "ActionSimulator",
    "ActivityKind",
    "ActivityPayload",
    "ActivityResult",
    "ActivityTracker",
    "CHANNELS_BY_SELECTOR",
    "ChannelSelector",
    "ChannelSender",
    "ConfigError",
    "ConfigErrorCodes",
    "DispatchOutcome",
    "DispatchResult",
    "HttpChannelSender",
    "InMemoryChannelSender",
    "LoggingChannelSender",
    "NotificationChannel",
    "NotificationDispatcher",
    "NotificationRequest",
    "NotificationResponse",
    "NotificationService",
    "NotifierConfig",
    "NotifierError",
    "NotifierErrorCodes",
    "OutcomeStatus",
    "RateLimitDecision",
    "RateLimitSnapshot",
    "RateLimiter",
    "RateLimiterConfig",
    "User",
    "format_activity_message",
    "load",
    "new_logger",
]
