"""Human-readable activity messages and notification subjects."""

from __future__ import annotations

from datetime import datetime
from typing import assert_never

from .types import ActivityKind, ActivityPayload

TIMESTAMP_FORMAT = "%m/%d/%Y, %I:%M:%S %p"

_CONTENT_VERBS: dict[ActivityKind, str] = {
    ActivityKind.CREATE: "created",
    ActivityKind.UPDATE: "updated",
    ActivityKind.DELETE: "deleted",
    ActivityKind.LIKE: "liked",
    ActivityKind.UNLIKE: "unliked",
}


def shorten_identity(identity: str) -> str:
    """Render a wallet address as its first 6 and last 4 characters."""
    return f"{identity[:6]}...{identity[-4:]}"


def format_activity_message(
    kind: ActivityKind | None,
    identity: str,
    payload: ActivityPayload,
    at: datetime,
) -> str:
    """Build the notification text for an activity.

    ``kind`` is None when the caller passed a value outside ActivityKind.
    """
    ts = at.strftime(TIMESTAMP_FORMAT)
    if kind is None:
        return f"Activity detected for account {identity} at {ts}"

    match kind:
        case ActivityKind.LOGIN:
            return f"Login detected for account {shorten_identity(identity)} at {ts}"
        case ActivityKind.LOGOUT:
            return f"Logout detected for account {shorten_identity(identity)} at {ts}"
        case ActivityKind.SEARCH:
            return f'Search performed with query: "{payload.query or ""}" at {ts}'
        case (
            ActivityKind.CREATE
            | ActivityKind.UPDATE
            | ActivityKind.DELETE
            | ActivityKind.LIKE
            | ActivityKind.UNLIKE
        ):
            return f"Content {_CONTENT_VERBS[kind]} with ID: {payload.content_id} at {ts}"
        case _:
            assert_never(kind)


def activity_subject_name(kind: ActivityKind | None) -> str:
    """Activity label used in email subjects."""
    if kind is None:
        return "Activity"

    match kind:
        case ActivityKind.LOGIN:
            return "Login"
        case ActivityKind.LOGOUT:
            return "Logout"
        case ActivityKind.SEARCH:
            return "Search"
        case ActivityKind.CREATE:
            return "Content Creation"
        case ActivityKind.UPDATE:
            return "Content Update"
        case ActivityKind.DELETE:
            return "Content Deletion"
        case ActivityKind.LIKE:
            return "Content Like"
        case ActivityKind.UNLIKE:
            return "Content Unlike"
        case _:
            assert_never(kind)


def notification_subject(prefix: str, kind: ActivityKind | None) -> str:
    return f"{prefix}: {activity_subject_name(kind)} Notification"
