"""Synthetic activity generator for demos and load checks."""

from __future__ import annotations

import asyncio
import random
from collections.abc import Sequence
from typing import Any, Protocol

import structlog

from .messages import shorten_identity
from .types import ActivityKind, ActivityResult, ChannelSelector, User

logger = structlog.get_logger(__name__)

SAMPLE_USERS: tuple[User, ...] = (
    User(
        identity="0x1234567890123456789012345678901234567890",
        email="user1@example.com",
        phone="+1234567890",
    ),
    User(
        identity="0x0987654321098765432109876543210987654321",
        email="user2@example.com",
        phone="+0987654321",
    ),
    User(
        identity="0x5678901234567890123456789012345678901234",
        email="user3@example.com",
        phone="+5678901234",
    ),
)

CONTENT_IDS: tuple[str, ...] = tuple(str(i) for i in range(1, 11))

SEARCH_QUERIES: tuple[str, ...] = (
    "blockchain",
    "ethereum",
    "solidity",
    "smart contract",
    "decentralized",
    "web3",
    "cryptocurrency",
    "NFT",
    "token",
    "DeFi",
)

_ACTIVITY_NAMES: dict[ActivityKind, str] = {
    ActivityKind.LOGIN: "Login",
    ActivityKind.LOGOUT: "Logout",
    ActivityKind.SEARCH: "Search",
    ActivityKind.CREATE: "Create Content",
    ActivityKind.UPDATE: "Update Content",
    ActivityKind.DELETE: "Delete Content",
    ActivityKind.LIKE: "Like Content",
    ActivityKind.UNLIKE: "Unlike Content",
}

_CHANNEL_NAMES: dict[ChannelSelector, str] = {
    ChannelSelector.NONE: "None",
    ChannelSelector.EMAIL: "Email",
    ChannelSelector.SMS: "SMS",
    ChannelSelector.CHAT: "Chat",
    ChannelSelector.ALL: "All Channels",
}


class _Tracker(Protocol):
    async def track_activity(
        self,
        user: User | None,
        activity_kind: Any,
        channel_selector: Any,
        payload: Any = None,
    ) -> ActivityResult: ...


def activity_name(kind: ActivityKind | None) -> str:
    if kind is None:
        return "Unknown Activity"
    return _ACTIVITY_NAMES.get(kind, "Unknown Activity")


def channel_name(selector: ChannelSelector | None) -> str:
    if selector is None:
        return "Unknown Channel"
    return _CHANNEL_NAMES.get(selector, "Unknown Channel")


class ActionSimulator:
    """Feeds random activities into a tracker."""

    def __init__(
        self,
        tracker: _Tracker,
        users: Sequence[User] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._tracker = tracker
        self._users = tuple(users) if users else SAMPLE_USERS
        self._rng = rng or random.Random()

    def _payload_for(self, kind: ActivityKind) -> dict[str, str]:
        if kind is ActivityKind.SEARCH:
            return {"query": self._rng.choice(SEARCH_QUERIES)}
        if kind in (
            ActivityKind.CREATE,
            ActivityKind.UPDATE,
            ActivityKind.DELETE,
            ActivityKind.LIKE,
            ActivityKind.UNLIKE,
        ):
            return {"content_id": self._rng.choice(CONTENT_IDS)}
        return {}

    async def generate_random_action(self) -> ActivityResult:
        user = self._rng.choice(self._users)
        kind = self._rng.choice(list(ActivityKind))
        selector = self._rng.choice(list(ChannelSelector))

        logger.debug(
            "simulated_action",
            identity=shorten_identity(user.identity),
            activity=activity_name(kind),
            channel=channel_name(selector),
        )
        return await self._tracker.track_activity(user, kind, selector, self._payload_for(kind))

    async def generate_multiple_random_actions(
        self, count: int = 5, delay_seconds: float = 0.5
    ) -> list[ActivityResult]:
        results: list[ActivityResult] = []
        for i in range(count):
            results.append(await self.generate_random_action())
            if delay_seconds and i + 1 < count:
                await asyncio.sleep(delay_seconds)
        return results
