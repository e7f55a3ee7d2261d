"""Channel senders that deliver a single notification."""

from __future__ import annotations

import asyncio
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from .exceptions import NotifierError, NotifierErrorCodes
from .types import NotificationChannel

logger = structlog.get_logger(__name__)

STATUS_SENT = "sent"
STATUS_FAILED = "failed"


@dataclass
class NotificationRequest:
    """Notification request."""

    channel: NotificationChannel
    recipient: str
    body: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    subject: str | None = None


@dataclass
class NotificationResponse:
    """Notification response."""

    id: str
    status: str
    message_id: str | None = None
    error: str | None = None


class ChannelSender(ABC):
    """Abstract channel sender."""

    @abstractmethod
    async def send(self, request: NotificationRequest) -> NotificationResponse: ...


class InMemoryChannelSender(ChannelSender):
    """In-memory channel sender for testing.

    ``delay`` suspends each send for that many seconds. ``fail`` makes every
    send report a failed status instead of recording the request.
    """

    def __init__(self, delay: float = 0.0, fail: bool = False) -> None:
        self._sent: list[NotificationRequest] = []
        self._delay = delay
        self._fail = fail

    @property
    def sent(self) -> list[NotificationRequest]:
        """Get a copy of sent notifications."""
        return list(self._sent)

    async def send(self, request: NotificationRequest) -> NotificationResponse:
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._fail:
            return NotificationResponse(
                id=request.id, status=STATUS_FAILED, error="provider rejected message"
            )
        self._sent.append(request)
        return NotificationResponse(id=request.id, status=STATUS_SENT)


class LoggingChannelSender(ChannelSender):
    """Logs each delivery after a simulated provider round trip."""

    def __init__(self, delay: float = 0.0) -> None:
        self._delay = delay

    async def send(self, request: NotificationRequest) -> NotificationResponse:
        if self._delay:
            await asyncio.sleep(self._delay)
        logger.info(
            "notification_delivered",
            channel=str(request.channel),
            recipient=request.recipient,
            subject=request.subject,
            body=request.body,
            request_id=request.id,
        )
        return NotificationResponse(id=request.id, status=STATUS_SENT)


class HttpChannelSender(ChannelSender):
    """Posts notifications to a provider HTTP API with httpx."""

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout_seconds
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._headers = headers

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(headers=self._headers, timeout=self._timeout)

    async def send(self, request: NotificationRequest) -> NotificationResponse:
        payload: dict[str, Any] = {
            "id": request.id,
            "channel": str(request.channel),
            "to": request.recipient,
            "subject": request.subject,
            "body": request.body,
        }
        try:
            async with self._make_client() as client:
                resp = await client.post(self._endpoint, json=payload)
        except httpx.HTTPError as e:
            raise NotifierError(
                code=NotifierErrorCodes.SEND_FAILED,
                message=f"Failed to reach {request.channel} provider: {e}",
                cause=e,
            ) from e

        if resp.status_code >= 400:
            raise NotifierError(
                code=NotifierErrorCodes.SEND_FAILED,
                message=f"{request.channel} provider returned HTTP {resp.status_code}: {resp.text}",
            )

        message_id: str | None = None
        if resp.content:
            try:
                data = resp.json()
            except ValueError:
                data = {}
            if isinstance(data, dict):
                message_id = data.get("message_id")
        return NotificationResponse(id=request.id, status=STATUS_SENT, message_id=message_id)
