"""
WebSocket push channel for live updates.

Each user has at most one live channel. A client opens ``/ws`` and sends
``{"type": "AUTH", "userId": N}``; the server answers ``AUTH_SUCCESS`` and
from then on pushes that user's change events to the socket:

┌─────────────┐  AUTH   ┌──────────────────────┐  broadcast(user, event)  ┌─────────────┐
│   Client    │────────►│  ConnectionRegistry  │◄─────────────────────────│  API routes │
│  (browser)  │◄────────│  user_id -> channel  │                          │  (writes)   │
└─────────────┘  events └──────────────────────┘                          └─────────────┘

The registry and broadcaster belong to one application instance
(``app.state``); see backend.main.create_app.
"""

import asyncio
import json
import logging
from typing import Dict, Optional, Protocol

from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState

from backend.schemas import (
    AuthMessage,
    AuthSuccess,
    DeletedTaskPayload,
    Event,
    MindfulnessCompletedEvent,
    SessionResponse,
    TaskCreatedEvent,
    TaskDeletedEvent,
    TaskResponse,
    TaskUpdatedEvent,
)
from src.core.models import MindfulnessSession, Task

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """Anything that can push a text frame; a Starlette WebSocket in production."""

    async def send_text(self, data: str) -> None:
        ...


def is_writable(channel: Channel) -> bool:
    """A WebSocket is writable while both ends still consider it connected."""
    for attr in ("client_state", "application_state"):
        state = getattr(channel, attr, WebSocketState.CONNECTED)
        if state != WebSocketState.CONNECTED:
            return False
    return True


class ConnectionRegistry:
    """
    Maps user id -> the user's live channel.

    Registering again for a user replaces the previous channel (which is
    left open). Unregistering only removes the entry when it still points
    at the given channel, so a stale socket closing late never evicts the
    channel that replaced it.
    """

    def __init__(self):
        self._channels: Dict[int, Channel] = {}
        self._lock = asyncio.Lock()

    async def register(self, user_id: int, channel: Channel) -> Optional[Channel]:
        """Register a channel; returns the channel it replaced, if any."""
        async with self._lock:
            previous = self._channels.get(user_id)
            self._channels[user_id] = channel

        if previous is not None and previous is not channel:
            logger.info("Replaced WebSocket channel for user %s", user_id)
        else:
            logger.info("WebSocket channel registered for user %s", user_id)
        return previous

    async def unregister(self, user_id: int, channel: Optional[Channel] = None) -> bool:
        """
        Remove a user's channel.

        Args:
            user_id: Owning user
            channel: Only remove if this is still the registered channel
                (None removes unconditionally)

        Returns:
            True if an entry was removed
        """
        async with self._lock:
            current = self._channels.get(user_id)
            if current is None:
                return False
            if channel is not None and current is not channel:
                return False
            del self._channels[user_id]

        logger.info("WebSocket channel unregistered for user %s", user_id)
        return True

    async def get(self, user_id: int) -> Optional[Channel]:
        async with self._lock:
            return self._channels.get(user_id)

    def count(self) -> int:
        """Get number of registered channels"""
        return len(self._channels)


class EventBroadcaster:
    """
    Delivers change events to the owning user's channel.

    Delivery is best effort: no queueing, no retries. A failed send is
    logged and the channel is dropped from the registry; callers never see
    the error.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def broadcast(self, user_id: int, event: Event) -> bool:
        """
        Send an event to a user if they have a writable channel.

        Returns:
            True if the frame was handed to the channel
        """
        channel = await self.registry.get(user_id)
        if channel is None or not is_writable(channel):
            return False

        try:
            await channel.send_text(event.model_dump_json(by_alias=True))
        except Exception as e:
            logger.warning("Failed to send %s to user %s: %s", event.type, user_id, e)
            await self.registry.unregister(user_id, channel)
            return False

        logger.debug("Sent %s to user %s", event.type, user_id)
        return True

    async def task_created(self, task: Task) -> bool:
        event = TaskCreatedEvent(payload=TaskResponse.model_validate(task))
        return await self.broadcast(task.user_id, event)

    async def task_updated(self, task: Task) -> bool:
        event = TaskUpdatedEvent(payload=TaskResponse.model_validate(task))
        return await self.broadcast(task.user_id, event)

    async def task_deleted(self, user_id: int, task_id: int) -> bool:
        event = TaskDeletedEvent(payload=DeletedTaskPayload(id=task_id))
        return await self.broadcast(user_id, event)

    async def mindfulness_completed(self, session: MindfulnessSession) -> bool:
        event = MindfulnessCompletedEvent(payload=SessionResponse.model_validate(session))
        return await self.broadcast(session.user_id, event)


async def websocket_endpoint(websocket: WebSocket, registry: ConnectionRegistry):
    """
    Main WebSocket endpoint handler.

    Protocol:
        Client sends: { "type": "AUTH", "userId": 1, "timestamp": ... }
        Server sends: { "type": "AUTH_SUCCESS", "timestamp": "..." }
        Server sends: { "type": "TASK_CREATED", "payload": {...}, "timestamp": "..." }

    Frames that are not valid JSON, or not a well-formed AUTH message, are
    logged and ignored; the socket stays open.
    """
    await websocket.accept()
    user_id: Optional[int] = None

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                logger.warning("Ignoring WebSocket frame that is not JSON")
                continue

            if not isinstance(message, dict) or message.get("type") != "AUTH":
                logger.debug("Ignoring WebSocket message: %r", data[:100])
                continue

            try:
                auth = AuthMessage.model_validate(message)
            except ValidationError as e:
                logger.warning("Ignoring malformed AUTH message: %s", e.errors())
                continue

            if user_id is not None and user_id != auth.user_id:
                await registry.unregister(user_id, websocket)
            user_id = auth.user_id

            await registry.register(user_id, websocket)
            await websocket.send_text(AuthSuccess().model_dump_json(by_alias=True))

    except WebSocketDisconnect:
        pass
    finally:
        if user_id is not None:
            await registry.unregister(user_id, websocket)
