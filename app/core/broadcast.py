"""
In-process fan-out of live attendance updates to Server-Sent Events viewers.

Each open attendance stream is a Subscriber with its own bounded
asyncio.Queue of pre-framed SSE strings. Subscribers are kept in a registry
partitioned by event id, so a broadcast only touches the viewers of that one
event.

Design decisions:
- Pushes use put_nowait and never await, so a registry mutation is never
  split across a suspension point and no lock is needed on the event loop
- A push that cannot be delivered (queue full, subscriber closed) removes
  only that subscriber; the other viewers still receive the frame
- No backlog or replay: viewers that join later only see later check-ins
- A background task pushes a keep-alive comment to every viewer on a fixed
  interval so proxies don't drop idle connections
- The registry lives in this process only. Running several server processes
  requires replacing it with a shared pub/sub channel (e.g. Redis) that each
  process subscribes to per event
"""
import asyncio
import enum
import json
import uuid
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Request

from app.core.config import settings
from app.core.constants import SSE_HEARTBEAT_FRAME, SSE_MESSAGE_CONNECTED
from app.core.exceptions import BroadcastPushFailure
from app.core.logging_config import get_logger
from app.core.utils import utc_now_iso

logger = get_logger(__name__)


class SubscriberState(str, enum.Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


def format_sse(payload: Dict[str, Any]) -> str:
    """Frame a message as an SSE data event, stamping it if needed."""
    message = dict(payload)
    if not message.get("timestamp"):
        message["timestamp"] = utc_now_iso()
    return f"data: {json.dumps(message, default=str)}\n\n"


class Subscriber:
    """One open live-view connection for a single event."""

    def __init__(self, event_id: int, queue_size: int = 100):
        self.id = uuid.uuid4().hex
        self.event_id = event_id
        self.state = SubscriberState.CONNECTING
        self.queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(maxsize=queue_size)

    def push(self, frame: str) -> None:
        if self.state is SubscriberState.CLOSED:
            raise BroadcastPushFailure(f"subscriber {self.id} is closed")
        try:
            self.queue.put_nowait(frame)
        except asyncio.QueueFull as exc:
            raise BroadcastPushFailure(f"subscriber {self.id} is not draining") from exc

    def close(self) -> None:
        """Mark closed and wake the stream so it can finish."""
        if self.state is SubscriberState.CLOSED:
            return
        self.state = SubscriberState.CLOSED
        # Pending frames are dropped; None tells the stream to stop
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(None)


class BroadcastHub:
    """Per-event registry of live-view subscribers."""

    def __init__(self, heartbeat_interval: float = 30, queue_size: int = 100):
        self._subscribers: Dict[int, List[Subscriber]] = {}
        self._heartbeat_interval = heartbeat_interval
        self._queue_size = queue_size
        self._heartbeat_task: Optional[asyncio.Task] = None

    def subscribe(self, event_id: int) -> Subscriber:
        """Register a viewer for ``event_id`` and queue the connected message."""
        subscriber = Subscriber(event_id, queue_size=self._queue_size)
        self._subscribers.setdefault(event_id, []).append(subscriber)

        subscriber.push(format_sse({
            "type": SSE_MESSAGE_CONNECTED,
            "message": "Connected to attendance stream",
        }))
        subscriber.state = SubscriberState.OPEN

        logger.info(
            "sse_client_connected",
            event_id=event_id,
            client_id=subscriber.id,
            clients=len(self._subscribers[event_id]),
        )
        return subscriber

    def unsubscribe(self, event_id: int, subscriber_id: str) -> None:
        """Remove a viewer; the event's registry is dropped once empty."""
        event_subscribers = self._subscribers.get(event_id)
        if not event_subscribers:
            return

        remaining = []
        for subscriber in event_subscribers:
            if subscriber.id == subscriber_id:
                subscriber.close()
            else:
                remaining.append(subscriber)

        if remaining:
            self._subscribers[event_id] = remaining
        else:
            del self._subscribers[event_id]

        logger.info(
            "sse_client_disconnected",
            event_id=event_id,
            client_id=subscriber_id,
            remaining=len(remaining),
        )

    def _deliver(self, subscriber: Subscriber, frame: str) -> bool:
        try:
            subscriber.push(frame)
            return True
        except BroadcastPushFailure as e:
            logger.warning(
                "sse_push_failed",
                event_id=subscriber.event_id,
                client_id=subscriber.id,
                error=str(e),
            )
            self.unsubscribe(subscriber.event_id, subscriber.id)
            return False

    def broadcast(self, event_id: int, payload: Dict[str, Any]) -> int:
        """
        Push ``payload`` to every viewer of ``event_id``.

        Best-effort: failed viewers are removed and the rest still receive the
        frame. Returns the number of viewers the frame was queued for.
        """
        event_subscribers = self._subscribers.get(event_id)
        if not event_subscribers:
            logger.debug("sse_broadcast_no_clients", event_id=event_id)
            return 0

        frame = format_sse(payload)
        delivered = 0
        # Iterate over a copy; failed pushes mutate the registry
        for subscriber in list(event_subscribers):
            if self._deliver(subscriber, frame):
                delivered += 1

        logger.info(
            "sse_broadcast",
            event_id=event_id,
            message_type=payload.get("type"),
            delivered=delivered,
        )
        return delivered

    def heartbeat(self) -> int:
        """Queue a keep-alive comment for every open viewer of every event."""
        delivered = 0
        for event_subscribers in list(self._subscribers.values()):
            for subscriber in list(event_subscribers):
                if self._deliver(subscriber, SSE_HEARTBEAT_FRAME):
                    delivered += 1
        return delivered

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_interval)
            self.heartbeat()

    def start(self) -> None:
        """Start the heartbeat task on the running event loop."""
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.get_running_loop().create_task(self._heartbeat_loop())

    async def shutdown(self) -> None:
        """Stop the heartbeat, close every viewer and clear all registries."""
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            try:
                await self._heartbeat_task
            except asyncio.CancelledError:
                pass
            self._heartbeat_task = None

        for event_subscribers in self._subscribers.values():
            for subscriber in event_subscribers:
                subscriber.close()
        self._subscribers.clear()
        logger.info("sse_hub_shutdown")

    def client_count(self, event_id: int) -> int:
        return len(self._subscribers.get(event_id, []))

    def total_client_count(self) -> int:
        return sum(len(event_subscribers) for event_subscribers in self._subscribers.values())

    async def stream(self, request: Request, subscriber: Subscriber) -> AsyncIterator[str]:
        """
        Yield framed messages for one viewer until it disconnects or is closed.

        Starlette cancels the response task when the client goes away; the
        ``finally`` block then removes the subscriber.
        """
        try:
            while True:
                frame = await subscriber.queue.get()
                if frame is None:
                    break
                if await request.is_disconnected():
                    break
                yield frame
        finally:
            self.unsubscribe(subscriber.event_id, subscriber.id)


# Global hub shared by the check-in service and the stream endpoint
hub = BroadcastHub(
    heartbeat_interval=settings.SSE_HEARTBEAT_INTERVAL,
    queue_size=settings.SSE_QUEUE_SIZE,
)
