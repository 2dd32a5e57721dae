"""
Broadcast Hub

Owns the set of live observers (WebSocket connections in production) and fans
change events out to them. Each observer gets its own bounded queue drained by
a dedicated task, so publishing never waits on a slow connection. A new
observer first receives an INITIAL_DATA snapshot, then every event published
after it registered. Observers whose delivery fails, times out or overflows
their queue are dropped; they recover by reconnecting.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from jobtracker.utils.logger import get_logger
from jobtracker.utils.metrics import EVENTS_PUBLISHED, LIVE_OBSERVERS, OBSERVERS_DROPPED

logger = get_logger(__name__)


class EventType(str, Enum):
    INITIAL_DATA = "INITIAL_DATA"
    NEW_APPLICATION = "NEW_APPLICATION"
    APPLICATION_UPDATED = "APPLICATION_UPDATED"
    APPLICATION_DELETED = "APPLICATION_DELETED"


@dataclass(frozen=True)
class ChangeEvent:
    """A mutation to announce to observers."""

    type: EventType
    application: Optional[Dict[str, Any]] = None
    application_id: Optional[str] = None

    @classmethod
    def created(cls, application: Dict[str, Any]) -> "ChangeEvent":
        return cls(EventType.NEW_APPLICATION, application=application)

    @classmethod
    def updated(cls, application: Dict[str, Any]) -> "ChangeEvent":
        return cls(EventType.APPLICATION_UPDATED, application=application)

    @classmethod
    def deleted(cls, application_id: str) -> "ChangeEvent":
        return cls(EventType.APPLICATION_DELETED, application_id=application_id)

    def to_message(self) -> Dict[str, Any]:
        if self.type is EventType.APPLICATION_DELETED:
            return {"type": self.type.value, "applicationId": self.application_id}
        return {"type": self.type.value, "application": self.application}


# Receives change events from worker threads, in store write order
ChangeListener = Callable[[ChangeEvent], None]


def initial_data_message(applications: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": EventType.INITIAL_DATA.value, "applications": applications}


class Observer(Protocol):
    """Transport-level connection that accepts JSON-able messages."""

    async def send(self, message: Dict[str, Any]) -> None: ...

    async def close(self) -> None: ...


SnapshotProvider = Callable[[], Awaitable[List[Dict[str, Any]]]]


class _Subscription:
    def __init__(self, observer: Observer, max_pending: int):
        self.observer = observer
        self.queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(maxsize=max_pending)
        self.task: Optional[asyncio.Task] = None
        # Checked by the pump after every delivery; a cancel can be lost inside wait_for
        self.closed = False
        self.dropped = False


class BroadcastHub:
    """Live observer registry with non-blocking publish"""

    def __init__(
        self,
        snapshot_provider: SnapshotProvider,
        send_timeout: float = 5.0,
        max_pending: int = 100,
    ):
        self._snapshot_provider = snapshot_provider
        self._send_timeout = send_timeout
        self._max_pending = max_pending
        self._subscriptions: Dict[Observer, _Subscription] = {}

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def is_registered(self, observer: Observer) -> bool:
        return observer in self._subscriptions

    async def register(self, observer: Observer) -> None:
        """Add an observer; its first message is the current snapshot."""
        if observer in self._subscriptions:
            return
        sub = _Subscription(observer, self._max_pending)
        # Added before the snapshot is read so no later event is missed
        self._subscriptions[observer] = sub
        sub.task = asyncio.get_running_loop().create_task(self._pump(sub))
        LIVE_OBSERVERS.set(len(self._subscriptions))
        logger.info(f"[BroadcastHub] Observer registered ({len(self._subscriptions)} live)")

    async def unregister(self, observer: Observer) -> None:
        """Remove an observer. Safe to call repeatedly or for unknown observers."""
        sub = self._subscriptions.pop(observer, None)
        if sub is None:
            return
        sub.closed = True
        LIVE_OBSERVERS.set(len(self._subscriptions))
        if sub.task is not None and sub.task is not asyncio.current_task():
            sub.task.cancel()
            done, _ = await asyncio.wait({sub.task}, timeout=self._send_timeout)
            if not done:
                logger.warning(
                    f"[BroadcastHub] Observer task still running {self._send_timeout}s after unregister"
                )
        logger.info(f"[BroadcastHub] Observer unregistered ({len(self._subscriptions)} live)")

    def threadsafe_listener(self, loop: asyncio.AbstractEventLoop) -> ChangeListener:
        """Listener that publishes on `loop` from any thread, keeping call order."""

        def notify(event: ChangeEvent) -> None:
            loop.call_soon_threadsafe(self.publish, event)

        return notify

    def publish(self, event: ChangeEvent) -> int:
        """
        Queue an event for every live observer without waiting on delivery.

        Returns:
            Number of observers the event was queued for
        """
        message = event.to_message()
        queued = 0
        for sub in list(self._subscriptions.values()):
            try:
                sub.queue.put_nowait(message)
                queued += 1
            except asyncio.QueueFull:
                logger.warning("[BroadcastHub] Observer queue full, dropping slow observer")
                self._drop(sub)
        EVENTS_PUBLISHED.labels(event_type=event.type.value).inc()
        logger.debug(f"[BroadcastHub] {event.type.value} queued for {queued} observer(s)")
        return queued

    async def close(self) -> None:
        """Unregister every observer (shutdown)."""
        await asyncio.gather(*(self.unregister(observer) for observer in list(self._subscriptions)))

    def _discard(self, sub: _Subscription) -> None:
        if self._subscriptions.get(sub.observer) is sub:
            del self._subscriptions[sub.observer]
            OBSERVERS_DROPPED.inc()
            LIVE_OBSERVERS.set(len(self._subscriptions))

    def _drop(self, sub: _Subscription) -> None:
        sub.closed = True
        sub.dropped = True
        self._discard(sub)
        if sub.task is not None:
            sub.task.cancel()

    async def _deliver(self, sub: _Subscription, message: Dict[str, Any]) -> None:
        await asyncio.wait_for(sub.observer.send(message), timeout=self._send_timeout)

    async def _pump(self, sub: _Subscription) -> None:
        try:
            snapshot = await self._snapshot_provider()
            if not sub.closed:
                await self._deliver(sub, initial_data_message(snapshot))
            while not sub.closed:
                message = await sub.queue.get()
                await self._deliver(sub, message)
        except asyncio.CancelledError:
            if sub.dropped:
                await self._close_quietly(sub.observer)
            raise
        except Exception as e:
            logger.warning(f"[BroadcastHub] Dropping observer after failed delivery: {e!r}")
            sub.closed = True
            sub.dropped = True
            self._discard(sub)
            await self._close_quietly(sub.observer)
            return
        if sub.dropped:
            await self._close_quietly(sub.observer)

    async def _close_quietly(self, observer: Observer) -> None:
        try:
            await observer.close()
        except Exception as e:
            logger.debug(f"[BroadcastHub] Ignoring error while closing observer: {e!r}")
