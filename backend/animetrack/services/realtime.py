"""
Invalidation bus
────────────────
Per-owner pub/sub used to tell connected clients "your data changed, fetch
again". Events carry no row data; clients re-run their full fetch.

Publishers are the sync service functions (run in FastAPI's threadpool), so
events are handed to each subscriber's event loop with call_soon_threadsafe.
Subscribers are the SSE endpoint, one per open stream.
"""
import asyncio
import json
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from uuid import UUID

logger = logging.getLogger(__name__)

COLLECTION_WATCHLIST = "watchlist"
COLLECTION_CUSTOM_WATCHLISTS = "custom_watchlists"
COLLECTION_CUSTOM_WATCHLIST_ITEMS = "custom_watchlist_items"
COLLECTION_PROFILES = "profiles"

SSE_HEARTBEAT = ": heartbeat\n\n"


def format_sse(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


@dataclass(frozen=True)
class Invalidation:
    collection: str
    scope: str

    def as_payload(self) -> dict:
        return {"event": "invalidated", "collection": self.collection, "scope": self.scope}


@dataclass(eq=False)
class Subscription:
    owner_id: UUID
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)

    async def get(self) -> Invalidation:
        return await self.queue.get()


class InvalidationBus:
    def __init__(self) -> None:
        self._subscribers: dict[UUID, set[Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, owner_id: UUID) -> Subscription:
        """Register a listener. Must be called from inside a running loop."""
        subscription = Subscription(owner_id=owner_id, loop=asyncio.get_running_loop())
        with self._lock:
            self._subscribers[owner_id].add(subscription)
        logger.debug("Subscribed to invalidations for owner %s", owner_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._subscribers.get(subscription.owner_id)
            if listeners is None:
                return
            listeners.discard(subscription)
            if not listeners:
                del self._subscribers[subscription.owner_id]
        logger.debug("Unsubscribed invalidations for owner %s", subscription.owner_id)

    def subscriber_count(self, owner_id: UUID) -> int:
        with self._lock:
            return len(self._subscribers.get(owner_id, ()))

    def publish(self, owner_id: UUID, collection: str, scope: str | None = None) -> int:
        """
        Fan an invalidation out to *owner_id*'s listeners without blocking.

        Returns the number of listeners reached. Listeners whose loop has
        closed are dropped.
        """
        event = Invalidation(collection=collection, scope=scope or str(owner_id))
        with self._lock:
            listeners = list(self._subscribers.get(owner_id, ()))

        delivered = 0
        for subscription in listeners:
            try:
                subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, event)
            except RuntimeError:
                logger.warning(
                    "Dropping invalidation listener for owner %s: event loop closed",
                    owner_id,
                )
                self.unsubscribe(subscription)
                continue
            delivered += 1
        return delivered


bus = InvalidationBus()
