"""
Simple Async Pub/Sub Event Bus

Observers of the aggregation layer (WebSocket clients, the badge surface)
receive updates through this bus. Each subscriber gets its own bounded
asyncio.Queue, so a slow observer never blocks the orchestrator.

Topics:
    crypto_data_update - {"type": "CRYPTO_DATA_UPDATE", "data": <snapshot>}
    badge              - {"type": "UPDATE_BADGE", "text": ..., "color": ..., "tooltip": ...}
"""

import asyncio
from collections import defaultdict
from typing import Any, DefaultDict, Dict, Optional, Set

from core.logging import get_logger


TOPIC_DATA_UPDATE = "crypto_data_update"
TOPIC_BADGE = "badge"


class EventBus:
    """
    Async event bus with topic-based pub/sub.

    - publish() never waits: events for a full queue are dropped
    - Unsubscribe on disconnect, otherwise the queue is leaked
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._topics: DefaultDict[str, Set[asyncio.Queue]] = defaultdict(set)
        self._max_queue_size = max_queue_size
        self._logger = get_logger(__name__)

    def subscribe(self, topic: str, queue: Optional[asyncio.Queue] = None) -> asyncio.Queue:
        """
        Subscribe to a topic. Returns the queue events will arrive on.

        Pass an existing queue to receive several topics on one queue.
        """
        if queue is None:
            queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._topics[topic].add(queue)
        self._logger.debug(f"Subscriber added to topic '{topic}'. total={len(self._topics[topic])}")
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue; unknown queues are ignored."""
        self._topics.get(topic, set()).discard(queue)
        self._logger.debug(f"Subscriber removed from topic '{topic}'. total={self.subscriber_count(topic)}")

    def subscriber_count(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    async def publish(self, topic: str, event: Dict[str, Any]) -> None:
        """Publish an event to every subscriber of topic."""
        for q in list(self._topics.get(topic, ())):
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                self._logger.warning(f"Dropping event for topic '{topic}' due to full queue")


# Application-wide bus
bus = EventBus()
