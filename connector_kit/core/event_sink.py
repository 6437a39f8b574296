"""Delivery channel for connectivity test events"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, List, Optional
import asyncio
import structlog
from .models import TestSourceMessage

logger = structlog.get_logger(__name__)

# Marks the end of the stream when the producer stops without a done event
_CLOSED = object()


class EventSink(ABC):
    """Ordered many-events-to-one-observer channel"""

    @abstractmethod
    async def send(self, message: TestSourceMessage) -> bool:
        """
        Deliver one event.

        Returns:
            True if the event was handed over, False if the observer is gone. A False
            return is not an error; the producer should simply stop sending.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Signal that the producer will not send anything else"""
        pass


class QueueEventSink(EventSink):
    """
    asyncio.Queue backed sink.

    The producer side is `send`/`close`; the observer iterates the sink with
    `async for` and may call `disconnect` at any time. A bounded `maxsize`
    applies backpressure to the producer.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._disconnected = False
        self._closed = False

    @property
    def is_disconnected(self) -> bool:
        return self._disconnected

    async def send(self, message: TestSourceMessage) -> bool:
        if self._disconnected or self._closed:
            return False
        await self._queue.put(message)
        # The observer may have left while we were waiting for room
        return not self._disconnected

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._disconnected:
            await self._queue.put(_CLOSED)

    def disconnect(self) -> None:
        """Observer side: stop receiving and release a producer blocked on a full queue"""
        self._disconnected = True
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
        logger.debug("Event sink observer disconnected")

    async def __aiter__(self) -> AsyncIterator[TestSourceMessage]:
        while not self._disconnected:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item
            if item.done:
                return

    async def collect(self, timeout: Optional[float] = None) -> List[TestSourceMessage]:
        """Read every event until the stream ends"""

        async def _drain():
            return [event async for event in self]

        if timeout is None:
            return await _drain()
        return await asyncio.wait_for(_drain(), timeout)
