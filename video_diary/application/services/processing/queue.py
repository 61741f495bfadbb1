"""Work queue feeding the enrichment worker."""

import asyncio
from collections.abc import AsyncIterator

from video_diary.domain.models import ProcessingRequest


class EntryProcessingQueue:
    """Unbounded FIFO of processing requests with a single consumer.

    ``enqueue`` never blocks, so request handlers can call it directly.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ProcessingRequest] = asyncio.Queue()

    def enqueue(self, request: ProcessingRequest) -> None:
        self._queue.put_nowait(request)

    async def dequeue(self) -> AsyncIterator[ProcessingRequest]:
        """Yield requests as they arrive, forever."""
        while True:
            request = await self._queue.get()
            try:
                yield request
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every enqueued request has been handled."""
        await self._queue.join()

    def __len__(self) -> int:
        return self._queue.qsize()
