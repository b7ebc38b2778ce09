from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

log = logging.getLogger(__name__)


class SnapshotConsumer(ABC):
    """Reactive snapshot consumer that runs as an independent asyncio task.

    ``feed`` is handed to a source's ``subscribe()`` and only enqueues; the
    ``run`` loop awaits ``queue.get()`` and renders.  This decouples slow
    rendering from the source's delivery path.
    """

    def __init__(self, queue: asyncio.Queue[Any] | None = None) -> None:
        self._queue: asyncio.Queue[Any] = queue if queue is not None else asyncio.Queue()

    def feed(self, snapshot: Any) -> None:
        self._queue.put_nowait(snapshot)

    @abstractmethod
    async def process(self, snapshot: Any) -> None:
        """Handle a single snapshot.  Subclasses implement this."""

    async def run(self) -> None:
        """Main consumer loop -- awaits snapshots from the queue and
        dispatches them to ``process()``.

        Runs indefinitely; designed to be launched via
        ``asyncio.create_task(consumer.run())``.
        """
        log.info("%s started, awaiting snapshots", type(self).__name__)
        while True:
            snapshot = await self._queue.get()
            try:
                await self.process(snapshot)
            except Exception:
                log.exception("%s failed processing snapshot", type(self).__name__)
            finally:
                self._queue.task_done()
