import asyncio
from collections import deque

from app.logging.logger import Log
from app.processor.models import UploadedFile
from app.worker.job_runner import ReceiptJobRunner


class UploadQueue:
    """FIFO of pending receipts, drained one file at a time.

    A drain task is started on the first enqueue and exits once the queue is
    empty; the next enqueue starts a new one.
    """

    def __init__(self, runner: ReceiptJobRunner) -> None:
        self._runner = runner
        self._pending: deque[UploadedFile] = deque()
        self._in_flight: UploadedFile | None = None
        self._drain_task: asyncio.Task[None] | None = None

    @property
    def depth(self) -> int:
        """Files waiting or being processed."""
        return len(self._pending) + (1 if self._in_flight is not None else 0)

    @property
    def in_flight(self) -> UploadedFile | None:
        return self._in_flight

    def enqueue(self, file: UploadedFile) -> None:
        """Append ``file`` to the tail. Must be called from the event loop."""
        self._pending.append(file)
        Log.info("receipt.queue.enqueued", file_name=file.name, depth=self.depth)
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.get_running_loop().create_task(self._drain())

    async def join(self) -> None:
        """Wait until every enqueued file has reached a terminal state."""
        while self._drain_task is not None and not self._drain_task.done():
            await self._drain_task

    async def _drain(self) -> None:
        Log.debug("receipt.queue.draining", depth=self.depth)
        while self._pending:
            file = self._pending.popleft()
            self._in_flight = file
            try:
                await self._runner.run(file)
            except Exception as exc:
                Log.error("receipt.queue.run_failed", file_name=file.name, error=str(exc))
            finally:
                self._in_flight = None
        Log.debug("receipt.queue.idle")
