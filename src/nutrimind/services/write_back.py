"""Background write-back of local mutations to the persistence gateway."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from uuid import uuid4

from nutrimind.services.notices import NoticeBoard

_logger = logging.getLogger(__name__)


class WriteStatus(StrEnum):
    """Lifecycle of a background write."""

    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class PendingWrite:
    """A remote write issued for a local mutation."""

    description: str
    call: Callable[[], Awaitable[object]]
    replay: Callable[[], None] | None = None
    mutation_id: str = field(default_factory=lambda: str(uuid4()))
    attempts: int = 0
    status: WriteStatus = WriteStatus.PENDING
    last_error: str | None = None


class WriteBackDispatcher:
    """Runs remote writes as tasks owned by one session.

    Local state is never rolled back. A write that still fails after its
    retries stays in ``failed`` until the session reloads and replays it.
    """

    def __init__(
        self,
        notices: NoticeBoard,
        retry_attempts: int = 2,
        retry_delay_seconds: float = 0.5,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.notices = notices
        self.retry_attempts = retry_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._writes: dict[str, PendingWrite] = {}
        self._closed = False

    @property
    def pending(self) -> list[PendingWrite]:
        """Writes that are in flight or failed."""
        return [
            write
            for write in self._writes.values()
            if write.status in {WriteStatus.PENDING, WriteStatus.FAILED}
        ]

    @property
    def in_flight(self) -> list[PendingWrite]:
        return [w for w in self._writes.values() if w.status is WriteStatus.PENDING]

    @property
    def failed(self) -> list[PendingWrite]:
        return [w for w in self._writes.values() if w.status is WriteStatus.FAILED]

    def submit(
        self,
        description: str,
        call: Callable[[], Awaitable[object]],
        replay: Callable[[], None] | None = None,
    ) -> PendingWrite:
        """Schedule ``call`` in the background and return immediately."""
        if self._closed:
            raise RuntimeError("Write-back dispatcher is closed")
        write = PendingWrite(description=description, call=call, replay=replay)
        return self._schedule(write)

    def take_failed(self) -> list[PendingWrite]:
        """Remove and return failed writes for replay."""
        failed = self.failed
        for write in failed:
            self._writes.pop(write.mutation_id, None)
        return failed

    def resubmit(self, write: PendingWrite) -> PendingWrite:
        """Schedule a previously failed write again under the same id."""
        if self._closed:
            raise RuntimeError("Write-back dispatcher is closed")
        write.status = WriteStatus.PENDING
        write.attempts = 0
        return self._schedule(write)

    async def drain(self) -> None:
        """Wait until every in-flight write has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks.values()), return_exceptions=True)

    async def close(self) -> None:
        """Cancel in-flight writes; later submissions are rejected."""
        self._closed = True
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        # Tasks cancelled before their first step never reach _run's handler.
        for write in list(self._writes.values()):
            if write.status is WriteStatus.PENDING:
                write.status = WriteStatus.CANCELLED
                del self._writes[write.mutation_id]

    def _schedule(self, write: PendingWrite) -> PendingWrite:
        self._writes[write.mutation_id] = write
        task = asyncio.get_running_loop().create_task(self._run(write))
        self._tasks[write.mutation_id] = task
        task.add_done_callback(lambda done: self._forget(write.mutation_id, done))
        return write

    def _forget(self, mutation_id: str, task: "asyncio.Task[None]") -> None:
        if self._tasks.get(mutation_id) is task:
            del self._tasks[mutation_id]

    async def _run(self, write: PendingWrite) -> None:
        delay = self.retry_delay_seconds
        try:
            while True:
                write.attempts += 1
                try:
                    await write.call()
                except Exception as exc:
                    write.last_error = f"{type(exc).__name__}: {exc}"
                    _logger.warning(
                        "Write-back %s failed (attempt %s/%s): %s",
                        write.description,
                        write.attempts,
                        self.retry_attempts + 1,
                        exc,
                    )
                    if write.attempts > self.retry_attempts:
                        write.status = WriteStatus.FAILED
                        self.notices.post(f"Failed to {write.description}.")
                        return
                    await self._sleep(delay)
                    delay *= 2
                else:
                    write.status = WriteStatus.DONE
                    self._writes.pop(write.mutation_id, None)
                    return
        except asyncio.CancelledError:
            write.status = WriteStatus.CANCELLED
            self._writes.pop(write.mutation_id, None)
            raise
