"""Tests for the background write-back dispatcher."""

import asyncio

import pytest

from nutrimind.services.notices import NoticeBoard
from nutrimind.services.write_back import WriteBackDispatcher, WriteStatus
from tests.conftest import instant_sleep


class FlakyCall:
    """Awaitable factory failing a fixed number of times."""

    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.attempts = 0

    async def __call__(self) -> None:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise RuntimeError("boom")


def test_successful_write_leaves_nothing_pending() -> None:
    async def scenario() -> tuple[WriteBackDispatcher, FlakyCall]:
        dispatcher = WriteBackDispatcher(NoticeBoard(), sleep=instant_sleep)
        call = FlakyCall(failures=0)
        dispatcher.submit("save food", call)
        await dispatcher.drain()
        return dispatcher, call

    dispatcher, call = asyncio.run(scenario())

    assert call.attempts == 1
    assert dispatcher.pending == []


def test_transient_failure_is_retried_with_backoff() -> None:
    delays: list[float] = []

    async def record_sleep(seconds: float) -> None:
        delays.append(seconds)

    async def scenario() -> tuple[NoticeBoard, FlakyCall]:
        notices = NoticeBoard()
        dispatcher = WriteBackDispatcher(
            notices, retry_attempts=2, retry_delay_seconds=0.5, sleep=record_sleep
        )
        call = FlakyCall(failures=2)
        dispatcher.submit("save food", call)
        await dispatcher.drain()
        return notices, call

    notices, call = asyncio.run(scenario())

    assert call.attempts == 3
    assert delays == [0.5, 1.0]
    assert notices.peek() == []


def test_final_failure_posts_notice_and_stays_failed() -> None:
    async def scenario() -> tuple[NoticeBoard, WriteBackDispatcher]:
        notices = NoticeBoard()
        dispatcher = WriteBackDispatcher(
            notices, retry_attempts=1, sleep=instant_sleep
        )
        dispatcher.submit("delete food", FlakyCall(failures=5))
        await dispatcher.drain()
        return notices, dispatcher

    notices, dispatcher = asyncio.run(scenario())

    [write] = dispatcher.failed
    assert write.status is WriteStatus.FAILED
    assert write.attempts == 2
    assert "RuntimeError" in (write.last_error or "")
    assert [notice.message for notice in notices.drain()] == ["Failed to delete food."]


def test_take_failed_and_resubmit_keeps_mutation_id() -> None:
    async def scenario() -> tuple[str, str, WriteBackDispatcher]:
        dispatcher = WriteBackDispatcher(
            NoticeBoard(), retry_attempts=0, sleep=instant_sleep
        )
        call = FlakyCall(failures=1)
        original = dispatcher.submit("save water", call)
        await dispatcher.drain()
        [failed] = dispatcher.take_failed()
        resubmitted = dispatcher.resubmit(failed)
        await dispatcher.drain()
        return original.mutation_id, resubmitted.mutation_id, dispatcher

    original_id, resubmitted_id, dispatcher = asyncio.run(scenario())

    assert original_id == resubmitted_id
    assert dispatcher.pending == []


def test_close_cancels_in_flight_writes_and_rejects_new_ones() -> None:
    async def scenario() -> WriteBackDispatcher:
        dispatcher = WriteBackDispatcher(NoticeBoard())
        blocker = asyncio.Event()

        async def hang() -> None:
            await blocker.wait()

        write = dispatcher.submit("save food", hang)
        await asyncio.sleep(0)
        await dispatcher.close()
        assert write.status is WriteStatus.CANCELLED
        return dispatcher

    dispatcher = asyncio.run(scenario())

    assert dispatcher.pending == []
    with pytest.raises(RuntimeError):
        dispatcher.submit("save food", FlakyCall(failures=0))
