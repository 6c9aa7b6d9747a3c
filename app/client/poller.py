"""
Translation task polling.

``TaskPoller.start`` runs one polling loop as an asyncio task and hands back a
``TaskStream`` of status snapshots. Starting another poll, or calling
``cancel``, stops the running loop first, so a poller never has two loops
updating the same state.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Union

from app.schemas.task import TranslationTask

logger = logging.getLogger(__name__)

FetchStatus = Callable[[str], Awaitable[TranslationTask]]

_END = object()


class PollError(Exception):
    """Base class for polling failures."""

    def __init__(self, task_id: str, message: str):
        super().__init__(message)
        self.task_id = task_id


class PollTimeoutError(PollError):
    """No terminal status after the maximum number of polls."""

    def __init__(self, task_id: str, polls: int, interval_seconds: float):
        super().__init__(
            task_id,
            f"Translation timed out: task {task_id} not finished after {polls} polls "
            f"({polls * interval_seconds:.0f}s)",
        )
        self.polls = polls


class PollFailedError(PollError):
    """A status request failed."""

    def __init__(self, task_id: str, cause: Exception):
        super().__init__(task_id, f"Failed to fetch status of task {task_id}: {cause}")
        self.cause = cause


class TaskStream:
    """
    Async iterator over the status snapshots of one task.

    Iteration ends after a terminal snapshot or a cancel, and raises
    ``PollTimeoutError`` or ``PollFailedError`` when the loop gives up.
    """

    def __init__(self, task_id: str):
        self.task_id = task_id
        self.latest: Optional[TranslationTask] = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    def _push(self, item: Union[TranslationTask, Exception, object]) -> None:
        if not self._closed:
            self._queue.put_nowait(item)

    def _close(self) -> None:
        self._push(_END)
        self._closed = True

    def __aiter__(self):
        return self

    async def __anext__(self) -> TranslationTask:
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        self.latest = item
        return item

    async def wait(self) -> Optional[TranslationTask]:
        """Consume the stream and return the last snapshot."""
        async for _ in self:
            pass
        return self.latest


class TaskPoller:
    """
    Polls a task status function on a fixed interval.

    Each poll waits one interval and then fetches. The loop stops right after
    the first terminal snapshot and issues no further request.

    Args:
        fetch_status: Coroutine function returning the current task snapshot
        interval_seconds: Wait before each poll
        max_polls: Number of non-terminal snapshots tolerated before timing out
        sleep: Sleep function, replaceable in tests
    """

    def __init__(
        self,
        fetch_status: FetchStatus,
        interval_seconds: float = 2.0,
        max_polls: int = 30,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_polls < 1:
            raise ValueError("max_polls must be at least 1")
        self.fetch_status = fetch_status
        self.interval_seconds = interval_seconds
        self.max_polls = max_polls
        self._sleep = sleep
        self._task: Optional[asyncio.Task] = None
        self._stream: Optional[TaskStream] = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, task_id: str) -> TaskStream:
        """Cancel any running poll and start polling ``task_id``."""
        self.cancel()
        stream = TaskStream(task_id)
        self._stream = stream
        self._task = asyncio.create_task(self._run(stream))
        logger.debug(f"Started polling task {task_id}")
        return stream

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug(f"Cancelled polling of task {self._stream.task_id}")
        if self._stream is not None:
            self._stream._close()
        self._task = None
        self._stream = None

    async def _run(self, stream: TaskStream) -> None:
        task_id = stream.task_id
        for attempt in range(1, self.max_polls + 1):
            await self._sleep(self.interval_seconds)
            try:
                snapshot = await self.fetch_status(task_id)
            except Exception as e:
                logger.warning(f"Poll {attempt} of task {task_id} failed: {e}")
                stream._push(PollFailedError(task_id, e))
                stream._close()
                return

            stream._push(snapshot)
            if snapshot.is_terminal:
                logger.info(f"Task {task_id} reached {snapshot.status.value} after {attempt} polls")
                stream._close()
                return

        logger.warning(f"Task {task_id} still {snapshot.status.value} after {self.max_polls} polls")
        stream._push(PollTimeoutError(task_id, self.max_polls, self.interval_seconds))
        stream._close()
