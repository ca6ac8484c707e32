"""
Debounced execution of an action on the asyncio event loop.

Many `schedule()` calls within a quiet period collapse into a single run of
the action. Each stream (missing-key flush, resource reload) owns one
`DebouncedTask`.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

DebouncedAction = Callable[..., Awaitable[object] | object]


class DebouncedTask:
    """
    Coalesce many triggers into one delayed action.

    Scheduling while a timer is pending restarts the quiet period and replaces
    the arguments. Runs of the same task never overlap: a run that starts while
    the previous one is still in progress waits for it first.
    """

    def __init__(
        self,
        action: DebouncedAction,
        delay: float,
        *,
        name: str = "debounced",
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """
        Initialize the debounced task.

        Args:
            action: Sync or async callable invoked with the latest arguments
            delay: Quiet period in seconds
            name: Name used in logs and asyncio task names
            loop: Event loop to schedule on, defaults to the running loop
        """
        if delay < 0:
            raise ValueError("delay must be non-negative")

        self._action: DebouncedAction = action
        self._delay: float = delay
        self._name: str = name
        self._loop: asyncio.AbstractEventLoop | None = loop

        self._handle: asyncio.TimerHandle | None = None
        self._generation: int = 0
        self._args: tuple[object, ...] = ()
        self._current: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()
        self._idle: asyncio.Event = asyncio.Event()
        self._idle.set()
        self._closed: bool = False
        self._run_count: int = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        """Whether a timer is waiting for its quiet period to elapse."""
        return self._handle is not None

    @property
    def running(self) -> bool:
        """Whether a run is in progress."""
        return bool(self._running)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def run_count(self) -> int:
        """Number of runs started so far."""
        return self._run_count

    def schedule(self, *args: object) -> None:
        """
        Record the arguments and (re)start the quiet-period timer.

        Must be called from the event loop thread.
        """
        if self._closed:
            logger.debug(f"Ignoring schedule on closed task {self._name}")
            return

        loop = self._get_loop()
        self._args = args
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self._delay, self._fire, self._generation)
        self._idle.clear()

    def cancel(self) -> None:
        """Drop the pending timer without affecting a run in progress."""
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._args = ()
        self._update_idle()

    def close(self) -> None:
        """Cancel the pending timer and refuse further scheduling."""
        self._closed = True
        self.cancel()

    async def flush(self) -> None:
        """Run a pending action now instead of waiting for its timer."""
        if self._handle is None:
            await self.wait_running()
            return

        args = self._args
        self._generation += 1
        self._handle.cancel()
        self._handle = None
        self._args = ()
        task = self._start(args)
        await asyncio.wait([task])

    async def join(self) -> None:
        """Wait until no timer is pending and no run is in progress."""
        _ = await self._idle.wait()

    async def wait_running(self) -> None:
        """Wait for runs in progress, ignoring a pending timer."""
        if self._running:
            _ = await asyncio.wait(set(self._running))

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _fire(self, generation: int) -> None:
        """Timer callback; stale generations are ignored."""
        if self._closed or generation != self._generation:
            logger.debug(f"Discarding stale firing of {self._name}")
            return

        self._handle = None
        args = self._args
        self._args = ()
        _ = self._start(args)

    def _start(self, args: tuple[object, ...]) -> asyncio.Task[None]:
        previous = self._current
        task = self._get_loop().create_task(
            self._run(args, previous), name=f"{self._name}-{self._run_count + 1}"
        )
        self._run_count += 1
        self._current = task
        self._running.add(task)
        self._idle.clear()
        task.add_done_callback(self._on_done)
        return task

    async def _run(
        self, args: tuple[object, ...], previous: asyncio.Task[None] | None
    ) -> None:
        if previous is not None and not previous.done():
            _ = await asyncio.wait([previous])

        try:
            result = self._action(*args)
            if inspect.isawaitable(result):
                _ = await result
        except Exception as e:
            logger.exception(f"Debounced task {self._name} failed: {e}")

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._running.discard(task)
        if self._current is task:
            self._current = None
        self._update_idle()

    def _update_idle(self) -> None:
        if self._handle is None and not self._running:
            self._idle.set()
