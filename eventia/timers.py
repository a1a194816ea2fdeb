import asyncio
import heapq
import itertools
from typing import Any, Callable, Protocol


class Scheduler(Protocol):
    """The timer facility an emitter needs from its host."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class LoopScheduler:
    """
    Schedules timers on an asyncio event loop.

    Without an explicit `loop`, every `call_later()` uses the loop running at
    that moment, so one emitter can outlive several `asyncio.run()` calls.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.__loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self.__loop is not None:
            return self.__loop
        return asyncio.get_running_loop()

    def call_later(
        self, delay_ms: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_ms / 1000.0, callback)

    def cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class ManualTimer:
    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def __repr__(self) -> str:
        return f"ManualTimer(deadline={self.deadline})"


class ManualScheduler:
    """
    A virtual clock. Nothing fires until `advance()` is called.

    Useful for tests and for hosts that drive time themselves (game loops,
    simulations). Callbacks run synchronously inside `advance()`, earliest
    deadline first; ties run in scheduling order.
    """

    def __init__(self, now: float = 0.0) -> None:
        self.now = now
        self.__queue: list[tuple[float, int, ManualTimer]] = []
        self.__seq = itertools.count()
        self.__cancelled = 0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now + max(delay_ms, 0.0), callback)
        heapq.heappush(self.__queue, (timer.deadline, next(self.__seq), timer))
        return timer

    def cancel(self, handle: ManualTimer) -> None:
        if handle.cancelled or handle.fired:
            return
        handle.cancelled = True
        self.__cancelled += 1
        # Compact once cancelled entries make up half the queue
        if self.__cancelled * 2 >= len(self.__queue):
            self.__queue = [e for e in self.__queue if not e[2].cancelled]
            heapq.heapify(self.__queue)
            self.__cancelled = 0

    @property
    def pending(self) -> int:
        return len(self.__queue) - self.__cancelled

    @property
    def queued(self) -> int:
        """Heap entries, including cancelled ones not yet compacted away."""
        return len(self.__queue)

    def advance(self, ms: float) -> int:
        """Move the clock forward by `ms` and run every timer that became due. Returns the number fired."""
        if ms < 0:
            raise ValueError(f"Cannot move the clock backwards: {ms}ms")
        target = self.now + ms
        fired = 0
        while self.__queue and self.__queue[0][0] <= target:
            deadline, _, timer = heapq.heappop(self.__queue)
            if timer.cancelled:
                self.__cancelled -= 1
                continue
            self.now = deadline
            timer.fired = True
            timer.callback()
            fired += 1
        self.now = target
        return fired


__all__ = ["Scheduler", "LoopScheduler", "ManualScheduler", "ManualTimer"]
