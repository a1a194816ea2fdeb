import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Hashable, overload

from eventia.errors import Destroyed, TimedOut
from eventia.schema import EventSchema
from eventia.timers import LoopScheduler, Scheduler
from eventia.utils.config import EmitterConfig

type Listener = Callable[[Any, Emitter[Any]], Any]


class _Waiter:
    """One pending `wait()`: the future, its once-listener and its timer, torn down together."""

    def __init__(self, emitter: "Emitter[Any]", key: Hashable, future: asyncio.Future):
        self.emitter = emitter
        self.key = key
        self.future = future
        self.listener: Listener | None = None
        self.timer: Any = None
        self.done = False

    def resolve(self, payload: Any) -> None:
        if self.__finish():
            self.future.set_result(payload)

    def reject(self, exc: BaseException) -> None:
        if self.__finish():
            self.future.set_exception(exc)

    def on_future_done(self, future: asyncio.Future) -> None:
        # The caller gave up (task cancelled, asyncio.wait_for, ...)
        if future.cancelled():
            self.__finish()

    def __finish(self) -> bool:
        if self.done:
            return False
        self.done = True
        self.emitter._release(self)
        return not self.future.done()


class Emitter[K: Hashable]:
    """
    A lightweight in-process event emitter.

    Listeners are called synchronously by `emit()` with `(payload, emitter)`.
    `wait()` returns a future for the next occurrence of an event, optionally
    bounded by a timeout. `destroy()` rejects pending waits, cancels timers
    and drops every listener.

    Listener exceptions are not caught: they propagate out of `emit()` and
    the remaining listeners of that pass are skipped.
    """

    def __init__(
        self,
        schema: EventSchema | None = None,
        scheduler: Scheduler | None = None,
        config: EmitterConfig | None = None,
    ) -> None:
        self.schema = schema
        self.config = config or EmitterConfig()
        self._scheduler: Scheduler = scheduler or LoopScheduler()
        self._calls: dict[K, dict[Listener, None]] = {}
        self._waiters: set[_Waiter] = set()
        self._timeouts: set[Any] = set()
        self._destroyed = False
        self.log = logging.getLogger("eventia.emitter")

    @staticmethod
    def from_config(
        config_path: str | Path | None = None,
        schema: EventSchema | None = None,
        scheduler: Scheduler | None = None,
    ) -> "Emitter[Any]":
        from eventia.utils.config import load_config

        return Emitter(schema=schema, scheduler=scheduler, config=load_config(config_path))

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def pending_waits(self) -> int:
        return len(self._waiters)

    @property
    def active_timers(self) -> int:
        return len(self._timeouts)

    def listener_count(self, key: K | None = None) -> int:
        if key is None:
            return sum(len(s) for s in self._calls.values())
        return len(self._calls.get(key, ()))

    def __len__(self) -> int:
        return self.listener_count()

    def __check_alive(self, op: str) -> bool:
        if not self._destroyed:
            return True
        if self.config.after_destroy == "raise":
            raise Destroyed(f"Cannot call {op}() on a destroyed EventEmitter")
        self.log.debug(f"Ignoring {op}() on a destroyed EventEmitter")
        return False

    @overload
    def on(self, key: K, listener: Listener) -> None: ...
    @overload
    def on(self, key: K) -> Callable[[Listener], Listener]: ...

    def on(self, key: K, listener: Listener | None = None):
        if listener is None:

            def decorator(func: Listener, /):
                self.on(key, func)
                return func

            return decorator
        if not self.__check_alive("on"):
            return
        self._calls.setdefault(key, {})[listener] = None

    @overload
    def once(self, key: K, listener: Listener) -> None: ...
    @overload
    def once(self, key: K) -> Callable[[Listener], Listener]: ...

    def once(self, key: K, listener: Listener | None = None):
        if listener is None:

            def decorator(func: Listener, /):
                self.once(key, func)
                return func

            return decorator
        self._once(key, listener)

    def _once(self, key: K, listener: Listener) -> Listener:
        fired = False

        def wrapper(payload: Any, emitter: "Emitter[Any]") -> None:
            nonlocal fired
            # Guards against re-entrant emits of the same key from inside `listener`
            if fired:
                return
            fired = True
            try:
                listener(payload, emitter)
            finally:
                self.off(key, wrapper)

        self.on(key, wrapper)
        return wrapper

    @overload
    def off(self, key: K, listener: Listener) -> None: ...
    @overload
    def off(self, key: K) -> Callable[[Listener], Listener]: ...

    def off(self, key: K, listener: Listener | None = None):
        if listener is None:

            def decorator(func: Listener, /):
                self.off(key, func)
                return func

            return decorator
        listeners = self._calls.get(key)
        if listeners is None:
            return
        listeners.pop(listener, None)
        if not listeners:
            del self._calls[key]

    def emit(self, key: K, payload: Any = None) -> None:
        if self._destroyed:
            self.log.debug(f"Ignoring emit({key!r}) on a destroyed EventEmitter")
            return
        if self.schema is not None and self.config.validate_payloads:
            payload = self.schema.validate(key, payload)
        listeners = self._calls.get(key)
        if not listeners:
            return
        # Snapshot: listeners added during this pass wait for the next emit
        for listener in tuple(listeners):
            current = self._calls.get(key)
            if current is None or listener not in current:
                continue
            listener(payload, self)

    def wait(self, key: K, timeout_ms: float | None = None) -> asyncio.Future[Any]:
        """
        Wait for the next `emit(key, ...)` and return its payload.

        The listener is registered immediately, not when the result is awaited,
        so only events emitted after this call can complete the future.

        On a destroyed emitter the returned future has already failed with
        `Destroyed` (await it or call `.exception()`, otherwise asyncio logs
        "Future exception was never retrieved"). With `after_destroy="raise"`,
        `Destroyed` is raised right away instead.

        Args:
            key: The event to wait for.
            timeout_ms: Fail with `TimedOut` after this many milliseconds.
                `None` falls back to `config.default_timeout_ms`; `None` or 0 means no timeout.

        Raises (through the future):
            TimedOut: The timeout elapsed first.
            Destroyed: `destroy()` was called first, or the emitter was already destroyed.
        """
        if timeout_ms is None:
            timeout_ms = self.config.default_timeout_ms
        if timeout_ms is not None and timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")
        if self._destroyed and self.config.after_destroy == "raise":
            raise Destroyed("Cannot call wait() on a destroyed EventEmitter")
        future = asyncio.get_running_loop().create_future()
        if self._destroyed:
            future.set_exception(Destroyed())
            return future

        waiter = _Waiter(self, key, future)
        # Listener first: a bad key fails here, before anything needs undoing
        waiter.listener = self._once(key, lambda payload, _: waiter.resolve(payload))
        self._waiters.add(waiter)
        if timeout_ms:
            t = timeout_ms

            def on_timeout():
                self.log.debug(f"wait({key!r}) timed out after {t}ms")
                waiter.reject(TimedOut(key, t))

            try:
                waiter.timer = self._scheduler.call_later(timeout_ms, on_timeout)
            except BaseException:
                self._release(waiter)
                future.cancel()
                raise
            self._timeouts.add(waiter.timer)
        future.add_done_callback(waiter.on_future_done)
        return future

    def _release(self, waiter: _Waiter) -> None:
        self._waiters.discard(waiter)
        if waiter.timer is not None:
            self._scheduler.cancel(waiter.timer)
            self._timeouts.discard(waiter.timer)
            waiter.timer = None
        if waiter.listener is not None:
            self.off(waiter.key, waiter.listener)
            waiter.listener = None

    def destroy(self) -> None:
        """
        Reject all pending `wait()` futures with `Destroyed`, cancel all timers
        and remove all listeners. Calling it again is a no-op.
        """
        if self._destroyed:
            return
        self._destroyed = True
        self.log.debug(
            f"Destroying EventEmitter: {len(self._waiters)} pending waits,"
            f" {len(self._timeouts)} timers, {len(self)} listeners"
        )
        for waiter in list(self._waiters):
            waiter.reject(Destroyed())
        for timer in self._timeouts:
            self._scheduler.cancel(timer)
        self._timeouts.clear()
        for listeners in self._calls.values():
            listeners.clear()
        self._calls.clear()


__all__ = ["Emitter", "Listener"]
