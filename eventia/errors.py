from typing import Hashable


class EmitterError(RuntimeError):
    """Base class for every error raised by an emitter."""


class TimedOut(EmitterError):
    def __init__(self, key: Hashable, timeout_ms: float) -> None:
        self.key = key
        self.timeout_ms = timeout_ms
        super().__init__(f"Event {key!r} timed out after {timeout_ms}ms")


class Destroyed(EmitterError):
    def __init__(self, msg: str = "EventEmitter destroyed") -> None:
        super().__init__(msg)


class UnknownEventError(EmitterError, KeyError):
    def __init__(self, key: Hashable) -> None:
        self.key = key
        super().__init__(f"Unknown event: {key!r}")

    def __str__(self) -> str:
        return self.args[0]


class PayloadValidationError(EmitterError):
    def __init__(self, key: Hashable, original: Exception) -> None:
        self.key = key
        self.msg = str(original)
        self.original = original
        super().__init__(f"Invalid payload for event {key!r}: {self.msg}")


__all__ = [
    "EmitterError",
    "TimedOut",
    "Destroyed",
    "UnknownEventError",
    "PayloadValidationError",
]
