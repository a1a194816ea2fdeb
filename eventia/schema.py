from typing import Any, Hashable, Iterator, Mapping, get_type_hints, is_typeddict

from pydantic import TypeAdapter, ValidationError

from eventia.errors import PayloadValidationError, UnknownEventError


class EventSchema:
    """
    Runtime contract mapping each event key to the type of its payload.

    The emitter itself never looks at payload types; when a schema is attached
    every `emit()` goes through `validate()` first, so listeners always see a
    payload of the declared type (coerced by pydantic where possible).

    A key declared as `None` is a "no payload" event.
    """

    def __init__(self, events: Mapping[Hashable, Any], strict: bool = True) -> None:
        self.strict = strict
        self.__adapters: dict[Hashable, TypeAdapter[Any]] = {
            key: TypeAdapter(tp) for key, tp in events.items()
        }

    @staticmethod
    def from_typeddict(cls: type, strict: bool = True) -> "EventSchema":
        """Build a schema from a TypedDict whose field names are the event keys."""
        if not is_typeddict(cls):
            raise TypeError(f"{cls!r} is not a TypedDict")
        return EventSchema(get_type_hints(cls), strict=strict)

    def keys(self) -> list[Hashable]:
        return list(self.__adapters.keys())

    def __contains__(self, key: Hashable) -> bool:
        return key in self.__adapters

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self.__adapters)

    def __len__(self) -> int:
        return len(self.__adapters)

    def validate(self, key: Hashable, payload: Any = None) -> Any:
        adapter = self.__adapters.get(key)
        if adapter is None:
            if self.strict:
                raise UnknownEventError(key)
            return payload
        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            raise PayloadValidationError(key, e) from e


__all__ = ["EventSchema"]
