from typing import TypedDict

from pydantic import BaseModel
from eventia import Emitter, EmitterConfig, EventSchema, PayloadValidationError, UnknownEventError
import pytest


class Point(BaseModel):
    x: int
    y: int


class Events(TypedDict):
    message: str
    data: int
    moved: Point
    ready: None


def test_from_typeddict():
    schema = EventSchema.from_typeddict(Events)
    assert set(schema.keys()) == {"message", "data", "moved", "ready"}
    assert "data" in schema
    assert "other" not in schema
    assert len(schema) == 4


def test_from_typeddict_rejects_other_types():
    with pytest.raises(TypeError):
        EventSchema.from_typeddict(dict)


def test_validate_coerces():
    schema = EventSchema.from_typeddict(Events)
    assert schema.validate("data", "7") == 7
    p = schema.validate("moved", {"x": 1, "y": 2})
    assert isinstance(p, Point) and p.x == 1 and p.y == 2
    assert schema.validate("ready") is None


def test_validate_errors():
    schema = EventSchema.from_typeddict(Events)
    with pytest.raises(PayloadValidationError) as info:
        schema.validate("data", "not a number")
    assert info.value.key == "data"
    with pytest.raises(PayloadValidationError):
        schema.validate("ready", 1)
    with pytest.raises(UnknownEventError):
        schema.validate("other", 1)
    with pytest.raises(KeyError):
        schema.validate("other", 1)


def test_non_strict_passes_unknown_keys():
    schema = EventSchema({"data": int}, strict=False)
    assert schema.validate("other", object) is object


def test_emitter_validates_payloads():
    e = Emitter[str](schema=EventSchema.from_typeddict(Events))
    received = []
    e.on("moved", lambda p, _: received.append(p))
    e.emit("moved", {"x": "3", "y": 4})
    assert received == [Point(x=3, y=4)]
    with pytest.raises(PayloadValidationError):
        e.emit("moved", {"x": "left"})
    assert len(received) == 1


def test_emitter_validation_can_be_disabled():
    e = Emitter[str](
        schema=EventSchema.from_typeddict(Events),
        config=EmitterConfig(validate_payloads=False),
    )
    received = []
    e.on("data", lambda p, _: received.append(p))
    e.emit("data", "raw")
    assert received == ["raw"]
