from typing import TypedDict
import asyncio
import logging
import dotenv

from eventia import Emitter, EventSchema, TimedOut, init_logging

dotenv.load_dotenv()


class Events(TypedDict):
    message: str
    data: int


async def consume(e: Emitter[str]):
    value = await e.wait("data")
    e.emit("message", str(value))


async def main():
    e = Emitter[str](schema=EventSchema.from_typeddict(Events))

    def print_message(text: str, _):
        print("Message:", text)

    @e.on("data")
    def on_data(value: int, emitter: Emitter[str]):
        print("Open", value)
        emitter.on("message", print_message)
        emitter.emit("message", "Dio")

    consumer = asyncio.create_task(consume(e))
    await asyncio.sleep(0.5)
    e.emit("data", 1)
    await consumer

    try:
        await e.wait("data", timeout_ms=100)
    except TimedOut as ex:
        print(ex)

    pending = e.wait("data", timeout_ms=1000)
    e.destroy()
    try:
        await pending
    except Exception as ex:
        print(f"{type(ex).__name__}: {ex}")


if __name__ == "__main__":
    init_logging(logging.DEBUG)
    asyncio.run(main())
