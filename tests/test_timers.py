import asyncio

from eventia import LoopScheduler, ManualScheduler
import pytest


def test_manual_scheduler_fires_in_deadline_order():
    clock = ManualScheduler()
    fired = []
    clock.call_later(30, lambda: fired.append("c"))
    clock.call_later(10, lambda: fired.append("a"))
    clock.call_later(10, lambda: fired.append("b"))
    assert clock.pending == 3
    assert clock.advance(10) == 2
    assert fired == ["a", "b"]
    assert clock.now == 10
    assert clock.advance(100) == 1
    assert fired == ["a", "b", "c"]
    assert clock.now == 110
    assert clock.pending == 0


def test_manual_scheduler_cancel():
    clock = ManualScheduler()
    fired = []
    handle = clock.call_later(5, lambda: fired.append("x"))
    clock.cancel(handle)
    assert clock.pending == 0
    assert clock.advance(10) == 0
    assert fired == []


def test_manual_scheduler_callback_can_schedule():
    clock = ManualScheduler()
    fired = []

    def first():
        fired.append(clock.now)
        clock.call_later(5, lambda: fired.append(clock.now))

    clock.call_later(5, first)
    clock.advance(20)
    assert fired == [5, 10]


@pytest.mark.asyncio
async def test_loop_scheduler():
    scheduler = LoopScheduler()
    done = asyncio.Event()
    scheduler.call_later(10, done.set)
    await asyncio.wait_for(done.wait(), 1)


@pytest.mark.asyncio
async def test_loop_scheduler_cancel():
    scheduler = LoopScheduler()
    fired = []
    handle = scheduler.call_later(10, lambda: fired.append(1))
    scheduler.cancel(handle)
    await asyncio.sleep(0.03)
    assert fired == []


def test_manual_scheduler_rejects_negative_advance():
    clock = ManualScheduler(now=10)
    with pytest.raises(ValueError):
        clock.advance(-1)
    assert clock.now == 10


def test_manual_scheduler_compacts_cancelled_timers():
    clock = ManualScheduler()
    handles = [clock.call_later(1000, lambda: None) for _ in range(10)]
    for h in handles[:6]:
        clock.cancel(h)
    assert clock.pending == 4
    # Compacted at the fifth cancel; the sixth waits for the next sweep
    assert clock.queued == 5
    # Cancelling twice, or after firing, changes nothing
    clock.cancel(handles[0])
    assert clock.pending == 4
    assert clock.advance(1000) == 4
    clock.cancel(handles[9])
    assert clock.pending == 0
    assert clock.queued == 0


def test_loop_scheduler_follows_the_running_loop():
    scheduler = LoopScheduler()
    fired = []

    async def run_once():
        done = asyncio.Event()
        scheduler.call_later(5, done.set)
        await asyncio.wait_for(done.wait(), 1)
        fired.append(True)

    asyncio.run(run_once())
    asyncio.run(run_once())
    assert fired == [True, True]
