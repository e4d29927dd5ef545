from __future__ import annotations

import asyncio
import threading

from oauth_consumer.services.shutdown import ShutdownSignal


def test_fire_returns_true_only_once() -> None:
    signal = ShutdownSignal()
    assert signal.fired is False
    assert signal.fire() is True
    assert signal.fire() is False
    assert signal.fired is True


def test_wait_returns_after_fire_in_same_loop() -> None:
    signal = ShutdownSignal()

    async def scenario() -> None:
        waiter = asyncio.create_task(signal.wait())
        await asyncio.sleep(0)
        assert not waiter.done()
        signal.fire()
        await asyncio.wait_for(waiter, timeout=1)

    asyncio.run(scenario())


def test_wait_returns_immediately_if_already_fired() -> None:
    signal = ShutdownSignal()
    signal.fire()
    asyncio.run(asyncio.wait_for(signal.wait(), timeout=1))


def test_fire_from_another_thread_wakes_waiter() -> None:
    signal = ShutdownSignal()

    async def scenario() -> None:
        waiter = asyncio.create_task(signal.wait())
        await asyncio.sleep(0)
        thread = threading.Thread(target=signal.fire)
        thread.start()
        await asyncio.wait_for(waiter, timeout=1)
        thread.join()

    asyncio.run(scenario())
