from __future__ import annotations

import asyncio

from agency_log.services.timer_service import DigitalTimer, TimerState


def test_125_seconds_is_two_minutes():
    timer = DigitalTimer()
    assert timer.start()
    for _ in range(125):
        timer.tick()
    assert timer.display == "02:05"
    assert timer.stop() == 2
    assert timer.state == TimerState.STOPPED


def test_ticks_ignored_unless_running():
    timer = DigitalTimer()
    timer.tick()
    assert timer.seconds == 0

    timer.start()
    timer.tick()
    timer.stop()
    timer.tick()
    timer.tick()
    assert timer.seconds == 1


def test_start_only_from_not_started():
    timer = DigitalTimer()
    timer.start()
    timer.stop()
    assert not timer.start()
    assert timer.state == TimerState.STOPPED


def test_stop_when_never_started_returns_zero():
    timer = DigitalTimer()
    assert timer.stop() == 0
    assert timer.state == TimerState.NOT_STARTED


def test_reset_clears_everything():
    timer = DigitalTimer()
    timer.start()
    for _ in range(61):
        timer.tick()
    timer.reset()
    assert timer.state == TimerState.NOT_STARTED
    assert timer.seconds == 0
    assert timer.display == "00:00"


def test_no_ticker_without_event_loop():
    timer = DigitalTimer()
    timer.start()
    assert not timer.has_ticker
    timer.stop()


def test_on_tick_callback_errors_do_not_stop_counting():
    seen = []

    def on_tick(seconds):
        seen.append(seconds)
        raise RuntimeError("display went away")

    timer = DigitalTimer(on_tick=on_tick)
    timer.start()
    timer.tick()
    timer.tick()
    assert seen == [1, 2]
    assert timer.seconds == 2


# ---- asyncio ticker ----


def test_ticker_counts_and_is_cancelled_on_stop():
    async def scenario():
        timer = DigitalTimer(interval=0.01)
        timer.start()
        task = timer._task
        assert timer.has_ticker

        await asyncio.sleep(0.1)
        timer.stop()
        counted = timer.seconds

        await asyncio.sleep(0.05)
        return timer, task, counted

    timer, task, counted = asyncio.run(scenario())
    assert counted > 0
    assert timer.seconds == counted
    assert not timer.has_ticker
    assert task.done()


def test_reset_cancels_ticker():
    async def scenario():
        timer = DigitalTimer(interval=0.01)
        timer.start()
        task = timer._task
        timer.reset()
        await asyncio.sleep(0.03)
        return timer, task

    timer, task = asyncio.run(scenario())
    assert task.cancelled()
    assert timer.seconds == 0
