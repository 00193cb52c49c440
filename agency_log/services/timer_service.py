"""
Elapsed-time counter for Digital entries
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerState(Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class DigitalTimer:
    """Counts seconds of screen time while running.

    Inside a running event loop ``start()`` spawns one ticker task that calls
    ``tick()`` every ``interval`` seconds. Without a loop the owner drives
    ``tick()`` itself. The ticker is cancelled on every way out of RUNNING.
    """

    def __init__(self, interval: float = 1.0, on_tick: Optional[Callable[[int], None]] = None):
        self.interval = interval
        self.on_tick = on_tick
        self.state = TimerState.NOT_STARTED
        self.seconds = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING

    @property
    def has_ticker(self) -> bool:
        return self._task is not None

    @property
    def elapsed_minutes(self) -> int:
        return self.seconds // 60

    @property
    def display(self) -> str:
        return f"{self.seconds // 60:02d}:{self.seconds % 60:02d}"

    def start(self) -> bool:
        """Start counting from zero"""
        if self.state != TimerState.NOT_STARTED:
            logger.debug(f"⏰ Timer start ignored in state {self.state.value}")
            return False

        self.state = TimerState.RUNNING
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            self._task = loop.create_task(self._ticker())

        logger.info("⏰ Digital timer started")
        return True

    def tick(self) -> None:
        """One elapsed second; ignored unless running"""
        if self.state != TimerState.RUNNING:
            return

        self.seconds += 1
        if self.on_tick is not None:
            try:
                self.on_tick(self.seconds)
            except Exception as e:
                logger.error(f"❌ Timer tick callback failed: {e}")

    def stop(self) -> int:
        """Freeze the counter and return the whole minutes"""
        if self.state != TimerState.RUNNING:
            return self.elapsed_minutes

        self.state = TimerState.STOPPED
        self._cancel_ticker()
        logger.info(f"⏹️ Digital timer stopped at {self.display}")
        return self.elapsed_minutes

    def reset(self) -> None:
        self._cancel_ticker()
        self.state = TimerState.NOT_STARTED
        self.seconds = 0

    def _cancel_ticker(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _ticker(self):
        try:
            while self.state == TimerState.RUNNING:
                await asyncio.sleep(self.interval)
                self.tick()
        except asyncio.CancelledError:
            logger.debug("⏹️ Timer ticker cancelled")
            raise
