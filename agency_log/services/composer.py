#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - Entry Composer
The new post-it form: type-specific fields, the Digital timer and submission

Version: 1.0.0
"""

from enum import Enum
from typing import Callable, Optional
import logging

from agency_log.core.models import (
    Entry, EntryDraft, EntryType,
    SleepData, FoodData, DigitalData, OutputData
)
from agency_log.services.ai_service import FeedbackGateway
from agency_log.services.timer_service import DigitalTimer, TimerState
from agency_log.utils.datetime_utils import Clock
from agency_log.utils.media_utils import encode_image, is_data_url
from agency_log.utils.validators import is_blank, is_valid_clock_time

logger = logging.getLogger(__name__)


class ComposerState(Enum):
    IDLE = "idle"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SAVED = "saved"
    FAILED = "failed"


def sleep_duration_description(bed_time: str, wake_time: str) -> str:
    """'23:30' -> '07:00' gives '7h 30m'; anything unparseable gives 'some hours'"""
    if not (is_valid_clock_time(bed_time) and is_valid_clock_time(wake_time)):
        return "some hours"

    bed_h, bed_m = (int(x) for x in bed_time.split(":"))
    wake_h, wake_m = (int(x) for x in wake_time.split(":"))
    minutes = ((wake_h * 60 + wake_m) - (bed_h * 60 + bed_m)) % (24 * 60)
    return f"{minutes // 60}h {minutes % 60:02d}m"


class EntryComposer:
    """Collects one entry and hands it to ``on_save``.

    ``on_save`` receives the finished draft and returns the stored Entry
    (normally ``JournalStore.append``). Anything that raises during submit
    leaves the fields in place so the user can try again.
    """

    def __init__(self, gateway: FeedbackGateway, on_save: Callable[[EntryDraft], Entry],
                 clock: Optional[Clock] = None, timer_interval: float = 1.0):
        self.gateway = gateway
        self.on_save = on_save
        self.clock = clock or Clock()
        self.timer = DigitalTimer(interval=timer_interval)
        self._generation = 0
        self._clear_fields()
        self.state = ComposerState.IDLE
        self.last_error: Optional[str] = None

    def _clear_fields(self):
        self.entry_type = EntryType.SLEEP
        self.sleep = SleepData()
        self.food = FoodData()
        self.output = OutputData()
        self.digital_mood = ""

    # ===== FIELDS =====

    def _touch(self):
        if self.state in (ComposerState.IDLE, ComposerState.SAVED, ComposerState.FAILED):
            self.state = ComposerState.EDITING

    def choose_type(self, entry_type: EntryType) -> bool:
        if self.timer.is_running:
            logger.debug("Type change ignored while the timer runs")
            return False
        self.entry_type = entry_type
        return True

    def update_sleep(self, bed_time: Optional[str] = None, wake_time: Optional[str] = None,
                     comment: Optional[str] = None):
        if bed_time is not None:
            self.sleep.bed_time = bed_time
        if wake_time is not None:
            self.sleep.wake_time = wake_time
        if comment is not None:
            self.sleep.comment = comment
        self._touch()

    def update_food(self, description: str):
        self.food.description = description
        self._touch()

    def attach_food_image(self, raw: bytes, mime_type: str = "image/jpeg"):
        self.food.image = encode_image(raw, mime_type)
        self._touch()

    def attach_food_image_data_url(self, data_url: str):
        """Accepts a data URL or bare base64; always stores a data URL"""
        image = data_url.strip()
        if image and not is_data_url(image):
            image = f"data:image/jpeg;base64,{image}"
        self.food.image = image
        self._touch()

    def clear_food_image(self):
        self.food.image = ""

    def update_output(self, description: str):
        self.output.description = description
        self._touch()

    def set_digital_mood(self, mood: str):
        self.digital_mood = mood
        self._touch()

    # ===== TIMER =====

    def start_timer(self) -> bool:
        if self.entry_type != EntryType.DIGITAL:
            return False
        started = self.timer.start()
        if started:
            self._touch()
        return started

    def stop_timer(self) -> int:
        return self.timer.stop()

    # ===== SUBMIT =====

    @property
    def can_submit(self) -> bool:
        if self.state == ComposerState.SUBMITTING or self.timer.is_running:
            return False
        if self.entry_type == EntryType.DIGITAL:
            return self.timer.state == TimerState.STOPPED and not is_blank(self.digital_mood)
        return True

    async def _build_sleep(self):
        data = SleepData(self.sleep.bed_time, self.sleep.wake_time, self.sleep.comment)
        duration = sleep_duration_description(data.bed_time, data.wake_time)
        return data, await self.gateway.feedback_for_sleep(data.comment, duration)

    async def _build_food(self):
        data = FoodData(self.food.description, self.food.image)
        return data, await self.gateway.feedback_for_food(data.description, data.image or None)

    async def _build_digital(self):
        # no AI call for screen time
        return DigitalData(duration_minutes=self.timer.elapsed_minutes, mood=self.digital_mood), ""

    async def _build_output(self):
        data = OutputData(self.output.description)
        return data, await self.gateway.praise_for_output(data.description)

    async def submit(self) -> Optional[Entry]:
        """Build, get feedback, save. Returns None when nothing was saved."""
        if not self.can_submit:
            logger.debug(f"Submit ignored: state={self.state.value}, timer={self.timer.state.value}")
            return None

        builders = {
            EntryType.SLEEP: self._build_sleep,
            EntryType.FOOD: self._build_food,
            EntryType.DIGITAL: self._build_digital,
            EntryType.OUTPUT: self._build_output,
        }

        generation = self._generation
        self.state = ComposerState.SUBMITTING
        self.last_error = None

        try:
            entry_date = self.clock.today()
            timestamp = self.clock.timestamp_ms()
            data, feedback = await builders[self.entry_type]()

            if generation != self._generation:
                logger.info("🗑️ Form was closed during submit, result discarded")
                return None

            draft = EntryDraft(
                date=entry_date,
                timestamp=timestamp,
                type=self.entry_type,
                data=data,
                ai_feedback=feedback
            )
            entry = self.on_save(draft)

        except Exception as e:
            logger.exception(f"❌ Entry submit failed: {e}")
            if generation == self._generation:
                self.state = ComposerState.FAILED
                self.last_error = str(e)
            return None

        self.reset()
        self.state = ComposerState.SAVED
        return entry

    def reset(self):
        """Clear the form and stop the timer"""
        self._generation += 1
        self.timer.reset()
        self._clear_fields()
        self.state = ComposerState.IDLE
        self.last_error = None
