#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - Journal Controller
Top-level UI state and the event surface a front end (or a test) drives

Version: 1.0.0
"""

from enum import Enum
from typing import Any, Dict, Optional
import logging

from agency_log.config import JournalConfig
from agency_log.constants import MOOD_OPTIONS
from agency_log.core import derivations
from agency_log.core.models import Entry, EntryType
from agency_log.core.store import FileStorage, JournalStore
from agency_log.services.ai_service import FeedbackGateway
from agency_log.services.composer import EntryComposer
from agency_log.shared.models import DashboardView, StatsView
from agency_log.utils.datetime_utils import Clock
from agency_log.utils.logger import setup_logging
from agency_log.utils.validators import is_valid_date

logger = logging.getLogger(__name__)


class View(Enum):
    DASHBOARD = "dashboard"
    STATS = "stats"


class JournalController:
    """Owns the journal for the lifetime of the process.

    Every user action goes through a method here; ``dashboard()`` and
    ``stats()`` recompute the read models from the store on each call.
    """

    def __init__(self, store: JournalStore, gateway: FeedbackGateway,
                 clock: Optional[Clock] = None, timer_interval: float = 1.0):
        self.store = store
        self.gateway = gateway
        self.clock = clock or store.clock
        self.composer = EntryComposer(gateway, store.append, self.clock, timer_interval)

        self.store.load()

        self.view = View.DASHBOARD
        self.selected_date = self.clock.today()
        self.is_form_open = False
        self.stats_tab = EntryType.SLEEP
        self.ai_summary = ""
        self.summary_loading = False

        logger.info(f"🚀 Journal ready: cycle started {self.store.start_date}")

    # ===== NAVIGATION =====

    def select_date(self, day: str) -> bool:
        if not is_valid_date(day):
            logger.warning(f"⚠️ Ignoring invalid date selection: {day!r}")
            return False
        self.selected_date = day
        return True

    def show_dashboard(self):
        self.view = View.DASHBOARD

    def show_stats(self):
        self.view = View.STATS

    def switch_stats_tab(self, tab: EntryType):
        self.stats_tab = tab
        self.ai_summary = ""

    # ===== ENTRY FORM =====

    def open_form(self):
        """New post-it: always logs against today"""
        self.selected_date = self.clock.today()
        self.is_form_open = True

    def close_form(self):
        self.composer.reset()
        self.is_form_open = False

    def choose_entry_type(self, entry_type: EntryType) -> bool:
        return self.composer.choose_type(entry_type)

    def start_timer(self) -> bool:
        return self.composer.start_timer()

    def stop_timer(self) -> int:
        return self.composer.stop_timer()

    async def submit_entry(self) -> Optional[Entry]:
        entry = await self.composer.submit()
        if entry is None:
            return None

        self.is_form_open = False
        self.view = View.DASHBOARD
        self.selected_date = entry.date
        return entry

    # ===== MOODS =====

    def set_mood(self, mood: str):
        """Mood for the selected date"""
        try:
            self.store.set_mood(self.selected_date, mood)
        except Exception as e:
            logger.error(f"❌ Could not save mood for {self.selected_date}: {e}")

    # ===== AI SUMMARY =====

    async def request_weekly_summary(self) -> str:
        tab = self.stats_tab
        self.summary_loading = True
        try:
            series = derivations.build_stats_series(self.store.entries)
            summary = await self.gateway.weekly_summary(tab, derivations.summary_payload(series, tab))
        finally:
            self.summary_loading = False

        # a tab switch while waiting makes this answer stale
        if tab == self.stats_tab:
            self.ai_summary = summary
        return summary

    # ===== READ MODELS =====

    def dashboard(self) -> DashboardView:
        state = self.store.state
        today = self.clock.today()
        day = self.selected_date

        return DashboardView(
            selected_date=day,
            title="TODAY'S LOG" if day == today else f"LOG: {day}",
            progress=derivations.cycle_progress(state.start_date, today),
            grid=derivations.build_day_grid(
                state.start_date, state.entries, state.daily_moods, today, day
            ),
            aggregate=derivations.aggregate_for_date(state.entries, day),
            entries=[
                derivations.entry_card(e, self.clock.tz.zone)
                for e in derivations.entries_for_date(state.entries, day)
            ],
            mood=state.mood_for(day),
            mood_options=list(MOOD_OPTIONS),
            is_form_open=self.is_form_open
        )

    def stats(self) -> StatsView:
        entries = self.store.entries
        tab = self.stats_tab

        return StatsView(
            active_tab=tab,
            metric=derivations.series_metric(tab),
            series=derivations.build_stats_series(entries),
            gallery=derivations.food_gallery(entries) if tab == EntryType.FOOD else [],
            outputs=derivations.output_list(entries) if tab == EntryType.OUTPUT else [],
            summary=self.ai_summary,
            summary_loading=self.summary_loading
        )

    # ===== LIFECYCLE =====

    def health_check(self) -> Dict[str, Any]:
        return {
            'store': self.store.get_stats(),
            'ai': self.gateway.get_health_status()
        }

    def shutdown(self):
        """Stop anything periodic"""
        self.composer.reset()
        self.is_form_open = False
        logger.info("🛑 Journal controller shut down")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()


def create_controller(config: Optional[JournalConfig] = None,
                      configure_logging: bool = True) -> JournalController:
    """Wire logging, storage, store, gateway and clock from configuration.

    Pass ``configure_logging=False`` when the host application already owns
    the logging setup.
    """
    config = config or JournalConfig.from_env()
    if configure_logging:
        setup_logging(config)

    clock = Clock(config.timezone)
    store = JournalStore(FileStorage(config.storage.data_dir), clock, config.storage.storage_key)
    gateway = FeedbackGateway(config.ai)
    return JournalController(store, gateway, clock, config.timer.tick_interval)


__all__ = ['View', 'JournalController', 'create_controller']
