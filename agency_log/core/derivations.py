#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - Derived Views
Day grid, per-day aggregates and chart series computed from the journal state

Every function here is pure: same inputs, same output, no I/O. They are
recomputed on each read; with 21 days of a few entries each there is nothing
worth caching.

Version: 1.0.0
"""

import json
import math
from datetime import datetime
from collections import OrderedDict
from typing import Dict, List, Optional, Callable

import pytz

from agency_log.core.models import Entry, EntryType
from agency_log.constants import MAX_DAYS, SLEEP_HOURS_PLACEHOLDER, TYPE_CONFIG
from agency_log.shared.models import (
    DayDescriptor, CycleProgress, DateAggregate, StatsBucket, GalleryItem, EntryCard
)
from agency_log.utils.datetime_utils import (
    add_days, days_between, parse_date, short_label, weekday_short
)

# ===== DAY GRID =====

def build_day_grid(start_date: str, entries: List[Entry], daily_moods: Dict[str, str],
                   today: str, selected_date: Optional[str]) -> List[DayDescriptor]:
    """The fixed 21-day strip starting at ``start_date``.

    The window never moves with ``today``; a day outside it simply has no
    ``is_today`` flag set.
    """
    dates_with_entries = {e.date for e in entries}
    grid = []

    for i in range(MAX_DAYS):
        day = add_days(start_date, i)
        has_entry = day in dates_with_entries
        is_complete = has_entry and bool(daily_moods.get(day))

        if is_complete:
            badge = "🌟"
        elif has_entry:
            badge = "📝"
        else:
            badge = ""

        grid.append(DayDescriptor(
            date=day,
            day_index=i + 1,
            has_entry=has_entry,
            is_complete=is_complete,
            is_selected=day == selected_date,
            is_today=day == today,
            day_of_month=parse_date(day).day,
            weekday=weekday_short(day),
            badge=badge
        ))

    return grid

def current_cycle_day(start_date: str, today: str) -> int:
    """1-based day number; the absolute difference keeps pre-start dates positive"""
    return math.ceil(abs(days_between(start_date, today))) + 1

def cycle_progress(start_date: str, today: str) -> CycleProgress:
    day = current_cycle_day(start_date, today)
    return CycleProgress(
        current_day=day,
        max_days=MAX_DAYS,
        ratio=min(day / MAX_DAYS, 1.0),
        label=f"Cycle Day {day}/{MAX_DAYS}"
    )

# ===== SELECTED DATE =====

def sort_newest_first(entries: List[Entry]) -> List[Entry]:
    return sorted(entries, key=lambda e: e.timestamp, reverse=True)

def entries_for_date(entries: List[Entry], day: str) -> List[Entry]:
    return sort_newest_first([e for e in entries if e.date == day])

def aggregate_for_date(entries: List[Entry], day: str) -> DateAggregate:
    aggregate = DateAggregate(date=day)

    for entry in entries:
        if entry.date != day:
            continue
        if entry.type == EntryType.SLEEP:
            aggregate.sleep_count += 1
        elif entry.type == EntryType.FOOD:
            aggregate.food_count += 1
        elif entry.type == EntryType.DIGITAL:
            aggregate.digital_minutes += entry.data.duration_minutes
        elif entry.type == EntryType.OUTPUT:
            aggregate.output_count += 1
        else:
            raise ValueError(f"Unhandled entry type: {entry.type}")

    return aggregate

def entry_card(entry: Entry, timezone: str = "UTC") -> EntryCard:
    local = datetime.fromtimestamp(entry.timestamp / 1000, tz=pytz.utc).astimezone(pytz.timezone(timezone))
    config = TYPE_CONFIG[entry.type]
    return EntryCard(
        entry_id=entry.id,
        type=entry.type,
        label=config['label'],
        icon=config['icon'],
        time_label=local.strftime("%H:%M"),
        data=entry.data.to_dict(),
        ai_feedback=entry.ai_feedback
    )

# ===== STATS SERIES =====

def _add_sleep(bucket: StatsBucket, entry: Entry) -> None:
    # no bed/wake arithmetic yet, see SLEEP_HOURS_PLACEHOLDER
    bucket.sleep_hours = SLEEP_HOURS_PLACEHOLDER

def _add_food(bucket: StatsBucket, entry: Entry) -> None:
    bucket.food_count += 1

def _add_digital(bucket: StatsBucket, entry: Entry) -> None:
    bucket.digital_mins += entry.data.duration_minutes

def _add_output(bucket: StatsBucket, entry: Entry) -> None:
    bucket.output_count += 1

_SERIES_ACCUMULATORS: Dict[EntryType, Callable[[StatsBucket, Entry], None]] = {
    EntryType.SLEEP: _add_sleep,
    EntryType.FOOD: _add_food,
    EntryType.DIGITAL: _add_digital,
    EntryType.OUTPUT: _add_output,
}

SERIES_METRICS: Dict[EntryType, str] = {
    EntryType.SLEEP: 'sleep_hours',
    EntryType.DIGITAL: 'digital_mins',
    EntryType.FOOD: 'food_count',
    EntryType.OUTPUT: 'output_count',
}

def build_stats_series(entries: List[Entry]) -> List[StatsBucket]:
    """One bucket per calendar date, oldest first, last 21 dates only"""
    buckets: "OrderedDict[str, StatsBucket]" = OrderedDict()

    for entry in sorted(entries, key=lambda e: (e.date, e.timestamp)):
        bucket = buckets.get(entry.date)
        if bucket is None:
            bucket = StatsBucket(date=entry.date, date_label=short_label(entry.date))
            buckets[entry.date] = bucket
        _SERIES_ACCUMULATORS[entry.type](bucket, entry)

    return list(buckets.values())[-MAX_DAYS:]

def series_metric(tab: EntryType) -> str:
    return SERIES_METRICS[tab]

def summary_payload(series: List[StatsBucket], tab: EntryType) -> str:
    """Compact JSON sent with a weekly-summary request"""
    metric = series_metric(tab)
    return json.dumps([
        {'date': bucket.date_label, 'val': getattr(bucket, metric)}
        for bucket in series
    ])

# ===== STATS TABS =====

def food_gallery(entries: List[Entry]) -> List[GalleryItem]:
    return [
        GalleryItem(
            entry_id=e.id,
            date=e.date,
            day_of_month=parse_date(e.date).day,
            description=e.data.description,
            image=e.data.image
        )
        for e in entries if e.type == EntryType.FOOD
    ]

def output_list(entries: List[Entry]) -> List[str]:
    return [e.data.description for e in entries if e.type == EntryType.OUTPUT]


__all__ = [
    'build_day_grid',
    'current_cycle_day',
    'cycle_progress',
    'sort_newest_first',
    'entries_for_date',
    'aggregate_for_date',
    'entry_card',
    'build_stats_series',
    'SERIES_METRICS',
    'series_metric',
    'summary_payload',
    'food_gallery',
    'output_list'
]
