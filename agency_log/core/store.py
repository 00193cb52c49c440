#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - Journal Store
Write-through persistence of the whole journal state under one storage key

Version: 1.0.0
"""

import os
import json
import time
import uuid
import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Protocol
from dataclasses import dataclass, replace
import logging

from agency_log.core import derivations
from agency_log.core.models import (
    AppState, Entry, EntryDraft, JournalError, ValidationError, validate_iso_date
)
from agency_log.constants import APP_STORAGE_KEY
from agency_log.utils.datetime_utils import Clock

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(JournalError):
    """The storage backend could not write"""
    pass

# ===== STORAGE BACKENDS =====

class KeyValueStorage(Protocol):
    """localStorage-like string storage"""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed storage"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class FileStorage:
    """One JSON file per key inside ``data_dir``"""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding='utf-8')

    def set_item(self, key: str, value: str) -> None:
        """Atomic save through a temporary file"""
        path = self.path_for(key)
        temp_file = path.with_name(path.name + '.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())

            # the temp file must parse before it replaces the blob
            with open(temp_file, 'r', encoding='utf-8') as f:
                json.load(f)

            os.replace(temp_file, path)

        except (OSError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            raise StorageError(f"Failed to write {path}: {e}") from e

    def quarantine(self, key: str) -> Optional[Path]:
        """Copy a corrupt blob aside so a fresh state does not destroy it"""
        path = self.path_for(key)
        if not path.exists():
            return None

        backup = path.with_name(f"{key}.corrupt-{int(time.time())}.json")
        try:
            shutil.copy2(path, backup)
            logger.warning(f"⚠️ Corrupt journal copied to {backup}")
            return backup
        except OSError as e:
            logger.error(f"❌ Could not copy corrupt journal: {e}")
            return None

# ===== STORE =====

@dataclass
class StoreStats:
    """Store counters"""
    load_count: int = 0
    save_count: int = 0
    error_count: int = 0
    recovered_from_corruption: bool = False
    last_save: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'load_count': self.load_count,
            'save_count': self.save_count,
            'error_count': self.error_count,
            'recovered_from_corruption': self.recovered_from_corruption,
            'last_save': self.last_save
        }


class JournalStore:
    """Owns the AppState and writes all of it on every mutation.

    Entries are append-only and ``start_date`` never changes after the first
    run. Pass the store to whatever needs it; there is no module-level instance.
    """

    def __init__(self, storage: KeyValueStorage, clock: Optional[Clock] = None,
                 key: str = APP_STORAGE_KEY):
        self.storage = storage
        self.clock = clock or Clock()
        self.key = key
        self.stats = StoreStats()
        self._state: Optional[AppState] = None

    # ===== LOADING =====

    def load(self) -> AppState:
        """Return the persisted state, or a fresh one. Never raises."""
        self.stats.load_count += 1

        try:
            raw = self.storage.get_item(self.key)
        except Exception as e:
            logger.error(f"❌ Failed to read journal storage: {e}")
            self.stats.error_count += 1
            raw = None

        if raw is None or not raw.strip():
            logger.info("📂 No saved journal, starting a new 21-day cycle")
            return self._start_fresh()

        try:
            self._state = AppState.from_dict(json.loads(raw))
            logger.info(f"📂 Journal loaded: {len(self._state.entries)} entries since {self._state.start_date}")
        except (ValueError, TypeError, OverflowError, RecursionError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError; deep nesting raises RecursionError
            logger.error(f"❌ Saved journal is corrupted, starting fresh: {e}")
            self.stats.error_count += 1
            self.stats.recovered_from_corruption = True
            quarantine = getattr(self.storage, 'quarantine', None)
            if quarantine is not None:
                quarantine(self.key)
            return self._start_fresh()

        return self._state

    def _start_fresh(self) -> AppState:
        # the cycle start is fixed by the first write
        self._state = AppState.fresh(self.clock.today())
        try:
            self.persist(self._state)
        except Exception as e:
            logger.error(f"❌ Could not save the new journal: {e}")
        return self._state

    @property
    def state(self) -> AppState:
        if self._state is None:
            self.load()
        return self._state

    # ===== MUTATIONS =====

    def persist(self, state: Optional[AppState] = None) -> None:
        """Serialize the whole state under the storage key"""
        state = state if state is not None else self.state
        payload = json.dumps(state.to_dict(), ensure_ascii=False)

        try:
            self.storage.set_item(self.key, payload)
        except Exception:
            self.stats.error_count += 1
            raise

        self.stats.save_count += 1
        self.stats.last_save = datetime.now().isoformat()

    def append(self, draft: EntryDraft) -> Entry:
        """Give the draft a fresh id, append it and persist.

        The new state is written before it replaces the in-memory one, so a
        failed write leaves the store untouched.
        """
        validate_iso_date(draft.date)
        current = self.state
        entry = Entry.from_draft(self._new_id(current), draft)

        updated = replace(current, entries=current.entries + [entry])
        self.persist(updated)
        self._state = updated

        logger.info(f"📝 {entry.type.value} entry {entry.id} saved for {entry.date}")
        return entry

    def set_mood(self, day: str, mood: str) -> None:
        """Upsert the mood for a date; latest write wins"""
        validate_iso_date(day, "mood date")
        if not mood or not mood.strip():
            logger.warning(f"⚠️ Ignoring blank mood for {day}")
            return

        current = self.state
        if current.daily_moods.get(day) == mood:
            return

        updated = replace(current, daily_moods={**current.daily_moods, day: mood})
        self.persist(updated)
        self._state = updated
        logger.info(f"🙂 Mood for {day} set to {mood}")

    def _new_id(self, state: AppState) -> str:
        while True:
            entry_id = str(uuid.uuid4())
            if not state.has_entry_id(entry_id):
                return entry_id

    # ===== READS =====

    @property
    def entries(self) -> List[Entry]:
        return list(self.state.entries)

    @property
    def start_date(self) -> str:
        return self.state.start_date

    def get_mood(self, day: str) -> Optional[str]:
        return self.state.mood_for(day)

    def entries_for_date(self, day: str) -> List[Entry]:
        """The date's entries, newest first"""
        return derivations.entries_for_date(self.state.entries, day)

    def get_stats(self) -> Dict[str, Any]:
        stats = self.stats.to_dict()
        stats['entries'] = len(self.state.entries)
        stats['moods'] = len(self.state.daily_moods)
        return stats


__all__ = [
    'StorageError',
    'KeyValueStorage',
    'MemoryStorage',
    'FileStorage',
    'StoreStats',
    'JournalStore'
]
