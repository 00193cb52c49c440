#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Agency Log v1.0 - Core Data Models
Journal entries, typed payloads and the persisted application state

Version: 1.0.0
"""

import math
from typing import Dict, List, Optional, Union, Any, Type
from dataclasses import dataclass, field
from enum import Enum
import logging

from agency_log.utils.validators import is_valid_date

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class JournalError(Exception):
    """Base error for the journal"""
    pass

class ValidationError(JournalError):
    """A persisted record has the wrong shape"""
    pass

# ===== ENUMS =====

class EntryType(Enum):
    """Kinds of journal entries"""
    SLEEP = "SLEEP"
    FOOD = "FOOD"
    DIGITAL = "DIGITAL"
    OUTPUT = "OUTPUT"

# ===== VALIDATION HELPERS =====

def validate_iso_date(value: Any, field_name: str = "date") -> str:
    """Check a YYYY-MM-DD string"""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    if not is_valid_date(value):
        raise ValidationError(f"Invalid {field_name}: {value!r}")
    return value

def _require(data: Dict[str, Any], key: str, expected: Union[type, tuple]) -> Any:
    if key not in data:
        raise ValidationError(f"Missing field: {key}")
    value = data[key]
    if not isinstance(value, expected) or isinstance(value, bool) and expected is not bool:
        raise ValidationError(f"Field {key} has wrong type: {type(value).__name__}")
    return value

def _require_number(data: Dict[str, Any], key: str) -> Union[int, float]:
    value = _require(data, key, (int, float))
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Field {key} must be a finite number")
    return value

# ===== PAYLOADS =====

@dataclass
class SleepData:
    """Bed time, wake time and a pre-sleep thought"""
    bed_time: str = ""
    wake_time: str = ""
    comment: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'bedTime': self.bed_time, 'wakeTime': self.wake_time, 'comment': self.comment}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SleepData":
        return cls(
            bed_time=_require(data, 'bedTime', str),
            wake_time=_require(data, 'wakeTime', str),
            comment=_require(data, 'comment', str)
        )

@dataclass
class FoodData:
    """Meal description with an optional image (data URL or base64 text)"""
    description: str = ""
    image: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'description': self.description, 'image': self.image}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FoodData":
        image = data.get('image') or ""
        if not isinstance(image, str):
            raise ValidationError("Field image has wrong type")
        return cls(description=_require(data, 'description', str), image=image)

@dataclass
class DigitalData:
    """Screen time in whole minutes and how the user felt afterwards"""
    duration_minutes: int = 0
    mood: str = ""

    def __post_init__(self):
        assert isinstance(self.duration_minutes, int) and self.duration_minutes >= 0, \
            f"duration_minutes must be a non-negative int, got {self.duration_minutes!r}"

    def to_dict(self) -> Dict[str, Any]:
        return {'durationMinutes': self.duration_minutes, 'mood': self.mood}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DigitalData":
        minutes = _require_number(data, 'durationMinutes')
        if minutes < 0:
            raise ValidationError("durationMinutes must not be negative")
        return cls(duration_minutes=int(minutes), mood=_require(data, 'mood', str))

@dataclass
class OutputData:
    """Something the user made or did"""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {'description': self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputData":
        return cls(description=_require(data, 'description', str))

EntryData = Union[SleepData, FoodData, DigitalData, OutputData]

PAYLOAD_TYPES: Dict[EntryType, Type] = {
    EntryType.SLEEP: SleepData,
    EntryType.FOOD: FoodData,
    EntryType.DIGITAL: DigitalData,
    EntryType.OUTPUT: OutputData,
}

def payload_from_dict(entry_type: EntryType, data: Dict[str, Any]) -> EntryData:
    """Parse a payload for the given type"""
    if not isinstance(data, dict):
        raise ValidationError("data must be an object")
    return PAYLOAD_TYPES[entry_type].from_dict(data)

# ===== ENTRIES =====

@dataclass
class EntryDraft:
    """An entry before the store gives it an id"""
    date: str
    timestamp: int
    type: EntryType
    data: EntryData
    ai_feedback: str = ""

    def __post_init__(self):
        assert isinstance(self.data, PAYLOAD_TYPES[self.type]), \
            f"{type(self.data).__name__} payload does not match {self.type.value}"

@dataclass
class Entry:
    """One logged event on one calendar day"""
    id: str
    date: str  # YYYY-MM-DD
    timestamp: int  # epoch milliseconds
    type: EntryType
    data: EntryData
    ai_feedback: str = ""

    def __post_init__(self):
        assert isinstance(self.data, PAYLOAD_TYPES[self.type]), \
            f"{type(self.data).__name__} payload does not match {self.type.value}"

    @classmethod
    def from_draft(cls, entry_id: str, draft: EntryDraft) -> "Entry":
        return cls(
            id=entry_id,
            date=draft.date,
            timestamp=draft.timestamp,
            type=draft.type,
            data=draft.data,
            ai_feedback=draft.ai_feedback
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'date': self.date,
            'timestamp': self.timestamp,
            'type': self.type.value,
            'data': self.data.to_dict(),
            'aiFeedback': self.ai_feedback
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        if not isinstance(data, dict):
            raise ValidationError("entry must be an object")

        try:
            entry_type = EntryType(data.get('type'))
        except ValueError:
            raise ValidationError(f"Unknown entry type: {data.get('type')!r}")

        timestamp = _require_number(data, 'timestamp')
        ai_feedback = data.get('aiFeedback') or ""
        if not isinstance(ai_feedback, str):
            raise ValidationError("aiFeedback must be a string")

        return cls(
            id=_require(data, 'id', str),
            date=validate_iso_date(data.get('date')),
            timestamp=int(timestamp),
            type=entry_type,
            data=payload_from_dict(entry_type, data.get('data')),
            ai_feedback=ai_feedback
        )

# ===== APPLICATION STATE =====

@dataclass
class AppState:
    """Everything the journal persists"""
    start_date: str
    entries: List[Entry] = field(default_factory=list)
    daily_moods: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def fresh(cls, today: str) -> "AppState":
        """New state whose cycle starts today"""
        return cls(start_date=validate_iso_date(today, "start_date"))

    def mood_for(self, day: str) -> Optional[str]:
        return self.daily_moods.get(day)

    def has_entry_id(self, entry_id: str) -> bool:
        return any(e.id == entry_id for e in self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'startDate': self.start_date,
            'entries': [e.to_dict() for e in self.entries],
            'dailyMoods': dict(self.daily_moods)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppState":
        if not isinstance(data, dict):
            raise ValidationError("state must be an object")

        entries = data.get('entries', [])
        if not isinstance(entries, list):
            raise ValidationError("entries must be a list")

        moods = data.get('dailyMoods', {})
        if not isinstance(moods, dict):
            raise ValidationError("dailyMoods must be an object")
        for day, mood in moods.items():
            validate_iso_date(day, "dailyMoods key")
            if not isinstance(mood, str):
                raise ValidationError(f"Mood for {day} must be a string")

        return cls(
            start_date=validate_iso_date(data.get('startDate'), "startDate"),
            entries=[Entry.from_dict(e) for e in entries],
            daily_moods=dict(moods)
        )


__all__ = [
    'JournalError',
    'ValidationError',
    'EntryType',
    'SleepData',
    'FoodData',
    'DigitalData',
    'OutputData',
    'EntryData',
    'PAYLOAD_TYPES',
    'payload_from_dict',
    'validate_iso_date',
    'EntryDraft',
    'Entry',
    'AppState'
]
