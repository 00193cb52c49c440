"""Tests for entry payloads, entries and AppState serialization."""

from __future__ import annotations

import pytest

from agency_log.core.models import (
    PAYLOAD_TYPES,
    AppState,
    DigitalData,
    Entry,
    EntryDraft,
    EntryType,
    FoodData,
    OutputData,
    SleepData,
    ValidationError,
)


def _entry(**overrides) -> Entry:
    fields = dict(
        id="e1",
        date="2024-01-05",
        timestamp=1704447000000,
        type=EntryType.SLEEP,
        data=SleepData("23:00", "07:00", "read a book"),
        ai_feedback="Sweet dreams! ✨",
    )
    fields.update(overrides)
    return Entry(**fields)


# ---- payload dispatch ----


def test_every_entry_type_has_a_payload_class():
    assert set(PAYLOAD_TYPES) == set(EntryType)


def test_mismatched_payload_fails_fast():
    with pytest.raises(AssertionError):
        _entry(type=EntryType.FOOD)


def test_mismatched_draft_payload_fails_fast():
    with pytest.raises(AssertionError):
        EntryDraft(date="2024-01-05", timestamp=0, type=EntryType.OUTPUT, data=DigitalData(3, "meh"))


def test_negative_digital_minutes_fails_fast():
    with pytest.raises(AssertionError):
        DigitalData(duration_minutes=-1, mood="")


# ---- serialization ----


def test_entry_blob_uses_camel_case_keys():
    d = _entry().to_dict()
    assert d == {
        "id": "e1",
        "date": "2024-01-05",
        "timestamp": 1704447000000,
        "type": "SLEEP",
        "data": {"bedTime": "23:00", "wakeTime": "07:00", "comment": "read a book"},
        "aiFeedback": "Sweet dreams! ✨",
    }


@pytest.mark.parametrize(
    "entry_type,data",
    [
        (EntryType.SLEEP, SleepData("22:15", "06:45", "")),
        (EntryType.FOOD, FoodData("rice bowl", "data:image/png;base64,AAAA")),
        (EntryType.DIGITAL, DigitalData(42, "guilty")),
        (EntryType.OUTPUT, OutputData("wrote a post")),
    ],
)
def test_entry_from_dict_restores_each_type(entry_type, data):
    entry = _entry(type=entry_type, data=data)
    assert Entry.from_dict(entry.to_dict()) == entry


def test_food_without_image_key_loads_empty_image():
    raw = _entry(type=EntryType.FOOD, data=FoodData("soup")).to_dict()
    del raw["data"]["image"]
    assert Entry.from_dict(raw).data.image == ""


def test_missing_ai_feedback_loads_as_empty():
    raw = _entry().to_dict()
    del raw["aiFeedback"]
    assert Entry.from_dict(raw).ai_feedback == ""


def test_unknown_type_rejected():
    raw = _entry().to_dict()
    raw["type"] = "NAP"
    with pytest.raises(ValidationError):
        Entry.from_dict(raw)


def test_payload_shape_must_match_type():
    raw = _entry().to_dict()
    raw["type"] = "DIGITAL"
    with pytest.raises(ValidationError):
        Entry.from_dict(raw)


def test_bad_date_rejected():
    raw = _entry().to_dict()
    raw["date"] = "05/01/2024"
    with pytest.raises(ValidationError):
        Entry.from_dict(raw)


def test_boolean_is_not_a_duration():
    raw = _entry(type=EntryType.DIGITAL, data=DigitalData(1, "")).to_dict()
    raw["data"]["durationMinutes"] = True
    with pytest.raises(ValidationError):
        Entry.from_dict(raw)


# ---- AppState ----


def test_fresh_state_is_empty():
    state = AppState.fresh("2024-01-01")
    assert state.start_date == "2024-01-01"
    assert state.entries == []
    assert state.daily_moods == {}


def test_app_state_roundtrip():
    state = AppState(
        start_date="2024-01-01",
        entries=[_entry(), _entry(id="e2", type=EntryType.OUTPUT, data=OutputData("ship it"))],
        daily_moods={"2024-01-05": "✨"},
    )
    assert AppState.from_dict(state.to_dict()) == state


def test_app_state_rejects_non_list_entries():
    with pytest.raises(ValidationError):
        AppState.from_dict({"startDate": "2024-01-01", "entries": {}, "dailyMoods": {}})


def test_app_state_requires_start_date():
    with pytest.raises(ValidationError):
        AppState.from_dict({"entries": [], "dailyMoods": {}})


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_timestamp_rejected(value):
    raw = _entry().to_dict()
    raw["timestamp"] = value
    with pytest.raises(ValidationError):
        Entry.from_dict(raw)


@pytest.mark.parametrize("day", ["2024-02-30", "2023-02-29", "20240105", "2024-1-5"])
def test_only_real_calendar_days_accepted(day):
    raw = _entry().to_dict()
    raw["date"] = day
    with pytest.raises(ValidationError):
        Entry.from_dict(raw)
