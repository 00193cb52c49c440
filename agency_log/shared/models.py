from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any

from agency_log.core.models import EntryType

# Dashboard: 21-day strip and the selected day
class DayDescriptor(BaseModel):
    date: str  # YYYY-MM-DD
    day_index: int = Field(..., ge=1)
    has_entry: bool = False
    is_complete: bool = False
    is_selected: bool = False
    is_today: bool = False
    day_of_month: int
    weekday: str
    badge: str = ""

class CycleProgress(BaseModel):
    current_day: int
    max_days: int
    ratio: float = Field(..., ge=0.0, le=1.0)
    label: str

class DateAggregate(BaseModel):
    date: str
    sleep_count: int = 0
    food_count: int = 0
    digital_minutes: int = 0
    output_count: int = 0

    @property
    def sleep_label(self) -> str:
        return "Done" if self.sleep_count > 0 else "-"

class EntryCard(BaseModel):
    entry_id: str
    type: EntryType
    label: str
    icon: str
    time_label: str  # HH:MM
    data: Dict[str, Any] = {}
    ai_feedback: str = ""

class DashboardView(BaseModel):
    selected_date: str
    title: str
    progress: CycleProgress
    grid: List[DayDescriptor]
    aggregate: DateAggregate
    entries: List[EntryCard] = []
    mood: Optional[str] = None
    mood_options: List[str] = []
    is_form_open: bool = False

# Stats: per-date chart series
class StatsBucket(BaseModel):
    date: str
    date_label: str  # M/D
    sleep_hours: int = 0
    digital_mins: int = 0
    food_count: int = 0
    output_count: int = 0

class GalleryItem(BaseModel):
    entry_id: str
    date: str
    day_of_month: int
    description: str = ""
    image: str = ""

class StatsView(BaseModel):
    active_tab: EntryType
    metric: str
    series: List[StatsBucket] = []
    gallery: List[GalleryItem] = []
    outputs: List[str] = []
    summary: str = ""
    summary_loading: bool = False
