# constants.py

from agency_log.core.models import EntryType

APP_STORAGE_KEY = 'agency-log-v1'

MAX_DAYS = 21

MOOD_OPTIONS = ['😊', '😐', '😭', '😡', '😴', '✨', '🌸', '💀']

TYPE_CONFIG = {
    EntryType.SLEEP: {'label': 'Sleep', 'icon': '🛌'},
    EntryType.FOOD: {'label': 'Food', 'icon': '🍱'},
    EntryType.DIGITAL: {'label': 'Digital', 'icon': '📱'},
    EntryType.OUTPUT: {'label': 'Output', 'icon': '⭐'},
}

# Stats chart value for any day with a Sleep entry. Not derived from bed/wake times.
SLEEP_HOURS_PLACEHOLDER = 7
