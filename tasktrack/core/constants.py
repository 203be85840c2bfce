"""
Fixed enumerations shared by the server and the client, plus the lookup
tables that map them to display attributes.
"""
from enum import Enum
from typing import Dict, List


class ColumnId(str, Enum):
    TODO = "todo"
    INPROGRESS = "inprogress"
    DONE = "done"


class PriorityLevel(str, Enum):
    BASSA = "Bassa"
    MEDIA = "Media"
    ALTA = "Alta"
    URGENTE = "Urgente"


class TimeUnit(str, Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


class BoardTheme(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"
    ORANGE = "orange"


class BoardIcon(str, Enum):
    UNIVERSITY = "university"
    PERSONAL = "personal"
    WORK = "work"
    OTHER = "other"


class GuestRole(str, Enum):
    VIEWER = "viewer"
    EDITOR = "editor"


ATTACHMENTS_BUCKET = "task-attachments"

MAX_REMINDERS_PER_PRIORITY = 3

# Kanban columns in display order
COLUMNS: List[Dict[str, str]] = [
    {"id": ColumnId.TODO.value, "title": "Da Fare", "color": "bg-blue-500/50"},
    {"id": ColumnId.INPROGRESS.value, "title": "In Corso", "color": "bg-amber-500/50"},
    {"id": ColumnId.DONE.value, "title": "Completato", "color": "bg-emerald-500/50"},
]

# 0 is the most urgent; unknown priorities sort last
PRIORITY_SORT_RANK: Dict[str, int] = {
    PriorityLevel.URGENTE.value: 0,
    PriorityLevel.ALTA.value: 1,
    PriorityLevel.MEDIA.value: 2,
    PriorityLevel.BASSA.value: 3,
}
UNKNOWN_PRIORITY_RANK = 99

# Order used when listing priority configurations
PRIORITY_DISPLAY_ORDER: Dict[str, int] = {
    PriorityLevel.BASSA.value: 1,
    PriorityLevel.MEDIA.value: 2,
    PriorityLevel.ALTA.value: 3,
    PriorityLevel.URGENTE.value: 4,
}

PRIORITY_STYLES: Dict[str, str] = {
    PriorityLevel.URGENTE.value: "bg-red-50 text-red-700 border-red-200",
    PriorityLevel.ALTA.value: "bg-orange-50 text-orange-700 border-orange-200",
    PriorityLevel.MEDIA.value: "bg-amber-50 text-amber-700 border-amber-200",
    PriorityLevel.BASSA.value: "bg-emerald-50 text-emerald-700 border-emerald-200",
}
DEFAULT_PRIORITY_STYLE = "bg-slate-50 text-slate-700 border-slate-200"

THEME_CLASSES: Dict[str, str] = {
    BoardTheme.BLUE.value: "bg-blue-500",
    BoardTheme.GREEN.value: "bg-green-500",
    BoardTheme.PURPLE.value: "bg-purple-500",
    BoardTheme.ORANGE.value: "bg-orange-400",
}
DEFAULT_THEME_CLASS = "bg-blue-500"

THEME_CARD_STYLES: Dict[str, str] = {
    BoardTheme.BLUE.value: "bg-blue-50 border-blue-200 hover:border-blue-300 text-blue-900",
    BoardTheme.GREEN.value: "bg-green-50 border-green-200 hover:border-green-300 text-green-900",
    BoardTheme.PURPLE.value: "bg-purple-50 border-purple-200 hover:border-purple-300 text-purple-900",
    BoardTheme.ORANGE.value: "bg-orange-50 border-orange-200 hover:border-orange-300 text-orange-900",
}

ICON_LABELS: Dict[str, str] = {
    BoardIcon.UNIVERSITY.value: "Università",
    BoardIcon.PERSONAL.value: "Personale & Hobby",
    BoardIcon.WORK.value: "Lavoro",
    BoardIcon.OTHER.value: "Altro",
}

CATEGORY_COLOR_CLASSES: Dict[str, str] = {
    "blue": "bg-blue-500 text-white hover:bg-blue-300",
    "cyan": "bg-cyan-500 text-white hover:bg-cyan-300",
    "green": "bg-green-500 text-white hover:bg-green-300",
    "purple": "bg-purple-500 text-white hover:bg-purple-300",
    "orange": "bg-orange-500 text-white hover:bg-orange-300",
    "yellow": "bg-yellow-500 text-white hover:bg-yellow-300",
    "red": "bg-red-500 text-white hover:bg-red-300",
    "pink": "bg-pink-500 text-white hover:bg-pink-300",
    "slate": "bg-slate-500 text-white hover:bg-slate-300",
}
DEFAULT_CATEGORY_COLOR_CLASS = "bg-slate-200 text-slate-800"

UNIT_LABELS: Dict[str, Dict[str, str]] = {
    TimeUnit.MINUTES.value: {"singular": "minuto", "plural": "minuti"},
    TimeUnit.HOURS.value: {"singular": "ora", "plural": "ore"},
    TimeUnit.DAYS.value: {"singular": "giorno", "plural": "giorni"},
}

DEFAULT_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Da fare", "color": "blue"},
    {"name": "In corso", "color": "orange"},
    {"name": "Completato", "color": "green"},
]

DEFAULT_PRIORITY_CONFIGS: List[Dict[str, str]] = [
    {
        "priority_level": PriorityLevel.BASSA.value,
        "label": "Bassa",
        "description": "Task non critici, scadenze flessibili.",
        "color_class": "text-emerald-700 bg-emerald-100 border-emerald-200",
        "bg_class": "bg-emerald-50/50",
    },
    {
        "priority_level": PriorityLevel.MEDIA.value,
        "label": "Media",
        "description": "Attività standard da completare in settimana.",
        "color_class": "text-amber-700 bg-amber-100 border-amber-200",
        "bg_class": "bg-amber-50/50",
    },
    {
        "priority_level": PriorityLevel.ALTA.value,
        "label": "Alta",
        "description": "Task importanti che richiedono attenzione immediata.",
        "color_class": "text-orange-700 bg-orange-100 border-orange-200",
        "bg_class": "bg-orange-50/50",
    },
    {
        "priority_level": PriorityLevel.URGENTE.value,
        "label": "Urgente",
        "description": "Scadenze imminenti o blocchi critici.",
        "color_class": "text-red-700 bg-red-100 border-red-200",
        "bg_class": "bg-red-50/50",
    },
]


def get_priority_style(priority: str) -> str:
    return PRIORITY_STYLES.get(priority, DEFAULT_PRIORITY_STYLE)


def get_theme_class(theme: str) -> str:
    return THEME_CLASSES.get(theme, DEFAULT_THEME_CLASS)


def get_category_color_class(color: str) -> str:
    return CATEGORY_COLOR_CLASSES.get(color, DEFAULT_CATEGORY_COLOR_CLASS)


def get_theme_card_style(theme: str) -> str:
    return THEME_CARD_STYLES.get(theme, THEME_CARD_STYLES[BoardTheme.BLUE.value])


def get_icon_label(icon: str) -> str:
    return ICON_LABELS.get(icon, ICON_LABELS[BoardIcon.OTHER.value])
