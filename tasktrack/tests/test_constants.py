"""Display lookups and their fallbacks."""
from datetime import datetime
from tasktrack.core.constants import (
    DEFAULT_CATEGORY_COLOR_CLASS,
    DEFAULT_PRIORITY_STYLE,
    DEFAULT_THEME_CLASS,
    get_category_color_class,
    get_icon_label,
    get_priority_style,
    get_theme_card_style,
    get_theme_class,
)
from tasktrack.schemas.board import Board
from tasktrack.schemas.category import Category
from tasktrack.schemas.task import Task


def test_priority_style():
    assert get_priority_style("Urgente") == "bg-red-50 text-red-700 border-red-200"
    assert get_priority_style("Critica") == DEFAULT_PRIORITY_STYLE == "bg-slate-50 text-slate-700 border-slate-200"


def test_theme_class():
    assert get_theme_class("orange") == "bg-orange-400"
    assert get_theme_class("black") == DEFAULT_THEME_CLASS == "bg-blue-500"


def test_category_color_class():
    assert get_category_color_class("pink") == "bg-pink-500 text-white hover:bg-pink-300"
    assert get_category_color_class("teal") == DEFAULT_CATEGORY_COLOR_CLASS == "bg-slate-200 text-slate-800"


def test_card_style_and_icon_label():
    assert get_theme_card_style("green").startswith("bg-green-50")
    assert get_theme_card_style("black") == get_theme_card_style("blue")
    assert get_icon_label("university") == "Università"
    assert get_icon_label("boat") == "Altro"


def test_records_expose_display_classes():
    category = Category(id=1, name="Extra", color="teal")
    task = Task(id=2, title="Spesa", priority="Critica", column_id="todo",
                due_date=datetime(2024, 6, 10), categories=[category])
    board = Board(id=3, title="Casa", icon="work", theme="purple")

    dumped = task.model_dump()
    assert dumped["priority_style"] == DEFAULT_PRIORITY_STYLE
    assert dumped["categories"][0]["color_class"] == DEFAULT_CATEGORY_COLOR_CLASS
    assert board.model_dump()["theme_class"] == "bg-purple-500"
    assert board.icon_label == "Lavoro"

    # Derived fields in a payload are ignored on the way back in
    assert Task.model_validate(task.model_dump(mode="json")).priority_style == DEFAULT_PRIORITY_STYLE
