"""
Board aggregation: derived statistics and owned/guest board merging.

Stats are never stored. They are recomputed from the board's tasks every
time a board is read.
"""
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Optional, TypeVar, Union
from ..core.constants import ColumnId
from ..schemas.board import BoardStats

T = TypeVar("T")


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def utc_now() -> datetime:
    """Naive UTC, the clock due dates and reminder times are compared against."""
    return datetime.utcnow()


def start_of_day(value: Union[date, datetime, str]) -> date:
    """Truncate a due date to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


def compute_board_stats(tasks: Iterable[Any], today: Optional[Union[date, datetime]] = None) -> BoardStats:
    """
    deadlines:   not done and due today or earlier
    in_progress: column is inprogress
    completed:   column is done
    """
    today = start_of_day(today or utc_now())

    deadlines = 0
    in_progress = 0
    completed = 0

    for task in tasks:
        column_id = _field(task, "column_id")

        if column_id == ColumnId.DONE:
            completed += 1
            continue

        if column_id == ColumnId.INPROGRESS:
            in_progress += 1

        due_date = _field(task, "due_date")
        if due_date is not None and start_of_day(due_date) <= today:
            deadlines += 1

    return BoardStats(deadlines=deadlines, in_progress=in_progress, completed=completed)


def deduplicate_boards(boards: Iterable[T], key: Callable[[T], Any] = lambda b: str(_field(b, "id"))) -> List[T]:
    """Drop repeated boards, keeping the first occurrence of each id."""
    seen = set()
    unique = []
    for board in boards:
        board_key = key(board)
        if board_key in seen:
            continue
        seen.add(board_key)
        unique.append(board)
    return unique
