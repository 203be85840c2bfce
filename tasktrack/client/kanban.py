"""
Kanban board view state.

KanbanController owns the task list of one board together with the filter
selections and the drag in progress. Column changes are applied locally
first and persisted afterwards; when persisting fails the whole list is
fetched again instead of rolling back the single task.

TaskDialogSession holds one create-or-edit dialog. Comments and files
added while it is open stay pending until save().
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union
import asyncio
import inspect
from ..core.constants import COLUMNS, ColumnId, PriorityLevel, PRIORITY_SORT_RANK, UNKNOWN_PRIORITY_RANK
from ..schemas.task import Task, TaskCreate, TaskUpdate
from ..schemas.attachment import Attachment
from ..utils.logger import get_logger
from .errors import BatchWriteError
from .gateway import TaskTrackClient

logger = get_logger(__name__)


async def _maybe_await(result: Any):
    if inspect.isawaitable(result):
        await result


# Filtering and sorting

def filter_tasks(
    tasks: Iterable[Task],
    search: str = "",
    priorities: Optional[Iterable[str]] = None,
    category_ids: Optional[Iterable[str]] = None
) -> List[Task]:
    """AND across search, priorities and categories; OR within each selection."""
    needle = (search or "").strip().lower()
    priority_set = {p.value if isinstance(p, PriorityLevel) else str(p) for p in priorities or ()}
    category_set = {str(c) for c in category_ids or ()}

    matched = []
    for task in tasks:
        if needle:
            in_title = needle in task.title.lower()
            in_categories = any(needle in c.name.lower() for c in task.categories)
            if not (in_title or in_categories):
                continue

        if priority_set and task.priority not in priority_set:
            continue

        if category_set and not any(c.id in category_set for c in task.categories):
            continue

        matched.append(task)
    return matched


def priority_rank(priority: str) -> int:
    return PRIORITY_SORT_RANK.get(priority, UNKNOWN_PRIORITY_RANK)


def sort_column_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Most urgent first, then earliest due date. Returns a new list."""
    return sorted(tasks, key=lambda t: (priority_rank(t.priority), t.due_date))


# Sync state

@dataclass(frozen=True)
class Clean:
    pass


@dataclass(frozen=True)
class OptimisticPending:
    previous: List[Task] = field(default_factory=list)


@dataclass(frozen=True)
class Reloading:
    pass


SyncState = Union[Clean, OptimisticPending, Reloading]


class KanbanController:
    def __init__(self, client: TaskTrackClient, board_id: str):
        self.client = client
        self.board_id = str(board_id)
        self.tasks: List[Task] = []
        self.search = ""
        self.selected_priorities: Set[str] = set()
        self.selected_categories: Set[str] = set()
        self.dragged_task_id: Optional[str] = None
        self.dialog: Optional["TaskDialogSession"] = None
        self.sync_state: SyncState = Clean()
        self.loading = False

    # Loading

    async def load(self) -> List[Task]:
        self.loading = True
        try:
            self.tasks = await self.client.list_tasks(self.board_id)
        except Exception as e:
            logger.error(f"Error loading tasks for board {self.board_id}: {e}")
            self.tasks = []
        finally:
            self.loading = False
        return self.tasks

    async def reload(self) -> List[Task]:
        self.sync_state = Reloading()
        try:
            return await self.load()
        finally:
            self.sync_state = Clean()

    # Filters

    def set_search(self, text: str):
        self.search = text or ""

    def toggle_priority(self, priority: Union[PriorityLevel, str]):
        value = priority.value if isinstance(priority, PriorityLevel) else str(priority)
        if value in self.selected_priorities:
            self.selected_priorities.remove(value)
        else:
            self.selected_priorities.add(value)

    def toggle_category(self, category_id):
        value = str(category_id)
        if value in self.selected_categories:
            self.selected_categories.remove(value)
        else:
            self.selected_categories.add(value)

    def clear_filters(self):
        self.search = ""
        self.selected_priorities.clear()
        self.selected_categories.clear()

    @property
    def active_filters_count(self) -> int:
        return len(self.selected_priorities) + len(self.selected_categories)

    @property
    def filtered_tasks(self) -> List[Task]:
        return filter_tasks(self.tasks, self.search, self.selected_priorities, self.selected_categories)

    def tasks_by_column(self) -> Dict[str, List[Task]]:
        columns: Dict[str, List[Task]] = {column["id"]: [] for column in COLUMNS}
        for task in self.filtered_tasks:
            columns.setdefault(task.column_id.value, []).append(task)
        return {column_id: sort_column_tasks(tasks) for column_id, tasks in columns.items()}

    # Drag and drop

    def start_drag(self, task_id):
        self.dragged_task_id = str(task_id)

    def cancel_drag(self):
        self.dragged_task_id = None

    async def drop(self, column_id: Union[ColumnId, str]) -> bool:
        """
        Move the dragged task to column_id.

        Returns True when the move was persisted. On failure the list is
        reloaded and False is returned; there is no retry.
        """
        task_id = self.dragged_task_id
        self.dragged_task_id = None
        if task_id is None:
            return False

        target = ColumnId(column_id)
        task = next((t for t in self.tasks if t.id == task_id), None)
        if task is None or task.column_id == target:
            return False

        previous = list(self.tasks)
        self.tasks = [
            t.model_copy(update={"column_id": target}) if t.id == task_id else t
            for t in self.tasks
        ]
        self.sync_state = OptimisticPending(previous=previous)

        try:
            await self.client.update_task_column(task_id, target)
            self.sync_state = Clean()
            logger.info(f"Task {task_id} moved to {target.value}")
            return True
        except Exception as e:
            logger.error(f"Error moving task {task_id} to {target.value}, reloading: {e}")
            await self.reload()
            return False

    # Dialog

    def open_create_dialog(
        self,
        column_id: Union[ColumnId, str] = ColumnId.TODO,
        alert: Optional[Callable[[str], Any]] = None
    ) -> "TaskDialogSession":
        self.dialog = TaskDialogSession(
            self.client,
            self.board_id,
            column_id=ColumnId(column_id),
            on_saved=self.reload,
            on_close=self._dialog_closed,
            alert=alert
        )
        return self.dialog

    def open_edit_dialog(self, task: Task, alert: Optional[Callable[[str], Any]] = None) -> "TaskDialogSession":
        self.dialog = TaskDialogSession(
            self.client,
            self.board_id,
            task=task,
            on_saved=self.reload,
            on_close=self._dialog_closed,
            alert=alert
        )
        return self.dialog

    @property
    def is_dialog_open(self) -> bool:
        return self.dialog is not None and self.dialog.is_open

    def _dialog_closed(self):
        self.dialog = None


@dataclass
class PendingAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


class TaskDialogSession:
    def __init__(
        self,
        client: TaskTrackClient,
        board_id: str,
        task: Optional[Task] = None,
        column_id: ColumnId = ColumnId.TODO,
        on_saved: Optional[Callable[[], Awaitable[Any]]] = None,
        on_close: Optional[Callable[[], Any]] = None,
        alert: Optional[Callable[[str], Any]] = None
    ):
        self.client = client
        self.board_id = str(board_id)
        self.task = task
        self.on_saved = on_saved
        self.on_close = on_close
        self.alert = alert

        self.title = task.title if task else ""
        self.description = task.description if task else ""
        self.priority = task.priority if task else PriorityLevel.MEDIA.value
        self.due_date: Optional[datetime] = task.due_date if task else None
        self.category_ids: List[str] = [c.id for c in task.categories] if task else []
        self.column_id = task.column_id if task else ColumnId(column_id)

        self.saved_comment_count = task.comments if task else 0
        self.saved_attachment_count = task.attachments if task else 0
        self.pending_comments: List[str] = []
        self.pending_attachments: List[PendingAttachment] = []
        self.attachments_to_delete: List[str] = []

        self.is_open = True
        self.is_saving = False
        self.confirm_delete = False

    @property
    def is_edit(self) -> bool:
        return self.task is not None

    # Pending items

    def add_comment(self, text: str) -> bool:
        text = (text or "").strip()
        if not text:
            return False
        self.pending_comments.append(text)
        return True

    def add_attachment(self, filename: str, content: bytes, content_type: str = "application/octet-stream"):
        self.pending_attachments.append(PendingAttachment(filename, content, content_type))

    def remove_pending_attachment(self, index: int):
        if 0 <= index < len(self.pending_attachments):
            self.pending_attachments.pop(index)

    def mark_attachment_for_deletion(self, attachment: Union[Attachment, str]):
        attachment_id = attachment.id if isinstance(attachment, Attachment) else str(attachment)
        if attachment_id not in self.attachments_to_delete:
            self.attachments_to_delete.append(attachment_id)

    def unmark_attachment_for_deletion(self, attachment_id):
        attachment_id = str(attachment_id)
        if attachment_id in self.attachments_to_delete:
            self.attachments_to_delete.remove(attachment_id)

    @property
    def comment_count(self) -> int:
        return self.saved_comment_count + len(self.pending_comments)

    @property
    def attachment_count(self) -> int:
        return self.saved_attachment_count + len(self.pending_attachments) - len(self.attachments_to_delete)

    # Save

    def build_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "due_date": self.due_date,
            "category_ids": list(self.category_ids),
            "column_id": ColumnId(self.column_id),
        }

    async def save(self) -> Optional[Task]:
        """
        Persist the form, then the pending items concurrently.

        Any failure is alerted and leaves the session open with its pending
        items in place so save() can be called again.
        """
        if self.is_saving:
            return None

        self.is_saving = True
        try:
            payload = self.build_payload()
            if self.task is None:
                saved = await self.client.create_task(self.board_id, TaskCreate(**payload))
                # A retry after a failed batch updates instead of creating twice
                self.task = saved
            else:
                saved = await self.client.update_task(self.task.id, TaskUpdate(**payload))

            writes = [self.client.add_comment(saved.id, text) for text in self.pending_comments]
            writes += [
                self.client.upload_attachment(saved.id, a.filename, a.content, a.content_type)
                for a in self.pending_attachments
            ]
            writes += [self.client.delete_attachment(attachment_id) for attachment_id in self.attachments_to_delete]

            if writes:
                results = await asyncio.gather(*writes, return_exceptions=True)
                failures = [r for r in results if isinstance(r, BaseException)]
                if failures:
                    raise BatchWriteError(failures, total=len(writes))

            comments = self.comment_count
            attachments = self.attachment_count
            saved = saved.model_copy(update={"comments": comments, "attachments": attachments})

            self.task = saved
            self.saved_comment_count = comments
            self.saved_attachment_count = attachments
            self.pending_comments = []
            self.pending_attachments = []
            self.attachments_to_delete = []

            logger.info(f"Task {saved.id} saved")
            self.close()
            if self.on_saved:
                await self.on_saved()
            return saved

        except Exception as e:
            logger.error(f"Error saving task: {e}")
            await self._alert(f"Errore durante il salvataggio: {e}")
            return None
        finally:
            self.is_saving = False

    # Delete

    async def request_delete(self) -> bool:
        """First call arms the confirmation, the second one deletes."""
        if self.task is None:
            return False

        if not self.confirm_delete:
            self.confirm_delete = True
            return False

        try:
            await self.client.delete_task(self.task.id)
            logger.info(f"Task {self.task.id} deleted")
        except Exception as e:
            logger.error(f"Error deleting task {self.task.id}: {e}")
            await self._alert(f"Errore durante l'eliminazione: {e}")
            return False

        self.close()
        if self.on_saved:
            await self.on_saved()
        return True

    def cancel_delete(self):
        self.confirm_delete = False

    def close(self):
        self.is_open = False
        self.confirm_delete = False
        if self.on_close:
            self.on_close()

    async def _alert(self, message: str):
        if self.alert:
            await _maybe_await(self.alert(message))
