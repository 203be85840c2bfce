from .user import User
from .board import Board, BoardGuest
from .category import Category
from .task import Task, TaskCategory, TaskAssignee
from .comment import Comment
from .attachment import Attachment
from .priority import PriorityConfig, Reminder
from .notification import ReminderDelivery

__all__ = [
    "User",
    "Board",
    "BoardGuest",
    "Category",
    "Task",
    "TaskCategory",
    "TaskAssignee",
    "Comment",
    "Attachment",
    "PriorityConfig",
    "Reminder",
    "ReminderDelivery"
]
