from ..db.models.user import User
from ..db.models.task import Task
from .logger import get_logger

logger = get_logger(__name__)


def build_reminder_message(task: Task, reminder_label: str) -> str:
    due_str = task.due_date.strftime("%d/%m/%Y %H:%M")
    return f"Promemoria ({reminder_label}): \"{task.title}\" scade il {due_str}"


def send_task_reminder(user: User, task: Task, reminder_label: str) -> str:
    """
    Deliver a reminder to one user.

    There is no mail transport: the message is logged here and the caller
    records it as a delivery.
    """
    message = build_reminder_message(task, reminder_label)
    logger.info(f"Reminder for task {task.id} to {user.email}: {message}")
    return message
