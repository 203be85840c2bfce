from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session
from datetime import datetime, timedelta
from typing import Callable, Optional
from ..db.models.task import Task
from ..db.models.user import User
from ..db.models.priority import PriorityConfig
from ..db.models.notification import ReminderDelivery
from ..db.session import SessionLocal
from ..core.config import REMINDER_TOLERANCE_MINUTES
from ..core.constants import ColumnId, MAX_REMINDERS_PER_PRIORITY
from ..utils.notifications import send_task_reminder
from ..utils.logger import get_logger
from .aggregation import utc_now
from .reminders import calculate_reminder_time, format_reminder, should_trigger
import logging

logger = get_logger(__name__)

# Reduce APScheduler logging noise
logging.getLogger('apscheduler').setLevel(logging.WARNING)

scheduler = BackgroundScheduler()


def _recipients(db: Session, task: Task):
    users = [ta.user for ta in task.task_assignees if ta.user]
    if not users and task.created_by:
        creator = db.query(User).filter(User.id == task.created_by).first()
        if creator:
            users = [creator]
    return users

def check_due_reminders(now: Optional[datetime] = None, session_factory: Callable[[], Session] = SessionLocal) -> int:
    """
    Background job that runs every minute and sends the reminders whose
    fire time (due date minus offset) falls within the tolerance window.

    Returns the number of deliveries recorded.
    """
    now = now or utc_now()
    tolerance = timedelta(minutes=REMINDER_TOLERANCE_MINUTES)
    db: Session = session_factory()
    sent = 0
    try:
        tasks = db.query(Task).filter(
            Task.column_id != ColumnId.DONE.value,
            Task.created_by.isnot(None),
            Task.due_date >= now - tolerance
        ).all()

        for task in tasks:
            try:
                config = db.query(PriorityConfig).filter(
                    PriorityConfig.user_id == task.created_by,
                    PriorityConfig.priority_level == task.priority
                ).first()
                if not config:
                    continue

                for reminder in config.reminders[:MAX_REMINDERS_PER_PRIORITY]:
                    if not should_trigger(task.due_date, reminder.value, reminder.unit, now, REMINDER_TOLERANCE_MINUTES):
                        continue

                    label = format_reminder(reminder.value, reminder.unit)
                    fire_at = calculate_reminder_time(task.due_date, reminder.value, reminder.unit)
                    for user in _recipients(db, task):
                        already_sent = db.query(ReminderDelivery).filter(
                            ReminderDelivery.task_id == task.id,
                            ReminderDelivery.fire_at == fire_at,
                            ReminderDelivery.user_id == user.id
                        ).first()
                        if already_sent:
                            continue

                        message = send_task_reminder(user, task, label)
                        db.add(ReminderDelivery(
                            task_id=task.id,
                            user_id=user.id,
                            fire_at=fire_at,
                            message=message,
                            sent_at=now
                        ))
                        sent += 1

                db.commit()

            except Exception as e:
                logger.error(f"Error sending reminders for task {task.id}: {e}")
                db.rollback()

        if sent:
            logger.info(f"Processed {sent} task reminders")

    except Exception as e:
        logger.error(f"Error in check_due_reminders: {e}")
    finally:
        db.close()

    return sent

def start_scheduler():
    try:
        scheduler.add_job(
            func=check_due_reminders,
            trigger='interval',
            minutes=1,
            id='check_due_reminders',
            replace_existing=True
        )
        logger.info("Scheduled: Check due reminders (every minute)")

        scheduler.start()
        logger.info("Reminder scheduler started successfully")

    except Exception as e:
        logger.error(f"Error starting scheduler: {e}")
        raise

def shutdown_scheduler():
    try:
        if scheduler.running:
            scheduler.shutdown()
            logger.info("Reminder scheduler shutdown successfully")
    except Exception as e:
        logger.error(f"Error shutting down scheduler: {e}")
