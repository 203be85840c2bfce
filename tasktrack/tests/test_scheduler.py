"""Background reminder dispatch."""
from datetime import datetime, timedelta
import logging
from tasktrack.db.models.notification import ReminderDelivery
from tasktrack.db.models.task import Task
from tasktrack.db.models.priority import PriorityConfig
from tasktrack.db.models.user import User
from tasktrack.schemas.board import BoardCreate
from tasktrack.schemas.priority import ReminderIn
from tasktrack.schemas.task import TaskCreate
from tasktrack.services.board_service import BoardService
from tasktrack.services.priority_service import PriorityService
from tasktrack.services.scheduler import check_due_reminders, shutdown_scheduler
from tasktrack.services.task_service import TaskService
from tasktrack.utils.notifications import build_reminder_message

DUE = datetime(2024, 6, 10, 12, 0)


def seed(db, storage, priority="Urgente", reminders=((1, "hours"),), assignee=None):
    owner = User(email="mario@example.com", name="Mario", surname="Rossi")
    db.add(owner)
    db.commit()

    priorities = PriorityService(db, owner)
    config = next(c for c in priorities.ensure_defaults() if c.priority_level == priority)
    priorities.sync_reminders(config.id, [ReminderIn(value=v, unit=u) for v, u in reminders])

    assignee_ids = []
    if assignee is not None:
        db.add(assignee)
        db.commit()
        assignee_ids = [assignee.id]

    board = BoardService(db, owner, storage).create_board(BoardCreate(title="Lavoro"))
    task = TaskService(db, owner, storage).create_task(board.id, TaskCreate(
        title="Consegna", priority=priority, due_date=DUE, assignee_ids=assignee_ids,
    ))
    return owner, task


def test_reminder_fires_once_inside_window(db, storage, session_factory):
    owner, task = seed(db, storage)

    assert check_due_reminders(now=DUE - timedelta(minutes=58), session_factory=session_factory) == 1
    assert check_due_reminders(now=DUE - timedelta(minutes=57), session_factory=session_factory) == 0

    deliveries = db.query(ReminderDelivery).all()
    assert len(deliveries) == 1
    assert deliveries[0].user_id == owner.id
    assert "1 ora prima" in deliveries[0].message


def test_reminder_outside_window_does_not_fire(db, storage, session_factory):
    seed(db, storage)
    assert check_due_reminders(now=DUE - timedelta(hours=2), session_factory=session_factory) == 0


def test_each_reminder_of_the_priority_fires(db, storage, session_factory):
    seed(db, storage, reminders=((1, "days"), (30, "minutes")))
    assert check_due_reminders(now=DUE - timedelta(days=1), session_factory=session_factory) == 1
    assert check_due_reminders(now=DUE - timedelta(minutes=30), session_factory=session_factory) == 1


def test_done_tasks_are_skipped(db, storage, session_factory):
    _, task = seed(db, storage)
    db.query(Task).filter(Task.id == int(task.id)).update({"column_id": "done"})
    db.commit()

    assert check_due_reminders(now=DUE - timedelta(hours=1), session_factory=session_factory) == 0


def test_assignees_are_notified_instead_of_creator(db, storage, session_factory):
    assignee = User(email="luigi@example.com", name="Luigi", surname="Verdi")
    seed(db, storage, assignee=assignee)

    assert check_due_reminders(now=DUE - timedelta(hours=1), session_factory=session_factory) == 1
    assert [d.user_id for d in db.query(ReminderDelivery).all()] == [assignee.id]


def test_priority_without_reminders_sends_nothing(db, storage, session_factory):
    seed(db, storage, reminders=())
    assert db.query(PriorityConfig).count() == 4
    assert check_due_reminders(now=DUE - timedelta(hours=1), session_factory=session_factory) == 0


def test_reminder_message():
    task = Task(id=3, title="Consegna", due_date=DUE)
    assert build_reminder_message(task, "1 ora prima") == 'Promemoria (1 ora prima): "Consegna" scade il 10/06/2024 12:00'


def test_resyncing_reminders_does_not_resend(db, storage, session_factory):
    owner, _ = seed(db, storage)
    assert check_due_reminders(now=DUE - timedelta(minutes=58), session_factory=session_factory) == 1

    priorities = PriorityService(db, owner)
    config = next(c for c in priorities.get_all_priorities() if c.priority_level == "Urgente")
    priorities.sync_reminders(config.id, [ReminderIn(value=1, unit="hours")])

    assert check_due_reminders(now=DUE - timedelta(minutes=57), session_factory=session_factory) == 0
    assert db.query(ReminderDelivery).count() == 1


def test_moving_the_due_date_fires_again(db, storage, session_factory):
    _, task = seed(db, storage)
    assert check_due_reminders(now=DUE - timedelta(hours=1), session_factory=session_factory) == 1

    later = DUE + timedelta(days=1)
    db.query(Task).filter(Task.id == int(task.id)).update({"due_date": later})
    db.commit()

    assert check_due_reminders(now=later - timedelta(hours=1), session_factory=session_factory) == 1
    assert {d.fire_at for d in db.query(ReminderDelivery).all()} == {DUE - timedelta(hours=1), later - timedelta(hours=1)}


def test_shutdown_without_running_scheduler_is_silent(caplog):
    with caplog.at_level(logging.INFO, logger="tasktrack.services.scheduler"):
        shutdown_scheduler()
    assert caplog.records == []
