"""
Reminder settings: a working copy of the user's priority configs edited
locally and pushed back with save_all().
"""
from datetime import datetime
from typing import Any, Callable, List, Optional
import asyncio
import inspect
import json
import uuid
from ..core.constants import MAX_REMINDERS_PER_PRIORITY, TimeUnit
from ..schemas.priority import PriorityConfig, Reminder, ReminderIn
from ..utils.logger import get_logger
from .errors import BatchWriteError
from .gateway import TaskTrackClient

logger = get_logger(__name__)

DEFAULT_REMINDER_VALUE = 1
DEFAULT_REMINDER_UNIT = TimeUnit.HOURS


def _snapshot(configs: List[PriorityConfig]) -> str:
    return json.dumps([c.model_dump(mode="json") for c in configs])


def _copy(configs: List[PriorityConfig]) -> List[PriorityConfig]:
    return [c.model_copy(deep=True) for c in configs]


class ReminderSettings:
    def __init__(
        self,
        client: TaskTrackClient,
        alert: Optional[Callable[[str], Any]] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.client = client
        self.alert = alert
        self.clock = clock
        self.priorities: List[PriorityConfig] = []
        self.saved_priorities: List[PriorityConfig] = []
        self.last_saved: Optional[datetime] = None
        self.loading = False
        self.saving = False

    async def load(self) -> List[PriorityConfig]:
        self.loading = True
        try:
            configs = await self.client.list_priorities()
        except Exception as e:
            logger.error(f"Error loading priority configs: {e}")
            configs = []
        finally:
            self.loading = False

        self.priorities = _copy(configs)
        self.saved_priorities = _copy(configs)
        return self.priorities

    @property
    def has_changes(self) -> bool:
        # Order-sensitive: moving a reminder counts as a change
        return _snapshot(self.priorities) != _snapshot(self.saved_priorities)

    def get_priority(self, config_id) -> Optional[PriorityConfig]:
        config_id = str(config_id)
        return next((p for p in self.priorities if p.id == config_id), None)

    # Mutations touch the working copy only

    def add_reminder(self, config_id) -> bool:
        config = self.get_priority(config_id)
        if config is None or len(config.reminders) >= MAX_REMINDERS_PER_PRIORITY:
            return False

        config.reminders.append(Reminder(
            id=f"new-{uuid.uuid4().hex[:8]}",
            value=DEFAULT_REMINDER_VALUE,
            unit=DEFAULT_REMINDER_UNIT
        ))
        return True

    def remove_reminder(self, config_id, index: int) -> bool:
        config = self.get_priority(config_id)
        if config is None or not 0 <= index < len(config.reminders):
            return False
        config.reminders.pop(index)
        return True

    def update_reminder(
        self,
        config_id,
        index: int,
        value: Optional[int] = None,
        unit: Optional[TimeUnit] = None
    ) -> bool:
        config = self.get_priority(config_id)
        if config is None or not 0 <= index < len(config.reminders):
            return False

        reminder = config.reminders[index]
        config.reminders[index] = reminder.model_copy(update={
            "value": reminder.value if value is None else max(1, int(value)),
            "unit": reminder.unit if unit is None else TimeUnit(unit),
        })
        return True

    def move_reminder(self, config_id, from_index: int, to_index: int) -> bool:
        config = self.get_priority(config_id)
        if config is None:
            return False
        size = len(config.reminders)
        if not (0 <= from_index < size and 0 <= to_index < size) or from_index == to_index:
            return False

        config.reminders.insert(to_index, config.reminders.pop(from_index))
        return True

    def discard_changes(self):
        self.priorities = _copy(self.saved_priorities)

    # Sync

    async def save_all(self) -> bool:
        """
        Replace the reminders of every config, all configs concurrently.

        The saved snapshot only moves forward when every call succeeds, so
        a retry resends the full set.
        """
        self.saving = True
        try:
            calls = [
                self.client.sync_reminders(
                    config.id,
                    [ReminderIn(value=r.value, unit=r.unit) for r in config.reminders]
                )
                for config in self.priorities
            ]
            results = await asyncio.gather(*calls, return_exceptions=True)
            failures = [r for r in results if isinstance(r, BaseException)]
            if failures:
                raise BatchWriteError(failures, total=len(calls))

            self.saved_priorities = _copy(self.priorities)
            self.last_saved = self.clock()
            logger.info(f"Saved reminders for {len(calls)} priorities")
            return True

        except Exception as e:
            logger.error(f"Error saving reminders: {e}")
            if self.alert:
                result = self.alert(f"Errore durante il salvataggio dei promemoria: {e}")
                if inspect.isawaitable(result):
                    await result
            return False
        finally:
            self.saving = False
