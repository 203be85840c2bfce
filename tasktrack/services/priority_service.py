from sqlalchemy.orm import Session
from typing import List, Optional
from ..db.models.priority import PriorityConfig, Reminder
from ..db.models.user import User
from ..schemas.priority import ReminderIn, PriorityConfigUpdate
from ..core.constants import DEFAULT_PRIORITY_CONFIGS, MAX_REMINDERS_PER_PRIORITY, PRIORITY_DISPLAY_ORDER
from ..utils.logger import get_logger
from .board_service import parse_id

logger = get_logger(__name__)


class PriorityService:
    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user

    def get_all_priorities(self) -> List[PriorityConfig]:
        """The user's configs with their reminders, Bassa through Urgente."""
        configs = self.db.query(PriorityConfig).filter(
            PriorityConfig.user_id == self.user.id
        ).all()

        if not configs:
            configs = self.ensure_defaults()

        return sorted(configs, key=lambda c: PRIORITY_DISPLAY_ORDER.get(c.priority_level, len(PRIORITY_DISPLAY_ORDER) + 1))

    def get_config(self, config_id) -> Optional[PriorityConfig]:
        config = self.db.query(PriorityConfig).filter(
            PriorityConfig.id == parse_id(config_id),
            PriorityConfig.user_id == self.user.id
        ).first()

        if not config:
            logger.warning(f"Priority config {config_id} not found for user {self.user.id}")
        return config

    def ensure_defaults(self) -> List[PriorityConfig]:
        """Create any missing default config for the user."""
        try:
            existing = {
                level for (level,) in self.db.query(PriorityConfig.priority_level).filter(
                    PriorityConfig.user_id == self.user.id
                ).all()
            }

            created = 0
            for config in DEFAULT_PRIORITY_CONFIGS:
                if config["priority_level"] in existing:
                    continue
                self.db.add(PriorityConfig(user_id=self.user.id, **config))
                created += 1

            if created:
                self.db.commit()
                logger.info(f"Created {created} default priority configs for user {self.user.id}")

            return self.db.query(PriorityConfig).filter(PriorityConfig.user_id == self.user.id).all()

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating default priority configs: {e}")
            raise

    def sync_reminders(self, config_id, reminders: List[ReminderIn]) -> Optional[PriorityConfig]:
        """
        Replace every reminder of a config with the given set.

        Existing rows are deleted and the new set inserted, both inside one
        session transaction so a failure leaves the previous set in place.
        """
        config = self.get_config(config_id)
        if not config:
            return None

        if len(reminders) > MAX_REMINDERS_PER_PRIORITY:
            raise ValueError(f"At most {MAX_REMINDERS_PER_PRIORITY} reminders per priority")

        try:
            self.db.query(Reminder).filter(
                Reminder.priority_config_id == config.id
            ).delete(synchronize_session=False)
            self.db.flush()

            for reminder in reminders:
                self.db.add(Reminder(
                    priority_config_id=config.id,
                    value=reminder.value,
                    unit=reminder.unit.value
                ))

            self.db.commit()
            self.db.refresh(config)

            logger.info(f"Synced {len(reminders)} reminders for priority config {config.id}")
            return config

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error syncing reminders for priority config {config_id}: {e}")
            raise

    def update_config(self, config_id, config_data: PriorityConfigUpdate) -> Optional[PriorityConfig]:
        config = self.get_config(config_id)
        if not config:
            return None

        try:
            for field, value in config_data.model_dump(exclude_unset=True).items():
                if field == "label" and value is None:
                    continue
                setattr(config, field, value)

            self.db.commit()
            self.db.refresh(config)

            logger.info(f"Priority config updated: {config.id}")
            return config

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating priority config {config_id}: {e}")
            raise

    def reset_to_defaults(self) -> List[PriorityConfig]:
        try:
            # Reminders go with their configs through the cascade
            for config in self.db.query(PriorityConfig).filter(PriorityConfig.user_id == self.user.id).all():
                self.db.delete(config)
            self.db.flush()

            for config in DEFAULT_PRIORITY_CONFIGS:
                self.db.add(PriorityConfig(user_id=self.user.id, **config))

            self.db.commit()
            logger.info(f"Priority configs reset for user {self.user.id}")

        except Exception as e:
            self.db.rollback()
            logger.error(f"Error resetting priority configs: {e}")
            raise

        return self.get_all_priorities()
