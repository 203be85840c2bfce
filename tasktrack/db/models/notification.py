from ..base import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime

class ReminderDelivery(Base):
    __tablename__ = "reminder_deliveries"
    # Keyed on the fire time, which survives a reminder resync and moves with the due date
    __table_args__ = (UniqueConstraint("task_id", "user_id", "fire_at", name="uq_reminder_delivery"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    fire_at = Column(DateTime, nullable=False)
    message = Column(String, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow)
