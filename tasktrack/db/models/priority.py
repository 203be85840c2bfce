from ..base import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

class PriorityConfig(Base):
    __tablename__ = "priority_configs"
    __table_args__ = (UniqueConstraint("user_id", "priority_level", name="uq_priority_config_level"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    priority_level = Column(String, nullable=False)
    label = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    color_class = Column(String, nullable=False)
    bg_class = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="priority_configs")
    reminders = relationship("Reminder", back_populates="priority_config", cascade="all, delete-orphan", passive_deletes=True, order_by="Reminder.id")


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    priority_config_id = Column(Integer, ForeignKey("priority_configs.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Integer, nullable=False)
    unit = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    priority_config = relationship("PriorityConfig", back_populates="reminders")
