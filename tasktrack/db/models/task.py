from ..base import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    priority = Column(String, nullable=False, default="Media")
    column_id = Column(String, nullable=False, default="todo", index=True)
    due_date = Column(DateTime, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    board = relationship("Board", back_populates="tasks")
    creator = relationship("User")
    task_categories = relationship("TaskCategory", back_populates="task", cascade="all, delete-orphan", passive_deletes=True)
    task_assignees = relationship("TaskAssignee", back_populates="task", cascade="all, delete-orphan", passive_deletes=True, order_by="TaskAssignee.id")
    comments = relationship("Comment", back_populates="task", cascade="all, delete-orphan", passive_deletes=True)
    attachments = relationship("Attachment", back_populates="task", cascade="all, delete-orphan", passive_deletes=True)


class TaskCategory(Base):
    __tablename__ = "task_categories"
    __table_args__ = (UniqueConstraint("task_id", "category_id", name="uq_task_category"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    task = relationship("Task", back_populates="task_categories")
    category = relationship("Category")


class TaskAssignee(Base):
    __tablename__ = "task_assignees"
    __table_args__ = (UniqueConstraint("task_id", "user_id", name="uq_task_assignee"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    task = relationship("Task", back_populates="task_assignees")
    user = relationship("User")
