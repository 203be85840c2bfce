from ..base import Base
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

class Board(Base):
    __tablename__ = "boards"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    icon = Column(String, nullable=False, default="other")
    theme = Column(String, nullable=False, default="blue")
    created_at = Column(DateTime, default=datetime.utcnow)

    owner = relationship("User", back_populates="boards")
    categories = relationship("Category", back_populates="board", cascade="all, delete-orphan", passive_deletes=True, order_by="Category.id")
    tasks = relationship("Task", back_populates="board", cascade="all, delete-orphan", passive_deletes=True)
    guests = relationship("BoardGuest", back_populates="board", cascade="all, delete-orphan", passive_deletes=True)


class BoardGuest(Base):
    __tablename__ = "board_guests"
    __table_args__ = (UniqueConstraint("board_id", "user_id", name="uq_board_guest"),)

    id = Column(Integer, primary_key=True, index=True)
    board_id = Column(Integer, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String, nullable=False, default="viewer")
    created_at = Column(DateTime, default=datetime.utcnow)

    board = relationship("Board", back_populates="guests")
    user = relationship("User")
