from ..base import Base
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=True)
    name = Column(String, nullable=False, default="")
    surname = Column(String, nullable=False, default="")
    avatar_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    boards = relationship("Board", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)
    priority_configs = relationship("PriorityConfig", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
