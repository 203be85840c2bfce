from pydantic import BaseModel, Field, computed_field
from datetime import datetime
from typing import List, Optional
from .common import StrId
from .category import Category
from .user import UserSummary
from ..core.constants import ColumnId, PriorityLevel, get_priority_style


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    priority: PriorityLevel = PriorityLevel.MEDIA
    column_id: ColumnId = ColumnId.TODO
    due_date: datetime
    assignee_ids: List[StrId] = []
    category_ids: List[StrId] = []


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    priority: Optional[PriorityLevel] = None
    column_id: Optional[ColumnId] = None
    due_date: Optional[datetime] = None
    # None leaves the relation untouched, a list replaces it wholesale
    assignee_ids: Optional[List[StrId]] = None
    category_ids: Optional[List[StrId]] = None


class TaskColumnUpdate(BaseModel):
    column_id: ColumnId


class Task(BaseModel):
    id: StrId
    title: str
    description: str = ""
    # Kept as a plain string so unrecognised levels survive a read
    priority: str
    column_id: ColumnId
    due_date: datetime
    board_id: Optional[StrId] = None
    assignees: List[UserSummary] = []
    categories: List[Category] = []
    comments: int = 0
    attachments: int = 0

    @computed_field
    @property
    def priority_style(self) -> str:
        return get_priority_style(self.priority)
