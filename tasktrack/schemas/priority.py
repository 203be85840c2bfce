from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from .common import StrId
from ..core.constants import TimeUnit


class ReminderIn(BaseModel):
    value: int = Field(..., ge=1)
    unit: TimeUnit


class Reminder(BaseModel):
    id: Optional[StrId] = None
    value: int = Field(..., ge=1)
    unit: TimeUnit

    model_config = ConfigDict(from_attributes=True)


class ReminderSyncRequest(BaseModel):
    reminders: List[ReminderIn] = []


class PriorityConfigUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class PriorityConfig(BaseModel):
    id: StrId
    priority_level: str
    label: str
    description: Optional[str] = None
    color_class: str
    bg_class: str
    reminders: List[Reminder] = []

    model_config = ConfigDict(from_attributes=True)
