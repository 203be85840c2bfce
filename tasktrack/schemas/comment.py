from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from .common import StrId
from .user import UserSummary


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1)


class Comment(BaseModel):
    id: StrId
    text: str
    created_at: Optional[datetime] = None
    author: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)
