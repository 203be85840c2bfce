from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional
from .common import StrId


class Attachment(BaseModel):
    id: StrId
    name: str
    file_path: str
    file_size: int
    file_type: str
    created_at: Optional[datetime] = None
    # Derived from file_path when read, never stored
    url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
