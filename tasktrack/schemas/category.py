from pydantic import BaseModel, ConfigDict, Field, computed_field
from typing import Optional
from .common import StrId
from ..core.constants import get_category_color_class


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = "blue"


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None


class Category(BaseModel):
    id: StrId
    name: str
    color: str
    board_id: Optional[StrId] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def color_class(self) -> str:
        return get_category_color_class(self.color)
