from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import datetime
from typing import List, Optional
from .common import StrId
from .category import Category
from .user import UserSummary
from ..core.constants import (
    BoardIcon, BoardTheme, GuestRole, get_icon_label, get_theme_card_style, get_theme_class
)


class BoardStats(BaseModel):
    deadlines: int = 0
    in_progress: int = 0
    completed: int = 0


class BoardCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    theme: BoardTheme = BoardTheme.BLUE
    icon: BoardIcon = BoardIcon.OTHER


class BoardUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    theme: Optional[BoardTheme] = None
    icon: Optional[BoardIcon] = None


class Board(BaseModel):
    id: StrId
    title: str
    description: str = ""
    icon: BoardIcon
    theme: BoardTheme
    owner_id: Optional[StrId] = None
    categories: List[Category] = []
    stats: BoardStats = BoardStats()
    guests: List[StrId] = []

    @computed_field
    @property
    def theme_class(self) -> str:
        return get_theme_class(self.theme.value)

    @computed_field
    @property
    def card_style(self) -> str:
        return get_theme_card_style(self.theme.value)

    @computed_field
    @property
    def icon_label(self) -> str:
        return get_icon_label(self.icon.value)


class GuestInvite(BaseModel):
    email: str = Field(..., min_length=3)
    role: GuestRole = GuestRole.VIEWER


class GuestRoleUpdate(BaseModel):
    role: GuestRole


class BoardGuest(BaseModel):
    id: StrId
    board_id: StrId
    user_id: StrId
    role: GuestRole
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)
