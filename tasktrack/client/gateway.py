"""
Async HTTP gateway to the TaskTrack API.

Unwraps the {"success", "data" | "error"} envelope, keeps the bearer and
refresh tokens, retries once through /auth/refresh on a 401, and
publishes SIGNED_IN / SIGNED_OUT / TOKEN_REFRESHED on its AuthEvents
channel.
"""
from typing import Any, Dict, List, Optional, Union
import httpx
from pydantic import BaseModel
from ..core.config import TASKTRACK_API_URL
from ..core.constants import BoardIcon, BoardTheme, ColumnId, GuestRole
from ..schemas.board import Board, BoardGuest
from ..schemas.category import Category
from ..schemas.task import Task, TaskCreate, TaskUpdate
from ..schemas.comment import Comment
from ..schemas.attachment import Attachment
from ..schemas.priority import PriorityConfig, ReminderIn
from ..schemas.user import UserProfile, UserSummary
from ..utils.logger import get_logger
from .errors import ApiError
from .events import AuthEvent, AuthEvents

logger = get_logger(__name__)

Payload = Union[BaseModel, Dict[str, Any]]


def _to_json(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_unset=True)
    return payload


class TaskTrackClient:
    def __init__(
        self,
        base_url: str = TASKTRACK_API_URL,
        events: Optional[AuthEvents] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0
    ):
        self.events = events or AuthEvents()
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self._http = httpx.AsyncClient(base_url=base_url.rstrip("/"), transport=transport, timeout=timeout)

    async def __aenter__(self) -> "TaskTrackClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    # --- Core request ---

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            return {}
        return {"Authorization": f"Bearer {self.access_token}"}

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._http.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError(0, str(e)) from e

    async def request(self, method: str, path: str, retry_auth: bool = True, **kwargs) -> Any:
        response = await self._send(method, path, **kwargs)

        if response.status_code == 401 and retry_auth and self.refresh_token:
            if await self._try_refresh():
                response = await self._send(method, path, **kwargs)

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_success and body.get("success", True):
            return body.get("data")

        message = body.get("error") or body.get("detail") or response.reason_phrase
        logger.warning(f"{method} {path} -> {response.status_code}: {message}")
        raise ApiError(response.status_code, str(message))

    async def _try_refresh(self) -> bool:
        try:
            await self.refresh_session()
            return True
        except ApiError as e:
            logger.warning(f"Token refresh failed: {e}")
            await self._clear_session(emit=True)
            return False

    async def _store_session(self, data: Dict[str, Any], event: AuthEvent) -> UserProfile:
        self.access_token = data["access_token"]
        self.refresh_token = data["refresh_token"]
        user = UserProfile.model_validate(data["user"])
        await self.events.emit(event, user)
        return user

    async def _clear_session(self, emit: bool):
        was_signed_in = self.access_token is not None
        self.access_token = None
        self.refresh_token = None
        if emit and was_signed_in:
            await self.events.emit(AuthEvent.SIGNED_OUT)

    # --- Auth ---

    async def sign_up(self, email: str, password: str, name: str, surname: str) -> UserProfile:
        data = await self.request("POST", "/auth/register", retry_auth=False, json={
            "email": email,
            "password": password,
            "name": name,
            "surname": surname,
        })
        return await self._store_session(data, AuthEvent.SIGNED_IN)

    async def sign_in_with_password(self, email: str, password: str) -> UserProfile:
        data = await self.request("POST", "/auth/login", retry_auth=False, json={
            "email": email,
            "password": password,
        })
        return await self._store_session(data, AuthEvent.SIGNED_IN)

    async def refresh_session(self) -> UserProfile:
        if not self.refresh_token:
            raise ApiError(401, "No refresh token")
        data = await self.request("POST", "/auth/refresh", retry_auth=False, json={
            "refresh_token": self.refresh_token,
        })
        return await self._store_session(data, AuthEvent.TOKEN_REFRESHED)

    async def sign_out(self):
        if self.access_token:
            try:
                await self.request("POST", "/auth/logout", retry_auth=False)
            except ApiError as e:
                logger.warning(f"Logout request failed, clearing session anyway: {e}")
        await self._clear_session(emit=True)

    async def get_user(self) -> Optional[UserProfile]:
        if not self.is_authenticated:
            return None
        return UserProfile.model_validate(await self.request("GET", "/auth/me"))

    async def update_profile(self, payload: Payload) -> UserProfile:
        return UserProfile.model_validate(await self.request("PATCH", "/auth/me", json=_to_json(payload)))

    async def list_users(self, search: Optional[str] = None) -> List[UserSummary]:
        params = {"search": search} if search else None
        data = await self.request("GET", "/users", params=params)
        return [UserSummary.model_validate(u) for u in data]

    # --- Boards ---

    async def list_boards(self) -> List[Board]:
        data = await self.request("GET", "/boards")
        return [Board.model_validate(b) for b in data]

    async def get_board(self, board_id: str) -> Optional[Board]:
        try:
            return Board.model_validate(await self.request("GET", f"/boards/{board_id}"))
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise

    async def create_board(
        self,
        title: str,
        description: str = "",
        theme: BoardTheme = BoardTheme.BLUE,
        icon: BoardIcon = BoardIcon.OTHER
    ) -> Board:
        data = await self.request("POST", "/boards", json={
            "title": title,
            "description": description,
            "theme": BoardTheme(theme).value,
            "icon": BoardIcon(icon).value,
        })
        return Board.model_validate(data)

    async def update_board(self, board_id: str, payload: Payload) -> Board:
        return Board.model_validate(await self.request("PATCH", f"/boards/{board_id}", json=_to_json(payload)))

    async def delete_board(self, board_id: str):
        await self.request("DELETE", f"/boards/{board_id}")

    async def list_guests(self, board_id: str) -> List[BoardGuest]:
        data = await self.request("GET", f"/boards/{board_id}/guests")
        return [BoardGuest.model_validate(g) for g in data]

    async def invite_guest(self, board_id: str, email: str, role: GuestRole = GuestRole.VIEWER) -> BoardGuest:
        data = await self.request("POST", f"/boards/{board_id}/guests", json={
            "email": email,
            "role": GuestRole(role).value,
        })
        return BoardGuest.model_validate(data)

    async def update_guest_role(self, board_id: str, user_id: str, role: GuestRole) -> BoardGuest:
        data = await self.request("PATCH", f"/boards/{board_id}/guests/{user_id}", json={
            "role": GuestRole(role).value,
        })
        return BoardGuest.model_validate(data)

    async def remove_guest(self, board_id: str, user_id: str):
        await self.request("DELETE", f"/boards/{board_id}/guests/{user_id}")

    # --- Categories ---

    async def list_categories(self, board_id: str) -> List[Category]:
        data = await self.request("GET", f"/boards/{board_id}/categories")
        return [Category.model_validate(c) for c in data]

    async def create_category(self, board_id: str, name: str, color: str = "blue") -> Category:
        data = await self.request("POST", f"/boards/{board_id}/categories", json={"name": name, "color": color})
        return Category.model_validate(data)

    async def update_category(self, category_id: str, payload: Payload) -> Category:
        return Category.model_validate(await self.request("PATCH", f"/categories/{category_id}", json=_to_json(payload)))

    async def delete_category(self, category_id: str):
        await self.request("DELETE", f"/categories/{category_id}")

    # --- Tasks ---

    async def list_tasks(self, board_id: str) -> List[Task]:
        data = await self.request("GET", f"/boards/{board_id}/tasks")
        return [Task.model_validate(t) for t in data]

    async def get_task(self, task_id: str) -> Task:
        return Task.model_validate(await self.request("GET", f"/tasks/{task_id}"))

    async def create_task(self, board_id: str, payload: Union[TaskCreate, Dict[str, Any]]) -> Task:
        if isinstance(payload, BaseModel):
            body = payload.model_dump(mode="json")
        else:
            body = payload
        return Task.model_validate(await self.request("POST", f"/boards/{board_id}/tasks", json=body))

    async def update_task(self, task_id: str, payload: Union[TaskUpdate, Dict[str, Any]]) -> Task:
        return Task.model_validate(await self.request("PATCH", f"/tasks/{task_id}", json=_to_json(payload)))

    async def update_task_column(self, task_id: str, column_id: ColumnId) -> Task:
        data = await self.request("PATCH", f"/tasks/{task_id}/column", json={"column_id": ColumnId(column_id).value})
        return Task.model_validate(data)

    async def delete_task(self, task_id: str):
        await self.request("DELETE", f"/tasks/{task_id}")

    async def list_comments(self, task_id: str) -> List[Comment]:
        data = await self.request("GET", f"/tasks/{task_id}/comments")
        return [Comment.model_validate(c) for c in data]

    async def add_comment(self, task_id: str, text: str) -> Comment:
        return Comment.model_validate(await self.request("POST", f"/tasks/{task_id}/comments", json={"text": text}))

    async def list_attachments(self, task_id: str) -> List[Attachment]:
        data = await self.request("GET", f"/tasks/{task_id}/attachments")
        return [Attachment.model_validate(a) for a in data]

    async def upload_attachment(
        self,
        task_id: str,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream"
    ) -> Attachment:
        data = await self.request(
            "POST",
            f"/tasks/{task_id}/attachments",
            files={"file": (filename, content, content_type)}
        )
        return Attachment.model_validate(data)

    async def delete_attachment(self, attachment_id: str):
        await self.request("DELETE", f"/attachments/{attachment_id}")

    # --- Priorities ---

    async def list_priorities(self) -> List[PriorityConfig]:
        data = await self.request("GET", "/priorities")
        return [PriorityConfig.model_validate(p) for p in data]

    async def update_priority(self, config_id: str, payload: Payload) -> PriorityConfig:
        return PriorityConfig.model_validate(await self.request("PATCH", f"/priorities/{config_id}", json=_to_json(payload)))

    async def sync_reminders(self, config_id: str, reminders: List[ReminderIn]) -> PriorityConfig:
        data = await self.request("PUT", f"/priorities/{config_id}/reminders", json={
            "reminders": [r.model_dump(mode="json") for r in reminders],
        })
        return PriorityConfig.model_validate(data)

    async def reset_priorities(self) -> List[PriorityConfig]:
        data = await self.request("POST", "/priorities/reset")
        return [PriorityConfig.model_validate(p) for p in data]
