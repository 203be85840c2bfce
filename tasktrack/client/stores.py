"""
Shared client state: the signed-in profile, the user's boards and the
focus timer. Each store is constructed explicitly with its collaborators
and torn down with close().
"""
from typing import Any, Callable, List, Optional
import asyncio
import inspect
import time
from ..schemas.board import Board
from ..schemas.user import UserProfile
from ..services.aggregation import deduplicate_boards
from ..utils.logger import get_logger
from .errors import ApiError
from .events import AuthEvent, Observable, Subscription
from .gateway import TaskTrackClient

logger = get_logger(__name__)

LOGIN_ROUTE = "/login"


async def _maybe_await(result: Any):
    if inspect.isawaitable(result):
        await result


class AuthStore(Observable):
    """Holds the current profile and follows the gateway's auth events."""

    def __init__(self, client: TaskTrackClient, navigate: Optional[Callable[[str], Any]] = None):
        super().__init__()
        self.client = client
        self.navigate = navigate
        self.profile: Optional[UserProfile] = None
        self.loading = False
        self._subscriptions: List[Subscription] = []

    @property
    def user_id(self) -> Optional[str]:
        return self.profile.id if self.profile else None

    async def start(self):
        self._subscriptions.append(self.client.events.subscribe(self._on_auth_event))
        if self.client.is_authenticated:
            await self.refresh_profile()

    async def _on_auth_event(self, event: AuthEvent, session: Any = None):
        if event in (AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED):
            await self.refresh_profile()
        elif event == AuthEvent.SIGNED_OUT:
            self.profile = None
            await self.publish(None)
            if self.navigate:
                await _maybe_await(self.navigate(LOGIN_ROUTE))

    async def refresh_profile(self) -> Optional[UserProfile]:
        self.loading = True
        try:
            self.profile = await self.client.get_user()
        except ApiError as e:
            logger.error(f"Error fetching profile: {e}")
            self.profile = None
        finally:
            self.loading = False

        await self.publish(self.profile)
        return self.profile

    async def sign_out(self):
        await self.client.sign_out()

    def close(self):
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()


class BoardsStore(Observable):
    """The user's boards, refetched whenever the signed-in identity changes."""

    def __init__(self, client: TaskTrackClient, auth: AuthStore):
        super().__init__()
        self.client = client
        self.auth = auth
        self.boards: List[Board] = []
        self.loading = False
        self._user_id: Optional[str] = None
        self._subscriptions: List[Subscription] = []

    async def start(self):
        self._subscriptions.append(self.auth.subscribe(self._on_profile))
        await self._on_profile(self.auth.profile)

    async def _on_profile(self, profile: Optional[UserProfile]):
        user_id = profile.id if profile else None
        if user_id == self._user_id:
            return

        self._user_id = user_id
        if user_id is None:
            self.boards = []
            await self.publish(self.boards)
        else:
            await self.refresh_boards()

    async def refresh_boards(self) -> List[Board]:
        if self._user_id is None:
            self.boards = []
            return self.boards

        self.loading = True
        try:
            self.boards = deduplicate_boards(await self.client.list_boards())
        except ApiError as e:
            # An empty list stands for both "no boards" and "fetch failed"
            logger.error(f"Error fetching boards: {e}")
            self.boards = []
        finally:
            self.loading = False

        await self.publish(self.boards)
        return self.boards

    def get_board(self, board_id) -> Optional[Board]:
        board_id = str(board_id)
        for board in self.boards:
            if board.id == board_id:
                return board
        return None

    def close(self):
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()


class FocusStore(Observable):
    """Elapsed-seconds counter ticking once a second while active."""

    TICK_SECONDS = 1.0

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        super().__init__()
        self.clock = clock
        self.is_active = False
        self.start_time: Optional[float] = None
        self.elapsed = 0
        self._ticker: Optional[asyncio.Task] = None

    async def toggle(self) -> bool:
        if self.is_active:
            self._stop_ticker()
            self.is_active = False
            self.start_time = None
            self.elapsed = 0
        else:
            self.is_active = True
            self.start_time = self.clock()
            self.elapsed = 0
            self._ticker = asyncio.get_running_loop().create_task(self._run())

        await self.publish(self.elapsed)
        return self.is_active

    async def tick(self) -> int:
        if self.is_active and self.start_time is not None:
            self.elapsed = int(self.clock() - self.start_time)
            await self.publish(self.elapsed)
        return self.elapsed

    async def _run(self):
        while self.is_active:
            await asyncio.sleep(self.TICK_SECONDS)
            await self.tick()

    def _stop_ticker(self):
        if self._ticker and not self._ticker.done():
            self._ticker.cancel()
        self._ticker = None

    def close(self):
        self._stop_ticker()
        self.is_active = False
