"""
Publish/subscribe primitives shared by the client stores.
"""
from enum import Enum
from typing import Any, Callable, List
import inspect
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class Subscription:
    def __init__(self, observable: "Observable", callback: Callable):
        self._observable = observable
        self._callback = callback
        self.active = True

    def unsubscribe(self):
        if self.active:
            self._observable._remove(self._callback)
            self.active = False


class Observable:
    """Callbacks may be plain functions or coroutine functions."""

    def __init__(self):
        self._callbacks: List[Callable] = []

    def subscribe(self, callback: Callable) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback: Callable):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    async def publish(self, *args: Any):
        for callback in list(self._callbacks):
            try:
                result = callback(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                # Logged per subscriber; delivery continues
                logger.error(f"Subscriber {getattr(callback, '__name__', callback)} failed: {e}")


class AuthEvents(Observable):
    """Channel carrying (AuthEvent, session) pairs from the gateway."""

    async def emit(self, event: AuthEvent, session: Any = None):
        logger.info(f"Auth event: {event.value}")
        await self.publish(event, session)
