"""Auth-state subscriber bookkeeping shared by the gateway backends."""

import inspect
import logging
from typing import Optional

from smartreader.domain.entities import Identity
from smartreader.domain.gateway import AuthStateCallback, Unsubscribe

logger = logging.getLogger(__name__)


class AuthStateNotifier:
    """Tracks the current identity and fans changes out to subscribers."""

    def __init__(self) -> None:
        self.current_identity: Optional[Identity] = None
        self._callbacks: list[AuthStateCallback] = []

    async def subscribe(self, callback: AuthStateCallback) -> Unsubscribe:
        self._callbacks.append(callback)
        logger.debug("Auth-state subscriber added (%d total)", len(self._callbacks))
        await self._call(callback, self.current_identity)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)
                logger.debug("Auth-state subscriber removed")

        return unsubscribe

    async def publish(self, identity: Optional[Identity]) -> None:
        self.current_identity = identity
        for callback in list(self._callbacks):
            await self._call(callback, identity)

    @staticmethod
    async def _call(callback: AuthStateCallback, identity: Optional[Identity]) -> None:
        result = callback(identity)
        if inspect.isawaitable(result):
            await result
