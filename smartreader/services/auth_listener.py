"""The single auth-state subscription feeding the session store."""

import logging
from typing import Optional

from smartreader.domain.entities import Identity
from smartreader.domain.gateway import IAuthGateway, Unsubscribe
from smartreader.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class AuthStateListener:
    """Translates backend sign-in/sign-out events into session state.

    Created once by the composition root, started in the application
    lifespan and stopped on shutdown.  It is the only writer of
    ``SessionStore.initialized``.
    """

    def __init__(self, session_store: SessionStore, auth_gateway: IAuthGateway):
        self.session_store = session_store
        self.auth_gateway = auth_gateway
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    async def start(self) -> None:
        if self._unsubscribe is not None:
            logger.warning("Auth-state listener already running; ignoring start()")
            return
        self._unsubscribe = await self.auth_gateway.on_auth_state_change(self.handle)
        logger.info("Auth-state listener started")

    def stop(self) -> None:
        if self._unsubscribe is None:
            return
        self._unsubscribe()
        self._unsubscribe = None
        logger.info("Auth-state listener stopped")

    async def handle(self, identity: Optional[Identity]) -> None:
        store = self.session_store
        store.set_loading(True)

        if identity is not None:
            try:
                store.set_user(await store.get_user_data(identity.uid))
            except Exception as exc:
                logger.error("Error getting user data for %s: %s", identity.uid, exc)
                store.set_user(None)
        else:
            store.set_user(None)

        store.set_loading(False)
        store.set_initialized(True)
