"""Session state container: current user plus login/register/logout."""

import logging
from typing import Any, Optional

from smartreader.core.messages import (
    LOGIN_DEFAULT,
    LOGIN_ERROR_MESSAGES,
    LOGOUT_DEFAULT,
    LOGOUT_ERROR_MESSAGES,
    REGISTER_DEFAULT,
    REGISTER_ERROR_MESSAGES,
    auth_error_message,
)
from smartreader.domain.entities import User
from smartreader.domain.gateway import USERS, IAuthGateway, IDocumentGateway

logger = logging.getLogger(__name__)


class SessionStore:
    """Owns the authenticated user for the lifetime of the process.

    ``initialized`` stays ``False`` until the auth-state listener has seen
    the backend's first notification; until then ``user`` is not reliable.
    """

    def __init__(self, auth_gateway: IAuthGateway, document_gateway: IDocumentGateway):
        self.auth_gateway = auth_gateway
        self.document_gateway = document_gateway
        self.user: Optional[User] = None
        self.loading = True
        self.error: Optional[str] = None
        self.initialized = False

    # -- mutators used by the auth-state listener ---------------------------

    def set_user(self, user: Optional[User]) -> None:
        self.user = user

    def set_loading(self, loading: bool) -> None:
        self.loading = loading

    def set_error(self, error: Optional[str]) -> None:
        self.error = error

    def set_initialized(self, initialized: bool) -> None:
        self.initialized = initialized

    # -- read side -----------------------------------------------------------

    @property
    def status(self) -> str:
        if not self.initialized:
            return "uninitialized"
        if self.loading:
            return "loading"
        return "authenticated" if self.user is not None else "anonymous"

    def snapshot(self) -> dict[str, Any]:
        return {
            "user": self.user.to_document() if self.user else None,
            "loading": self.loading,
            "error": self.error,
            "initialized": self.initialized,
            "status": self.status,
        }

    async def get_user_data(self, user_id: str) -> Optional[User]:
        """Read the ``users/{user_id}`` document, ``None`` when absent."""
        data = await self.document_gateway.get_document(USERS, user_id)
        if data is None:
            return None
        return User.from_document(user_id, data)

    # -- operations ----------------------------------------------------------

    async def login(self, email: str, password: str) -> None:
        self.loading = True
        self.error = None
        try:
            identity = await self.auth_gateway.sign_in(email, password)
            # the auth-state listener may have settled loading meanwhile
            self.loading = True
            user = await self.get_user_data(identity.uid)
        except Exception as exc:
            logger.error("Login failed for %s: %s", email, exc)
            self.error = auth_error_message(exc, LOGIN_ERROR_MESSAGES, LOGIN_DEFAULT)
            self.loading = False
            raise
        self.user = user
        self.loading = False
        logger.info("User logged in: %s", identity.uid)

    async def register(self, email: str, password: str, name: str) -> None:
        self.loading = True
        self.error = None
        try:
            identity = await self.auth_gateway.create_account(email, password)
            self.loading = True
            await self.document_gateway.set_document(
                USERS, identity.uid, User(id=identity.uid, name=name, email=email).to_document()
            )
            user = await self.get_user_data(identity.uid)
        except Exception as exc:
            logger.error("Registration failed for %s: %s", email, exc)
            self.error = auth_error_message(exc, REGISTER_ERROR_MESSAGES, REGISTER_DEFAULT)
            self.loading = False
            raise
        self.user = user
        self.loading = False
        logger.info("User registered: %s", identity.uid)

    async def logout(self) -> None:
        self.loading = True
        self.error = None
        try:
            await self.auth_gateway.sign_out()
        except Exception as exc:
            logger.error("Logout failed: %s", exc)
            self.error = auth_error_message(exc, LOGOUT_ERROR_MESSAGES, LOGOUT_DEFAULT)
            self.loading = False
            raise
        self.user = None
        self.loading = False
        logger.info("User logged out")
