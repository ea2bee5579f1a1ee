"""Gateway interfaces (ports) for the hosted auth + document backend.

The state containers in ``smartreader/services/`` depend only on these
abstract classes.  Concrete backends live in
``smartreader/infrastructure/gateway/`` and are picked by the composition
root in ``smartreader/core/dependencies.py``.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Union

from smartreader.domain.entities import Identity

USERS = "users"
BOOKS = "books"
REVIEWS = "reviews"

AuthStateCallback = Callable[[Optional[Identity]], Union[None, Awaitable[None]]]
Unsubscribe = Callable[[], None]


class GatewayError(Exception):
    """A failure reported by the backend, tagged with its error code.

    Auth failures use the ``auth/...`` vocabulary (``auth/wrong-password``,
    ``auth/email-already-in-use``); data failures use short codes such as
    ``not-found`` or ``unavailable``.
    """

    def __init__(self, code: str, message: Optional[str] = None):
        self.code = code
        self.message = message or code
        super().__init__(self.message)


class IAuthGateway(ABC):

    @abstractmethod
    async def create_account(self, email: str, password: str) -> Identity:
        """Create an account and sign it in."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> Identity:
        pass

    @abstractmethod
    async def sign_out(self) -> None:
        pass

    @abstractmethod
    async def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        """Subscribe to sign-in/sign-out events.

        The callback fires once with the current identity (or ``None``),
        awaited before this returns, and then after every sign-in and
        sign-out.  Coroutine callbacks are awaited.  Returns a function that
        removes the subscription.
        """
        pass


class IDocumentGateway(ABC):

    @abstractmethod
    async def create_document(self, collection: str, fields: dict[str, Any]) -> str:
        """Store a new document and return its generated id."""
        pass

    @abstractmethod
    async def set_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Create or overwrite a document under a caller-chosen id."""
        pass

    @abstractmethod
    async def update_document(
        self, collection: str, doc_id: str, fields: dict[str, Any]
    ) -> None:
        """Merge ``fields`` into an existing document.

        Raises ``GatewayError("not-found")`` when the document is missing.
        """
        pass

    @abstractmethod
    async def delete_document(self, collection: str, doc_id: str) -> None:
        """Remove a document; a missing document is not an error."""
        pass

    @abstractmethod
    async def get_document(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        pass

    @abstractmethod
    async def query_equals(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Return every document where ``field == value``.

        Each result carries its document id under the ``"id"`` key.  Results
        are sorted ascending by ``order_by`` when given, otherwise the
        backend's natural order applies.
        """
        pass
