"""In-memory gateway backend.

Behaves like the hosted backend closely enough for development and tests:
same error codes, generated document ids, equality queries with optional
ordering.  Nothing is persisted across processes.
"""

import hashlib
import logging
import secrets
from typing import Any, Optional
from uuid import uuid4

from smartreader.domain.entities import Identity
from smartreader.domain.gateway import (
    AuthStateCallback,
    GatewayError,
    IAuthGateway,
    IDocumentGateway,
    Unsubscribe,
)
from smartreader.domain.helpers import is_valid_email
from smartreader.infrastructure.gateway.notifier import AuthStateNotifier

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode()).hexdigest()


class MemoryGateway(IAuthGateway, IDocumentGateway):
    """Dict-backed auth + document store."""

    def __init__(self) -> None:
        self._accounts: dict[str, dict[str, Any]] = {}
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._notifier = AuthStateNotifier()

    @property
    def current_identity(self) -> Optional[Identity]:
        return self._notifier.current_identity

    # -- IAuthGateway --------------------------------------------------------

    async def create_account(self, email: str, password: str) -> Identity:
        if not is_valid_email(email):
            raise GatewayError("auth/invalid-email", "Invalid email address")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise GatewayError("auth/weak-password", "Password should be at least 6 characters")
        key = email.lower()
        if key in self._accounts:
            raise GatewayError("auth/email-already-in-use", "Email already in use")

        salt = secrets.token_hex(8)
        identity = Identity(uid=uuid4().hex, email=email)
        self._accounts[key] = {
            "uid": identity.uid,
            "email": email,
            "salt": salt,
            "password_hash": _hash_password(password, salt),
            "disabled": False,
        }
        logger.info("Account created: %s", identity.uid)
        await self._notifier.publish(identity)
        return identity

    async def sign_in(self, email: str, password: str) -> Identity:
        if not is_valid_email(email):
            raise GatewayError("auth/invalid-email", "Invalid email address")
        account = self._accounts.get(email.lower())
        if account is None:
            raise GatewayError("auth/user-not-found", "No account for this email")
        if account["disabled"]:
            raise GatewayError("auth/user-disabled", "Account disabled")
        if _hash_password(password, account["salt"]) != account["password_hash"]:
            raise GatewayError("auth/wrong-password", "Wrong password")

        identity = Identity(uid=account["uid"], email=account["email"])
        await self._notifier.publish(identity)
        return identity

    async def sign_out(self) -> None:
        await self._notifier.publish(None)

    async def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        return await self._notifier.subscribe(callback)

    def disable_account(self, email: str) -> None:
        """Mark an account as disabled; later sign-ins fail."""
        self._accounts[email.lower()]["disabled"] = True

    # -- IDocumentGateway ----------------------------------------------------

    async def create_document(self, collection: str, fields: dict[str, Any]) -> str:
        doc_id = uuid4().hex
        self._collection(collection)[doc_id] = dict(fields)
        return doc_id

    async def set_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        self._collection(collection)[doc_id] = dict(fields)

    async def update_document(
        self, collection: str, doc_id: str, fields: dict[str, Any]
    ) -> None:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise GatewayError("not-found", f"No document to update: {collection}/{doc_id}")
        docs[doc_id].update(fields)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        # Deleting a missing document succeeds, as in Firestore
        self._collection(collection).pop(doc_id, None)

    async def get_document(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        data = self._collection(collection).get(doc_id)
        return dict(data) if data is not None else None

    async def query_equals(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        results = [
            {"id": doc_id, **data}
            for doc_id, data in self._collection(collection).items()
            if data.get(field) == value
        ]
        if order_by:
            # Documents missing the order field are left out, as Firestore does
            results = [r for r in results if order_by in r]
            results.sort(key=lambda r: r[order_by])
        return results

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(name, {})
