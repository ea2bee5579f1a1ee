"""Firebase gateway backend.

Authentication goes through the Identity Toolkit REST API using **httpx**;
documents live in Cloud Firestore, accessed with the async
``google-cloud-firestore`` client under service-account credentials.

Constructor args:
    api_key:           Web API key of the Firebase project.
    project_id:        Google Cloud project that hosts Firestore.
    credentials_file:  Service-account JSON; application-default
                       credentials are used when empty.
    auth_url:          Identity Toolkit base URL.
    timeout:           Per-request timeout in seconds for auth calls.
"""

import logging
from typing import Any, Optional

import httpx
from google.api_core import exceptions as google_exceptions
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore
from google.oauth2 import service_account

from smartreader.domain.entities import Identity
from smartreader.domain.gateway import (
    AuthStateCallback,
    GatewayError,
    IAuthGateway,
    IDocumentGateway,
    Unsubscribe,
)
from smartreader.infrastructure.gateway.notifier import AuthStateNotifier

logger = logging.getLogger(__name__)

# Identity Toolkit error messages -> auth/... codes
REST_ERROR_CODES = {
    "EMAIL_EXISTS": "auth/email-already-in-use",
    "OPERATION_NOT_ALLOWED": "auth/operation-not-allowed",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "USER_DISABLED": "auth/user-disabled",
    "INVALID_EMAIL": "auth/invalid-email",
    "WEAK_PASSWORD": "auth/weak-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
}

FIRESTORE_ERROR_CODES = {
    google_exceptions.NotFound: "not-found",
    google_exceptions.PermissionDenied: "permission-denied",
    google_exceptions.ServiceUnavailable: "unavailable",
    google_exceptions.DeadlineExceeded: "deadline-exceeded",
    google_exceptions.FailedPrecondition: "failed-precondition",
    google_exceptions.InvalidArgument: "invalid-argument",
}


def rest_error_code(message: str) -> str:
    """Map an Identity Toolkit error message to an ``auth/...`` code.

    Messages may carry a detail suffix, e.g.
    ``"WEAK_PASSWORD : Password should be at least 6 characters"``.
    """
    key = message.split(":", 1)[0].strip()
    return REST_ERROR_CODES.get(key, "auth/internal-error")


def firestore_error(exc: google_exceptions.GoogleAPICallError) -> GatewayError:
    for exc_type, code in FIRESTORE_ERROR_CODES.items():
        if isinstance(exc, exc_type):
            return GatewayError(code, str(exc))
    return GatewayError("unknown", str(exc))


class FirebaseGateway(IAuthGateway, IDocumentGateway):
    """Firebase Authentication + Cloud Firestore."""

    def __init__(
        self,
        api_key: str,
        project_id: str,
        credentials_file: str = "",
        auth_url: str = "https://identitytoolkit.googleapis.com/v1",
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.project_id = project_id
        self.credentials_file = credentials_file
        self.auth_url = auth_url.rstrip("/")
        self.timeout = timeout
        self._id_token: Optional[str] = None
        self._client: Optional[firestore.AsyncClient] = None
        self._notifier = AuthStateNotifier()

    # -- internal helpers ---------------------------------------------------

    def _firestore(self) -> firestore.AsyncClient:
        if self._client is not None:
            return self._client
        try:
            credentials = None
            if self.credentials_file:
                credentials = service_account.Credentials.from_service_account_file(
                    self.credentials_file
                )
            self._client = firestore.AsyncClient(
                project=self.project_id or None, credentials=credentials
            )
        except (GoogleAuthError, OSError, ValueError) as exc:
            # missing default credentials, unreadable or malformed key file
            logger.error("Could not create Firestore client: %s", exc)
            raise GatewayError("unavailable", str(exc)) from exc
        return self._client

    async def _auth_call(self, endpoint: str, email: str, password: str) -> Identity:
        """``POST accounts:<endpoint>`` and return the signed-in identity."""
        payload = {"email": email, "password": password, "returnSecureToken": True}
        url = f"{self.auth_url}/accounts:{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Identity Toolkit %s unreachable: %s", endpoint, exc)
            raise GatewayError("auth/network-request-failed", str(exc)) from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code != 200:
            message = data.get("error", {}).get("message", "")
            logger.warning("Identity Toolkit %s failed: %s", endpoint, message)
            raise GatewayError(rest_error_code(message), message)

        self._id_token = data.get("idToken")
        identity = Identity(uid=data["localId"], email=data.get("email", email))
        await self._notifier.publish(identity)
        return identity

    # -- IAuthGateway --------------------------------------------------------

    async def create_account(self, email: str, password: str) -> Identity:
        return await self._auth_call("signUp", email, password)

    async def sign_in(self, email: str, password: str) -> Identity:
        return await self._auth_call("signInWithPassword", email, password)

    async def sign_out(self) -> None:
        self._id_token = None
        await self._notifier.publish(None)

    async def on_auth_state_change(self, callback: AuthStateCallback) -> Unsubscribe:
        return await self._notifier.subscribe(callback)

    # -- IDocumentGateway ----------------------------------------------------

    async def create_document(self, collection: str, fields: dict[str, Any]) -> str:
        try:
            _, ref = await self._firestore().collection(collection).add(fields)
        except google_exceptions.GoogleAPICallError as exc:
            raise firestore_error(exc) from exc
        return ref.id

    async def set_document(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        try:
            await self._firestore().collection(collection).document(doc_id).set(fields)
        except google_exceptions.GoogleAPICallError as exc:
            raise firestore_error(exc) from exc

    async def update_document(
        self, collection: str, doc_id: str, fields: dict[str, Any]
    ) -> None:
        try:
            await self._firestore().collection(collection).document(doc_id).update(fields)
        except google_exceptions.GoogleAPICallError as exc:
            raise firestore_error(exc) from exc

    async def delete_document(self, collection: str, doc_id: str) -> None:
        try:
            await self._firestore().collection(collection).document(doc_id).delete()
        except google_exceptions.GoogleAPICallError as exc:
            raise firestore_error(exc) from exc

    async def get_document(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        try:
            snapshot = await self._firestore().collection(collection).document(doc_id).get()
        except google_exceptions.GoogleAPICallError as exc:
            raise firestore_error(exc) from exc
        return snapshot.to_dict() if snapshot.exists else None

    async def query_equals(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        query = self._firestore().collection(collection).where(
            filter=firestore.FieldFilter(field, "==", value)
        )
        if order_by:
            query = query.order_by(order_by)
        results: list[dict[str, Any]] = []
        try:
            async for snapshot in query.stream():
                results.append({"id": snapshot.id, **snapshot.to_dict()})
        except google_exceptions.GoogleAPICallError as exc:
            raise firestore_error(exc) from exc
        return results
