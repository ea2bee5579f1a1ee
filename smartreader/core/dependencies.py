"""Dependency injection container."""

from dataclasses import dataclass
from typing import Optional, Union

from fastapi import Depends, HTTPException, Request, status

from smartreader.core.config import Settings, settings
from smartreader.domain.entities import User
from smartreader.infrastructure.gateway.firebase import FirebaseGateway
from smartreader.infrastructure.gateway.memory import MemoryGateway
from smartreader.services.auth_listener import AuthStateListener
from smartreader.services.book_store import BookStore
from smartreader.services.review_store import ReviewStore
from smartreader.services.session_store import SessionStore

Gateway = Union[MemoryGateway, FirebaseGateway]


@dataclass
class Container:
    """Everything one running process owns: one gateway, one session."""

    gateway: Gateway
    session_store: SessionStore
    book_store: BookStore
    review_store: ReviewStore
    auth_listener: AuthStateListener


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def get_gateway(config: Optional[Settings] = None) -> Gateway:
    """Return the configured gateway backend."""
    config = config or settings
    if config.gateway_backend == "memory":
        return MemoryGateway()
    elif config.gateway_backend == "firebase":
        return FirebaseGateway(
            api_key=config.firebase_api_key,
            project_id=config.firebase_project_id,
            credentials_file=config.firebase_credentials_file,
            auth_url=config.firebase_auth_url,
            timeout=config.http_timeout,
        )
    raise ValueError(f"Unknown gateway backend: {config.gateway_backend}")


def build_container(gateway: Optional[Gateway] = None) -> Container:
    """Wire the state containers and the auth listener around one gateway."""
    gateway = gateway or get_gateway()
    session_store = SessionStore(auth_gateway=gateway, document_gateway=gateway)
    return Container(
        gateway=gateway,
        session_store=session_store,
        book_store=BookStore(document_gateway=gateway),
        review_store=ReviewStore(document_gateway=gateway),
        auth_listener=AuthStateListener(session_store=session_store, auth_gateway=gateway),
    )


# ---------------------------------------------------------------------------
# Request-scoped providers
# ---------------------------------------------------------------------------
def get_container(request: Request) -> Container:
    return request.app.state.container


def get_session_store(container: Container = Depends(get_container)) -> SessionStore:
    return container.session_store


def get_book_store(container: Container = Depends(get_container)) -> BookStore:
    return container.book_store


def get_review_store(container: Container = Depends(get_container)) -> ReviewStore:
    return container.review_store


def get_current_user(session_store: SessionStore = Depends(get_session_store)) -> User:
    """Return the signed-in user or reject the request."""
    if session_store.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return session_store.user
