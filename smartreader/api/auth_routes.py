"""Authentication API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from smartreader.api.schemas import (
    LoginRequest,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from smartreader.core.dependencies import Container, get_container, get_session_store
from smartreader.domain.gateway import GatewayError
from smartreader.domain.helpers import validate_login_form, validate_register_form
from smartreader.services.session_store import SessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _reset_mirrors(container: Container) -> None:
    """Drop cached books and reviews whenever the signed-in identity changes."""
    container.book_store.clear()
    container.review_store.clear()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    container: Annotated[Container, Depends(get_container)],
) -> UserResponse:
    """Create an account and sign it in."""
    session_store = container.session_store
    errors = validate_register_form(body.name, body.email, body.password, body.confirm_password)
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    _reset_mirrors(container)
    try:
        await session_store.register(body.email, body.password, body.name.strip())
    except GatewayError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=session_store.error)
    return UserResponse.model_validate(session_store.user)


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    container: Annotated[Container, Depends(get_container)],
) -> UserResponse:
    session_store = container.session_store
    errors = validate_login_form(body.email, body.password)
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    _reset_mirrors(container)
    try:
        await session_store.login(body.email, body.password)
    except GatewayError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=session_store.error)
    if session_store.user is None:
        # Signed in, but the profile document is missing
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")
    return UserResponse.model_validate(session_store.user)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(container: Annotated[Container, Depends(get_container)]) -> dict:
    """Sign out and drop the cached books and reviews."""
    try:
        await container.session_store.logout()
    except GatewayError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=container.session_store.error
        )
    _reset_mirrors(container)
    return {"detail": "Successfully signed out"}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    session_store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionResponse:
    """Current session state; ``user`` is only meaningful once initialized."""
    return SessionResponse(**session_store.snapshot())
