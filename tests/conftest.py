"""Shared fixtures: every test runs against a fresh in-memory gateway."""

import pytest
from fastapi.testclient import TestClient

from smartreader.core.dependencies import build_container
from smartreader.domain.entities import Book
from smartreader.infrastructure.gateway.memory import MemoryGateway
from smartreader.main import create_app
from smartreader.services.auth_listener import AuthStateListener
from smartreader.services.book_store import BookStore
from smartreader.services.review_store import ReviewStore
from smartreader.services.session_store import SessionStore

PASSWORD = "Abcdefg1"


@pytest.fixture
def gateway():
    return MemoryGateway()


@pytest.fixture
def session_store(gateway):
    return SessionStore(auth_gateway=gateway, document_gateway=gateway)


@pytest.fixture
def listener(session_store, gateway):
    return AuthStateListener(session_store=session_store, auth_gateway=gateway)


@pytest.fixture
def book_store(gateway):
    return BookStore(document_gateway=gateway)


@pytest.fixture
def review_store(gateway):
    return ReviewStore(document_gateway=gateway)


@pytest.fixture
def container(gateway):
    return build_container(gateway)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client


@pytest.fixture
def signed_in_client(client):
    resp = client.post(
        "/auth/register",
        json={
            "name": "Ana",
            "email": "ana@example.com",
            "password": PASSWORD,
            "confirm_password": PASSWORD,
        },
    )
    assert resp.status_code == 201
    return client


def make_book(book_id: str, rating: float = 0, status: str = "desired", author: str = "A") -> Book:
    return Book(
        id=book_id,
        title=f"Title {book_id}",
        author=author,
        status=status,
        user_id="u1",
        rating=rating,
    )
