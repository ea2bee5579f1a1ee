"""Book store: gateway round-trips and the local mirror."""

from unittest.mock import AsyncMock

import pytest

from conftest import make_book
from smartreader.domain.entities import BookDraft
from smartreader.domain.gateway import BOOKS, GatewayError


def draft(title="T", author="A", user_id="u1", status="desired", rating=0):
    return BookDraft(title=title, author=author, user_id=user_id, status=status, rating=rating)


async def test_add_then_fetch_round_trip(book_store):
    created = await book_store.add_book(draft())

    await book_store.fetch_user_books("u1")

    assert len(book_store.books) == 1
    book = book_store.books[0]
    assert book.id == created.id and book.id
    assert (book.title, book.author, book.status, book.user_id, book.rating) == (
        "T", "A", "desired", "u1", 0,
    )
    assert book_store.loading is False
    assert book_store.error is None


async def test_fetch_only_returns_users_books_sorted_by_title(book_store):
    await book_store.add_book(draft(title="Zorba"))
    await book_store.add_book(draft(title="Another", user_id="u2"))
    await book_store.add_book(draft(title="Anna Karenina"))

    await book_store.fetch_user_books("u1")

    assert [b.title for b in book_store.books] == ["Anna Karenina", "Zorba"]


async def test_fetch_replaces_the_whole_list(book_store):
    await book_store.add_book(draft(user_id="u1"))
    await book_store.add_book(draft(user_id="u2"))
    assert len(book_store.books) == 2

    await book_store.fetch_user_books("u2")

    assert [b.user_id for b in book_store.books] == ["u2"]


async def test_update_rating_changes_only_rating(book_store, gateway):
    book = await book_store.add_book(draft(title="Dune", author="Herbert", status="read"))

    await book_store.update_book(book.id, rating=4)

    local = book_store.get_book(book.id)
    assert local.rating == 4
    assert (local.title, local.author, local.status, local.user_id) == (
        "Dune", "Herbert", "read", "u1",
    )
    remote = await gateway.get_document(BOOKS, book.id)
    assert remote == {
        "title": "Dune",
        "author": "Herbert",
        "status": "read",
        "userId": "u1",
        "rating": 4,
    }


async def test_status_and_rating_wrappers(book_store):
    book = await book_store.add_book(draft())

    await book_store.update_book_status(book.id, "inProgress")
    await book_store.update_book_rating(book.id, 5)

    assert book_store.get_book(book.id).status == "inProgress"
    assert book_store.get_book(book.id).rating == 5


async def test_update_rejects_owner_and_unknown_fields(book_store, gateway):
    book = await book_store.add_book(draft())
    gateway.update_document = AsyncMock()

    with pytest.raises(ValueError):
        await book_store.update_book(book.id, user_id="u2")
    with pytest.raises(ValueError):
        await book_store.update_book(book.id, userId="u2")

    gateway.update_document.assert_not_called()
    assert book_store.get_book(book.id).user_id == "u1"


async def test_delete_removes_locally_and_remotely(book_store):
    keep = await book_store.add_book(draft(title="Keep"))
    gone = await book_store.add_book(draft(title="Gone"))

    await book_store.delete_book(gone.id)

    assert [b.id for b in book_store.books] == [keep.id]
    await book_store.fetch_user_books("u1")
    assert [b.id for b in book_store.books] == [keep.id]


async def test_write_failure_records_error_and_reraises(book_store, gateway):
    book = await book_store.add_book(draft())
    gateway.update_document = AsyncMock(side_effect=GatewayError("unavailable", "backend down"))

    with pytest.raises(GatewayError):
        await book_store.update_book(book.id, rating=3)

    assert book_store.error == "backend down"
    assert book_store.loading is False
    assert book_store.get_book(book.id).rating == 0


async def test_update_missing_book_fails(book_store):
    with pytest.raises(GatewayError) as exc_info:
        await book_store.update_book("nope", title="X")
    assert exc_info.value.code == "not-found"
    assert book_store.error


async def test_add_failure_leaves_mirror_untouched(book_store, gateway):
    gateway.create_document = AsyncMock(side_effect=GatewayError("permission-denied", "denied"))

    with pytest.raises(GatewayError):
        await book_store.add_book(draft())

    assert book_store.books == []
    assert book_store.error == "denied"


async def test_delete_failure_keeps_book(book_store, gateway):
    book = await book_store.add_book(draft())
    gateway.delete_document = AsyncMock(side_effect=GatewayError("unavailable", "offline"))

    with pytest.raises(GatewayError):
        await book_store.delete_book(book.id)

    assert book_store.get_book(book.id) is not None
    assert book_store.error == "offline"


async def test_fetch_failure_is_not_raised(book_store, gateway):
    await book_store.add_book(draft())
    gateway.query_equals = AsyncMock(side_effect=GatewayError("unavailable", "offline"))

    await book_store.fetch_user_books("u1")

    assert book_store.error == "offline"
    assert book_store.loading is False
    assert len(book_store.books) == 1


def test_books_by_status_preserves_order(book_store):
    book_store.books = [
        make_book("1", status="read"),
        make_book("2", status="desired"),
        make_book("3", status="read"),
    ]
    assert [b.id for b in book_store.get_books_by_status("read")] == ["1", "3"]
    assert book_store.get_books_by_status("inProgress") == []


def test_top_rated_is_stable_and_limited(book_store):
    book_store.books = [
        make_book("1", rating=3),
        make_book("2", rating=5),
        make_book("3", rating=3),
        make_book("4", rating=5),
        make_book("5", rating=1),
    ]
    assert [b.id for b in book_store.get_top_rated_books(3)] == ["2", "4", "1"]
    assert [b.id for b in book_store.get_top_rated_books()] == ["2", "4", "1", "3", "5"]
    assert [b.id for b in book_store.get_top_rated_books(50)] == ["2", "4", "1", "3", "5"]
    # the mirror itself is not reordered
    assert [b.id for b in book_store.books] == ["1", "2", "3", "4", "5"]


def test_clear_drops_mirror_and_error(book_store):
    book_store.books = [make_book("1")]
    book_store.error = "stale"

    book_store.clear()

    assert book_store.books == []
    assert book_store.error is None


def test_top_rated_with_non_positive_limit_is_empty(book_store):
    book_store.books = [make_book("1", rating=3), make_book("2", rating=5)]

    assert book_store.get_top_rated_books(0) == []
    assert book_store.get_top_rated_books(-1) == []
