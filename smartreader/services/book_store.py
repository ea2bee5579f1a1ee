"""Book collection state container."""

import logging
from typing import Any, Optional, Union

from smartreader.domain.entities import Book, BookDraft
from smartreader.domain.gateway import BOOKS, IDocumentGateway

logger = logging.getLogger(__name__)

# Book attribute -> document field for the fields an update may touch
UPDATABLE_FIELDS = {
    "title": "title",
    "author": "author",
    "status": "status",
    "rating": "rating",
}


class BookStore:
    """In-memory mirror of the signed-in user's books.

    The gateway is the source of truth.  Every write goes to the gateway
    first; the local list is only patched after the write succeeds.  Reads
    replace the whole list.
    """

    def __init__(self, document_gateway: IDocumentGateway):
        self.document_gateway = document_gateway
        self.books: list[Book] = []
        self.loading = False
        self.error: Optional[str] = None

    def clear(self) -> None:
        self.books = []
        self.error = None

    async def fetch_user_books(self, user_id: str) -> None:
        """Load every book owned by ``user_id``, ordered by title.

        Failures are recorded in ``error`` and not raised; the previous list
        stays in place.
        """
        self.loading = True
        self.error = None
        try:
            docs = await self.document_gateway.query_equals(
                BOOKS, "userId", user_id, order_by="title"
            )
        except Exception as exc:
            logger.error("Error fetching books for %s: %s", user_id, exc)
            self.error = str(exc)
            self.loading = False
            return
        self.books = [Book.from_document(doc["id"], doc) for doc in docs]
        self.loading = False
        logger.debug("Fetched %d books for %s", len(self.books), user_id)

    async def add_book(self, draft: BookDraft) -> Book:
        self.loading = True
        self.error = None
        try:
            book_id = await self.document_gateway.create_document(BOOKS, draft.to_document())
        except Exception as exc:
            logger.error("Error adding book %r: %s", draft.title, exc)
            self.error = str(exc)
            self.loading = False
            raise
        book = Book(
            id=book_id,
            title=draft.title,
            author=draft.author,
            status=draft.status,
            user_id=draft.user_id,
            rating=draft.rating,
        )
        self.books = [*self.books, book]
        self.loading = False
        logger.info("Book created: %s", book_id)
        return book

    async def update_book(self, book_id: str, **fields: Any) -> None:
        """Write a partial update and merge it into the local record.

        Only title, author, status and rating may change; anything else
        (owner included) is rejected before the gateway is called.
        """
        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update book fields: {', '.join(sorted(unknown))}")
        if not fields:
            return

        self.loading = True
        self.error = None
        payload = {UPDATABLE_FIELDS[name]: value for name, value in fields.items()}
        try:
            await self.document_gateway.update_document(BOOKS, book_id, payload)
        except Exception as exc:
            logger.error("Error updating book %s: %s", book_id, exc)
            self.error = str(exc)
            self.loading = False
            raise
        self.books = [
            self._merged(book, fields) if book.id == book_id else book for book in self.books
        ]
        self.loading = False
        logger.info("Book updated: %s (%s)", book_id, ", ".join(sorted(fields)))

    async def delete_book(self, book_id: str) -> None:
        self.loading = True
        self.error = None
        try:
            await self.document_gateway.delete_document(BOOKS, book_id)
        except Exception as exc:
            logger.error("Error deleting book %s: %s", book_id, exc)
            self.error = str(exc)
            self.loading = False
            raise
        self.books = [book for book in self.books if book.id != book_id]
        self.loading = False
        logger.info("Book deleted: %s", book_id)

    async def update_book_status(self, book_id: str, status: str) -> None:
        await self.update_book(book_id, status=status)

    async def update_book_rating(self, book_id: str, rating: Union[int, float]) -> None:
        await self.update_book(book_id, rating=rating)

    # -- selectors -----------------------------------------------------------

    def get_book(self, book_id: str) -> Optional[Book]:
        return next((book for book in self.books if book.id == book_id), None)

    def get_books_by_status(self, status: str) -> list[Book]:
        return [book for book in self.books if book.status == status]

    def get_top_rated_books(self, limit: int = 10) -> list[Book]:
        # sorted() is stable, so equal ratings keep their list order
        ranked = sorted(self.books, key=lambda book: book.rating, reverse=True)
        return ranked[: max(limit, 0)]

    @staticmethod
    def _merged(book: Book, fields: dict[str, Any]) -> Book:
        return Book(
            id=book.id,
            title=fields.get("title", book.title),
            author=fields.get("author", book.author),
            status=fields.get("status", book.status),
            user_id=book.user_id,
            rating=fields.get("rating", book.rating),
        )
