"""Review collection state container."""

import logging
from typing import Optional

from smartreader.core.messages import DUPLICATE_REVIEW
from smartreader.domain.entities import Review
from smartreader.domain.gateway import REVIEWS, IDocumentGateway
from smartreader.domain.helpers import get_user_review_for_book

logger = logging.getLogger(__name__)


class DuplicateReviewError(ValueError):
    """The user already has a review for this book."""

    def __init__(self, user_id: str, book_id: str):
        self.user_id = user_id
        self.book_id = book_id
        super().__init__(DUPLICATE_REVIEW)


class ReviewStore:
    """In-memory mirror of the reviews for one book or one user.

    Same contract as the book store: fetches replace the list and swallow
    errors, writes hit the gateway first and re-raise on failure.
    """

    def __init__(self, document_gateway: IDocumentGateway):
        self.document_gateway = document_gateway
        self.reviews: list[Review] = []
        self.loading = False
        self.error: Optional[str] = None

    def clear(self) -> None:
        self.reviews = []
        self.error = None

    async def fetch_book_reviews(self, book_id: str) -> None:
        await self._fetch("bookId", book_id)

    async def fetch_user_reviews(self, user_id: str) -> None:
        await self._fetch("userId", user_id)

    async def _fetch(self, field: str, value: str) -> None:
        # No server-side ordering: avoids needing a composite index
        self.loading = True
        self.error = None
        try:
            docs = await self.document_gateway.query_equals(REVIEWS, field, value)
        except Exception as exc:
            logger.error("Error fetching reviews where %s == %s: %s", field, value, exc)
            self.error = str(exc)
            self.loading = False
            return
        self.reviews = [Review.from_document(doc["id"], doc) for doc in docs]
        self.loading = False

    async def add_review(self, book_id: str, user_id: str, text: str) -> Review:
        """Create the user's review for a book.

        A user gets one review per book: the book's existing reviews are
        checked first and :class:`DuplicateReviewError` is raised when the
        user already has one.  The check and the write are not atomic.
        """
        self.loading = True
        self.error = None
        draft = Review(id="", book_id=book_id, user_id=user_id, text=text)
        try:
            existing = await self.document_gateway.query_equals(REVIEWS, "bookId", book_id)
            reviews = [Review.from_document(doc["id"], doc) for doc in existing]
            if get_user_review_for_book(reviews, user_id, book_id) is not None:
                raise DuplicateReviewError(user_id, book_id)
            review_id = await self.document_gateway.create_document(REVIEWS, draft.to_document())
        except Exception as exc:
            logger.error("Error adding review for book %s: %s", book_id, exc)
            self.error = str(exc)
            self.loading = False
            raise
        review = Review(id=review_id, book_id=book_id, user_id=user_id, text=text)
        self.reviews = [*self.reviews, review]
        self.loading = False
        logger.info("Review created: %s for book %s", review_id, book_id)
        return review

    async def update_review(self, review_id: str, text: str) -> None:
        self.loading = True
        self.error = None
        try:
            await self.document_gateway.update_document(REVIEWS, review_id, {"text": text})
        except Exception as exc:
            logger.error("Error updating review %s: %s", review_id, exc)
            self.error = str(exc)
            self.loading = False
            raise
        self.reviews = [
            Review(id=r.id, book_id=r.book_id, user_id=r.user_id, text=text)
            if r.id == review_id
            else r
            for r in self.reviews
        ]
        self.loading = False
        logger.info("Review updated: %s", review_id)

    async def delete_review(self, review_id: str) -> None:
        self.loading = True
        self.error = None
        try:
            await self.document_gateway.delete_document(REVIEWS, review_id)
        except Exception as exc:
            logger.error("Error deleting review %s: %s", review_id, exc)
            self.error = str(exc)
            self.loading = False
            raise
        self.reviews = [r for r in self.reviews if r.id != review_id]
        self.loading = False
        logger.info("Review deleted: %s", review_id)

    # -- selectors -----------------------------------------------------------

    def get_review_by_id(self, review_id: str) -> Optional[Review]:
        return next((r for r in self.reviews if r.id == review_id), None)

    def get_reviews_by_book_id(self, book_id: str) -> list[Review]:
        return [r for r in self.reviews if r.book_id == book_id]
