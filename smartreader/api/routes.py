"""Book and review API routes (shelf CRUD, stats, rankings, reviews)."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from smartreader.api.schemas import (
    BookCreate,
    BookResponse,
    BookReviewsResponse,
    BookStatsResponse,
    BookUpdate,
    RankingResponse,
    RatingUpdate,
    ReviewRequest,
    ReviewResponse,
    StatusField,
    StatusUpdate,
)
from smartreader.core.config import settings
from smartreader.core.dependencies import get_book_store, get_current_user, get_review_store
from smartreader.domain.entities import Book, BookDraft, Review, User
from smartreader.domain.gateway import GatewayError
from smartreader.domain.helpers import (
    RankingSort,
    calculate_average_rating,
    get_book_counts,
    get_featured_books,
    get_ranked_books,
    get_status_label,
    get_unique_authors,
    get_user_review_for_book,
    group_books_by_author,
    rating_to_stars,
    validate_book_form,
    validate_review_form,
)
from smartreader.services.book_store import BookStore
from smartreader.services.review_store import DuplicateReviewError, ReviewStore

logger = logging.getLogger(__name__)
router = APIRouter(tags=["books"])

BookStoreDep = Annotated[BookStore, Depends(get_book_store)]
ReviewStoreDep = Annotated[ReviewStore, Depends(get_review_store)]
CurrentUser = Annotated[User, Depends(get_current_user)]


def _book_response(book: Book) -> BookResponse:
    return BookResponse(
        id=book.id,
        title=book.title,
        author=book.author,
        status=book.status,
        status_label=get_status_label(book.status),
        user_id=book.user_id,
        rating=book.rating,
        stars=rating_to_stars(book.rating),
    )


def _gateway_failure(exc: GatewayError, detail: Optional[str]) -> HTTPException:
    if exc.code == "not-found":
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


async def _owned_book(book_store: BookStore, user: User, book_id: str) -> Book:
    """Find one of the user's books, refreshing the mirror once if needed.

    Someone else's book is reported as missing.
    """
    book = book_store.get_book(book_id)
    if book is None:
        await book_store.fetch_user_books(user.id)
        book = book_store.get_book(book_id)
    if book is None or book.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return book


async def _owned_review(review_store: ReviewStore, user: User, review_id: str) -> Review:
    review = review_store.get_review_by_id(review_id)
    if review is None:
        await review_store.fetch_user_reviews(user.id)
        review = review_store.get_review_by_id(review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
    if review.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your review")
    return review


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
@router.get("/books", response_model=list[BookResponse])
async def list_books(
    book_store: BookStoreDep,
    current_user: CurrentUser,
    book_status: Annotated[Optional[StatusField], Query(alias="status")] = None,
) -> list[BookResponse]:
    """The user's shelf, ordered by title.

    A failed refresh serves the last known list rather than an error.
    """
    await book_store.fetch_user_books(current_user.id)
    books = book_store.get_books_by_status(book_status) if book_status else book_store.books
    return [_book_response(b) for b in books]


@router.post("/books", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreate,
    book_store: BookStoreDep,
    current_user: CurrentUser,
) -> BookResponse:
    errors = validate_book_form(body.title, body.author)
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    draft = BookDraft(
        title=body.title.strip(),
        author=body.author.strip(),
        user_id=current_user.id,
        status=body.status,
        rating=body.rating,
    )
    try:
        book = await book_store.add_book(draft)
    except GatewayError as exc:
        raise _gateway_failure(exc, book_store.error)
    return _book_response(book)


@router.get("/books/stats", response_model=BookStatsResponse)
async def book_stats(book_store: BookStoreDep, current_user: CurrentUser) -> BookStatsResponse:
    """Dashboard numbers: counts per status, average rating, books per author."""
    await book_store.fetch_user_books(current_user.id)
    books = book_store.books
    counts = get_book_counts(books)
    return BookStatsResponse(
        total=counts["total"],
        desired=counts["desired"],
        in_progress=counts["inProgress"],
        read=counts["read"],
        average_rating=calculate_average_rating(books),
        authors={
            author: [_book_response(b) for b in group]
            for author, group in group_books_by_author(books).items()
        },
    )


@router.get("/books/top-rated", response_model=list[BookResponse])
async def top_rated_books(
    book_store: BookStoreDep,
    current_user: CurrentUser,
    limit: Annotated[int, Query(ge=1, le=100)] = settings.top_rated_limit,
) -> list[BookResponse]:
    await book_store.fetch_user_books(current_user.id)
    return [_book_response(b) for b in book_store.get_top_rated_books(limit)]


@router.get("/books/rankings", response_model=RankingResponse)
async def book_rankings(
    book_store: BookStoreDep,
    current_user: CurrentUser,
    sort_by: RankingSort = "rating",
    author: Optional[str] = None,
) -> RankingResponse:
    """Read and rated books, with the top few featured."""
    await book_store.fetch_user_books(current_user.id)
    books = book_store.books
    return RankingResponse(
        featured=[_book_response(b) for b in get_featured_books(books, settings.featured_limit)],
        books=[_book_response(b) for b in get_ranked_books(books, sort_by, author)],
        authors=get_unique_authors(books),
    )


@router.get("/books/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str, book_store: BookStoreDep, current_user: CurrentUser
) -> BookResponse:
    return _book_response(await _owned_book(book_store, current_user, book_id))


@router.patch("/books/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    body: BookUpdate,
    book_store: BookStoreDep,
    current_user: CurrentUser,
) -> BookResponse:
    """Change any of title, author, status or rating."""
    book = await _owned_book(book_store, current_user, book_id)
    fields = body.model_dump(exclude_none=True)
    errors = validate_book_form(fields.get("title", book.title), fields.get("author", book.author))
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    try:
        await book_store.update_book(book_id, **fields)
    except GatewayError as exc:
        raise _gateway_failure(exc, book_store.error)
    return _book_response(book_store.get_book(book_id) or book)


@router.put("/books/{book_id}/status", response_model=BookResponse)
async def update_book_status(
    book_id: str,
    body: StatusUpdate,
    book_store: BookStoreDep,
    current_user: CurrentUser,
) -> BookResponse:
    book = await _owned_book(book_store, current_user, book_id)
    try:
        await book_store.update_book_status(book_id, body.status)
    except GatewayError as exc:
        raise _gateway_failure(exc, book_store.error)
    return _book_response(book_store.get_book(book_id) or book)


@router.put("/books/{book_id}/rating", response_model=BookResponse)
async def update_book_rating(
    book_id: str,
    body: RatingUpdate,
    book_store: BookStoreDep,
    current_user: CurrentUser,
) -> BookResponse:
    book = await _owned_book(book_store, current_user, book_id)
    try:
        await book_store.update_book_rating(book_id, body.rating)
    except GatewayError as exc:
        raise _gateway_failure(exc, book_store.error)
    return _book_response(book_store.get_book(book_id) or book)


@router.delete("/books/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str, book_store: BookStoreDep, current_user: CurrentUser
) -> Response:
    await _owned_book(book_store, current_user, book_id)
    try:
        await book_store.delete_book(book_id)
    except GatewayError as exc:
        raise _gateway_failure(exc, book_store.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
@router.get("/books/{book_id}/reviews", response_model=BookReviewsResponse)
async def list_book_reviews(
    book_id: str,
    book_store: BookStoreDep,
    review_store: ReviewStoreDep,
    current_user: CurrentUser,
) -> BookReviewsResponse:
    book = await _owned_book(book_store, current_user, book_id)
    await review_store.fetch_book_reviews(book_id)
    reviews = review_store.get_reviews_by_book_id(book_id)
    return BookReviewsResponse(
        book=_book_response(book),
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        has_reviewed=get_user_review_for_book(reviews, current_user.id, book_id) is not None,
    )


@router.post("/books/{book_id}/reviews", response_model=ReviewResponse)
async def save_book_review(
    book_id: str,
    body: ReviewRequest,
    book_store: BookStoreDep,
    review_store: ReviewStoreDep,
    current_user: CurrentUser,
) -> ReviewResponse:
    """Write the user's review for a book, replacing the text if one exists.

    The book's reviews are re-fetched afterwards so the mirror matches the
    backend.
    """
    errors = validate_review_form(body.text)
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    await _owned_book(book_store, current_user, book_id)
    await review_store.fetch_book_reviews(book_id)
    existing = get_user_review_for_book(review_store.reviews, current_user.id, book_id)
    try:
        if existing:
            await review_store.update_review(existing.id, body.text)
            review_id = existing.id
        else:
            review_id = (await review_store.add_review(book_id, current_user.id, body.text)).id
    except DuplicateReviewError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=review_store.error)
    except GatewayError as exc:
        raise _gateway_failure(exc, review_store.error)

    await review_store.fetch_book_reviews(book_id)
    review = review_store.get_review_by_id(review_id)
    if review is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=review_store.error)
    return ReviewResponse.model_validate(review)


@router.get("/reviews/mine", response_model=list[ReviewResponse])
async def list_my_reviews(
    review_store: ReviewStoreDep,
    current_user: CurrentUser,
) -> list[ReviewResponse]:
    await review_store.fetch_user_reviews(current_user.id)
    return [ReviewResponse.model_validate(r) for r in review_store.reviews]


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: str,
    body: ReviewRequest,
    review_store: ReviewStoreDep,
    current_user: CurrentUser,
) -> ReviewResponse:
    errors = validate_review_form(body.text)
    if errors:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=errors)
    await _owned_review(review_store, current_user, review_id)
    try:
        await review_store.update_review(review_id, body.text)
    except GatewayError as exc:
        raise _gateway_failure(exc, review_store.error)
    return ReviewResponse.model_validate(review_store.get_review_by_id(review_id))


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: str,
    review_store: ReviewStoreDep,
    current_user: CurrentUser,
) -> Response:
    await _owned_review(review_store, current_user, review_id)
    try:
        await review_store.delete_review(review_id)
    except GatewayError as exc:
        raise _gateway_failure(exc, review_store.error)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
