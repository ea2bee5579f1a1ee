"""Pydantic schemas for API requests and responses."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

StatusField = Literal["desired", "inProgress", "read"]


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class SessionResponse(BaseModel):
    user: Optional[UserResponse] = None
    loading: bool
    error: Optional[str] = None
    initialized: bool
    status: str


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookCreate(BaseModel):
    title: str
    author: str
    status: StatusField = "desired"
    rating: float = Field(0, ge=0, le=5)


class BookUpdate(BaseModel):
    """Partial update; omitted fields are left alone."""

    title: Optional[str] = None
    author: Optional[str] = None
    status: Optional[StatusField] = None
    rating: Optional[float] = Field(None, ge=0, le=5)


class StatusUpdate(BaseModel):
    status: StatusField


class RatingUpdate(BaseModel):
    rating: float = Field(..., ge=0, le=5)


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    status: str
    status_label: str
    user_id: str
    rating: float
    stars: list[int]


class BookStatsResponse(BaseModel):
    total: int
    desired: int
    in_progress: int
    read: int
    average_rating: float
    authors: dict[str, list[BookResponse]]


class RankingResponse(BaseModel):
    featured: list[BookResponse]
    books: list[BookResponse]
    authors: list[str]


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class ReviewRequest(BaseModel):
    text: str


class ReviewResponse(BaseModel):
    id: str
    book_id: str
    user_id: str
    text: str

    model_config = ConfigDict(from_attributes=True)


class BookReviewsResponse(BaseModel):
    book: BookResponse
    reviews: list[ReviewResponse]
    has_reviewed: bool
