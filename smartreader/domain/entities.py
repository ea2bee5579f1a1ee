"""Domain entities for SmartReader."""

from dataclasses import dataclass
from typing import Any, Literal, Optional

BookStatus = Literal["desired", "inProgress", "read"]
BOOK_STATUSES: tuple[str, ...] = ("desired", "inProgress", "read")


@dataclass
class Identity:
    """Signed-in principal as reported by the auth gateway."""

    uid: str
    email: Optional[str] = None


@dataclass
class User:
    id: str
    name: str
    email: str

    def to_document(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "User":
        return cls(
            id=data.get("id") or doc_id,
            name=data.get("name", ""),
            email=data.get("email", ""),
        )


@dataclass
class BookDraft:
    """A book that has not been written to the gateway yet (no id)."""

    title: str
    author: str
    user_id: str
    status: str = "desired"
    rating: float = 0

    def to_document(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "status": self.status,
            "userId": self.user_id,
            "rating": self.rating,
        }


@dataclass
class Book:
    id: str
    title: str
    author: str
    status: str
    user_id: str
    rating: float = 0

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Book":
        return cls(
            id=doc_id,
            title=data.get("title", ""),
            author=data.get("author", ""),
            status=data.get("status", "desired"),
            user_id=data.get("userId", ""),
            rating=data.get("rating", 0),
        )


@dataclass
class Review:
    id: str
    book_id: str
    user_id: str
    text: str

    def to_document(self) -> dict[str, Any]:
        return {"bookId": self.book_id, "userId": self.user_id, "text": self.text}

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> "Review":
        return cls(
            id=doc_id,
            book_id=data.get("bookId", ""),
            user_id=data.get("userId", ""),
            text=data.get("text", ""),
        )
