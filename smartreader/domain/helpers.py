"""Pure validation and derived-view helpers.

Nothing in here touches the gateway or any container state; every function
takes plain entities and returns a value.
"""

import re
from datetime import date, datetime
from typing import Iterable, Literal, Optional, Union

from smartreader.domain.entities import BOOK_STATUSES, Book, Review

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# At least 8 characters, 1 uppercase, 1 lowercase, 1 number
STRONG_PASSWORD_RE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$")

STATUS_LABELS = {
    "desired": "Para ler",
    "inProgress": "Em andamento",
    "read": "Lido",
}
STATUS_COLORS = {
    "desired": "blue",
    "inProgress": "orange",
    "read": "green",
}

RankingSort = Literal["rating", "title", "author"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def is_strong_password(password: str) -> bool:
    return bool(STRONG_PASSWORD_RE.match(password or ""))


def validate_login_form(email: str, password: str) -> dict[str, str]:
    """Field-level messages for the sign-in form; empty when valid."""
    errors: dict[str, str] = {}
    if not email:
        errors["email"] = "Email é obrigatório"
    elif not is_valid_email(email):
        errors["email"] = "Por favor, insira um email válido"
    if not password:
        errors["password"] = "Senha é obrigatória"
    return errors


def validate_register_form(
    name: str, email: str, password: str, confirm_password: str
) -> dict[str, str]:
    """Field-level messages for the sign-up form; empty when valid."""
    errors: dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Nome é obrigatório"
    if not email:
        errors["email"] = "Email é obrigatório"
    elif not is_valid_email(email):
        errors["email"] = "Por favor, insira um email válido"
    if not password:
        errors["password"] = "Senha é obrigatória"
    elif not is_strong_password(password):
        errors["password"] = (
            "A senha deve ter pelo menos 8 caracteres com 1 letra maiúscula, "
            "1 minúscula e 1 número"
        )
    if password != confirm_password:
        errors["confirm_password"] = "As senhas não coincidem"
    return errors


def validate_book_form(title: str, author: str) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not (title or "").strip():
        errors["title"] = "Por favor, preencha todos os campos obrigatórios"
    if not (author or "").strip():
        errors["author"] = "Por favor, preencha todos os campos obrigatórios"
    return errors


def validate_review_form(text: str) -> dict[str, str]:
    if not (text or "").strip():
        return {"text": "A resenha não pode estar vazia"}
    return {}


# ---------------------------------------------------------------------------
# Labels & formatting
# ---------------------------------------------------------------------------
def get_status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def get_status_color(status: str) -> str:
    return STATUS_COLORS.get(status, "gray")


def rating_to_stars(rating: float) -> list[int]:
    """Five 0/1 flags for a star widget, rounding half up."""
    filled = int(rating + 0.5) if rating > 0 else 0
    return [1 if i < filled else 0 for i in range(5)]


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def format_date(value: Union[date, datetime, str, int, float]) -> str:
    """Render a date as e.g. ``January 5, 2024``.

    Accepts ``date``/``datetime`` objects, ISO strings and epoch
    milliseconds.
    """
    if isinstance(value, (int, float)):
        value = datetime.fromtimestamp(value / 1000)
    elif isinstance(value, str):
        value = datetime.fromisoformat(value)
    return f"{value:%B} {value.day}, {value.year}"


# ---------------------------------------------------------------------------
# Counts & aggregates
# ---------------------------------------------------------------------------
def get_total_book_count(books: list[Book]) -> int:
    return len(books)


def get_book_count_by_status(books: Iterable[Book], status: str) -> int:
    return sum(1 for book in books if book.status == status)


def get_book_counts(books: list[Book]) -> dict[str, int]:
    """Total plus one count per status, as shown on the dashboard."""
    counts = {status: get_book_count_by_status(books, status) for status in BOOK_STATUSES}
    counts["total"] = get_total_book_count(books)
    return counts


def calculate_average_rating(books: list[Book]) -> float:
    if not books:
        return 0
    return sum(book.rating for book in books) / len(books)


def group_books_by_author(books: Iterable[Book]) -> dict[str, list[Book]]:
    groups: dict[str, list[Book]] = {}
    for book in books:
        groups.setdefault(book.author, []).append(book)
    return groups


def get_unique_authors(books: Iterable[Book]) -> list[str]:
    return sorted({book.author for book in books})


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------
def get_ranked_books(
    books: list[Book],
    sort_by: RankingSort = "rating",
    author: Optional[str] = None,
) -> list[Book]:
    """Books that were read and rated, optionally for one author.

    ``rating`` sorts descending; ``title`` and ``author`` sort ascending,
    ignoring case.  Ties keep their original order.
    """
    ranked = [b for b in books if b.status == "read" and b.rating > 0]
    if author is not None:
        ranked = [b for b in ranked if b.author == author]
    if sort_by == "rating":
        return sorted(ranked, key=lambda b: b.rating, reverse=True)
    if sort_by == "title":
        return sorted(ranked, key=lambda b: b.title.casefold())
    if sort_by == "author":
        return sorted(ranked, key=lambda b: b.author.casefold())
    raise ValueError(f"Unknown sort option: {sort_by}")


def get_featured_books(books: list[Book], limit: int = 3) -> list[Book]:
    return get_ranked_books(books, "rating")[:limit]


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
def has_user_reviewed_book(reviews: Iterable[Review], user_id: str, book_id: str) -> bool:
    return get_user_review_for_book(reviews, user_id, book_id) is not None


def get_user_review_for_book(
    reviews: Iterable[Review], user_id: str, book_id: str
) -> Optional[Review]:
    for review in reviews:
        if review.user_id == user_id and review.book_id == book_id:
            return review
    return None
