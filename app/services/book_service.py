"""
Collection service: CRUD on a user's books.

Every read and write filters on (book id, owner id) in the same query, so a
book owned by someone else is indistinguishable from a missing one. Callers
pass the owner id taken from the validated token, never from the request body.
"""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from database import commit
from errors import ValidationError
from models import Book, ReadingStatus, as_utc

logger = logging.getLogger(__name__)

# Public sort keys -> model columns
SORT_FIELDS = {
    "title": Book.title,
    "author": Book.author,
    "dateAdded": Book.date_added,
}

# Fields a partial update may touch
UPDATABLE_FIELDS = ("title", "author", "isbn", "thumbnail_url")
REQUIRED_FIELDS = ("title", "author")


def _required(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field.capitalize()} is required", field=field)
    return value


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def parse_reading_status(value: Any) -> ReadingStatus:
    """Map a client value to ReadingStatus; raises ValidationError otherwise."""
    try:
        return ReadingStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ReadingStatus)
        raise ValidationError(
            f"Invalid reading status; expected one of: {allowed}",
            field="readingStatus",
        )


def book_to_dict(book: Book) -> dict:
    """Serialize a book for API responses."""
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "isbn": book.isbn,
        "thumbnailUrl": book.thumbnail_url,
        "userId": book.user_id,
        "isFavorite": book.is_favorite,
        "readingStatus": book.reading_status,
        "dateAdded": as_utc(book.date_added).isoformat() if book.date_added else None,
    }


def _get_owned(db: Session, owner_id: int, book_id: int) -> Book | None:
    stmt = select(Book).where(Book.id == book_id, Book.user_id == owner_id)
    return db.execute(stmt).scalar_one_or_none()


def add_book(
    db: Session,
    owner_id: int,
    title: str,
    author: str,
    isbn: str | None = None,
    thumbnail_url: str | None = None,
) -> Book:
    """Persist a new book for owner_id with default status and favorite flag."""
    book = Book(
        title=_required(title, "title"),
        author=_required(author, "author"),
        isbn=_optional(isbn),
        thumbnail_url=_optional(thumbnail_url),
        user_id=owner_id,
        is_favorite=False,
        reading_status=ReadingStatus.WANT_TO_READ.value,
    )
    db.add(book)
    commit(db)
    db.refresh(book)
    logger.info("User %s added book id=%s", owner_id, book.id)
    return book


def list_books(
    db: Session,
    owner_id: int,
    status: str | None = None,
    favorite: bool | None = None,
    sort: str | None = None,
) -> list[Book]:
    """
    Return the owner's books, insertion order unless sort is given
    (title, author, dateAdded; leading '-' for descending).
    """
    stmt = select(Book).where(Book.user_id == owner_id)
    if status is not None:
        stmt = stmt.where(Book.reading_status == parse_reading_status(status).value)
    if favorite is not None:
        stmt = stmt.where(Book.is_favorite == favorite)

    if sort:
        descending = sort.startswith("-")
        column = SORT_FIELDS.get(sort.lstrip("-"))
        if column is None:
            allowed = ", ".join(SORT_FIELDS)
            raise ValidationError(f"Invalid sort; expected one of: {allowed}", field="sort")
        stmt = stmt.order_by(column.desc() if descending else column.asc(), Book.id.asc())
    else:
        stmt = stmt.order_by(Book.id.asc())
    return list(db.execute(stmt).scalars())


def update_book(db: Session, owner_id: int, book_id: int, fields: dict) -> Book | None:
    """
    Partial update. Keys absent from fields are left as stored; title and
    author may not be blanked; isbn / thumbnail_url set to None or "" are cleared.
    Returns None when the book does not exist for this owner.
    """
    changes = {}
    for key in UPDATABLE_FIELDS:
        if key not in fields:
            continue
        if key in REQUIRED_FIELDS:
            changes[key] = _required(fields[key], key)
        else:
            changes[key] = _optional(fields[key])

    book = _get_owned(db, owner_id, book_id)
    if book is None:
        return None
    for key, value in changes.items():
        setattr(book, key, value)
    commit(db)
    return book


def delete_book(db: Session, owner_id: int, book_id: int) -> bool:
    """Delete the owner's book; False if there was nothing to delete."""
    book = _get_owned(db, owner_id, book_id)
    if book is None:
        return False
    db.delete(book)
    commit(db)
    logger.info("User %s deleted book id=%s", owner_id, book_id)
    return True


def set_reading_status(db: Session, owner_id: int, book_id: int, status: Any) -> Book | None:
    status = parse_reading_status(status)
    book = _get_owned(db, owner_id, book_id)
    if book is None:
        return None
    book.reading_status = status.value
    commit(db)
    return book


def set_favorite(db: Session, owner_id: int, book_id: int, is_favorite: bool) -> Book | None:
    book = _get_owned(db, owner_id, book_id)
    if book is None:
        return None
    book.is_favorite = bool(is_favorite)
    commit(db)
    return book
