"""
Data models for the book tracker backend.

"""
import enum
from datetime import datetime, UTC

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database import Base


class ReadingStatus(str, enum.Enum):
    """Closed set of reading states. Any transition between them is allowed."""

    WANT_TO_READ = "WantToRead"
    READING = "Reading"
    FINISHED = "Finished"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class User(Base):
    """
    Credential record.

    - id: integer assigned by the database, immutable.
    - username: display name, mutable.
    - email: login key, stored stripped and lower-cased, unique.
    - password_hash: bcrypt hash; the raw password is never stored.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    books = relationship("Book", back_populates="owner", order_by="Book.id")


class Book(Base):
    """
    A book in one user's collection. Ownership (user_id) is set on creation
    and never changes; every query filters on it.
    """
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(32), nullable=True)
    thumbnail_url = Column(String(2048), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    is_favorite = Column(Boolean, nullable=False, default=False)
    reading_status = Column(
        String(32), nullable=False, default=ReadingStatus.WANT_TO_READ.value
    )
    # Server clock at creation; never updated
    date_added = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    owner = relationship("User", back_populates="books")
