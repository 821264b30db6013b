"""
Books router: catalog search and the caller's own collection.

Delegates business logic to services.book_service and services.catalog_service.
The owner id always comes from the bearer token (get_current_user_id); a book
owned by another user answers 404 exactly like a missing one.
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from auth import get_current_user_id
from database import get_db
from services import book_service, catalog_service

router = APIRouter(prefix="/books")

BOOK_NOT_FOUND = "Book not found or not owned by user"


# --- Request models ---


class _CamelBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AddBookBody(_CamelBody):
    """Request body for adding a book (manual entry or from a search result)."""
    title: str = Field(..., max_length=500)
    author: str = Field(..., max_length=255)
    isbn: str | None = Field(None, max_length=32)
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl", max_length=2048)


class UpdateBookBody(_CamelBody):
    """Partial update; only fields present in the JSON are applied."""
    title: str | None = Field(None, max_length=500)
    author: str | None = Field(None, max_length=255)
    isbn: str | None = Field(None, max_length=32)
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl", max_length=2048)


class ReadingStatusBody(_CamelBody):
    reading_status: str = Field(..., alias="readingStatus")


class FavoriteBody(_CamelBody):
    is_favorite: bool = Field(..., alias="isFavorite")


# --- Endpoints ---


@router.get("/search")
def search_books(query: str = ""):
    """Search the external catalog. No authentication required."""
    return catalog_service.search_books(query)


@router.post("")
def add_book(
    body: AddBookBody,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    book = book_service.add_book(
        db,
        user_id,
        body.title,
        body.author,
        isbn=body.isbn,
        thumbnail_url=body.thumbnail_url,
    )
    return {"Message": "Book added successfully", "Id": book.id}


@router.get("")
def list_books(
    status: str | None = None,
    favorite: bool | None = None,
    sort: str | None = Query(None, description="title, author or dateAdded; prefix '-' for descending"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Return the caller's books; insertion order unless sort is given."""
    books = book_service.list_books(db, user_id, status=status, favorite=favorite, sort=sort)
    return [book_service.book_to_dict(b) for b in books]


@router.put("/{book_id}")
def update_book(
    book_id: int,
    body: UpdateBookBody,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    fields = body.model_dump(exclude_unset=True)
    book = book_service.update_book(db, user_id, book_id, fields)
    if book is None:
        raise HTTPException(status_code=404, detail=BOOK_NOT_FOUND)
    return {"Message": "Book updated successfully", "book": book_service.book_to_dict(book)}


@router.delete("/{book_id}")
def delete_book(
    book_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    if not book_service.delete_book(db, user_id, book_id):
        raise HTTPException(status_code=404, detail=BOOK_NOT_FOUND)
    return {"Message": "Book deleted successfully"}


@router.patch("/{book_id}/reading-status")
def update_reading_status(
    book_id: int,
    body: ReadingStatusBody,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    book = book_service.set_reading_status(db, user_id, book_id, body.reading_status)
    if book is None:
        raise HTTPException(status_code=404, detail=BOOK_NOT_FOUND)
    return {
        "Message": "Reading status updated successfully",
        "book": book_service.book_to_dict(book),
    }


@router.patch("/{book_id}/favorite")
def update_favorite(
    book_id: int,
    body: FavoriteBody,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    book = book_service.set_favorite(db, user_id, book_id, body.is_favorite)
    if book is None:
        raise HTTPException(status_code=404, detail=BOOK_NOT_FOUND)
    return {
        "Message": "Favorite status updated successfully",
        "book": book_service.book_to_dict(book),
    }
