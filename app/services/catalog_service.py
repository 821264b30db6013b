"""
Catalog service: Google Books search and result normalization.

The only outbound dependency of the backend. Every call carries a
(connect, read) timeout; transport, HTTP and decoding failures are turned
into UpstreamFailure so callers never see a raw requests exception.
"""
import logging
from typing import Any

import requests

from config import (
    CATALOG_MAX_RESULTS,
    CATALOG_REQUEST_TIMEOUT,
    GOOGLE_BOOKS_API_KEY,
    GOOGLE_BOOKS_API_URL,
)
from errors import UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)

ISBN_TYPES = ("ISBN_13", "ISBN_10")


def _catalog_request(params: dict) -> dict:
    """GET the volumes endpoint with timeout; returns decoded JSON."""
    try:
        resp = requests.get(GOOGLE_BOOKS_API_URL, params=params, timeout=CATALOG_REQUEST_TIMEOUT)
        resp.raise_for_status()
        data = resp.json()
    except requests.exceptions.Timeout:
        logger.warning("Catalog request timed out")
        raise UpstreamFailure("Book search timed out; please try again later")
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning("Catalog request failed: %s", e)
        raise UpstreamFailure("Book search is currently unavailable")
    return data if isinstance(data, dict) else {}


def _extract_isbn(volume_info: dict) -> str | None:
    for identifier in volume_info.get("industryIdentifiers") or []:
        if identifier.get("type") in ISBN_TYPES and identifier.get("identifier"):
            return identifier["identifier"]
    return None


def _extract_thumbnail(volume_info: dict) -> str | None:
    image_links = volume_info.get("imageLinks") or {}
    return image_links.get("thumbnail") or image_links.get("smallThumbnail")


def normalize_item(item: dict) -> dict | None:
    """
    Flatten one Google Books volume into the public shape.
    Returns None for items carrying neither an id nor a title.
    """
    volume_info = item.get("volumeInfo") or {}
    book_id = item.get("id")
    title = volume_info.get("title")
    if not book_id and not title:
        return None
    return {
        "id": book_id,
        "title": title or "Unknown Title",
        "authors": volume_info.get("authors") or ["Unknown Author"],
        "description": volume_info.get("description"),
        "publishedDate": volume_info.get("publishedDate"),
        "pageCount": volume_info.get("pageCount") or 0,
        "categories": volume_info.get("categories") or [],
        "language": volume_info.get("language") or "en",
        "isbn": _extract_isbn(volume_info),
        "thumbnail": _extract_thumbnail(volume_info),
        "previewLink": volume_info.get("previewLink"),
        "infoLink": volume_info.get("infoLink"),
        "averageRating": volume_info.get("averageRating") or 0,
        "ratingsCount": volume_info.get("ratingsCount") or 0,
        "publisher": volume_info.get("publisher"),
    }


def search_books(query: str, max_results: int = CATALOG_MAX_RESULTS) -> list[dict[str, Any]]:
    """
    Search the catalog for free text. Raises ValidationError on a blank query,
    UpstreamFailure when the catalog cannot be reached.
    """
    query = (query or "").strip()
    if not query:
        raise ValidationError("Query is required", field="query")

    params = {"q": query, "maxResults": max_results, "printType": "books"}
    if GOOGLE_BOOKS_API_KEY:
        params["key"] = GOOGLE_BOOKS_API_KEY

    data = _catalog_request(params)
    results = []
    for item in data.get("items") or []:
        if not isinstance(item, dict):
            continue
        normalized = normalize_item(item)
        if normalized is not None:
            results.append(normalized)
    return results
