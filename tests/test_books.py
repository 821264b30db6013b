from datetime import datetime, timedelta, UTC

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from errors import ValidationError
from main import app
from models import Book
from services import book_service


def _add(client, headers, **fields):
    payload = {"title": "Dune", "author": "Herbert"}
    payload.update(fields)
    resp = client.post("/books", headers=headers, json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()["Id"]


def _list(client, headers, **params):
    resp = client.get("/books", headers=headers, params=params)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_add_then_list_has_defaults(client, make_user):
    user, headers = make_user()
    resp = client.post(
        "/books",
        headers=headers,
        json={"title": "Dune", "author": "Herbert", "isbn": "9780441013593", "thumbnailUrl": "http://img/dune.jpg"},
    )
    assert resp.status_code == 200
    assert resp.json()["Message"] == "Book added successfully"
    book_id = resp.json()["Id"]

    books = _list(client, headers)
    assert len(books) == 1
    book = books[0]
    assert book["id"] == book_id
    assert book["title"] == "Dune"
    assert book["author"] == "Herbert"
    assert book["isbn"] == "9780441013593"
    assert book["thumbnailUrl"] == "http://img/dune.jpg"
    assert book["userId"] == user["id"]
    assert book["isFavorite"] is False
    assert book["readingStatus"] == "WantToRead"

    added = datetime.fromisoformat(book["dateAdded"])
    assert added.utcoffset() == timedelta(0)
    assert abs(datetime.now(UTC) - added) < timedelta(minutes=1)


def test_add_requires_title_and_author(client, make_user):
    _, headers = make_user()
    resp = client.post("/books", headers=headers, json={"title": "   ", "author": "Herbert"})
    assert resp.status_code == 400
    assert resp.json()["Field"] == "title"

    resp = client.post("/books", headers=headers, json={"title": "Dune"})
    assert resp.status_code == 400
    assert _list(client, headers) == []


def test_owner_id_comes_from_token_not_body(client, make_user):
    alice, alice_headers = make_user()
    bob, bob_headers = make_user(username="bob", email="b@x.com")
    resp = client.post(
        "/books",
        headers=alice_headers,
        json={"title": "Dune", "author": "Herbert", "userId": bob["id"]},
    )
    assert resp.status_code == 200
    assert _list(client, bob_headers) == []
    assert _list(client, alice_headers)[0]["userId"] == alice["id"]


def test_full_lifecycle_scenario(client, make_user):
    _, headers = make_user()
    book_id = _add(client, headers)

    resp = client.patch(f"/books/{book_id}/reading-status", headers=headers, json={"readingStatus": "Finished"})
    assert resp.status_code == 200
    assert resp.json()["book"]["readingStatus"] == "Finished"
    assert _list(client, headers)[0]["readingStatus"] == "Finished"

    resp = client.delete(f"/books/{book_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"Message": "Book deleted successfully"}
    assert _list(client, headers) == []

    resp = client.delete(f"/books/{book_id}", headers=headers)
    assert resp.status_code == 404


def test_partial_update_changes_only_given_fields(client, make_user):
    _, headers = make_user()
    book_id = _add(client, headers, isbn="123", thumbnailUrl="http://img/1.jpg")

    resp = client.put(f"/books/{book_id}", headers=headers, json={"title": "New Title"})
    assert resp.status_code == 200
    book = resp.json()["book"]
    assert book["title"] == "New Title"
    assert book["author"] == "Herbert"
    assert book["isbn"] == "123"
    assert book["thumbnailUrl"] == "http://img/1.jpg"


def test_update_can_clear_optional_fields_but_not_required(client, make_user):
    _, headers = make_user()
    book_id = _add(client, headers, isbn="123")

    resp = client.put(f"/books/{book_id}", headers=headers, json={"isbn": None})
    assert resp.status_code == 200
    assert resp.json()["book"]["isbn"] is None

    resp = client.put(f"/books/{book_id}", headers=headers, json={"author": ""})
    assert resp.status_code == 400
    assert _list(client, headers)[0]["author"] == "Herbert"


def test_favorite_is_idempotent(client, make_user):
    _, headers = make_user()
    book_id = _add(client, headers)

    first = client.patch(f"/books/{book_id}/favorite", headers=headers, json={"isFavorite": True})
    after_once = _list(client, headers)
    second = client.patch(f"/books/{book_id}/favorite", headers=headers, json={"isFavorite": True})
    after_twice = _list(client, headers)

    assert first.status_code == second.status_code == 200
    assert after_once == after_twice
    assert after_twice[0]["isFavorite"] is True


def test_unknown_reading_status_rejected(client, make_user):
    _, headers = make_user()
    book_id = _add(client, headers)
    resp = client.patch(f"/books/{book_id}/reading-status", headers=headers, json={"readingStatus": "Abandoned"})
    assert resp.status_code == 400
    assert resp.json()["Field"] == "readingStatus"
    assert _list(client, headers)[0]["readingStatus"] == "WantToRead"


def test_any_status_transition_allowed(client, make_user):
    _, headers = make_user()
    book_id = _add(client, headers)
    for status in ("Finished", "Reading", "WantToRead", "Reading"):
        resp = client.patch(f"/books/{book_id}/reading-status", headers=headers, json={"readingStatus": status})
        assert resp.status_code == 200
        assert resp.json()["book"]["readingStatus"] == status


def test_other_users_book_is_not_found(client, make_user):
    _, alice_headers = make_user()
    _, bob_headers = make_user(username="bob", email="b@x.com")
    book_id = _add(client, alice_headers)
    before = _list(client, alice_headers)

    not_found = {"Message": "Book not found or not owned by user"}
    calls = [
        client.put(f"/books/{book_id}", headers=bob_headers, json={"title": "Hacked"}),
        client.patch(f"/books/{book_id}/reading-status", headers=bob_headers, json={"readingStatus": "Finished"}),
        client.patch(f"/books/{book_id}/favorite", headers=bob_headers, json={"isFavorite": True}),
        client.delete(f"/books/{book_id}", headers=bob_headers),
    ]
    for resp in calls:
        assert resp.status_code == 404
        assert resp.json() == not_found

    # identical to a book that never existed
    missing = client.put("/books/999999", headers=bob_headers, json={"title": "x"})
    assert missing.status_code == 404
    assert missing.json() == not_found

    assert _list(client, alice_headers) == before
    assert _list(client, bob_headers) == []


def test_list_is_insertion_ordered_and_filterable(client, make_user):
    _, headers = make_user()
    first = _add(client, headers, title="Zen", author="Pirsig")
    second = _add(client, headers, title="Anathem", author="Stephenson")
    third = _add(client, headers, title="Middlemarch", author="Eliot")
    client.patch(f"/books/{second}/favorite", headers=headers, json={"isFavorite": True})
    client.patch(f"/books/{third}/reading-status", headers=headers, json={"readingStatus": "Reading"})

    assert [b["id"] for b in _list(client, headers)] == [first, second, third]
    assert [b["title"] for b in _list(client, headers, sort="title")] == ["Anathem", "Middlemarch", "Zen"]
    assert [b["author"] for b in _list(client, headers, sort="-author")] == ["Stephenson", "Pirsig", "Eliot"]
    assert [b["id"] for b in _list(client, headers, favorite="true")] == [second]
    assert [b["id"] for b in _list(client, headers, status="Reading")] == [third]

    assert client.get("/books", headers=headers, params={"sort": "rating"}).status_code == 400
    assert client.get("/books", headers=headers, params={"status": "Done"}).status_code == 400


def test_service_delete_returns_false_for_missing(db):
    assert book_service.delete_book(db, owner_id=1, book_id=42) is False


def test_service_rejects_bad_status_before_lookup(db):
    with pytest.raises(ValidationError):
        book_service.set_reading_status(db, owner_id=1, book_id=42, status="finished")


def test_service_update_keeps_date_added(db, client, make_user):
    user, _ = make_user()
    book = book_service.add_book(db, user["id"], "Dune", "Herbert")
    added = book.date_added
    updated = book_service.update_book(db, user["id"], book.id, {"title": "Dune Messiah"})
    assert updated.title == "Dune Messiah"
    assert updated.date_added == added
    assert db.get(Book, book.id).reading_status == "WantToRead"


def test_failed_commit_is_generic_500_and_rolled_back(client, make_user, monkeypatch):
    _, headers = make_user()

    def failing_commit(self):
        raise OperationalError("INSERT INTO books", {}, Exception("disk full at /var/db"))

    monkeypatch.setattr(Session, "commit", failing_commit)
    resp = client.post("/books", headers=headers, json={"title": "Dune", "author": "Herbert"})
    monkeypatch.undo()

    assert resp.status_code == 500
    assert resp.json() == {"Message": "A storage error occurred; please try again later"}
    assert "disk full" not in resp.text
    assert "INSERT" not in resp.text
    assert _list(client, headers) == []


def test_unexpected_error_is_generic_500(make_user, monkeypatch):
    _, headers = make_user()

    def broken_list_books(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(book_service, "list_books", broken_list_books)
    with TestClient(app, raise_server_exceptions=False) as unsafe_client:
        resp = unsafe_client.get("/books", headers=headers)

    assert resp.status_code == 500
    assert resp.json() == {"Message": "Internal server error"}
    assert "secret internals" not in resp.text
