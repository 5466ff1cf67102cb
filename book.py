from __future__ import annotations

from typing import Any

from config import PLACEHOLDER_COVER

STATUS_AVAILABLE = "available"
STATUS_UNAVAILABLE = "unavailable"


class Book:
    """Represents a single book item in the catalog.

    Books created here get trimmed text and default values. Books read back
    with ``from_dict`` keep the stored record as-is, so writing them out again
    does not alter the file.
    """

    def __init__(self, id: int, title: str, author: str, cover: str | None = None,
                 status: str | None = None, due_date: Any = None) -> None:
        self.id = int(id)
        self.title = title.strip()
        self.author = author.strip()
        self.cover = cover or PLACEHOLDER_COVER
        self.status = status or STATUS_AVAILABLE
        self.due_date = due_date or None
        self._record: dict | None = None

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"#{self.id} {self.title} by {self.author} ({self.status})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def is_available(self) -> bool:
        return self.status == STATUS_AVAILABLE

    def to_dict(self) -> dict:
        if self._record is not None:
            return dict(self._record)
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "cover": self.cover,
            "status": self.status,
            "dueDate": self.due_date,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        book = Book(
            id=data["id"],
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            cover=data.get("cover"),
            status=data.get("status"),
            due_date=data.get("dueDate"),
        )
        book._record = dict(data)
        return book


# Seeded only on first boot of a deployment whose store cannot be read
DEFAULT_BOOKS: list[dict] = [
    {
        "id": 1,
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "cover": "https://images.unsplash.com/photo-1544947950-fa07a98d237f?w=300&h=400&fit=crop",
        "status": STATUS_AVAILABLE,
        "dueDate": None,
    },
    {
        "id": 2,
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "cover": "https://images.unsplash.com/photo-1543002588-bfa74002ed7e?w=300&h=400&fit=crop",
        "status": STATUS_AVAILABLE,
        "dueDate": None,
    },
]
