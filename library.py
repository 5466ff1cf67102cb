import logging
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from book import Book, DEFAULT_BOOKS, STATUS_AVAILABLE, STATUS_UNAVAILABLE
from cache_manager import CatalogCache
from config import settings
from store import JsonFileStore, StoreError
from utils.validators import TextValidator, due_date_from_now

logger = logging.getLogger(__name__)


class Library:
    """Manages the collection of books and data persistence.

    The books file is the source of truth whenever it can be read. The cache
    mirrors it and takes over when the file is missing, corrupt or read-only.
    ``load`` and ``save`` never raise; persistence problems are logged and the
    catalog keeps working from memory.
    """

    def __init__(self, store: Optional[JsonFileStore] = None, cache: Optional[CatalogCache] = None,
                 placeholder_cover: Optional[str] = None) -> None:
        self.store = store or JsonFileStore(settings.books_file)
        self.cache = cache if cache is not None else CatalogCache()
        self.placeholder_cover = placeholder_cover or settings.placeholder_cover
        # Every load-mutate-save sequence runs under this lock
        self._lock = threading.RLock()

    # ------------------------- Persistence ------------------------- #
    def load(self) -> List[Book]:
        """Read the catalog, falling back to the cache (or defaults) on any failure."""
        with self._lock:
            try:
                records = self.store.read()
                books = [Book.from_dict(r) for r in records]
            except StoreError as e:
                logger.warning("Falling back to in-memory catalog: %s", e)
                return self._fallback()
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Books file holds an invalid record, using in-memory catalog: %s", e)
                return self._fallback()

            self.cache.replace([b.to_dict() for b in books])
            return books

    def save(self, books: List[Book]) -> None:
        """Update the cache, then try to write the books file."""
        records = [b.to_dict() for b in books]
        with self._lock:
            self.cache.replace(records)
            try:
                self.store.write(records)
            except StoreError as e:
                logger.error("Error saving books, keeping in-memory copy only: %s", e)

    def reload(self) -> List[Book]:
        """Re-read the store at startup or on demand."""
        books = self.load()
        logger.info("Catalog loaded with %d books", len(books))
        return books

    def _fallback(self) -> List[Book]:
        if self.cache.is_empty():
            logger.info("Seeding catalog with %d default books", len(DEFAULT_BOOKS))
            self.cache.replace(DEFAULT_BOOKS)
        return [Book.from_dict(r) for r in self.cache.snapshot()]

    def next_id(self, books: Optional[List[Book]] = None) -> int:
        """One past the highest id, or 1 for an empty catalog."""
        if books is None:
            books = self.load()
        return max((b.id for b in books), default=0) + 1

    # ------------------------- Core operations ------------------------- #
    def list_books(self) -> List[Book]:
        return self.load()

    def find_book(self, book_id: int) -> Optional[Book]:
        for book in self.load():
            if book.id == book_id:
                return book
        return None

    def add_book(self, title: Optional[str], author: Optional[str], *, status: Optional[str] = None,
                 due_date: Optional[str] = None, cover: Optional[str] = None) -> Book:
        """Create a book with a server-assigned id."""
        if not TextValidator.validate_title(title) or not TextValidator.validate_author(author):
            raise ValueError("Title and author are required")

        with self._lock:
            books = self.load()
            book = Book(
                id=self.next_id(books),
                title=title,
                author=author,
                cover=cover or self.placeholder_cover,
                status=status or STATUS_AVAILABLE,
                due_date=due_date or None,
            )
            books.append(book)
            self.save(books)
        logger.info("Added book %d: %s", book.id, book.title)
        return book

    def update_book(self, book_id: int, changes: Dict[str, Any]) -> Optional[Book]:
        """Shallow-merge ``changes`` onto the stored record. Returns None if not found."""
        with self._lock:
            books = self.load()
            for index, book in enumerate(books):
                if book.id != book_id:
                    continue
                record = book.to_dict()
                record.update({k: v for k, v in changes.items() if k != "id"})
                updated = Book.from_dict(record)
                books[index] = updated
                self.save(books)
                return updated
        return None

    def remove_book(self, book_id: int) -> bool:
        with self._lock:
            books = self.load()
            remaining = [b for b in books if b.id != book_id]
            if len(remaining) == len(books):
                return False
            self.save(remaining)
        logger.info("Removed book %d", book_id)
        return True

    def reserve_book(self, book_id: int, days: Optional[int] = None,
                     now: Optional[datetime] = None) -> Optional[Book]:
        """Mark a book unavailable until ``days`` from now."""
        if days is None:
            days = settings.reservation_days
        return self.update_book(book_id, {
            "status": STATUS_UNAVAILABLE,
            "dueDate": due_date_from_now(days, now),
        })

    def count(self) -> int:
        """Number of books currently held in memory."""
        return len(self.cache)

    def get_statistics(self) -> Dict[str, Any]:
        books = self.load()
        available = sum(1 for b in books if b.is_available)
        return {
            "total_books": len(books),
            "available": available,
            "unavailable": len(books) - available,
            "unique_authors": len({b.author for b in books}),
        }
