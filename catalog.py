import logging
from typing import Dict, List, Optional

from book import Book
from exceptions import DuplicateEntryError
from popularity import PopularityTracker

logger = logging.getLogger(__name__)


class Catalog:
    """Owns the book records, in insertion order."""

    def __init__(self, popularity: PopularityTracker) -> None:
        self._books: Dict[str, Book] = {}
        self._popularity = popularity

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, isbn: object) -> bool:
        return isbn in self._books

    def add(self, book: Book) -> None:
        """Add a book and start tracking its borrow count. Prevent duplicates by ISBN."""
        if book.isbn in self._books:
            raise DuplicateEntryError(f"Book with ISBN {book.isbn} already exists.")
        self._books[book.isbn] = book
        self._popularity.track(book.isbn)
        logger.info("Added book %s", book.isbn)

    def remove(self, isbn: str) -> bool:
        book = self._books.pop(isbn, None)
        if book is None:
            return False
        self._popularity.forget(isbn)
        logger.info("Removed book %s", isbn)
        return True

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        return self._books.get(isbn)

    def list_books(self) -> List[Book]:
        return list(self._books.values())

    def search_by_title(self, text: str) -> List[Book]:
        needle = text.lower()
        return [b for b in self._books.values() if needle in b.title.lower()]

    def search_by_author(self, text: str) -> List[Book]:
        needle = text.lower()
        return [b for b in self._books.values() if needle in b.author.lower()]
