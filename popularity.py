import logging
from typing import Dict, Iterable, List

from book import Book

logger = logging.getLogger(__name__)


class PopularityTracker:
    """Cumulative borrow counts keyed by ISBN. Counts only ever go up."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}

    def track(self, isbn: str) -> None:
        self._counts[isbn] = 0

    def forget(self, isbn: str) -> None:
        self._counts.pop(isbn, None)

    def increment(self, isbn: str) -> int:
        self._counts[isbn] = self._counts.get(isbn, 0) + 1
        logger.debug("Borrow count for %s is now %d", isbn, self._counts[isbn])
        return self._counts[isbn]

    def count_of(self, isbn: str) -> int:
        return self._counts.get(isbn, 0)

    def top_n(self, books: Iterable[Book], n: int) -> List[Book]:
        """Return the n most borrowed books, largest first.

        ``books`` must be in catalog insertion order; ``sorted`` is stable so
        ties keep that order.
        """
        if n <= 0:
            return []
        ranked = sorted(books, key=lambda b: self.count_of(b.isbn), reverse=True)
        return ranked[:n]

    def never_borrowed(self, books: Iterable[Book]) -> List[Book]:
        return [b for b in books if self.count_of(b.isbn) == 0]
