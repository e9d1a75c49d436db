from __future__ import annotations


class Book:
    """Represents a single title on the circulation desk."""

    def __init__(self, title: str, author: str, isbn: str) -> None:
        self.title = title.strip()
        self.author = author.strip()
        self._isbn = isbn.strip()

    @property
    def isbn(self) -> str:
        return self._isbn

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def __repr__(self) -> str:
        return f"Book(isbn={self.isbn!r}, title={self.title!r})"

    def to_dict(self) -> dict:
        return {"title": self.title, "author": self.author, "isbn": self.isbn}
