import pytest

from book import Book
from catalog import Catalog
from exceptions import DuplicateEntryError
from popularity import PopularityTracker


@pytest.fixture
def catalog():
    return Catalog(PopularityTracker())


def test_add_list_and_find(catalog):
    assert catalog.list_books() == []

    book = Book("Ulysses", "James Joyce", "9780199535675")
    catalog.add(book)

    assert catalog.find_by_isbn("9780199535675") is book
    assert len(catalog) == 1
    assert "9780199535675" in catalog


def test_book_fields_are_stripped():
    book = Book("  Ulysses ", " James Joyce", " 123 ")
    assert book.title == "Ulysses"
    assert book.author == "James Joyce"
    assert book.isbn == "123"


def test_add_duplicate_isbn(catalog):
    catalog.add(Book("Test Book", "Test Author", "1234567890"))

    with pytest.raises(DuplicateEntryError, match="Book with ISBN 1234567890 already exists."):
        catalog.add(Book("Another Book", "Someone Else", "1234567890"))

    assert len(catalog) == 1
    assert catalog.find_by_isbn("1234567890").title == "Test Book"


def test_duplicate_is_a_value_error(catalog):
    catalog.add(Book("Test", "Author", "1"))
    with pytest.raises(ValueError):
        catalog.add(Book("Test", "Author", "1"))


def test_remove(catalog):
    catalog.add(Book("Test", "Author", "123"))
    assert catalog.remove("123") is True
    assert catalog.remove("123") is False
    assert catalog.find_by_isbn("123") is None


def test_add_and_remove_track_popularity():
    popularity = PopularityTracker()
    catalog = Catalog(popularity)
    catalog.add(Book("Test", "Author", "123"))
    popularity.increment("123")
    assert popularity.count_of("123") == 1

    catalog.remove("123")
    assert popularity.count_of("123") == 0

    # Re-adding starts the count over.
    catalog.add(Book("Test", "Author", "123"))
    assert popularity.count_of("123") == 0


def test_find_unknown_isbn(catalog):
    assert catalog.find_by_isbn("nonexistent") is None
    assert catalog.find_by_isbn("") is None


def test_search_by_title_is_case_insensitive_and_ordered(catalog):
    catalog.add(Book("The Hobbit", "J.R.R. Tolkien", "1"))
    catalog.add(Book("Dune", "Frank Herbert", "2"))
    catalog.add(Book("The Return of the King", "J.R.R. Tolkien", "3"))

    results = catalog.search_by_title("THE")
    assert [b.isbn for b in results] == ["1", "3"]
    assert catalog.search_by_title("une")[0].title == "Dune"


def test_search_by_author(catalog):
    catalog.add(Book("The Hobbit", "J.R.R. Tolkien", "1"))
    catalog.add(Book("Dune", "Frank Herbert", "2"))

    assert [b.isbn for b in catalog.search_by_author("tolkien")] == ["1"]


def test_search_no_match_returns_empty(catalog):
    catalog.add(Book("Dune", "Frank Herbert", "2"))
    assert catalog.search_by_title("Nonexistent") == []
    assert catalog.search_by_author("Nobody") == []
