from datetime import datetime, timedelta

import pytest

from book import Book
from library import Library
from member import Member


class FakeClock:
    """Manually advanced clock injected into the engine."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, days: float = 0, **kwargs) -> datetime:
        self.current += timedelta(days=days, **kwargs)
        return self.current


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 9, 0, 0))


@pytest.fixture
def lib(clock):
    # Every test gets its own engine; nothing is shared between instances.
    return Library(clock=clock)


@pytest.fixture
def stocked_lib(lib):
    lib.add_book(Book("Dom Casmurro", "Machado de Assis", "A1"))
    lib.add_book(Book("Memorias Postumas", "Machado de Assis", "A2"))
    lib.add_book(Book("Grande Sertao: Veredas", "Guimaraes Rosa", "A3"))
    lib.add_member(Member("M1", "Ana Souza"))
    lib.add_member(Member("M2", "Carlos Lima"))
    return lib
