import threading
from decimal import Decimal

import pytest

from book import Book
from exceptions import PenaltyOutstandingError, UnavailableError
from library import Library
from loan import LoanStatus
from member import Member


def test_late_return_penalty_and_settlement(lib, clock):
    lib.add_book(Book("Dom Casmurro", "Machado de Assis", "A1"))
    lib.add_book(Book("Iracema", "Jose de Alencar", "B2"))
    lib.add_member(Member("M1", "Ana Souza"))

    loan = lib.borrow("M1", "A1")
    assert loan.status is LoanStatus.OPEN

    clock.advance(days=10)
    assert lib.return_loan("M1", "A1") is True
    assert loan.status is LoanStatus.RETURNED
    assert lib.penalty_of("M1") == Decimal("7.5")

    with pytest.raises(PenaltyOutstandingError):
        lib.borrow("M1", "B2")

    assert lib.settle("M1", Decimal("7.5")) is True
    assert lib.penalty_of("M1") == Decimal("0")
    assert lib.borrow("M1", "B2").status is LoanStatus.OPEN


def test_partial_settlement_keeps_member_blocked(lib, clock):
    lib.add_book(Book("Dom Casmurro", "Machado de Assis", "A1"))
    lib.add_member(Member("M1", "Ana Souza"))
    lib.borrow("M1", "A1")
    clock.advance(days=10)
    lib.return_loan("M1", "A1")

    assert lib.settle("M1", 5) is False
    assert lib.penalty_of("M1") == Decimal("7.5")
    with pytest.raises(PenaltyOutstandingError):
        lib.borrow("M1", "A1")


def test_removed_member_reads_as_owing_nothing(lib, clock):
    lib.add_book(Book("Dom Casmurro", "Machado de Assis", "A1"))
    lib.add_member(Member("M1", "Ana Souza"))
    lib.borrow("M1", "A1")
    clock.advance(days=9)
    lib.return_loan("M1", "A1")
    assert lib.penalty_of("M1") == Decimal("5.0")

    assert lib.remove_member("M1") is True
    assert lib.find_member("M1") is None
    assert lib.penalty_of("M1") == Decimal("0")
    assert lib.settle("M1", 100) is False
    # Loan history outlives the member.
    assert len(lib.loans_of("M1")) == 1


def test_removed_book_lookups_fail_gracefully(stocked_lib):
    stocked_lib.borrow("M1", "A1")
    stocked_lib.remove_book("A1")

    assert stocked_lib.find_book("A1") is None
    assert stocked_lib.times_borrowed("A1") == 0
    assert [l.isbn for l in stocked_lib.open_loans()] == ["A1"]
    assert "A1" not in [b.isbn for b in stocked_lib.available_books()]


def test_engines_are_isolated(clock):
    first = Library(clock=clock)
    second = Library(clock=clock)
    first.add_book(Book("Dom Casmurro", "Machado de Assis", "A1"))

    assert second.find_book("A1") is None
    assert second.list_books() == []


def test_search_members_and_books(stocked_lib):
    assert [m.member_id for m in stocked_lib.search_members("lima")] == ["M2"]
    assert [b.isbn for b in stocked_lib.search_books_by_author("machado")] == ["A1", "A2"]
    assert [b.isbn for b in stocked_lib.search_books_by_title("sertao")] == ["A3"]


def test_concurrent_borrows_only_one_succeeds(lib):
    lib.add_book(Book("Dom Casmurro", "Machado de Assis", "A1"))
    for i in range(20):
        lib.add_member(Member(f"M{i}", f"Member {i}"))

    start = threading.Barrier(20)
    successes = []
    refusals = []

    def attempt(member_id):
        start.wait()
        try:
            successes.append(lib.borrow(member_id, "A1"))
        except UnavailableError:
            refusals.append(member_id)

    threads = [threading.Thread(target=attempt, args=(f"M{i}",)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(successes) == 1
    assert len(refusals) == 19
    assert len(lib.open_loans()) == 1
    assert lib.times_borrowed("A1") == 1
