import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field, StringConstraints

from book import Book
from config import settings
from exceptions import (
    DuplicateEntryError,
    InsufficientPaymentError,
    NoMatchingOpenLoanError,
    NotFoundError,
    PenaltyOutstandingError,
    UnavailableError,
)
from library import Library
from loan import Loan
from member import Member

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

library = Library()

app = FastAPI(title=settings.app_name, version=settings.app_version)


def get_library() -> Library:
    """Dependency returning the engine; tests override it with their own instance."""
    return library


# --- Security ---
api_key_header = APIKeyHeader(name="X-API-Key")

def get_api_key(api_key: str = Security(api_key_header)):
    """Dependency validating the API key on mutating routes."""
    if api_key == settings.api_key:
        return api_key
    raise HTTPException(status_code=403, detail="Could not validate credentials")


# --- Models ---
# Surrounding whitespace is stripped before the length check.
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

class BookModel(BaseModel):
    isbn: str
    title: str
    author: str
    available: bool = True
    times_borrowed: int = 0

class BookCreateModel(BaseModel):
    isbn: NonBlankStr
    title: NonBlankStr
    author: NonBlankStr

class MemberModel(BaseModel):
    member_id: str
    name: str
    penalty: Decimal = Decimal("0")

class MemberCreateModel(BaseModel):
    member_id: NonBlankStr
    name: NonBlankStr

class LoanModel(BaseModel):
    loan_id: int
    member_id: str
    isbn: str
    title: Optional[str] = None
    borrowed_at: datetime
    returned_at: Optional[datetime] = None
    status: str
    fine: Decimal

class LoanRequestModel(BaseModel):
    member_id: str
    isbn: str

class PaymentModel(BaseModel):
    amount: Decimal = Field(ge=0)

class PenaltyModel(BaseModel):
    member_id: str
    penalty: Decimal

class RankedBookModel(BaseModel):
    isbn: str
    title: str
    times_borrowed: int

class PendingPenaltyModel(BaseModel):
    member_id: str
    name: str
    penalty: Decimal

class SummaryModel(BaseModel):
    top_borrowed: List[RankedBookModel]
    members_with_penalty: List[PendingPenaltyModel]
    total_members: int
    total_books: int


# --- Helpers ---
def _book_model(lib: Library, book: Book) -> BookModel:
    return BookModel(
        **book.to_dict(),
        available=lib.is_available(book.isbn),
        times_borrowed=lib.times_borrowed(book.isbn),
    )

def _member_model(lib: Library, member: Member) -> MemberModel:
    return MemberModel(**member.to_dict(), penalty=lib.penalty_of(member.member_id))

def _loan_model(lib: Library, loan: Loan) -> LoanModel:
    # The book may have been removed since the loan was made.
    book = lib.find_book(loan.isbn)
    return LoanModel(**loan.to_dict(), title=book.title if book else None)


# --- Health ---
@app.get("/health")
def health(lib: Library = Depends(get_library)):
    """Lightweight liveness check with basic counters."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "total_books": len(lib.list_books()),
        "total_members": len(lib.list_members()),
        "open_loans": len(lib.open_loans()),
    }


# --- Books ---
@app.get("/books", response_model=List[BookModel])
def get_books(lib: Library = Depends(get_library)):
    """List every book in catalog order."""
    with lib.lock:
        return [_book_model(lib, b) for b in lib.list_books()]

@app.get("/books/search", response_model=List[BookModel])
def search_books(
    title: Optional[str] = Query(None, description="Case-insensitive title fragment"),
    author: Optional[str] = Query(None, description="Case-insensitive author fragment"),
    lib: Library = Depends(get_library),
):
    """Search by title and/or author. Both filters must match when both are given."""
    if title is None and author is None:
        raise HTTPException(status_code=400, detail="Provide title and/or author.")
    with lib.lock:
        results = lib.list_books()
        if title is not None:
            by_title = {b.isbn for b in lib.search_books_by_title(title)}
            results = [b for b in results if b.isbn in by_title]
        if author is not None:
            by_author = {b.isbn for b in lib.search_books_by_author(author)}
            results = [b for b in results if b.isbn in by_author]
        return [_book_model(lib, b) for b in results]

@app.get("/books/{isbn}", response_model=BookModel)
def get_book(isbn: str, lib: Library = Depends(get_library)):
    with lib.lock:
        book = lib.find_book(isbn)
        if not book:
            raise HTTPException(status_code=404, detail="Book not found.")
        return _book_model(lib, book)

@app.post("/books", response_model=BookModel, dependencies=[Depends(get_api_key)])
def add_book(payload: BookCreateModel, lib: Library = Depends(get_library)):
    """Add a new book to the catalog."""
    book = Book(title=payload.title, author=payload.author, isbn=payload.isbn)
    with lib.lock:
        try:
            lib.add_book(book)
        except DuplicateEntryError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _book_model(lib, book)

@app.delete("/books/{isbn}", dependencies=[Depends(get_api_key)])
def delete_book(isbn: str, lib: Library = Depends(get_library)):
    if not lib.remove_book(isbn):
        raise HTTPException(status_code=404, detail="Book not found.")
    return {"message": "Book removed."}


# --- Members ---
@app.get("/members", response_model=List[MemberModel])
def get_members(q: Optional[str] = Query(None, description="Name fragment"),
                lib: Library = Depends(get_library)):
    with lib.lock:
        members = lib.search_members(q) if q else lib.list_members()
        return [_member_model(lib, m) for m in members]

@app.get("/members/{member_id}", response_model=MemberModel)
def get_member(member_id: str, lib: Library = Depends(get_library)):
    with lib.lock:
        member = lib.find_member(member_id)
        if not member:
            raise HTTPException(status_code=404, detail="Member not found.")
        return _member_model(lib, member)

@app.post("/members", response_model=MemberModel, dependencies=[Depends(get_api_key)])
def add_member(payload: MemberCreateModel, lib: Library = Depends(get_library)):
    member = Member(member_id=payload.member_id, name=payload.name)
    with lib.lock:
        try:
            lib.add_member(member)
        except DuplicateEntryError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _member_model(lib, member)

@app.delete("/members/{member_id}", dependencies=[Depends(get_api_key)])
def delete_member(member_id: str, lib: Library = Depends(get_library)):
    if not lib.remove_member(member_id):
        raise HTTPException(status_code=404, detail="Member not found.")
    return {"message": "Member removed."}

@app.get("/members/{member_id}/loans", response_model=List[LoanModel])
def get_member_loans(member_id: str, lib: Library = Depends(get_library)):
    """Every loan of the member, open or returned, oldest first."""
    with lib.lock:
        return [_loan_model(lib, l) for l in lib.loans_of(member_id)]

@app.get("/members/{member_id}/penalty", response_model=PenaltyModel)
def get_penalty(member_id: str, lib: Library = Depends(get_library)):
    return PenaltyModel(member_id=member_id, penalty=lib.penalty_of(member_id))

@app.post("/members/{member_id}/settle", response_model=PenaltyModel, dependencies=[Depends(get_api_key)])
def settle_penalty(member_id: str, payment: PaymentModel, lib: Library = Depends(get_library)):
    """Pay off the member's whole penalty. Partial payments are refused."""
    with lib.lock:
        try:
            lib.pay(member_id, payment.amount)
        except NotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except InsufficientPaymentError as e:
            raise HTTPException(status_code=402, detail=str(e))
        return PenaltyModel(member_id=member_id, penalty=lib.penalty_of(member_id))


# --- Loans ---
@app.post("/loans", response_model=LoanModel, dependencies=[Depends(get_api_key)])
def borrow_book(payload: LoanRequestModel, lib: Library = Depends(get_library)):
    """Lend a book to a member."""
    with lib.lock:
        try:
            loan = lib.borrow(payload.member_id, payload.isbn)
        except NotFoundError as e:
            logger.info("Borrow rejected: %s", e)
            raise HTTPException(status_code=404, detail=str(e))
        except (UnavailableError, PenaltyOutstandingError) as e:
            logger.info("Borrow rejected: %s", e)
            raise HTTPException(status_code=409, detail=str(e))
        return _loan_model(lib, loan)

@app.post("/loans/return", response_model=LoanModel, dependencies=[Depends(get_api_key)])
def return_book(payload: LoanRequestModel, lib: Library = Depends(get_library)):
    """Return a borrowed book; late fees are charged here."""
    with lib.lock:
        try:
            loan = lib.close_loan(payload.member_id, payload.isbn)
        except NoMatchingOpenLoanError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return _loan_model(lib, loan)


# --- Reports ---
@app.get("/reports/open-loans", response_model=List[LoanModel])
def report_open_loans(lib: Library = Depends(get_library)):
    with lib.lock:
        return [_loan_model(lib, l) for l in lib.open_loans()]

@app.get("/reports/overdue", response_model=List[LoanModel])
def report_overdue(lib: Library = Depends(get_library)):
    with lib.lock:
        return [_loan_model(lib, l) for l in lib.overdue_loans()]

@app.get("/reports/available", response_model=List[BookModel])
def report_available(lib: Library = Depends(get_library)):
    with lib.lock:
        return [_book_model(lib, b) for b in lib.available_books()]

@app.get("/reports/never-borrowed", response_model=List[BookModel])
def report_never_borrowed(lib: Library = Depends(get_library)):
    with lib.lock:
        return [_book_model(lib, b) for b in lib.never_borrowed_books()]

@app.get("/reports/members-without-penalty", response_model=List[MemberModel])
def report_members_without_penalty(lib: Library = Depends(get_library)):
    with lib.lock:
        return [_member_model(lib, m) for m in lib.members_without_penalty()]

@app.get("/reports/top", response_model=List[RankedBookModel])
def report_top(n: int = Query(5, ge=0, description="How many books to rank"),
               lib: Library = Depends(get_library)):
    """Most borrowed books, largest count first; ties keep catalog order."""
    with lib.lock:
        return [
            RankedBookModel(isbn=b.isbn, title=b.title, times_borrowed=lib.times_borrowed(b.isbn))
            for b in lib.top_borrowed(n)
        ]

@app.get("/reports/summary", response_model=SummaryModel)
def report_summary(lib: Library = Depends(get_library)):
    return SummaryModel(**lib.summary())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
