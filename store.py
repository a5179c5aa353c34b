from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from book import Book
from loan import Loan
from member import Member


class EntityStore:
    """In-memory catalog, roster and ledger keyed by id.

    Dicts keep insertion order, which is the listing order everywhere.
    Persistence is a separate, explicit step (see ``database.save_state``).
    """

    def __init__(self) -> None:
        self._books: Dict[str, Book] = {}
        self._members: Dict[str, Member] = {}
        self._loans: Dict[str, Loan] = {}

    # ------------------------- Lookups ------------------------- #
    def find_book(self, book_id: str) -> Optional[Book]:
        return self._books.get(book_id)

    def find_member(self, member_id: str) -> Optional[Member]:
        return self._members.get(member_id)

    def find_loan(self, loan_id: str) -> Optional[Loan]:
        return self._loans.get(loan_id)

    def books(self) -> List[Book]:
        return list(self._books.values())

    def members(self) -> List[Member]:
        return list(self._members.values())

    def loans(self) -> List[Loan]:
        return list(self._loans.values())

    def loans_for_book(self, book_id: str) -> List[Loan]:
        return [l for l in self._loans.values() if l.book_id == book_id]

    # ------------------------- Mutations ------------------------- #
    def add_book(self, book: Book) -> bool:
        """Insert a book. Returns False (and changes nothing) for an empty or taken id."""
        if not book.id or book.id in self._books:
            return False
        self._books[book.id] = book
        return True

    def add_member(self, member: Member) -> bool:
        """Insert a member. Returns False (and changes nothing) for an empty or taken id."""
        if not member.id or member.id in self._members:
            return False
        self._members[member.id] = member
        return True

    def add_loan(self, loan: Loan) -> None:
        if loan.loan_id in self._loans:
            raise ValueError(f"Loan {loan.loan_id} already exists.")
        self._loans[loan.loan_id] = loan

    def remove_loan(self, loan_id: str) -> Optional[Loan]:
        return self._loans.pop(loan_id, None)

    def clear(self) -> None:
        self._books.clear()
        self._members.clear()
        self._loans.clear()

    def replace_all(self, books: Iterable[Book], members: Iterable[Member], loans: Iterable[Loan]) -> None:
        """Swap in a whole new state, as read from disk."""
        self.clear()
        for book in books:
            self._books[book.id] = book
        for member in members:
            self._members[member.id] = member
        for loan in loans:
            self._loans[loan.loan_id] = loan

    def counts(self) -> Dict[str, int]:
        return {"books": len(self._books), "members": len(self._members), "loans": len(self._loans)}
