import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

import fines
import search
from book import Book
from config import Settings, settings
from database import PersistenceError, load_state, save_state
from loan import Loan, new_loan_id
from member import Member
from sample_data import seed_sample_data
from store import EntityStore
from validators import TextValidator, parse_int_or_default

logger = logging.getLogger(__name__)


class Collection(Enum):
    """Record collections that can be listed and searched."""
    BOOKS = "books"
    MEMBERS = "members"
    LOANS = "loans"


class FailureReason(Enum):
    """Why a mutating operation was rejected."""
    EMPTY_ID = "empty_id"
    EMPTY_NAME = "empty_name"
    DUPLICATE_ID = "duplicate_id"
    UNKNOWN_BOOK = "unknown_book"
    UNKNOWN_MEMBER = "unknown_member"
    NO_COPIES_AVAILABLE = "no_copies_available"
    UNKNOWN_LOAN = "unknown_loan"


@dataclass
class OperationResult:
    """Outcome of a mutating operation."""
    ok: bool
    message: str
    reason: Optional[FailureReason] = None
    record: Any = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str, record: Any = None) -> "OperationResult":
        return cls(ok=True, message=message, record=record)

    @classmethod
    def failure(cls, reason: FailureReason, message: str) -> "OperationResult":
        return cls(ok=False, message=message, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "reason": self.reason.value if self.reason else None,
            "record": self.record.to_dict() if self.record is not None else None,
        }


@dataclass
class LoanStatus:
    """An open loan together with its fine figures at a given instant."""
    loan: Loan
    elapsed_days: int
    grace_days_left: int
    fine: int
    overdue: bool
    due_soon: bool

    def to_dict(self) -> Dict[str, Any]:
        data = self.loan.to_dict()
        data.update({
            "elapsed_days": self.elapsed_days,
            "grace_days_left": self.grace_days_left,
            "fine": self.fine,
            "overdue": self.overdue,
            "due_soon": self.due_soon,
        })
        return data


class Library:
    """Owns the catalog, roster and ledger and every operation that changes them.

    Each successful mutation is followed by a full save. A failed save is
    logged and the in-memory state stays authoritative.
    """

    def __init__(self, db_file: Optional[str] = None, clock: Optional[Callable[[], int]] = None,
                 config: Optional[Settings] = None) -> None:
        self.settings = config or settings
        self.db_file = db_file or self.settings.data_file
        self.clock = clock or fines.now_ms
        self._store = EntityStore()
        # Serializes mutations and fine reads if a host ever drives us from several threads.
        self._lock = threading.RLock()

    # ------------------------- Lifecycle ------------------------- #
    def initialize(self) -> bool:
        """Load the saved state, or seed and save the sample data.

        Returns True when state was loaded from disk, False when it was seeded.
        """
        with self._lock:
            try:
                state = load_state(self.db_file)
            except PersistenceError as e:
                logger.warning("Saved state unusable, reseeding: %s", e)
                state = None

            if state is not None:
                self._store.replace_all(*state)
                logger.info("Loaded library state from %s: %s", self.db_file, self._store.counts())
                return True

            seed_sample_data(self._store, self.clock)
            logger.info("Seeded sample data: %s", self._store.counts())
            self.save()
            return False

    def save(self) -> bool:
        """Persist the full state. Returns False if the write failed."""
        with self._lock:
            try:
                save_state(self._store.books(), self._store.members(), self._store.loans(), self.db_file)
            except PersistenceError as e:
                logger.error("Save failed: %s", e)
                return False
            return True

    def shutdown_save(self) -> bool:
        return self.save()

    # ------------------------- Core operations ------------------------- #
    def add_book(self, book_id: str, title: str = "", author: str = "",
                 year: Union[int, str, None] = None, total: Union[int, str, None] = 1) -> OperationResult:
        """Add a title to the catalog with every copy available."""
        book_id = TextValidator.clean(book_id)
        if not book_id:
            return OperationResult.failure(FailureReason.EMPTY_ID, "Book ID cannot be empty.")

        with self._lock:
            if self._store.find_book(book_id):
                return OperationResult.failure(FailureReason.DUPLICATE_ID, f"Book with ID {book_id} already exists.")

            year = parse_int_or_default(year, self._current_year())
            total = max(1, parse_int_or_default(total, 1))
            book = Book(book_id, TextValidator.clean(title), TextValidator.clean(author), year, total)
            self._store.add_book(book)
            logger.info("Added book %s (%d copies)", book.id, book.total)
            self.save()
        return OperationResult.success(f"Added: {book.display_title} by {book.display_author}", book)

    def add_member(self, member_id: str, name: str) -> OperationResult:
        member_id = TextValidator.clean(member_id)
        name = TextValidator.clean(name)
        if not member_id:
            return OperationResult.failure(FailureReason.EMPTY_ID, "Member ID cannot be empty.")
        if not name:
            return OperationResult.failure(FailureReason.EMPTY_NAME, "Member name cannot be empty.")

        with self._lock:
            member = Member(member_id, name)
            if not self._store.add_member(member):
                return OperationResult.failure(FailureReason.DUPLICATE_ID, f"Member with ID {member_id} already exists.")
            logger.info("Added member %s", member.id)
            self.save()
        return OperationResult.success(f"Added member: {member.name}", member)

    def borrow(self, book_id: str, member_id: str) -> OperationResult:
        """Lend one copy of a book to a member."""
        book_id = TextValidator.clean(book_id)
        member_id = TextValidator.clean(member_id)

        with self._lock:
            book = self._store.find_book(book_id)
            if book is None:
                return OperationResult.failure(FailureReason.UNKNOWN_BOOK, f"Book with ID {book_id} not found.")
            member = self._store.find_member(member_id)
            if member is None:
                return OperationResult.failure(FailureReason.UNKNOWN_MEMBER, f"Member with ID {member_id} not found.")
            if book.available <= 0:
                return OperationResult.failure(
                    FailureReason.NO_COPIES_AVAILABLE, f"No copies of {book.display_title} are available."
                )

            book.available -= 1
            loan = Loan(new_loan_id(), book.id, member.id, self.clock())
            self._store.add_loan(loan)
            logger.info("Loan %s: book %s to member %s", loan.loan_id, book.id, member.id)
            self.save()
        return OperationResult.success(f"Borrowed: {book.display_title} by {member.name}", loan)

    def return_loan(self, loan_id: str) -> OperationResult:
        """Close a loan and put its copy back on the shelf."""
        loan_id = TextValidator.clean(loan_id)

        with self._lock:
            loan = self._store.remove_loan(loan_id)
            if loan is None:
                return OperationResult.failure(FailureReason.UNKNOWN_LOAN, "Loan not found.")

            book = self._store.find_book(loan.book_id)
            if book is not None:
                book.available = min(book.total, book.available + 1)
            else:
                logger.warning("Loan %s referenced missing book %s", loan.loan_id, loan.book_id)
            logger.info("Returned loan %s", loan.loan_id)
            self.save()

        title = book.display_title if book is not None else loan.book_id
        return OperationResult.success(f"Returned: {title}", loan)

    # ------------------------- Queries ------------------------- #
    def find_book(self, book_id: str) -> Optional[Book]:
        return self._store.find_book(TextValidator.clean(book_id))

    def find_member(self, member_id: str) -> Optional[Member]:
        return self._store.find_member(TextValidator.clean(member_id))

    def find_loan(self, loan_id: str) -> Optional[Loan]:
        return self._store.find_loan(TextValidator.clean(loan_id))

    def list_books(self, query: Optional[str] = None) -> List[Book]:
        return search.filter_records(self._store.books(), query)

    def list_members(self, query: Optional[str] = None) -> List[Member]:
        return search.filter_records(self._store.members(), query)

    def list_loans(self, query: Optional[str] = None) -> List[LoanStatus]:
        """Open loans matching ``query``, with fines computed against the clock now."""
        with self._lock:
            now = self.clock()
            return [self._status(loan, now) for loan in search.filter_records(self._store.loans(), query)]

    def loan_status(self, loan_id: str) -> Optional[LoanStatus]:
        with self._lock:
            loan = self.find_loan(loan_id)
            return self._status(loan, self.clock()) if loan else None

    def suggest(self, collection: Union[Collection, str], query: Optional[str]) -> List[str]:
        """Suggestions for a search box. Raises ValueError for an unknown collection."""
        if isinstance(collection, str):
            collection = collection.strip().lower()
        collection = Collection(collection)
        if collection is Collection.BOOKS:
            records = self._store.books()
        elif collection is Collection.MEMBERS:
            records = self._store.members()
        else:
            records = self._store.loans()
        return search.suggest(records, query, limit=self.settings.suggestion_limit)

    def get_statistics(self) -> Dict[str, Any]:
        """Catalog and ledger totals."""
        books = self._store.books()
        statuses = self.list_loans()
        return {
            "total_titles": len(books),
            "total_copies": sum(b.total for b in books),
            "available_copies": sum(b.available for b in books),
            "members": len(self._store.members()),
            "open_loans": len(statuses),
            "overdue_loans": sum(1 for s in statuses if s.overdue),
            "outstanding_fines": sum(s.fine for s in statuses),
        }

    # ------------------------- Utilities ------------------------- #
    def _status(self, loan: Loan, now: int) -> LoanStatus:
        grace = self.settings.grace_period_days
        return LoanStatus(
            loan=loan,
            elapsed_days=fines.elapsed_days(loan, now),
            grace_days_left=fines.grace_days_left(loan, now, grace),
            fine=fines.fine(loan, now, grace, self.settings.fine_per_day),
            overdue=fines.is_overdue(loan, now, grace),
            due_soon=fines.is_due_soon(loan, now, grace),
        )

    def _current_year(self) -> int:
        return datetime.fromtimestamp(self.clock() / 1000).year
