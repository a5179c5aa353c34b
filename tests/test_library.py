import random
import sqlite3

import pytest

from config import Settings
from database import save_state
from library import Collection, FailureReason, Library
from loan import Loan
from member import Member


def snapshot(lib):
    return (
        [b.to_dict() for b in lib.list_books()],
        [m.to_dict() for m in lib.list_members()],
        [s.loan.to_dict() for s in lib.list_loans()],
    )


# ------------------------- Startup ------------------------- #
def test_initialize_seeds_sample_data(empty_lib, clock):
    assert empty_lib.initialize() is False

    assert len(empty_lib.list_books()) == 15
    assert len(empty_lib.list_members()) == 3
    loans = empty_lib.list_loans()
    assert len(loans) == 2

    fresh, old = loans
    assert (fresh.loan.book_id, fresh.loan.member_id) == ("B001", "M01")
    assert fresh.loan.issue_date == clock.now
    assert fresh.fine == 0
    assert (old.loan.book_id, old.loan.member_id) == ("B002", "M02")
    assert old.elapsed_days == 40
    assert old.fine == 20
    assert old.grace_days_left == -10
    assert old.overdue is True

    assert empty_lib.find_book("B001").available == 2
    assert empty_lib.find_book("B002").available == 1


def test_initialize_loads_saved_state(lib, db_file, clock):
    lib.borrow("B003", "M03")
    before = snapshot(lib)

    reloaded = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    assert reloaded.initialize() is True
    assert snapshot(reloaded) == before


def test_corrupt_file_is_reseeded(db_file, clock):
    with open(db_file, "wb") as f:
        f.write(b"this is not a database")

    lib = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    assert lib.initialize() is False
    assert len(lib.list_books()) == 15

    # The seeded state replaced the corrupt file
    again = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    assert again.initialize() is True


def test_schema_version_mismatch_is_reseeded(lib, db_file, clock):
    lib.add_book("X1", "Extra", "Someone", 2020, 1)
    conn = sqlite3.connect(db_file)
    conn.execute("UPDATE metadata SET value = '99' WHERE key = 'schema_version'")
    conn.commit()
    conn.close()

    reloaded = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    assert reloaded.initialize() is False
    assert reloaded.find_book("X1") is None
    assert len(reloaded.list_books()) == 15


def test_invalid_rows_are_reseeded(lib, db_file, clock):
    conn = sqlite3.connect(db_file)
    conn.execute("UPDATE books SET available = 99 WHERE id = 'B001'")
    conn.commit()
    conn.close()

    reloaded = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    assert reloaded.initialize() is False
    assert reloaded.find_book("B001").available == 2


# ------------------------- add_book / add_member ------------------------- #
def test_add_book(lib):
    result = lib.add_book("B100", "Refactoring", "Martin Fowler", 1999, 2)
    assert result.ok
    book = lib.find_book("B100")
    assert book.total == 2
    assert book.available == 2
    assert result.record is book


def test_add_book_with_empty_id_is_rejected(lib):
    result = lib.add_book("", "X", "Y", 2020, 1)
    assert not result.ok
    assert result.reason is FailureReason.EMPTY_ID
    assert len(lib.list_books()) == 15


def test_add_book_with_duplicate_id_is_rejected(lib):
    result = lib.add_book("B001", "Another", "Author", 2020, 1)
    assert result.reason is FailureReason.DUPLICATE_ID
    assert lib.find_book("B001").title == "Clean Code"


def test_add_book_clamps_and_defaults_numbers(lib):
    lib.add_book("B100", "Zero Copies", "", 2020, 0)
    assert lib.find_book("B100").total == 1

    lib.add_book("B101", "Bad Input", "", "not a year", "lots")
    book = lib.find_book("B101")
    assert book.year == 2023  # year of the fake clock
    assert book.total == 1
    assert book.available == 1

    lib.add_book("B102", "Text Input", "", " 2001 ", "4")
    assert lib.find_book("B102").year == 2001
    assert lib.find_book("B102").total == 4


def test_add_member(lib):
    assert lib.add_member(" M10 ", " New Member ").ok
    assert lib.find_member("M10").name == "New Member"

    assert lib.add_member("", "Name").reason is FailureReason.EMPTY_ID
    assert lib.add_member("M11", "   ").reason is FailureReason.EMPTY_NAME
    assert lib.add_member("M01", "Someone").reason is FailureReason.DUPLICATE_ID
    assert len(lib.list_members()) == 4


# ------------------------- borrow / return ------------------------- #
def test_borrow_last_copy(lib, clock):
    first = lib.borrow("B003", "M01")
    assert first.ok
    assert lib.find_book("B003").available == 0
    assert first.record.issue_date == clock.now

    second = lib.borrow("B003", "M02")
    assert not second.ok
    assert second.reason is FailureReason.NO_COPIES_AVAILABLE
    assert lib.find_book("B003").available == 0
    assert len(lib.list_loans()) == 3


@pytest.mark.parametrize("book_id, member_id, reason", [
    ("B999", "M01", FailureReason.UNKNOWN_BOOK),
    ("B001", "M99", FailureReason.UNKNOWN_MEMBER),
    ("", "", FailureReason.UNKNOWN_BOOK),
])
def test_borrow_failures_change_nothing(lib, book_id, member_id, reason):
    before = snapshot(lib)
    result = lib.borrow(book_id, member_id)
    assert not result.ok
    assert result.reason is reason
    assert snapshot(lib) == before


def test_borrow_generates_unique_loan_ids(lib):
    ids = {lib.borrow("B009", "M01").record.loan_id for _ in range(6)}
    assert len(ids) == 6


def test_return_loan(lib):
    loan = lib.borrow("B003", "M01").record
    other_ids = [s.loan.loan_id for s in lib.list_loans() if s.loan.loan_id != loan.loan_id]

    result = lib.return_loan(loan.loan_id)
    assert result.ok
    assert lib.find_loan(loan.loan_id) is None
    assert lib.find_book("B003").available == 1
    assert [s.loan.loan_id for s in lib.list_loans()] == other_ids


def test_return_unknown_loan(lib):
    before = snapshot(lib)
    result = lib.return_loan("no-such-loan")
    assert not result.ok
    assert result.reason is FailureReason.UNKNOWN_LOAN
    assert snapshot(lib) == before


def test_return_tolerates_missing_book(db_file, clock):
    save_state([], [Member("M01", "Aisha Khan")], [Loan("orphan", "GONE", "M01", clock.now)], db_file)
    lib = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    assert lib.initialize() is True

    assert lib.return_loan("orphan").ok
    assert lib.list_loans() == []


def test_availability_stays_in_bounds(lib):
    rng = random.Random(1234)
    open_loans = []
    for _ in range(200):
        if open_loans and rng.random() < 0.5:
            lib.return_loan(open_loans.pop(rng.randrange(len(open_loans))))
        else:
            result = lib.borrow("B002", rng.choice(["M01", "M02", "M03"]))
            if result.ok:
                open_loans.append(result.record.loan_id)
        book = lib.find_book("B002")
        assert 0 <= book.available <= book.total
        assert book.available == book.total - sum(1 for s in lib.list_loans() if s.loan.book_id == "B002")


def test_every_write_is_persisted(lib, db_file, clock):
    lib.add_member("M04", "Kabir Rao")
    lib.borrow("B005", "M04")

    reloaded = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    reloaded.initialize()
    assert reloaded.find_member("M04").name == "Kabir Rao"
    assert reloaded.find_book("B005").available == 2


def test_failed_save_keeps_state_in_memory(tmp_path, clock, caplog):
    db_file = str(tmp_path / "missing-dir" / "library.db")
    lib = Library(db_file=db_file, clock=clock, config=Settings(data_file=db_file))
    lib.initialize()

    result = lib.borrow("B003", "M01")
    assert result.ok
    assert lib.find_book("B003").available == 0
    assert lib.shutdown_save() is False
    assert "Save failed" in caplog.text


# ------------------------- Queries ------------------------- #
def test_list_filters(lib):
    assert [b.id for b in lib.list_books("java")] == ["B006", "B007", "B013"]
    assert len(lib.list_books()) == 15
    assert [m.id for m in lib.list_members("priya")] == ["M03"]
    assert [s.loan.member_id for s in lib.list_loans("m02")] == ["M02"]


def test_list_loans_uses_current_time(lib, clock):
    clock.advance(days=31)
    fresh = lib.list_loans("M01")[0]
    assert fresh.elapsed_days == 31
    assert fresh.fine == 2
    assert fresh.grace_days_left == -1


def test_suggest(lib):
    assert lib.suggest(Collection.BOOKS, "clean") == ["Clean Code"]
    assert lib.suggest("members", "ro") == ["Rohan Verma"]
    assert lib.suggest("Books", "") == []
    assert len(lib.suggest("books", "e")) == 20
    with pytest.raises(ValueError):
        lib.suggest("shelves", "x")


def test_loan_status(lib):
    old = lib.list_loans("M02")[0]
    status = lib.loan_status(old.loan.loan_id)
    assert status.fine == 20
    assert lib.loan_status("missing") is None


def test_configured_fine_schedule(db_file, clock):
    config = Settings(data_file=db_file, grace_period_days=10, fine_per_day=5)
    lib = Library(db_file=db_file, clock=clock, config=config)
    lib.initialize()
    old = lib.list_loans("M02")[0]
    assert old.grace_days_left == -30
    assert old.fine == 150


def test_statistics(lib):
    stats = lib.get_statistics()
    assert stats == {
        "total_titles": 15,
        "total_copies": 53,
        "available_copies": 51,
        "members": 3,
        "open_loans": 2,
        "overdue_loans": 1,
        "outstanding_fines": 20,
    }


def test_operation_result_to_dict(lib):
    assert lib.borrow("B999", "M01").to_dict() == {
        "ok": False,
        "message": "Book with ID B999 not found.",
        "reason": "unknown_book",
        "record": None,
    }
    data = lib.add_member("M05", "Neha Iyer").to_dict()
    assert data["ok"] is True
    assert data["record"] == {"id": "M05", "name": "Neha Iyer"}
