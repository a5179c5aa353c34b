import os
import sqlite3

import pytest

from book import Book
from database import SCHEMA_VERSION, PersistenceError, load_state, save_state
from loan import Loan
from member import Member


@pytest.fixture
def state():
    books = [
        Book("B001", "Clean Code", "Robert C. Martin", 2008, 3, available=2),
        Book("B002", "", "", 2019, 1),
    ]
    members = [Member("M01", "Aisha Khan"), Member("M02", "Rohan Verma")]
    loans = [Loan("2f1c6a5e-0000-4000-8000-000000000001", "B001", "M01", 1_700_000_000_000)]
    return books, members, loans


def test_missing_file_loads_nothing(db_file):
    assert load_state(db_file) is None
    assert not os.path.exists(db_file)


def test_round_trip(db_file, state):
    save_state(*state, db_file)
    assert load_state(db_file) == state


def test_save_replaces_previous_state(db_file, state):
    books, members, loans = state
    save_state(books, members, loans, db_file)
    save_state(books[:1], [], [], db_file)

    loaded_books, loaded_members, loaded_loans = load_state(db_file)
    assert [b.id for b in loaded_books] == ["B001"]
    assert loaded_members == []
    assert loaded_loans == []
    assert not os.path.exists(db_file + ".tmp")


def test_schema_version_is_written(db_file, state):
    save_state(*state, db_file)
    conn = sqlite3.connect(db_file)
    value = conn.execute("SELECT value FROM metadata WHERE key = 'schema_version'").fetchone()[0]
    conn.close()
    assert int(value) == SCHEMA_VERSION


def test_missing_version_is_rejected(db_file, state):
    save_state(*state, db_file)
    conn = sqlite3.connect(db_file)
    conn.execute("DELETE FROM metadata")
    conn.commit()
    conn.close()

    with pytest.raises(PersistenceError):
        load_state(db_file)


def test_wrong_column_type_is_rejected(db_file, state):
    save_state(*state, db_file)
    conn = sqlite3.connect(db_file)
    conn.execute("UPDATE loans SET issue_date = 'yesterday'")
    conn.commit()
    conn.close()

    with pytest.raises(PersistenceError, match="failed validation"):
        load_state(db_file)


def test_unwritable_location_raises(tmp_path, state):
    with pytest.raises(PersistenceError):
        save_state(*state, str(tmp_path / "no" / "such" / "dir.db"))
