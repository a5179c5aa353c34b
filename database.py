import logging
import os
import sqlite3
from typing import List, Optional, Tuple

from dotenv import load_dotenv
from pydantic import ValidationError

from book import Book
from loan import Loan
from member import Member
from schemas import BookRow, LoanRow, MemberRow

# Load .env before reading the default location below.
load_dotenv()

DATABASE_FILE = os.environ.get("LIBRARY_DATA_FILE") or "library_data.db"

# Bump whenever a table or column changes. Files written with another
# version are not migrated; the library reseeds instead.
SCHEMA_VERSION = 1

logger = logging.getLogger(__name__)

LibraryState = Tuple[List[Book], List[Member], List[Loan]]


class PersistenceError(Exception):
    """Raised when the library state cannot be read or written."""
    pass


def get_db_connection(db_file: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection to the SQLite database holding the library state."""
    conn = sqlite3.connect(db_file or DATABASE_FILE)
    conn.row_factory = sqlite3.Row
    return conn


def create_tables(conn: sqlite3.Connection) -> None:
    """Create the state tables if they are missing."""
    cursor = conn.cursor()
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS metadata (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        )
    """)
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS books (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            author TEXT NOT NULL,
            year INTEGER NOT NULL,
            total INTEGER NOT NULL,
            available INTEGER NOT NULL
        )
    """)
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS members (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL
        )
    """)
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS loans (
            loan_id TEXT PRIMARY KEY,
            book_id TEXT NOT NULL,
            member_id TEXT NOT NULL,
            issue_date INTEGER NOT NULL
        )
    """)


def save_state(books: List[Book], members: List[Member], loans: List[Loan], db_file: Optional[str] = None) -> None:
    """Write all three collections as one unit.

    The state is written to a temporary file which then replaces the real one,
    so readers see either the previous state or the new one, never a mix.
    """
    path = db_file or DATABASE_FILE
    tmp_path = path + ".tmp"

    conn = None
    try:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        conn = get_db_connection(tmp_path)
        with conn:
            create_tables(conn)
            conn.execute(
                "INSERT INTO metadata (key, value) VALUES (?, ?)",
                ("schema_version", str(SCHEMA_VERSION)),
            )
            conn.executemany(
                "INSERT INTO books (id, title, author, year, total, available) VALUES (?, ?, ?, ?, ?, ?)",
                [(b.id, b.title, b.author, b.year, b.total, b.available) for b in books],
            )
            conn.executemany(
                "INSERT INTO members (id, name) VALUES (?, ?)",
                [(m.id, m.name) for m in members],
            )
            conn.executemany(
                "INSERT INTO loans (loan_id, book_id, member_id, issue_date) VALUES (?, ?, ?, ?)",
                [(l.loan_id, l.book_id, l.member_id, l.issue_date) for l in loans],
            )
        conn.close()
        conn = None
        os.replace(tmp_path, path)
    except (sqlite3.Error, OSError) as e:
        if conn is not None:
            conn.close()
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise PersistenceError(f"Could not save library state to {path}: {e}") from e

    logger.debug("Saved %d books, %d members, %d loans to %s", len(books), len(members), len(loans), path)


def read_schema_version(conn: sqlite3.Connection) -> int:
    row = conn.execute("SELECT value FROM metadata WHERE key = ?", ("schema_version",)).fetchone()
    if row is None:
        raise PersistenceError("Stored state has no schema version.")
    try:
        return int(row["value"])
    except ValueError as e:
        raise PersistenceError(f"Invalid schema version {row['value']!r}.") from e


def load_state(db_file: Optional[str] = None) -> Optional[LibraryState]:
    """Read the persisted collections.

    Returns None when nothing has been saved yet. Raises PersistenceError when
    the file is unreadable, has a different schema version, or holds rows that
    fail validation.
    """
    path = db_file or DATABASE_FILE
    if not os.path.exists(path):
        return None

    conn = None
    try:
        conn = get_db_connection(path)
        version = read_schema_version(conn)
        if version != SCHEMA_VERSION:
            raise PersistenceError(f"Schema version {version} does not match expected {SCHEMA_VERSION}.")

        cursor = conn.execute("SELECT id, title, author, year, total, available FROM books ORDER BY rowid")
        books = [Book.from_dict(BookRow.model_validate(dict(row)).model_dump()) for row in cursor.fetchall()]

        cursor = conn.execute("SELECT id, name FROM members ORDER BY rowid")
        members = [Member.from_dict(MemberRow.model_validate(dict(row)).model_dump()) for row in cursor.fetchall()]

        cursor = conn.execute("SELECT loan_id, book_id, member_id, issue_date FROM loans ORDER BY rowid")
        loans = [Loan.from_dict(LoanRow.model_validate(dict(row)).model_dump()) for row in cursor.fetchall()]
    except sqlite3.Error as e:
        raise PersistenceError(f"Could not read library state from {path}: {e}") from e
    except ValidationError as e:
        raise PersistenceError(f"Stored state in {path} failed validation: {e}") from e
    finally:
        if conn is not None:
            conn.close()

    logger.debug("Loaded %d books, %d members, %d loans from %s", len(books), len(members), len(loans), path)
    return books, members, loans
