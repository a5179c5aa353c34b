"""Sample catalog used when no saved state can be loaded."""

from __future__ import annotations

from typing import Callable

from book import Book
from fines import MS_PER_DAY
from loan import Loan, new_loan_id
from member import Member
from store import EntityStore

SAMPLE_BOOKS = [
    ("B001", "Clean Code", "Robert C. Martin", 2008, 3),
    ("B002", "The Silent Patient", "Alex Michaelides", 2019, 2),
    ("B003", "Design Patterns", "Gamma et al.", 1994, 1),
    ("B004", "Introduction to Algorithms", "CLRS", 2009, 4),
    ("B005", "The Pragmatic Programmer", "Andrew Hunt", 1999, 3),
    ("B006", "Head First Java", "Kathy Sierra", 2005, 5),
    ("B007", "Effective Java", "Joshua Bloch", 2017, 3),
    ("B008", "Rich Dad Poor Dad", "Robert Kiyosaki", 1997, 4),
    ("B009", "Atomic Habits", "James Clear", 2018, 6),
    ("B010", "Harry Potter and the Sorcerer's Stone", "J.K. Rowling", 1997, 5),
    ("B011", "The Alchemist", "Paulo Coelho", 1988, 4),
    ("B012", "The Power of Your Subconscious Mind", "Joseph Murphy", 1963, 3),
    ("B013", "Java: The Complete Reference", "Herbert Schildt", 2021, 2),
    ("B014", "Sapiens: A Brief History of Humankind", "Yuval Noah Harari", 2011, 3),
    ("B015", "The Psychology of Money", "Morgan Housel", 2020, 5),
]

SAMPLE_MEMBERS = [
    ("M01", "Aisha Khan"),
    ("M02", "Rohan Verma"),
    ("M03", "Priya Shah"),
]

# (book id, member id, days ago). The 40-day-old loan is already overdue.
SAMPLE_LOANS = [
    ("B001", "M01", 0),
    ("B002", "M02", 40),
]


def seed_sample_data(store: EntityStore, clock: Callable[[], int]) -> None:
    """Replace the store contents with the sample catalog, roster and loans."""
    store.clear()
    for book_id, title, author, year, total in SAMPLE_BOOKS:
        store.add_book(Book(book_id, title, author, year, total))
    for member_id, name in SAMPLE_MEMBERS:
        store.add_member(Member(member_id, name))

    now = clock()
    for book_id, member_id, days_ago in SAMPLE_LOANS:
        store.add_loan(Loan(new_loan_id(), book_id, member_id, now - days_ago * MS_PER_DAY))
        book = store.find_book(book_id)
        book.available = max(0, book.available - 1)
