from __future__ import annotations

import uuid


def new_loan_id() -> str:
    return str(uuid.uuid4())


class Loan:
    """An open loan: one copy of a book checked out to a member.

    ``issue_date`` is stored as milliseconds since the epoch and never
    changes after the loan is created.
    """

    def __init__(self, loan_id: str, book_id: str, member_id: str, issue_date: int) -> None:
        self.loan_id = loan_id
        self.book_id = book_id
        self.member_id = member_id
        self.issue_date = issue_date

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"Loan {self.short_id}: {self.book_id} -> {self.member_id}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Loan):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def short_id(self) -> str:
        """First 8 characters of the loan id, for display."""
        if len(self.loan_id) <= 8:
            return self.loan_id
        return self.loan_id[:8] + "..."

    def to_dict(self) -> dict:
        return {
            "loan_id": self.loan_id,
            "book_id": self.book_id,
            "member_id": self.member_id,
            "issue_date": self.issue_date,
        }

    @staticmethod
    def from_dict(data: dict) -> "Loan":
        return Loan(
            loan_id=data["loan_id"],
            book_id=data["book_id"],
            member_id=data["member_id"],
            issue_date=data["issue_date"],
        )
