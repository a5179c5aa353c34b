"""
Row schemas for the persisted library state.

Each model validates one row read back from SQLite before it is turned into
a domain object. Strict mode rejects rows whose column types drifted, so a
damaged database falls back to the seed data instead of loading garbage.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BookRow(BaseModel):
    model_config = ConfigDict(strict=True)

    id: str = Field(..., min_length=1, description="Book identifier")
    title: str = Field("", description="Book title, may be empty")
    author: str = Field("", description="Author name, may be empty")
    year: int = Field(..., description="Publication year")
    total: int = Field(..., ge=1, description="Copies owned")
    available: int = Field(..., ge=0, description="Copies on the shelf")

    @model_validator(mode="after")
    def check_available(self) -> "BookRow":
        if self.available > self.total:
            raise ValueError("available copies exceed total copies")
        return self


class MemberRow(BaseModel):
    model_config = ConfigDict(strict=True)

    id: str = Field(..., min_length=1, description="Member identifier")
    name: str = Field(..., description="Full name")


class LoanRow(BaseModel):
    model_config = ConfigDict(strict=True)

    loan_id: str = Field(..., min_length=1, description="Generated loan identifier")
    book_id: str = Field(..., description="Borrowed book id")
    member_id: str = Field(..., description="Borrowing member id")
    issue_date: int = Field(..., description="Issue time, ms since epoch")
