from __future__ import annotations


class Book:
    """Represents a single title in the catalog and its copy counts."""

    def __init__(self, id: str, title: str, author: str, year: int, total: int,
                 available: int | None = None) -> None:
        self.id = id.strip()
        self.title = (title or "").strip()
        self.author = (author or "").strip()
        self.year = year
        self.total = total
        # A new book starts with every copy on the shelf
        self.available = total if available is None else available

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.display_title} by {self.display_author} (ID: {self.id})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Book):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def display_title(self) -> str:
        return self.title or "Untitled"

    @property
    def display_author(self) -> str:
        return self.author or "Unknown"

    @property
    def on_loan(self) -> int:
        return self.total - self.available

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "year": self.year,
            "total": self.total,
            "available": self.available,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            id=data["id"],
            title=data.get("title", ""),
            author=data.get("author", ""),
            year=data["year"],
            total=data["total"],
            available=data.get("available"),
        )
