from __future__ import annotations


class Member:
    """A registered library member."""

    def __init__(self, id: str, name: str) -> None:
        self.id = id.strip()
        self.name = name.strip()

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} ({self.id})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Member):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @staticmethod
    def from_dict(data: dict) -> "Member":
        return Member(id=data["id"], name=data["name"])
