from __future__ import annotations


class Member:
    """A registered borrower."""

    def __init__(self, member_id: str, name: str) -> None:
        self._member_id = member_id.strip()
        self.name = name.strip()

    @property
    def member_id(self) -> str:
        return self._member_id

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} (ID: {self.member_id})"

    def __repr__(self) -> str:
        return f"Member(member_id={self.member_id!r}, name={self.name!r})"

    def to_dict(self) -> dict:
        return {"member_id": self.member_id, "name": self.name}
