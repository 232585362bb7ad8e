"""
Customer Module

Customer profiles. A customer owns no accounts; accounts point back at
their owner, so the reference graph stays acyclic.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .errors import ValidationError
from .transactions import utc_now


@dataclass
class Customer:
    """
    Registered bank customer

    id and created_at are fixed at registration. name and email change only
    through rename() and change_email().
    """
    id: str
    name: str
    email: str
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        self.name = _require_text(self.name, "name")
        self.email = _require_text(self.email, "email")

    def rename(self, name: str) -> None:
        self.name = _require_text(name, "name")

    def change_email(self, email: str) -> None:
        self.email = _require_text(email, "email")

    def describe(self) -> str:
        return f"{self.id} - {self.name} ({self.email})"

    def to_dict(self) -> Dict[str, Any]:
        """Convert Customer to dictionary for storage"""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Customer":
        """Convert dictionary to Customer"""
        return cls(
            id=data["id"],
            name=data["name"],
            email=data["email"],
            created_at=datetime.fromisoformat(data["created_at"]),
        )


def _require_text(value: str, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"Customer {field_name} must be a string")
    return value
