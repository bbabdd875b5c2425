"""Domain entities: Contact, the field sets used to create/change it, and sort keys."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


def normalize_email(email: str) -> str:
    """Lowercase and trim an email. Uniqueness is checked on this form."""
    return (email or "").strip().lower()


class SortField(str, Enum):
    """Sortable contact fields, by their wire name."""

    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"

    @property
    def attribute(self) -> str:
        """Attribute / stored property name for this field."""
        return _SORT_ATTRIBUTES[self]

    @classmethod
    def parse(cls, value: str | None) -> "SortField":
        """Return the matching field, or CREATED_AT for missing/unknown values."""
        try:
            return cls(value)
        except ValueError:
            return cls.CREATED_AT


_SORT_ATTRIBUTES = {
    SortField.NAME: "name",
    SortField.EMAIL: "email",
    SortField.PHONE: "phone",
    SortField.CREATED_AT: "created_at",
    SortField.UPDATED_AT: "updated_at",
}


@dataclass(frozen=True)
class ContactFields:
    """Field values for a new contact. The store assigns id and timestamps."""

    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class ContactChanges:
    """Partial update. None means "leave unchanged"."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class Contact:
    """
    A persisted contact.
    id, created_at are fixed at creation; updated_at never precedes created_at.
    """

    id: str
    name: str
    email: str
    phone: str
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Contact name must be non-empty.")
        if not self.email or not self.email.strip():
            raise ValueError("Contact email must be non-empty.")
        if self.updated_at < self.created_at:
            raise ValueError("Contact updated_at must not precede created_at.")
