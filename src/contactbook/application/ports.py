"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from contactbook.domain import Contact, ContactChanges, ContactFields, SortField


class ContactRepository(Protocol):
    """Persists and queries contacts. Email is unique after lowercasing.

    Implementations raise StoreError on store failures and ConstraintViolation
    when a write would duplicate an email.
    """

    def insert(self, fields: ContactFields) -> Contact:
        """Store a new contact with a generated id and created_at == updated_at == now."""
        ...

    def get_by_id(self, contact_id: str) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def find_one(self, *, email: str, exclude_id: str | None = None) -> Contact | None:
        """Return a contact with this email (case-insensitive), skipping exclude_id, or None."""
        ...

    def find_many(
        self,
        search: str | None,
        sort_by: SortField,
        descending: bool,
        skip: int,
        limit: int,
    ) -> list[Contact]:
        """Return at most limit contacts matching search, ordered, after skipping skip."""
        ...

    def count(self, search: str | None) -> int:
        """Return the number of contacts matching search (None matches all)."""
        ...

    def update_by_id(self, contact_id: str, changes: ContactChanges) -> Contact | None:
        """Apply non-None changes and refresh updated_at. Returns None if not found."""
        ...

    def delete_by_id(self, contact_id: str) -> Contact | None:
        """Remove the contact and return it, or None if not found."""
        ...
