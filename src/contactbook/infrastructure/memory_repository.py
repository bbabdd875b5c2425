"""In-memory implementation of ContactRepository (no DB)."""

import re
import threading
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timezone

from contactbook.application.errors import ConstraintViolation
from contactbook.domain import (
    Contact,
    ContactChanges,
    ContactFields,
    SortField,
    normalize_email,
)

_TOKEN_SPLIT = re.compile(r"[^0-9a-z]+")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _tokens(text: str | None) -> set[str]:
    return {t for t in _TOKEN_SPLIT.split((text or "").lower()) if t}


def _matches(contact: Contact, terms: set[str]) -> bool:
    words = _tokens(contact.name) | _tokens(contact.email) | _tokens(contact.phone)
    return bool(words & terms)


class InMemoryContactRepository:
    """Stores contacts in memory. Order preserved by insertion.
    Search matches when any search term equals a word of name, email or phone.
    Writes are serialized by a lock so the email constraint holds under concurrency.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._by_id: dict[str, Contact] = {}
        self._order: list[str] = []
        self._id_by_email: dict[str, str] = {}

    def insert(self, fields: ContactFields) -> Contact:
        email = normalize_email(fields.email)
        with self._lock:
            if email in self._id_by_email:
                raise ConstraintViolation(f"email already exists: {email}")
            now = self._clock()
            contact = Contact(
                id=str(uuid.uuid4()),
                name=fields.name,
                email=email,
                phone=fields.phone,
                created_at=now,
                updated_at=now,
            )
            self._by_id[contact.id] = contact
            self._order.append(contact.id)
            self._id_by_email[email] = contact.id
        return contact

    def get_by_id(self, contact_id: str) -> Contact | None:
        return self._by_id.get(contact_id)

    def find_one(self, *, email: str, exclude_id: str | None = None) -> Contact | None:
        contact_id = self._id_by_email.get(normalize_email(email))
        if contact_id is None or contact_id == exclude_id:
            return None
        return self._by_id.get(contact_id)

    def _filtered(self, search: str | None) -> list[Contact]:
        with self._lock:
            contacts = [self._by_id[cid] for cid in self._order if cid in self._by_id]
        terms = _tokens(search)
        if not terms:
            return contacts
        return [c for c in contacts if _matches(c, terms)]

    def find_many(
        self,
        search: str | None,
        sort_by: SortField,
        descending: bool,
        skip: int,
        limit: int,
    ) -> list[Contact]:
        attribute = sort_by.attribute
        contacts = sorted(
            self._filtered(search),
            key=lambda c: (getattr(c, attribute), c.id),
            reverse=descending,
        )
        return contacts[skip : skip + limit]

    def count(self, search: str | None) -> int:
        return len(self._filtered(search))

    def update_by_id(self, contact_id: str, changes: ContactChanges) -> Contact | None:
        with self._lock:
            contact = self._by_id.get(contact_id)
            if contact is None:
                return None
            email = normalize_email(changes.email) if changes.email is not None else contact.email
            owner = self._id_by_email.get(email)
            if owner is not None and owner != contact_id:
                raise ConstraintViolation(f"email already exists: {email}")
            updated = replace(
                contact,
                name=changes.name if changes.name is not None else contact.name,
                email=email,
                phone=changes.phone if changes.phone is not None else contact.phone,
                updated_at=max(self._clock(), contact.created_at),
            )
            self._by_id[contact_id] = updated
            if email != contact.email:
                del self._id_by_email[contact.email]
                self._id_by_email[email] = contact_id
        return updated

    def delete_by_id(self, contact_id: str) -> Contact | None:
        with self._lock:
            contact = self._by_id.pop(contact_id, None)
            if contact is None:
                return None
            self._order.remove(contact_id)
            self._id_by_email.pop(contact.email, None)
        return contact
