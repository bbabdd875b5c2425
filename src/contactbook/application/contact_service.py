"""Contact list, get, create, update and delete. Stateless; one repository per service."""

import logging
import math

from contactbook.application.dto import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    ContactListQuery,
    ContactPage,
    DuplicateEmail,
    FieldError,
    Invalid,
    NotFound,
)
from contactbook.application.errors import ConstraintViolation
from contactbook.application.ports import ContactRepository
from contactbook.domain import (
    Contact,
    ContactChanges,
    ContactFields,
    SortField,
    normalize_email,
)

logger = logging.getLogger(__name__)

# Largest SKIP/LIMIT value the store driver can encode.
MAX_STORE_INT = 2**63 - 1

DUPLICATE_EMAIL_MESSAGE = "Contact with this email already exists"
DUPLICATE_EMAIL_ON_UPDATE_MESSAGE = "Another contact with this email already exists"

_REQUIRED_FIELDS = ("name", "email", "phone")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip()


def _required_message(field_name: str) -> str:
    return f"{field_name.capitalize()} is required"


class ContactService:
    """Translates request parameters into repository calls and enforces email uniqueness."""

    def __init__(self, repository: ContactRepository) -> None:
        self._repo = repository

    def list_contacts(self, query: ContactListQuery) -> ContactPage:
        """Return one page of contacts plus totals.

        Unknown sort fields fall back to createdAt; any order but "asc" is
        descending; page and limit below 1 are clamped to 1, and both are
        capped so skip and limit stay within a signed 64-bit integer.
        """
        search = (query.search or "").strip() or None
        sort_by = SortField.parse(query.sort_by)
        descending = (query.order or "").strip().lower() != "asc"
        page = max(query.page if query.page is not None else DEFAULT_PAGE, 1)
        limit = max(query.limit if query.limit is not None else DEFAULT_LIMIT, 1)
        limit = min(limit, MAX_STORE_INT)
        page = min(page, MAX_STORE_INT // limit + 1)
        skip = (page - 1) * limit

        total_count = self._repo.count(search)
        contacts = self._repo.find_many(search, sort_by, descending, skip, limit)
        return ContactPage(
            contacts=contacts,
            total_count=total_count,
            total_pages=math.ceil(total_count / limit),
            current_page=page,
            limit=limit,
        )

    def get_contact(self, contact_id: str) -> Contact | NotFound:
        contact = self._repo.get_by_id(contact_id)
        if contact is None:
            return NotFound(contact_id=contact_id)
        return contact

    def create_contact(
        self,
        name: str | None,
        email: str | None,
        phone: str | None,
    ) -> Contact | Invalid | DuplicateEmail:
        """Validate and store a new contact. Email is lowercased before the duplicate check."""
        values = {"name": _clean(name), "email": _clean(email), "phone": _clean(phone)}
        errors = [
            FieldError(field=key, message=_required_message(key))
            for key in _REQUIRED_FIELDS
            if not values[key]
        ]
        if errors:
            return Invalid(errors=errors)

        email_norm = normalize_email(values["email"])
        if self._repo.find_one(email=email_norm) is not None:
            return DuplicateEmail(email=email_norm, message=DUPLICATE_EMAIL_MESSAGE)

        fields = ContactFields(name=values["name"], email=email_norm, phone=values["phone"])
        try:
            contact = self._repo.insert(fields)
        except ConstraintViolation:
            # Lost a race with a concurrent create of the same email.
            return DuplicateEmail(email=email_norm, message=DUPLICATE_EMAIL_MESSAGE)
        logger.info("Created contact %s", contact.id)
        return contact

    def update_contact(
        self,
        contact_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
    ) -> Contact | Invalid | DuplicateEmail | NotFound:
        """Change the supplied fields only. updated_at is refreshed even when nothing else changes."""
        values = {"name": _clean(name), "email": _clean(email), "phone": _clean(phone)}
        errors = [
            FieldError(field=key, message=f"{key.capitalize()} cannot be empty")
            for key in _REQUIRED_FIELDS
            if values[key] is not None and not values[key]
        ]
        if errors:
            return Invalid(errors=errors)

        if self._repo.get_by_id(contact_id) is None:
            return NotFound(contact_id=contact_id)

        email_norm = normalize_email(values["email"]) if values["email"] is not None else None
        if email_norm is not None:
            other = self._repo.find_one(email=email_norm, exclude_id=contact_id)
            if other is not None:
                return DuplicateEmail(email=email_norm, message=DUPLICATE_EMAIL_ON_UPDATE_MESSAGE)

        changes = ContactChanges(name=values["name"], email=email_norm, phone=values["phone"])
        try:
            contact = self._repo.update_by_id(contact_id, changes)
        except ConstraintViolation:
            return DuplicateEmail(email=email_norm or "", message=DUPLICATE_EMAIL_ON_UPDATE_MESSAGE)
        if contact is None:
            # Deleted between the existence check and the write.
            return NotFound(contact_id=contact_id)
        logger.info("Updated contact %s", contact.id)
        return contact

    def delete_contact(self, contact_id: str) -> Contact | NotFound:
        contact = self._repo.delete_by_id(contact_id)
        if contact is None:
            return NotFound(contact_id=contact_id)
        logger.info("Deleted contact %s", contact.id)
        return contact
