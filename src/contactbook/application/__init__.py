"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from contactbook.application.contact_service import ContactService
from contactbook.application.dto import (
    ContactListQuery,
    ContactPage,
    DuplicateEmail,
    FieldError,
    Invalid,
    NotFound,
)
from contactbook.application.errors import ConstraintViolation, StoreError
from contactbook.application.ports import ContactRepository

__all__ = [
    "ConstraintViolation",
    "ContactListQuery",
    "ContactPage",
    "ContactRepository",
    "ContactService",
    "DuplicateEmail",
    "FieldError",
    "Invalid",
    "NotFound",
    "StoreError",
]
