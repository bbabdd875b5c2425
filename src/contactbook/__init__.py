"""
Contactbook core: clean-architecture layout.

- domain: entities (Contact, ContactFields, ContactChanges, SortField). No outer dependencies.
- application: use cases (ContactService), ports (ContactRepository), DTOs and store errors.
- infrastructure: adapters (InMemoryContactRepository, Neo4jContactRepository) and schema setup.
- config: Settings loaded once from the environment.
"""

from contactbook.application import (
    ConstraintViolation,
    ContactListQuery,
    ContactPage,
    ContactRepository,
    ContactService,
    DuplicateEmail,
    FieldError,
    Invalid,
    NotFound,
    StoreError,
)
from contactbook.domain import Contact, ContactChanges, ContactFields, SortField
from contactbook.infrastructure import InMemoryContactRepository, Neo4jContactRepository

__all__ = [
    "ConstraintViolation",
    "Contact",
    "ContactChanges",
    "ContactFields",
    "ContactListQuery",
    "ContactPage",
    "ContactRepository",
    "ContactService",
    "DuplicateEmail",
    "FieldError",
    "InMemoryContactRepository",
    "Invalid",
    "Neo4jContactRepository",
    "NotFound",
    "SortField",
    "StoreError",
]
