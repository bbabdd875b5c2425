"""Domain layer: entities and value objects. No dependencies on outer layers."""

from contactbook.domain.entities import (
    Contact,
    ContactChanges,
    ContactFields,
    SortField,
    normalize_email,
)

__all__ = ["Contact", "ContactChanges", "ContactFields", "SortField", "normalize_email"]
