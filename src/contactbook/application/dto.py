"""Data transfer objects for the contact use cases: list query/page and outcome types."""

from dataclasses import dataclass, field

from contactbook.domain import Contact

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class ContactListQuery:
    """Raw list parameters as received from the caller. Normalized by ContactService."""

    search: str | None = None
    sort_by: str | None = None
    order: str | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class ContactPage:
    contacts: list[Contact]
    total_count: int
    total_pages: int
    current_page: int
    limit: int


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass(frozen=True)
class Invalid:
    """One or more fields failed validation."""

    errors: list[FieldError] = field(default_factory=list)


@dataclass(frozen=True)
class DuplicateEmail:
    email: str
    message: str


@dataclass(frozen=True)
class NotFound:
    contact_id: str
