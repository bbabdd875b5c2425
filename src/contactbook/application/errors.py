"""Exceptions raised by ContactRepository implementations."""


class StoreError(Exception):
    """The underlying store failed (connectivity, driver or database error)."""


class ConstraintViolation(StoreError):
    """A write would break a uniqueness constraint (e.g. duplicate email)."""
