"""Neo4j implementation of ContactRepository.
Graph: one (:Contact {id, name, email, phone, created_at, updated_at}) node per contact.
Email is stored lowercased under a unique constraint; search goes through the
contact_search fulltext index (see contactbook.infrastructure.schema).
"""

import logging
import re
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone

from neo4j.exceptions import ConstraintError, DriverError, Neo4jError

from contactbook.application.errors import ConstraintViolation, StoreError
from contactbook.domain import (
    Contact,
    ContactChanges,
    ContactFields,
    SortField,
    normalize_email,
)
from contactbook.infrastructure.schema import CONTACT_SEARCH_INDEX

logger = logging.getLogger(__name__)

# Lucene query syntax characters, escaped so user input is matched literally.
_LUCENE_SPECIAL = re.compile(r'([+\-!(){}\[\]^"~*?:\\/&|])')
# Operator words are only operators in upper case; the analyzer lowercases terms anyway.
_LUCENE_OPERATORS = {"AND", "OR", "NOT"}


def _datetime_to_iso(dt: datetime) -> str:
    # Fixed width so string order equals chronological order.
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_fulltext_query(search: str) -> str:
    """Escape each whitespace-separated term; terms are OR'ed by the index."""
    return " ".join(_escape_term(term) for term in search.split())


def _escape_term(term: str) -> str:
    if term in _LUCENE_OPERATORS:
        return term.lower()
    return _LUCENE_SPECIAL.sub(r"\\\1", term)


_INSERT_QUERY = """
CREATE (c:Contact {
    id: $id,
    name: $name,
    email: $email,
    phone: $phone,
    created_at: $now,
    updated_at: $now
})
RETURN c {.*} AS contact
"""

_GET_BY_ID_QUERY = """
MATCH (c:Contact {id: $id})
RETURN c {.*} AS contact
"""

_FIND_BY_EMAIL_QUERY = """
MATCH (c:Contact {email: $email})
WHERE $exclude_id IS NULL OR c.id <> $exclude_id
RETURN c {.*} AS contact
LIMIT 1
"""

_UPDATE_QUERY = """
MATCH (c:Contact {id: $id})
SET c.name = CASE WHEN $name IS NOT NULL THEN $name ELSE c.name END,
    c.email = CASE WHEN $email IS NOT NULL THEN $email ELSE c.email END,
    c.phone = CASE WHEN $phone IS NOT NULL THEN $phone ELSE c.phone END,
    c.updated_at = CASE WHEN $now < c.created_at THEN c.created_at ELSE $now END
RETURN c {.*} AS contact
"""

_DELETE_QUERY = """
MATCH (c:Contact {id: $id})
WITH c, c {.*} AS contact
DELETE c
RETURN contact
"""

_COUNT_ALL_QUERY = "MATCH (c:Contact) RETURN count(c) AS total"

_COUNT_SEARCH_QUERY = """
CALL db.index.fulltext.queryNodes($index, $query) YIELD node
RETURN count(node) AS total
"""

_MATCH_ALL = "MATCH (c:Contact)"
_MATCH_SEARCH = "CALL db.index.fulltext.queryNodes($index, $query) YIELD node AS c"


def _page_query(match: str, sort_by: SortField, descending: bool) -> str:
    # Property and direction come from SortField / a bool, never from raw input.
    direction = "DESC" if descending else "ASC"
    return f"""
    {match}
    WITH c
    ORDER BY c.{sort_by.attribute} {direction}, c.id {direction}
    SKIP $skip
    LIMIT $limit
    RETURN c {{.*}} AS contact
    """


class Neo4jContactRepository:
    """Stores contacts as Contact nodes in Neo4j. One session per operation.
    Driver and database errors are raised as StoreError, constraint breaches as ConstraintViolation.
    """

    def __init__(self, driver: object, database: str | None = None) -> None:
        self._driver = driver
        self._database = database

    @contextmanager
    def _session(self):
        try:
            with self._driver.session(database=self._database) as session:
                yield session
        except ConstraintError as exc:
            raise ConstraintViolation(exc.message or str(exc)) from exc
        except (Neo4jError, DriverError) as exc:
            logger.error("Neo4j operation failed: %s", exc)
            raise StoreError(str(exc)) from exc

    def insert(self, fields: ContactFields) -> Contact:
        with self._session() as session:
            record = session.run(
                _INSERT_QUERY,
                id=str(uuid.uuid4()),
                name=fields.name,
                email=normalize_email(fields.email),
                phone=fields.phone,
                now=_datetime_to_iso(_utcnow()),
            ).single()
        return _record_to_contact(record)

    def get_by_id(self, contact_id: str) -> Contact | None:
        with self._session() as session:
            record = session.run(_GET_BY_ID_QUERY, id=contact_id).single()
        if not record:
            return None
        return _record_to_contact(record)

    def find_one(self, *, email: str, exclude_id: str | None = None) -> Contact | None:
        with self._session() as session:
            record = session.run(
                _FIND_BY_EMAIL_QUERY,
                email=normalize_email(email),
                exclude_id=exclude_id,
            ).single()
        if not record:
            return None
        return _record_to_contact(record)

    def find_many(
        self,
        search: str | None,
        sort_by: SortField,
        descending: bool,
        skip: int,
        limit: int,
    ) -> list[Contact]:
        query = build_fulltext_query(search) if search else ""
        match = _MATCH_SEARCH if query else _MATCH_ALL
        with self._session() as session:
            result = session.run(
                _page_query(match, sort_by, descending),
                index=CONTACT_SEARCH_INDEX,
                query=query,
                skip=skip,
                limit=limit,
            )
            return [_record_to_contact(rec) for rec in result]

    def count(self, search: str | None) -> int:
        query = build_fulltext_query(search) if search else ""
        with self._session() as session:
            if query:
                record = session.run(
                    _COUNT_SEARCH_QUERY, index=CONTACT_SEARCH_INDEX, query=query
                ).single()
            else:
                record = session.run(_COUNT_ALL_QUERY).single()
        return record["total"] if record else 0

    def update_by_id(self, contact_id: str, changes: ContactChanges) -> Contact | None:
        with self._session() as session:
            record = session.run(
                _UPDATE_QUERY,
                id=contact_id,
                name=changes.name,
                email=normalize_email(changes.email) if changes.email is not None else None,
                phone=changes.phone,
                now=_datetime_to_iso(_utcnow()),
            ).single()
        if not record:
            return None
        return _record_to_contact(record)

    def delete_by_id(self, contact_id: str) -> Contact | None:
        with self._session() as session:
            record = session.run(_DELETE_QUERY, id=contact_id).single()
        if not record:
            return None
        return _record_to_contact(record)


def _record_to_contact(record) -> Contact:
    c = record["contact"]
    return Contact(
        id=c["id"],
        name=c["name"],
        email=c["email"],
        phone=c.get("phone") or "",
        created_at=_iso_to_datetime(c["created_at"]),
        updated_at=_iso_to_datetime(c["updated_at"]),
    )
