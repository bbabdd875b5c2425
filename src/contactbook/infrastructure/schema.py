"""Contact schema in Neo4j: unique id and email constraints plus the fulltext search index."""

import logging

logger = logging.getLogger(__name__)

CONTACT_SEARCH_INDEX = "contact_search"

_SCHEMA_QUERIES = (
    """
    CREATE CONSTRAINT contact_id_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.id IS UNIQUE
    """,
    # Emails are stored lowercased, so this constraint is case-insensitive.
    """
    CREATE CONSTRAINT contact_email_unique IF NOT EXISTS
    FOR (c:Contact) REQUIRE c.email IS UNIQUE
    """,
    f"""
    CREATE FULLTEXT INDEX {CONTACT_SEARCH_INDEX} IF NOT EXISTS
    FOR (c:Contact) ON EACH [c.name, c.email, c.phone]
    """,
)

_AWAIT_INDEXES_QUERY = "CALL db.awaitIndexes($timeout)"


def ensure_contact_schema(driver, database: str | None = None, timeout: int = 60) -> None:
    """Create the contact constraints and fulltext index if missing, then wait until online."""
    with driver.session(database=database) as session:
        for query in _SCHEMA_QUERIES:
            session.run(query).consume()
        session.run(_AWAIT_INDEXES_QUERY, timeout=timeout).consume()
    logger.info("Contact schema ready (index %s)", CONTACT_SEARCH_INDEX)
