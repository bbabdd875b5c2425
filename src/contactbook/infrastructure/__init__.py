"""Infrastructure layer: concrete implementations of application ports."""

from contactbook.infrastructure.memory_repository import InMemoryContactRepository
from contactbook.infrastructure.persistence.neo4j_repository import Neo4jContactRepository
from contactbook.infrastructure.schema import CONTACT_SEARCH_INDEX, ensure_contact_schema

__all__ = [
    "CONTACT_SEARCH_INDEX",
    "InMemoryContactRepository",
    "Neo4jContactRepository",
    "ensure_contact_schema",
]
