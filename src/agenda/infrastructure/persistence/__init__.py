"""Neo4j persistence adapters."""

from agenda.infrastructure.persistence.neo4j_repository import (
    Neo4jContactRepository,
    Neo4jUserRepository,
    ensure_constraints,
)

__all__ = ["Neo4jContactRepository", "Neo4jUserRepository", "ensure_constraints"]
