"""Infrastructure layer: concrete implementations of application ports."""

from agenda.infrastructure.firebase_auth import FirebaseIdentityProvider
from agenda.infrastructure.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore
from agenda.infrastructure.memory_identity import InMemoryIdentityProvider
from agenda.infrastructure.memory_repository import (
    InMemoryContactRepository,
    InMemoryUserRepository,
)
from agenda.infrastructure.persistence.neo4j_repository import (
    Neo4jContactRepository,
    Neo4jUserRepository,
    ensure_constraints,
)

__all__ = [
    "FirebaseIdentityProvider",
    "InMemoryContactRepository",
    "InMemoryIdentityProvider",
    "InMemoryKeyValueStore",
    "InMemoryUserRepository",
    "JsonFileKeyValueStore",
    "Neo4jContactRepository",
    "Neo4jUserRepository",
    "ensure_constraints",
]
