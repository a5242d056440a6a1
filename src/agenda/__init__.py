"""
Agenda core: accounts and owner-scoped contacts.

- domain: entities (User, Contact) and the alphabetical grouping. No outer dependencies.
- application: services (CredentialService, Session, MigrationRegistry, ContactService,
  AuthService), ports, and result DTOs.
- infrastructure: adapters (in-memory, Neo4j, JSON state file, Firebase).
"""

from agenda.application import (
    AuthService,
    ContactCreated,
    ContactDeleted,
    ContactInput,
    ContactNotFound,
    ContactService,
    ContactUpdated,
    CredentialService,
    EmailTaken,
    FailureReason,
    Invalid,
    MigrationRegistry,
    NotAuthenticated,
    NotVerified,
    ProviderFailure,
    Registered,
    Session,
    SignedIn,
    StoreFailure,
    UsernameTaken,
    UserNotFound,
    VerificationSent,
)
from agenda.domain import Contact, ContactGroup, User, group_by_initial

__all__ = [
    "AuthService",
    "Contact",
    "ContactCreated",
    "ContactDeleted",
    "ContactGroup",
    "ContactInput",
    "ContactNotFound",
    "ContactService",
    "ContactUpdated",
    "CredentialService",
    "EmailTaken",
    "FailureReason",
    "Invalid",
    "MigrationRegistry",
    "NotAuthenticated",
    "NotVerified",
    "ProviderFailure",
    "Registered",
    "Session",
    "SignedIn",
    "StoreFailure",
    "User",
    "UserNotFound",
    "UsernameTaken",
    "VerificationSent",
    "group_by_initial",
]
