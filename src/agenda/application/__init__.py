"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from agenda.application.auth_service import AuthService, translate_provider_error
from agenda.application.contact_service import ContactService
from agenda.application.credential_service import CredentialService
from agenda.application.dto import (
    ContactCreated,
    ContactDeleted,
    ContactInput,
    ContactNotFound,
    ContactUpdated,
    EmailTaken,
    FailureReason,
    Invalid,
    NotAuthenticated,
    NotVerified,
    ProviderFailure,
    Registered,
    SignedIn,
    StoreFailure,
    UsernameTaken,
    UserNotFound,
    VerificationSent,
)
from agenda.application.migrations import (
    AdoptOrphanContacts,
    MigrationRegistry,
    RewriteUsernameOwnerToEmail,
    default_migrations,
)
from agenda.application.ports import (
    ContactRepository,
    DuplicateKeyError,
    IdentityProvider,
    KeyValueStore,
    ProviderAccount,
    ProviderError,
    RecordDecodeError,
    StoreError,
    StorePermissionError,
    UserRepository,
)
from agenda.application.session import Session

__all__ = [
    "AdoptOrphanContacts",
    "AuthService",
    "ContactCreated",
    "ContactDeleted",
    "ContactInput",
    "ContactNotFound",
    "ContactRepository",
    "ContactService",
    "ContactUpdated",
    "CredentialService",
    "DuplicateKeyError",
    "EmailTaken",
    "FailureReason",
    "IdentityProvider",
    "Invalid",
    "KeyValueStore",
    "MigrationRegistry",
    "NotAuthenticated",
    "NotVerified",
    "ProviderAccount",
    "ProviderError",
    "ProviderFailure",
    "RecordDecodeError",
    "Registered",
    "RewriteUsernameOwnerToEmail",
    "Session",
    "SignedIn",
    "StoreError",
    "StoreFailure",
    "StorePermissionError",
    "UserNotFound",
    "UserRepository",
    "UsernameTaken",
    "VerificationSent",
    "default_migrations",
    "translate_provider_error",
]
