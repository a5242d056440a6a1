"""Domain layer: entities and value objects. No dependencies on outer layers."""

from agenda.domain.entities import Contact, User, looks_like_email, normalize_identifier
from agenda.domain.grouping import OTHER_BUCKET, ContactGroup, group_by_initial, initial_letter

__all__ = [
    "OTHER_BUCKET",
    "Contact",
    "ContactGroup",
    "User",
    "group_by_initial",
    "initial_letter",
    "looks_like_email",
    "normalize_identifier",
]
